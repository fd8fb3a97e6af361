"""
MilestoneFlags -- fixed-size per-project progress flags.

Responsibility:
    Value object holding exactly one boolean per day of the year.  A project
    is created with every flag cleared; flags are only ever set, one index at
    a time, by the milestone tracker.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Length is fixed at MILESTONE_COUNT and can never change.  ``mark()``
      returns a new value of the same length; there is no append, resize or
      clear operation.

Failure modes:
    - InvalidMilestoneIndexError for any index outside [0, MILESTONE_COUNT).
    - ValueError when deserializing a bit string of the wrong length or with
      characters other than "0"/"1".
"""

from __future__ import annotations

from dataclasses import dataclass

from marketplace_kernel.exceptions import InvalidMilestoneIndexError

MILESTONE_COUNT = 365


@dataclass(frozen=True)
class MilestoneFlags:
    """
    Immutable sequence of MILESTONE_COUNT booleans.

    Use ``MilestoneFlags.empty()`` for a new project.  Stored as a
    MILESTONE_COUNT-character string of "0" and "1" (see ``to_bits``).
    """

    flags: tuple[bool, ...]

    def __post_init__(self) -> None:
        if len(self.flags) != MILESTONE_COUNT:
            raise ValueError(
                f"MilestoneFlags requires exactly {MILESTONE_COUNT} flags, "
                f"got {len(self.flags)}"
            )

    @classmethod
    def empty(cls) -> MilestoneFlags:
        return cls(flags=(False,) * MILESTONE_COUNT)

    @classmethod
    def from_bits(cls, bits: str) -> MilestoneFlags:
        if set(bits) - {"0", "1"}:
            raise ValueError("Milestone bit string may only contain '0' and '1'")
        return cls(flags=tuple(ch == "1" for ch in bits))

    def to_bits(self) -> str:
        return "".join("1" if flag else "0" for flag in self.flags)

    @staticmethod
    def validate_index(index: int) -> None:
        """Raise InvalidMilestoneIndexError unless 0 <= index < MILESTONE_COUNT."""
        if isinstance(index, bool) or not isinstance(index, int):
            raise InvalidMilestoneIndexError(index, MILESTONE_COUNT)
        if not 0 <= index < MILESTONE_COUNT:
            raise InvalidMilestoneIndexError(index, MILESTONE_COUNT)

    def mark(self, index: int) -> MilestoneFlags:
        """Return a copy with ``index`` set. Marking a set flag is a no-op."""
        self.validate_index(index)
        if self.flags[index]:
            return self
        updated = list(self.flags)
        updated[index] = True
        return MilestoneFlags(flags=tuple(updated))

    def is_reached(self, index: int) -> bool:
        self.validate_index(index)
        return self.flags[index]

    @property
    def reached_count(self) -> int:
        return sum(self.flags)

    def reached_indices(self) -> tuple[int, ...]:
        return tuple(i for i, flag in enumerate(self.flags) if flag)

    def __len__(self) -> int:
        return MILESTONE_COUNT

    def __getitem__(self, index: int) -> bool:
        return self.flags[index]
