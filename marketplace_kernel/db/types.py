"""
Module: marketplace_kernel.db.types
Responsibility: The milestone column type and the
    amount range check shared by every service that accepts value.
Architecture position: Kernel > DB.  May be imported by models/, services/
    and selectors/.  MUST NOT import from any of those layers.

Invariants enforced:
    - Amounts are unsigned integers that fit a signed 64-bit column:
      0 <= amount <= MAX_AMOUNT.  ``validate_amount()`` is the ONLY sanctioned
      check and runs before any state is touched.
    - Milestones round-trip through a fixed-width String(MILESTONE_COUNT).

Failure modes:
    - ValueError from ``validate_amount()`` on bool, non-int, negative or
      out-of-range values.
    - ValueError from ``MilestoneFlagsType`` if a stored value has the wrong
      width (corrupted row).
"""

from sqlalchemy import String
from sqlalchemy.types import TypeDecorator

from marketplace_kernel.domain.milestones import MILESTONE_COUNT, MilestoneFlags

MAX_AMOUNT = 2**63 - 1


def validate_amount(value: int, field_name: str = "amount") -> int:
    """
    Check that ``value`` is a storable unsigned amount.

    Args:
        value: Candidate amount.
        field_name: Name used in the error message.

    Returns:
        The value unchanged.

    Raises:
        ValueError: If value is not an int in [0, MAX_AMOUNT].
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{field_name} must be an integer, got {type(value).__name__}")
    if value < 0 or value > MAX_AMOUNT:
        raise ValueError(f"{field_name} {value} outside [0, {MAX_AMOUNT}]")
    return value


class MilestoneFlagsType(TypeDecorator):
    """
    MilestoneFlags stored as a String(MILESTONE_COUNT) of "0"/"1".

    Guarantees:
        - process_bind_param: MilestoneFlags -> bit string on INSERT/UPDATE.
        - process_result_value: bit string -> MilestoneFlags on SELECT.
    """

    impl = String(MILESTONE_COUNT)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None:
            return value.to_bits()
        return None

    def process_result_value(self, value, dialect):
        if value is not None:
            return MilestoneFlags.from_bits(value)
        return None
