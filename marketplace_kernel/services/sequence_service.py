"""
SequenceService -- monotonic id allocation via counter rows.

Responsibility:
    Owns the global counters ``next_project_id``, ``next_bid_id`` and the
    notification sequence.  Each counter is one row in a dedicated table;
    ``allocate()`` hands out the current value and increments it, so ids start
    at 0 and increase by exactly 1 per successful creation.

Architecture position:
    Kernel > Services -- imperative shell infrastructure.
    Called by ProjectRegistry, BidLedger and NotificationLog.

Invariants enforced:
    - Counters are the sole source of new ids: no id is ever reused and the
      aggregate-max-plus-one pattern is never used.
    - Transactional: an increment is only visible after the caller's
      transaction commits.  A rolled-back operation leaves the counter at
      its previous value, so failed creations never leave gaps.

Failure modes:
    - None under the facade's serialization.  Rows are read ``FOR UPDATE``
      on backends that support it.
"""

from sqlalchemy import BigInteger, String, select
from sqlalchemy.orm import Mapped, Session, mapped_column

from marketplace_kernel.db.base import Base
from marketplace_kernel.logging_config import get_logger

logger = get_logger("services.sequence")


class SequenceCounter(Base):
    """
    Sequence counter table.

    Each row represents a named sequence holding the NEXT value to hand out.
    """

    __tablename__ = "sequence_counters"

    name: Mapped[str] = mapped_column(String(50), primary_key=True)

    next_value: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)


class SequenceService:
    """
    Service for allocating transactional ids.

    Non-goals:
        - Does NOT call ``session.commit()`` -- caller controls boundaries.
        - Does NOT expose a way to set or decrement a counter.

    Usage:
        with session_scope() as session:
            project_id = SequenceService(session).allocate(SequenceService.PROJECT)
    """

    # Well-known sequence names
    PROJECT = "project"
    BID = "bid"
    NOTIFICATION = "notification"

    def __init__(self, session: Session):
        self._session = session

    def _load(self, sequence_name: str) -> SequenceCounter | None:
        return self._session.execute(
            select(SequenceCounter)
            .where(SequenceCounter.name == sequence_name)
            .with_for_update()
        ).scalar_one_or_none()

    def allocate(self, sequence_name: str) -> int:
        """
        Hand out the next value of a named sequence.

        Postconditions:
            - Returns the value ``peek()`` would have returned.
            - The counter is one higher once the transaction commits.

        Args:
            sequence_name: Name of the sequence.

        Returns:
            The allocated value (0 for the first allocation).
        """
        counter = self._load(sequence_name)
        if counter is None:
            counter = SequenceCounter(name=sequence_name, next_value=0)
            self._session.add(counter)

        value = counter.next_value
        counter.next_value = value + 1
        self._session.flush()

        logger.debug(
            "sequence_allocated",
            extra={"sequence_name": sequence_name, "value": value},
        )
        return value

    def peek(self, sequence_name: str) -> int:
        """
        Get the value the next ``allocate()`` would return, without allocating.

        Returns:
            Next value, or 0 if the sequence has never been used.
        """
        counter = self._session.execute(
            select(SequenceCounter).where(SequenceCounter.name == sequence_name)
        ).scalar_one_or_none()
        return counter.next_value if counter else 0
