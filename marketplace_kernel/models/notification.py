"""
Module: marketplace_kernel.models.notification
Responsibility: ORM persistence for the append-only notification log.
Architecture position: Kernel > Models.  May import from db/ and domain/.

Invariants enforced:
    - Append-only: no UPDATE or DELETE (db/immutability.py).
    - seq is allocated by SequenceService ("notification" counter) and
      orders the log by emission time.
    - hash = H(kind | project_id | bid_id | payload_hash | prev_hash);
      validated by NotificationLog.validate_chain().

Audit relevance:
    This table IS the audit log.  Every successful state transition writes
    exactly one row inside the same transaction as the transition, so a
    rolled-back operation leaves no trace here.
"""

from sqlalchemy import JSON, BigInteger, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from marketplace_kernel.db.base import Base


class Notification(Base):
    """One emitted notification with hash chain linkage."""

    __tablename__ = "notifications"

    __table_args__ = (
        Index("idx_notification_project", "project_id"),
        Index("idx_notification_bid", "bid_id"),
        Index("idx_notification_kind", "kind"),
    )

    seq: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)

    # NotificationKind value
    kind: Mapped[str] = mapped_column(String(32), nullable=False)

    project_id: Mapped[int] = mapped_column(BigInteger, nullable=False)

    bid_id: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    milestone_index: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    amount: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    name: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Who performed the transition
    actor: Mapped[str] = mapped_column(String(128), nullable=False)

    # Clock time, whole UTC seconds
    occurred_at: Mapped[int] = mapped_column(BigInteger, nullable=False)

    payload: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    payload_hash: Mapped[str] = mapped_column(String(64), nullable=False)

    # Hash of the previous notification (null for the first one)
    prev_hash: Mapped[str | None] = mapped_column(String(64), nullable=True)

    hash: Mapped[str] = mapped_column(String(64), nullable=False)

    def __repr__(self) -> str:
        return f"<Notification {self.seq} {self.kind} project={self.project_id}>"

    @property
    def is_genesis(self) -> bool:
        return self.prev_hash is None
