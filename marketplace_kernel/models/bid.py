"""
Module: marketplace_kernel.models.bid
Responsibility: ORM persistence for escrowed bids.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - id is allocated by SequenceService ("bid" counter), starting at 0.
    - A Bid is immutable once flushed (db/immutability.py).
    - project_id referenced an existing project when the bid was placed;
      it is not re-validated afterwards.
"""

from sqlalchemy import BigInteger, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from marketplace_kernel.db.base import Base


class Bid(Base):
    """An offer to carry out a project, backed by escrowed value."""

    __tablename__ = "bids"

    __table_args__ = (
        Index("idx_bid_project", "project_id"),
        Index("idx_bid_bidder", "bidder"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)

    project_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("projects.id"),
        nullable=False,
    )

    # Clock time at placement, whole UTC seconds
    timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False)

    # Equal to the value escrowed at placement
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)

    bidder: Mapped[str] = mapped_column(String(128), nullable=False)

    def __repr__(self) -> str:
        return f"<Bid {self.id} on project {self.project_id} amount={self.amount}>"
