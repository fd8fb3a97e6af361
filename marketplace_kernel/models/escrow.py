"""
Module: marketplace_kernel.models.escrow
Responsibility: Single-row table holding the pooled escrow balance.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - One balance for the whole process; there is no per-project sub-ledger.
"""

from sqlalchemy import BigInteger, Integer
from sqlalchemy.orm import Mapped, mapped_column

from marketplace_kernel.db.base import Base

POOL_ROW_ID = 1


class EscrowPool(Base):
    """Aggregate of every escrowed bid amount not yet withdrawn."""

    __tablename__ = "escrow_pool"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=POOL_ROW_ID)

    balance: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
