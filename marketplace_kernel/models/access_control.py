"""
Module: marketplace_kernel.models.access_control
Responsibility: Single-row table holding the system owner and the
    emergency-stop flag.
Architecture position: Kernel > Models.  May import from db/ only.
"""

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from marketplace_kernel.db.base import Base

CONTROL_ROW_ID = 1


class AccessControlState(Base):
    """System owner (written once) and the stopped flag."""

    __tablename__ = "access_control"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=CONTROL_ROW_ID)

    owner: Mapped[str] = mapped_column(String(128), nullable=False)

    stopped: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
