"""
Module: marketplace_kernel.models.project
Responsibility: ORM persistence for published construction projects.
Architecture position: Kernel > Models.  May import from db/ and domain/.

Invariants enforced:
    - id is allocated by SequenceService ("project" counter), starting at 0.
    - name, description and price are written once at creation.
    - is_active only moves from True to False (bid acceptance).
    - milestones always holds exactly MILESTONE_COUNT flags.
    The last three are enforced by db/immutability.py listeners.
"""

from sqlalchemy import BigInteger, Boolean, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from marketplace_kernel.db.base import Base
from marketplace_kernel.db.types import MilestoneFlagsType
from marketplace_kernel.domain.milestones import MilestoneFlags


class Project(Base):
    """A unit of construction work offered for bids."""

    __tablename__ = "projects"

    __table_args__ = (
        Index("idx_project_owner", "owner"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)

    name: Mapped[str] = mapped_column(Text, nullable=False)

    description: Mapped[str] = mapped_column(Text, nullable=False)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Advertised price; informational, never compared with bid amounts
    price: Mapped[int] = mapped_column(BigInteger, nullable=False)

    # Current holder: the creator, then the accepted bidder
    owner: Mapped[str] = mapped_column(String(128), nullable=False)

    milestones: Mapped[MilestoneFlags] = mapped_column(
        MilestoneFlagsType(),
        nullable=False,
        default=MilestoneFlags.empty,
    )

    def __repr__(self) -> str:
        return f"<Project {self.id} owner={self.owner} active={self.is_active}>"
