"""
Module: marketplace_kernel.selectors.marketplace_selector
Responsibility: Read-only access to projects, bids and system status.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Zero-value reads: an id that was never assigned yields
      ``ProjectInfo.empty()`` / ``BidInfo.empty()``, never an error.
    - Bids are listed in id order.

Failure modes:
    - None on absence of data.  ``status()`` raises RuntimeError only if
      the store was never initialized.
"""

from sqlalchemy import select

from marketplace_kernel.domain.dtos import BidInfo, MarketplaceStatus, ProjectInfo
from marketplace_kernel.models.access_control import CONTROL_ROW_ID, AccessControlState
from marketplace_kernel.models.bid import Bid
from marketplace_kernel.models.escrow import POOL_ROW_ID, EscrowPool
from marketplace_kernel.models.project import Project
from marketplace_kernel.selectors.base import BaseSelector
from marketplace_kernel.services.sequence_service import SequenceCounter, SequenceService


class MarketplaceSelector(BaseSelector[Project]):
    """Project, bid and status queries."""

    def get_project(self, project_id: int) -> ProjectInfo:
        project = self.session.get(Project, project_id)
        if project is None:
            return ProjectInfo.empty()
        return ProjectInfo.from_model(project)

    def get_bid(self, bid_id: int) -> BidInfo:
        bid = self.session.get(Bid, bid_id)
        if bid is None:
            return BidInfo.empty()
        return BidInfo.from_model(bid)

    def bids_for_project(self, project_id: int) -> list[BidInfo]:
        bids = self.session.execute(
            select(Bid).where(Bid.project_id == project_id).order_by(Bid.id)
        ).scalars().all()
        return [BidInfo.from_model(bid) for bid in bids]

    def _counter(self, name: str) -> int:
        counter = self.session.get(SequenceCounter, name)
        return counter.next_value if counter else 0

    def status(self) -> MarketplaceStatus:
        """
        Snapshot of owner, gate state, pooled balance and next ids.

        Raises:
            RuntimeError: If access control was never initialized.
        """
        state = self.session.get(AccessControlState, CONTROL_ROW_ID)
        if state is None:
            raise RuntimeError("Access control not initialized")
        pool = self.session.get(EscrowPool, POOL_ROW_ID)
        return MarketplaceStatus(
            owner=state.owner,
            stopped=state.stopped,
            pooled_balance=pool.balance if pool else 0,
            next_project_id=self._counter(SequenceService.PROJECT),
            next_bid_id=self._counter(SequenceService.BID),
        )
