"""
BidLedger -- escrowed bid placement and bid lookup.

Responsibility:
    Records a bid against an active project once the caller has escrowed
    exactly the bid amount, and moves that value into the pooled balance.

Architecture position:
    Kernel > Services -- imperative shell.
    Uses ProjectRegistry for the project lookup and FundCustody for the
    deposit.  The two stores are joined only by ``project_id``.

Invariants enforced:
    - Preconditions are checked in a fixed order: gate, amount range,
      project exists, project active, exact escrow.
    - ``escrowed_value == bid_amount``; over-payment is rejected as well.
    - New id == prior value of the bid counter (independent of projects).
    - ``timestamp`` always comes from the injected clock.

Failure modes:
    - EmergencyStoppedError, ProjectNotFoundError, ProjectNotActiveError,
      InsufficientFundsError, EscrowOverflowError.
    - BidNotFoundError: ``require_bid`` on an unassigned id.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from marketplace_kernel.db.types import validate_amount
from marketplace_kernel.domain.clock import Clock, SystemClock
from marketplace_kernel.exceptions import (
    BidNotFoundError,
    InsufficientFundsError,
    ProjectNotActiveError,
)
from marketplace_kernel.logging_config import get_logger
from marketplace_kernel.models.bid import Bid
from marketplace_kernel.services.access_controller import AccessController
from marketplace_kernel.services.base import BaseService
from marketplace_kernel.services.fund_custody import FundCustody
from marketplace_kernel.services.notification_log import NotificationLog
from marketplace_kernel.services.project_registry import ProjectRegistry
from marketplace_kernel.services.sequence_service import SequenceService

logger = get_logger("services.bid_ledger")


class BidLedger(BaseService):
    """Create/store Bid records backed by escrow."""

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session)
        self._clock = clock or SystemClock()
        self._access = AccessController(session)
        self._registry = ProjectRegistry(session, self._clock)
        self._custody = FundCustody(session)
        self._sequence_service = SequenceService(session)
        self._notifications = NotificationLog(session, self._clock)

    def place_bid(
        self,
        project_id: int,
        bid_amount: int,
        escrowed_value: int,
        caller: str,
    ) -> int:
        """
        Place a bid on an active project.

        Args:
            project_id: Target project.
            bid_amount: Offered amount.
            escrowed_value: Value the caller attaches; must equal bid_amount.
            caller: Identity of the bidder.

        Returns:
            The new bid id.

        Raises:
            EmergencyStoppedError: Gate closed.
            ProjectNotFoundError: Project id never assigned.
            ProjectNotActiveError: A bid was already accepted on the project.
            InsufficientFundsError: Escrow does not match the amount.
        """
        self._access.require_running("place_bid")
        validate_amount(bid_amount, "bid_amount")
        validate_amount(escrowed_value, "escrowed_value")
        project = self._registry.require_project(project_id)
        if not project.is_active:
            raise ProjectNotActiveError(project_id)
        if escrowed_value != bid_amount:
            raise InsufficientFundsError(bid_amount, escrowed_value)

        bid_id = self._sequence_service.allocate(SequenceService.BID)
        bid = Bid(
            id=bid_id,
            project_id=project_id,
            timestamp=self._clock.timestamp(),
            amount=bid_amount,
            bidder=caller,
        )
        self.session.add(bid)
        self.session.flush()

        balance = self._custody.deposit(escrowed_value)

        self._notifications.new_bid(project_id, bid_id, bid_amount, caller)

        logger.info(
            "bid_placed",
            extra={
                "bid_id": bid_id,
                "project_id": project_id,
                "amount": bid_amount,
                "bidder": caller,
                "pooled_balance": balance,
            },
        )
        return bid_id

    def find_bid(self, bid_id: int) -> Bid | None:
        return self.session.execute(
            select(Bid).where(Bid.id == bid_id)
        ).scalar_one_or_none()

    def require_bid(self, bid_id: int) -> Bid:
        """
        Load a bid, failing if it was never placed.

        Raises:
            BidNotFoundError: If the id was never assigned.
        """
        bid = self.find_bid(bid_id)
        if bid is None:
            raise BidNotFoundError(bid_id)
        return bid
