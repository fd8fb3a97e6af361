"""
BidAcceptanceWorkflow -- accept one bid and hand the project to the bidder.

Responsibility:
    Deactivates a project and transfers its ownership to the bidder of the
    accepted bid, in one step.

Architecture position:
    Kernel > Services -- imperative shell.
    Reads through BidLedger and ProjectRegistry; mutates the Project row.

Invariants enforced:
    - At most one bid is ever accepted per project: ``is_active`` only moves
      from True to False, and acceptance requires it to be True.
    - Only the current project owner may accept.
    - The bid must exist.  A never-placed bid id is rejected instead of
      being read as an all-zero record.
    - No value moves: escrow stays pooled, no refunds to other bidders, no
      payout to the previous owner.

Failure modes:
    - EmergencyStoppedError, BidNotFoundError, ProjectNotFoundError,
      UnauthorizedError, ProjectNotActiveError.
"""

from sqlalchemy.orm import Session

from marketplace_kernel.domain.clock import Clock, SystemClock
from marketplace_kernel.domain.dtos import ProjectInfo
from marketplace_kernel.exceptions import ProjectNotActiveError, UnauthorizedError
from marketplace_kernel.logging_config import get_logger
from marketplace_kernel.services.access_controller import PROJECT_OWNER_ROLE, AccessController
from marketplace_kernel.services.base import BaseService
from marketplace_kernel.services.bid_ledger import BidLedger
from marketplace_kernel.services.notification_log import NotificationLog
from marketplace_kernel.services.project_registry import ProjectRegistry

logger = get_logger("services.bid_acceptance")


class BidAcceptanceWorkflow(BaseService):
    """Accept-once ownership transfer."""

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session)
        clock = clock or SystemClock()
        self._access = AccessController(session)
        self._bids = BidLedger(session, clock)
        self._registry = ProjectRegistry(session, clock)
        self._notifications = NotificationLog(session, clock)

    def accept_bid(self, bid_id: int, caller: str) -> ProjectInfo:
        """
        Accept ``bid_id`` on behalf of the project owner.

        Returns:
            The project as it stands after the transfer.

        Raises:
            EmergencyStoppedError: Gate closed.
            BidNotFoundError: Bid id never assigned.
            ProjectNotFoundError: Bid references a missing project.
            UnauthorizedError: Caller does not own the project.
            ProjectNotActiveError: A bid was already accepted.
        """
        self._access.require_running("accept_bid")
        bid = self._bids.require_bid(bid_id)
        project = self._registry.require_project(bid.project_id)

        if caller != project.owner:
            raise UnauthorizedError(caller, PROJECT_OWNER_ROLE, "accept_bid")
        if not project.is_active:
            raise ProjectNotActiveError(project.id)

        previous_owner = project.owner
        project.is_active = False
        project.owner = bid.bidder
        self.session.flush()

        self._notifications.bid_accepted(project.id, bid.id, caller)

        logger.info(
            "bid_accepted",
            extra={
                "bid_id": bid.id,
                "project_id": project.id,
                "previous_owner": previous_owner,
                "new_owner": bid.bidder,
            },
        )
        return ProjectInfo.from_model(project)
