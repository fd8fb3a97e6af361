"""
Marketplace -- the public operation surface of the kernel.

Responsibility:
    Exposes every marketplace operation (project publication, bidding,
    acceptance, milestones, completion, emergency stop, withdrawal and the
    reads) and runs each one as an indivisible unit: one operation at a
    time, one database transaction per operation.

Architecture position:
    Kernel > Facade.  The only module that opens sessions and commits.
    Composes services (write side) and selectors (read side).

Invariants enforced:
    - Serialization: every operation holds the instance's operation lock
      from its first check to its commit.  Callers on other threads wait.
    - All-or-nothing: any exception rolls the transaction back, so counters,
      records, balance and notification log are left exactly as they were.
    - Re-entrancy: a call made by the thread already running an operation
      (for example from inside ``PayoutGateway.transfer``) raises
      ReentrantCallError instead of deadlocking.

Failure modes:
    - Every MarketplaceError raised by a service surfaces unchanged, after
      an ``operation_rejected`` WARNING log carrying its code.
    - ReentrantCallError: nested call on the operating thread.

Audit relevance:
    Every successful mutation commits together with its notification; a
    rejected one commits nothing.
"""

import threading
from contextlib import contextmanager
from typing import Generator
from uuid import uuid4

from sqlalchemy.orm import Session, sessionmaker

from marketplace_kernel.db.engine import get_session_factory, session_scope
from marketplace_kernel.domain.clock import Clock, SystemClock
from marketplace_kernel.domain.dtos import (
    BidInfo,
    MarketplaceStatus,
    NotificationKind,
    NotificationRecord,
    ProjectInfo,
)
from marketplace_kernel.domain.payout import InMemoryWallet, PayoutGateway
from marketplace_kernel.exceptions import MarketplaceError, ReentrantCallError
from marketplace_kernel.logging_config import LogContext, get_logger
from marketplace_kernel.selectors.marketplace_selector import MarketplaceSelector
from marketplace_kernel.selectors.notification_selector import NotificationSelector
from marketplace_kernel.services.access_controller import AccessController
from marketplace_kernel.services.bid_acceptance import BidAcceptanceWorkflow
from marketplace_kernel.services.bid_ledger import BidLedger
from marketplace_kernel.services.fund_custody import FundCustody
from marketplace_kernel.services.milestone_tracker import MilestoneTracker
from marketplace_kernel.services.notification_log import NotificationLog
from marketplace_kernel.services.project_registry import ProjectRegistry

logger = get_logger("marketplace")


class Marketplace:
    """
    Serialized facade over the marketplace services.

    One instance owns one store.  Construct it after the engine is
    initialized and the tables exist (see ``marketplace_config.bridges``).

    Usage:
        market = Marketplace(owner="0xOwner")
        project_id = market.create_project("Bridge", "Span", 100, caller="0xA")
        bid_id = market.place_bid(project_id, 50, 50, caller="0xB")
        market.accept_bid(bid_id, caller="0xA")
    """

    def __init__(
        self,
        owner: str,
        clock: Clock | None = None,
        payout: PayoutGateway | None = None,
        session_factory: sessionmaker[Session] | None = None,
    ):
        self._clock = clock or SystemClock()
        self._payout = payout or InMemoryWallet()
        self._session_factory = session_factory or get_session_factory()
        self._lock = threading.Lock()
        self._running_thread: int | None = None
        self._running_operation: str | None = None

        with self._operation("initialize", owner) as session:
            AccessController(session).initialize(owner)
            FundCustody(session).initialize()

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def payout(self) -> PayoutGateway:
        return self._payout

    @contextmanager
    def _operation(
        self,
        name: str,
        caller: str | None = None,
        **context: int | None,
    ) -> Generator[Session, None, None]:
        if self._running_thread == threading.get_ident():
            logger.error(
                "reentrant_call_rejected",
                extra={"operation": name, "active_operation": self._running_operation},
            )
            raise ReentrantCallError(name, self._running_operation or "unknown")

        with self._lock:
            self._running_thread = threading.get_ident()
            self._running_operation = name
            try:
                with LogContext.bind(
                    correlation_id=uuid4().hex,
                    operation=name,
                    actor_id=caller,
                    **context,
                ):
                    try:
                        with session_scope(self._session_factory) as session:
                            yield session
                    except MarketplaceError as exc:
                        logger.warning(
                            "operation_rejected",
                            extra={"code": exc.code, "reason": exc.reason},
                        )
                        raise
            finally:
                self._running_thread = None
                self._running_operation = None

    # Access control

    def toggle_active(self, caller: str) -> bool:
        """Flip the emergency stop. System owner only. Returns the new ``stopped``."""
        with self._operation("toggle_active", caller) as session:
            return AccessController(session).toggle_active(caller)

    # Projects and bids

    def create_project(self, name: str, description: str, price: int, caller: str) -> int:
        with self._operation("create_project", caller) as session:
            return ProjectRegistry(session, self._clock).create_project(
                name, description, price, caller
            )

    def place_bid(
        self,
        project_id: int,
        bid_amount: int,
        escrowed_value: int,
        caller: str,
    ) -> int:
        """
        Place a bid, escrowing ``escrowed_value`` into the pooled balance.

        ``escrowed_value`` must equal ``bid_amount`` exactly.
        """
        with self._operation("place_bid", caller, project_id=project_id) as session:
            return BidLedger(session, self._clock).place_bid(
                project_id, bid_amount, escrowed_value, caller
            )

    def accept_bid(self, bid_id: int, caller: str) -> ProjectInfo:
        with self._operation("accept_bid", caller, bid_id=bid_id) as session:
            return BidAcceptanceWorkflow(session, self._clock).accept_bid(bid_id, caller)

    # Milestones

    def mark_milestone(self, project_id: int, index: int, caller: str) -> None:
        with self._operation("mark_milestone", caller, project_id=project_id) as session:
            MilestoneTracker(session, self._clock).mark_milestone(project_id, index, caller)

    def complete_project(self, project_id: int, caller: str) -> None:
        with self._operation("complete_project", caller, project_id=project_id) as session:
            MilestoneTracker(session, self._clock).complete_project(project_id, caller)

    # Funds

    def withdraw(self, caller: str) -> int:
        """
        Drain the pooled balance to the system owner.

        Permitted while stopped.  Returns the amount transferred.
        """
        with self._operation("withdraw", caller) as session:
            return FundCustody(session).withdraw(caller, self._payout)

    # Reads

    def get_project(self, project_id: int) -> ProjectInfo:
        """Stored project, or the zero-value record for an unassigned id."""
        with self._operation("get_project", project_id=project_id) as session:
            return MarketplaceSelector(session).get_project(project_id)

    def get_bid(self, bid_id: int) -> BidInfo:
        """Stored bid, or the zero-value record for an unassigned id."""
        with self._operation("get_bid", bid_id=bid_id) as session:
            return MarketplaceSelector(session).get_bid(bid_id)

    def bids_for_project(self, project_id: int) -> list[BidInfo]:
        with self._operation("bids_for_project", project_id=project_id) as session:
            return MarketplaceSelector(session).bids_for_project(project_id)

    def status(self) -> MarketplaceStatus:
        with self._operation("status") as session:
            return MarketplaceSelector(session).status()

    def notifications(
        self,
        project_id: int | None = None,
        bid_id: int | None = None,
        kind: NotificationKind | str | None = None,
    ) -> list[NotificationRecord]:
        with self._operation("notifications") as session:
            return NotificationSelector(session).query(
                project_id=project_id, bid_id=bid_id, kind=kind
            )

    def verify_audit_log(self) -> bool:
        """
        Recompute the notification hash chain.

        Raises:
            AuditChainBrokenError: At the first mismatching record.
        """
        with self._operation("verify_audit_log") as session:
            return NotificationLog(session, self._clock).validate_chain()
