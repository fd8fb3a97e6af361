"""
NotificationLog -- append-only, hash-chained record of state transitions.

Responsibility:
    Writes one Notification row per successful state transition
    (NewProject, NewBid, BidAccepted, MilestoneReached, ProjectCompleted)
    and validates the hash chain over the whole log.

Architecture position:
    Kernel > Services -- imperative shell, called by ProjectRegistry,
    BidLedger, BidAcceptanceWorkflow and MilestoneTracker as the last step
    of each operation.

Invariants enforced:
    - Sequence numbers come from SequenceService, never from max(seq)+1.
    - ``hash = H(seq | kind | project_id | bid_id | payload_hash | prev_hash)``.
    - Append-only (ORM listeners on the Notification model).
    - Emission happens inside the operation's transaction: a failed
      operation rolls its notification back with everything else.

Failure modes:
    - AuditChainBrokenError: recomputed hash does not match the stored one,
      or prev_hash does not match the predecessor's hash.
"""

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from marketplace_kernel.domain.clock import Clock, SystemClock
from marketplace_kernel.domain.dtos import NotificationKind, NotificationRecord
from marketplace_kernel.exceptions import AuditChainBrokenError
from marketplace_kernel.logging_config import get_logger
from marketplace_kernel.models.notification import Notification
from marketplace_kernel.services.base import BaseService
from marketplace_kernel.services.sequence_service import SequenceService
from marketplace_kernel.utils.hashing import hash_notification, hash_payload

logger = get_logger("services.notification_log")


class NotificationLog(BaseService):
    """
    Service for emitting and validating notifications.

    Non-goals:
        - Does NOT call ``session.commit()`` -- caller controls boundaries.
        - Does NOT deliver notifications anywhere; readers query the log.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session)
        self._clock = clock or SystemClock()
        self._sequence_service = SequenceService(session)

    def _last_hash(self) -> str | None:
        last = self.session.execute(
            select(Notification).order_by(Notification.seq.desc()).limit(1)
        ).scalar_one_or_none()
        return last.hash if last else None

    def _emit(
        self,
        kind: NotificationKind,
        project_id: int,
        actor: str,
        *,
        bid_id: int | None = None,
        milestone_index: int | None = None,
        amount: int | None = None,
        name: str | None = None,
    ) -> NotificationRecord:
        seq = self._sequence_service.allocate(SequenceService.NOTIFICATION)
        prev_hash = self._last_hash()

        payload: dict[str, Any] = {"project_id": project_id, "actor": actor}
        if bid_id is not None:
            payload["bid_id"] = bid_id
        if milestone_index is not None:
            payload["milestone_index"] = milestone_index
        if amount is not None:
            payload["amount"] = amount
        if name is not None:
            payload["name"] = name

        payload_hash = hash_payload(payload)
        notification = Notification(
            seq=seq,
            kind=kind.value,
            project_id=project_id,
            bid_id=bid_id,
            milestone_index=milestone_index,
            amount=amount,
            name=name,
            actor=actor,
            occurred_at=self._clock.timestamp(),
            payload=payload,
            payload_hash=payload_hash,
            prev_hash=prev_hash,
            hash=hash_notification(
                seq=seq,
                kind=kind.value,
                project_id=project_id,
                bid_id=bid_id,
                payload_hash=payload_hash,
                prev_hash=prev_hash,
            ),
        )
        self.session.add(notification)
        self.session.flush()

        logger.info(
            "notification_emitted",
            extra={"kind": kind.value, "seq": seq, "project_id": project_id},
        )
        return NotificationRecord.from_model(notification)

    # Domain-specific emitters

    def new_project(self, project_id: int, name: str, actor: str) -> NotificationRecord:
        return self._emit(NotificationKind.NEW_PROJECT, project_id, actor, name=name)

    def new_bid(
        self, project_id: int, bid_id: int, bid_amount: int, actor: str
    ) -> NotificationRecord:
        return self._emit(
            NotificationKind.NEW_BID, project_id, actor, bid_id=bid_id, amount=bid_amount
        )

    def bid_accepted(self, project_id: int, bid_id: int, actor: str) -> NotificationRecord:
        return self._emit(NotificationKind.BID_ACCEPTED, project_id, actor, bid_id=bid_id)

    def milestone_reached(
        self, project_id: int, milestone_index: int, actor: str
    ) -> NotificationRecord:
        return self._emit(
            NotificationKind.MILESTONE_REACHED,
            project_id,
            actor,
            milestone_index=milestone_index,
        )

    def project_completed(self, project_id: int, actor: str) -> NotificationRecord:
        return self._emit(NotificationKind.PROJECT_COMPLETED, project_id, actor)

    # Chain validation

    def validate_chain(self) -> bool:
        """
        Validate the entire notification chain.

        Returns:
            True if every stored hash matches its recomputed value and links
            to its predecessor.

        Raises:
            AuditChainBrokenError: At the first mismatch.
        """
        notifications = self.session.execute(
            select(Notification).order_by(Notification.seq)
        ).scalars().all()

        prev_hash: str | None = None
        for notification in notifications:
            if notification.prev_hash != prev_hash:
                logger.critical(
                    "audit_chain_broken", extra={"seq": notification.seq}
                )
                raise AuditChainBrokenError(
                    notification.seq, prev_hash or "None", notification.prev_hash or "None"
                )

            expected = hash_notification(
                seq=notification.seq,
                kind=notification.kind,
                project_id=notification.project_id,
                bid_id=notification.bid_id,
                payload_hash=hash_payload(notification.payload or {}),
                prev_hash=notification.prev_hash,
            )
            if notification.hash != expected:
                logger.critical(
                    "audit_chain_broken", extra={"seq": notification.seq}
                )
                raise AuditChainBrokenError(notification.seq, expected, notification.hash)

            prev_hash = notification.hash

        logger.info("audit_chain_valid", extra={"notification_count": len(notifications)})
        return True
