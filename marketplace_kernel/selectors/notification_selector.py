"""
Module: marketplace_kernel.selectors.notification_selector
Responsibility: Query the notification log by project, bid and kind.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Results are always ordered by ``seq`` (emission order).
    - Filters combine with AND; no filter returns the whole log.
"""

from sqlalchemy import func, select

from marketplace_kernel.domain.dtos import NotificationKind, NotificationRecord
from marketplace_kernel.models.notification import Notification
from marketplace_kernel.selectors.base import BaseSelector


class NotificationSelector(BaseSelector[Notification]):
    """Read side of the notification log."""

    def query(
        self,
        project_id: int | None = None,
        bid_id: int | None = None,
        kind: NotificationKind | str | None = None,
    ) -> list[NotificationRecord]:
        stmt = select(Notification)
        if project_id is not None:
            stmt = stmt.where(Notification.project_id == project_id)
        if bid_id is not None:
            stmt = stmt.where(Notification.bid_id == bid_id)
        if kind is not None:
            stmt = stmt.where(Notification.kind == NotificationKind(kind).value)
        rows = self.session.execute(stmt.order_by(Notification.seq)).scalars().all()
        return [NotificationRecord.from_model(row) for row in rows]

    def count(self) -> int:
        return self.session.execute(select(func.count(Notification.seq))).scalar_one()
