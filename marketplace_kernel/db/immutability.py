"""
ORM-Level Immutability Enforcement.

===============================================================================
HOW IT WORKS
===============================================================================

SQLAlchemy fires events before UPDATE/DELETE operations reach the database.
We register listeners that intercept these events and check the lifecycle
rules of each record:

    session.flush()
         |
         v
    [before_update event] --> _check_*_update() --> ImmutabilityViolationError
         |                                                  ^
         v                                                  |
    [before_delete event] --> _check_*_delete() ------------+
         |
         v
    SQL sent to database (only if checks pass)

If a check fails, ImmutabilityViolationError propagates out of the flush and
the marketplace operation's transaction rolls back.

===============================================================================
PROTECTED ENTITIES
===============================================================================

Entity        | Rule
--------------|-----------------------------------------------------------
Bid           | Never updated, never deleted
Notification  | Never updated, never deleted (the audit log)
Project       | Never deleted; id/name/description/price frozen;
              | is_active may only go True -> False
===============================================================================
"""

from sqlalchemy import event
from sqlalchemy import inspect as sa_inspect

from marketplace_kernel.exceptions import ImmutabilityViolationError
from marketplace_kernel.logging_config import get_logger

logger = get_logger("db.immutability")

# Written once at creation
PROJECT_FROZEN_FIELDS = frozenset({"id", "name", "description", "price"})


def _block(entity_type: str, entity_id, operation: str, reason: str) -> None:
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": entity_type,
            "entity_id": str(entity_id),
            "operation": operation,
        },
    )
    raise ImmutabilityViolationError(
        entity_type=entity_type,
        entity_id=str(entity_id),
        reason=reason,
    )


def _check_bid_update(mapper, connection, target):
    _block("Bid", target.id, "UPDATE", "Bids are immutable once placed")


def _check_bid_delete(mapper, connection, target):
    _block("Bid", target.id, "DELETE", "Bids cannot be deleted")


def _check_notification_update(mapper, connection, target):
    _block(
        "Notification", target.seq, "UPDATE",
        "Notifications are append-only and cannot be modified",
    )


def _check_notification_delete(mapper, connection, target):
    _block("Notification", target.seq, "DELETE", "Notifications cannot be deleted")


def _check_project_update(mapper, connection, target):
    """
    Allow only the lifecycle fields to change, and only forward.

    Uses attribute history, so a field set to its current value is not a change.
    """
    state = sa_inspect(target)

    changed = {
        attr.key for attr in state.attrs if attr.history.has_changes()
    }
    frozen = changed & PROJECT_FROZEN_FIELDS
    if frozen:
        _block(
            "Project", target.id, "UPDATE",
            f"Fields {sorted(frozen)} are fixed at creation",
        )

    if "is_active" in changed:
        previous = state.attrs.is_active.history.deleted
        if previous and previous[0] is False and target.is_active:
            _block(
                "Project", target.id, "UPDATE",
                "An inactive project cannot be reactivated",
            )


def _check_project_delete(mapper, connection, target):
    _block("Project", target.id, "DELETE", "Projects cannot be deleted")


_LISTENERS = (
    ("Bid", "before_update", _check_bid_update),
    ("Bid", "before_delete", _check_bid_delete),
    ("Notification", "before_update", _check_notification_update),
    ("Notification", "before_delete", _check_notification_delete),
    ("Project", "before_update", _check_project_update),
    ("Project", "before_delete", _check_project_delete),
)


def _models() -> dict:
    from marketplace_kernel.models import Bid, Notification, Project

    return {"Bid": Bid, "Notification": Notification, "Project": Project}


def register_immutability_listeners() -> None:
    """
    Register all immutability enforcement event listeners (idempotent).

    Call this after all models are imported but before any database
    operations begin.
    """
    models = _models()
    for model_name, event_name, listener in _LISTENERS:
        target = models[model_name]
        if not event.contains(target, event_name, listener):
            event.listen(target, event_name, listener)


def unregister_immutability_listeners() -> None:
    """
    Remove immutability enforcement event listeners.

    WARNING: Only use this in tests where you need to intentionally
    violate immutability rules to verify detection.
    """
    models = _models()
    for model_name, event_name, listener in _LISTENERS:
        target = models[model_name]
        if event.contains(target, event_name, listener):
            event.remove(target, event_name, listener)
