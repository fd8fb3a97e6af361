"""ORM models for the marketplace kernel."""

from marketplace_kernel.models.access_control import AccessControlState
from marketplace_kernel.models.bid import Bid
from marketplace_kernel.models.escrow import EscrowPool
from marketplace_kernel.models.notification import Notification
from marketplace_kernel.models.project import Project

__all__ = [
    "AccessControlState",
    "Bid",
    "EscrowPool",
    "Notification",
    "Project",
]
