"""Services for the marketplace kernel (write side)."""

from marketplace_kernel.services.access_controller import AccessController
from marketplace_kernel.services.bid_acceptance import BidAcceptanceWorkflow
from marketplace_kernel.services.bid_ledger import BidLedger
from marketplace_kernel.services.fund_custody import FundCustody
from marketplace_kernel.services.milestone_tracker import MilestoneTracker
from marketplace_kernel.services.notification_log import NotificationLog
from marketplace_kernel.services.project_registry import ProjectRegistry
from marketplace_kernel.services.sequence_service import SequenceService

__all__ = [
    "AccessController",
    "BidAcceptanceWorkflow",
    "BidLedger",
    "FundCustody",
    "MilestoneTracker",
    "NotificationLog",
    "ProjectRegistry",
    "SequenceService",
]
