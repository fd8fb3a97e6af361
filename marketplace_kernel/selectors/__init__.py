"""Selectors for the marketplace kernel (read side)."""

from marketplace_kernel.selectors.marketplace_selector import MarketplaceSelector
from marketplace_kernel.selectors.notification_selector import NotificationSelector

__all__ = [
    "MarketplaceSelector",
    "NotificationSelector",
]
