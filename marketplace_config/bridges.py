"""
Config -> Kernel Bridges.

Turns a ``MarketplaceSettings`` into a running ``Marketplace``.  This lives
in marketplace_config because the kernel must never import
marketplace_config.

Usage:
    from marketplace_config import get_active_settings
    from marketplace_config.bridges import open_marketplace

    market = open_marketplace(get_active_settings())
"""

from __future__ import annotations

import logging

from marketplace_config.schema import MarketplaceSettings
from marketplace_kernel.db.engine import (
    create_tables,
    get_session_factory,
    init_engine_from_url,
)
from marketplace_kernel.db.immutability import register_immutability_listeners
from marketplace_kernel.domain.clock import Clock
from marketplace_kernel.domain.payout import PayoutGateway
from marketplace_kernel.logging_config import configure_logging
from marketplace_kernel.marketplace import Marketplace


def open_marketplace(
    settings: MarketplaceSettings,
    clock: Clock | None = None,
    payout: PayoutGateway | None = None,
) -> Marketplace:
    """
    Boot a marketplace from settings.

    Configures logging, initializes the engine, creates tables, registers
    the immutability listeners and initializes access control with
    ``settings.system_owner``.

    Raises:
        OwnerAlreadySetError: If the store was initialized by another owner.
    """
    configure_logging(level=getattr(logging, settings.log_level))
    init_engine_from_url(settings.database_url, echo=settings.sql_echo)
    create_tables()
    register_immutability_listeners()

    return Marketplace(
        owner=settings.system_owner,
        clock=clock,
        payout=payout,
        session_factory=get_session_factory(),
    )
