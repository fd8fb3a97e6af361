"""
marketplace_config -- single public entrypoint for marketplace settings.

Responsibility:
    Provides ``get_active_settings()``, the one way runtime code obtains
    its settings.  Reads the bundled (or given) YAML file, applies
    MARKETPLACE_* environment overrides and returns a frozen
    ``MarketplaceSettings``.

Architecture position:
    Configuration -- sits above ``marketplace_kernel``.  The kernel MUST
    NEVER import from ``marketplace_config``; ``bridges`` translates
    settings into a running kernel.

Failure modes:
    - ``FileNotFoundError`` -- settings file missing.
    - ``KeyError`` -- no ``system_owner`` in file or environment.
    - ``ValueError`` -- invalid log level.

Audit relevance:
    Every successful call emits a ``MARKETPLACE_CONFIG_TRACE`` log entry
    carrying the settings checksum and source path.
"""

from __future__ import annotations

import logging
from pathlib import Path

from marketplace_config.loader import (
    apply_env_overrides,
    compute_checksum,
    load_yaml_file,
    parse_settings,
)
from marketplace_config.schema import MarketplaceSettings

_logger = logging.getLogger("marketplace_kernel.config")

DEFAULT_SETTINGS_PATH = Path(__file__).parent / "sets" / "default.yaml"


def get_active_settings(path: Path | None = None) -> MarketplaceSettings:
    """
    Load settings from ``path`` (default: the bundled ``sets/default.yaml``).

    Environment variables take precedence over file values.
    """
    source = path or DEFAULT_SETTINGS_PATH
    settings = parse_settings(apply_env_overrides(load_yaml_file(source)))

    _logger.info(
        "MARKETPLACE_CONFIG_TRACE",
        extra={
            "trace_type": "MARKETPLACE_CONFIG_TRACE",
            "source": str(source),
            "checksum": compute_checksum(settings),
            "database_url": settings.database_url,
            "log_level": settings.log_level,
        },
    )
    return settings


__all__ = [
    "DEFAULT_SETTINGS_PATH",
    "MarketplaceSettings",
    "get_active_settings",
]
