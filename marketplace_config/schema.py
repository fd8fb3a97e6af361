"""
Configuration schema (``marketplace_config.schema``).

Responsibility
--------------
Frozen dataclass describing the settings a marketplace is booted with.

Invariants enforced
-------------------
* Every settings object is immutable once parsed.
* ``log_level`` is one of ``VALID_LOG_LEVELS``.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_DATABASE_URL = "sqlite://"

VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


@dataclass(frozen=True)
class MarketplaceSettings:
    """Boot settings for one marketplace store."""

    system_owner: str
    database_url: str = DEFAULT_DATABASE_URL
    sql_echo: bool = False
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if not self.system_owner:
            raise ValueError("system_owner must be a non-empty identity")
        if self.log_level not in VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid log_level {self.log_level!r}; "
                f"expected one of {sorted(VALID_LOG_LEVELS)}"
            )
