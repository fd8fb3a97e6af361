"""
Configuration Loader (``marketplace_config.loader``).

Responsibility
--------------
Loads a YAML settings file, applies environment overrides and parses the
result into a frozen ``MarketplaceSettings``.

Invariants enforced
-------------------
* All parse errors raise ``ValueError`` or ``KeyError`` with descriptive
  messages; there is no silent default for ``system_owner``.
* Environment variables override file values, never the other way round.
* ``compute_checksum`` is deterministic for identical settings.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing ``system_owner``  -> ``KeyError`` propagates.
* Unknown log level  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
import os
from dataclasses import asdict
from pathlib import Path
from typing import Any, Mapping

import yaml

from marketplace_config.schema import DEFAULT_DATABASE_URL, MarketplaceSettings

ENV_DATABASE_URL = "MARKETPLACE_DATABASE_URL"
ENV_LOG_LEVEL = "MARKETPLACE_LOG_LEVEL"
ENV_SYSTEM_OWNER = "MARKETPLACE_SYSTEM_OWNER"

_ENV_OVERRIDES = {
    ENV_DATABASE_URL: "database_url",
    ENV_LOG_LEVEL: "log_level",
    ENV_SYSTEM_OWNER: "system_owner",
}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def apply_env_overrides(
    data: Mapping[str, Any],
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Return a copy of ``data`` with any MARKETPLACE_* variables applied."""
    environ = os.environ if environ is None else environ
    merged = dict(data)
    for env_name, key in _ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if value:
            merged[key] = value
    return merged


def parse_settings(data: Mapping[str, Any]) -> MarketplaceSettings:
    """
    Parse a ``MarketplaceSettings`` from a dict.

    Raises:
        KeyError: if ``system_owner`` is absent.
        ValueError: if ``log_level`` is not a known level.
    """
    return MarketplaceSettings(
        system_owner=str(data["system_owner"]),
        database_url=str(data.get("database_url") or DEFAULT_DATABASE_URL),
        sql_echo=bool(data.get("sql_echo", False)),
        log_level=str(data.get("log_level", "INFO")).upper(),
    )


def compute_checksum(settings: MarketplaceSettings) -> str:
    """SHA-256 over the canonical JSON form of the settings."""
    canonical = json.dumps(asdict(settings), sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
