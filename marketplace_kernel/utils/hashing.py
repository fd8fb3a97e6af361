"""
Deterministic hashing utilities.

All hashing in the marketplace kernel must be deterministic and reproducible.
This module provides the canonical hashing functions for the notification log.
"""

import hashlib
import json
from typing import Any


def canonicalize_json(data: dict | list | Any) -> str:
    """
    Convert data to canonical JSON string.

    Produces a deterministic JSON representation:
    - Keys are sorted alphabetically
    - No whitespace

    Args:
        data: Data to canonicalize.

    Returns:
        Canonical JSON string.
    """
    return json.dumps(data, sort_keys=True, separators=(",", ":"))


def hash_payload(payload: dict) -> str:
    """
    Compute SHA-256 hash of a payload.

    Returns:
        Hex-encoded SHA-256 hash (64 characters).
    """
    canonical = canonicalize_json(payload)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def hash_notification(
    seq: int,
    kind: str,
    project_id: int,
    bid_id: int | None,
    payload_hash: str,
    prev_hash: str | None,
) -> str:
    """
    Compute the chained hash of a notification.

    The hash includes the identifying fields plus the previous notification's
    hash, so editing or removing any earlier record changes every later hash.

    Args:
        seq: Position in the log.
        kind: NotificationKind value.
        project_id: Project the notification concerns.
        bid_id: Bid the notification concerns, if any.
        payload_hash: Hash of the notification payload.
        prev_hash: Hash of the previous notification (None for the first).

    Returns:
        Hex-encoded SHA-256 hash.
    """
    components = [
        str(seq),
        kind,
        str(project_id),
        "" if bid_id is None else str(bid_id),
        payload_hash,
        prev_hash or "GENESIS",
    ]
    data = "|".join(components)
    return hashlib.sha256(data.encode("utf-8")).hexdigest()
