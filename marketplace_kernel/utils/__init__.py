"""Utility modules for the marketplace kernel."""

from marketplace_kernel.utils.hashing import (
    canonicalize_json,
    hash_notification,
    hash_payload,
)

__all__ = [
    "canonicalize_json",
    "hash_notification",
    "hash_payload",
]
