"""
Structured JSON logging for the marketplace kernel.

Every record is one JSON line.  Operation-scoped fields (correlation id,
actor, operation, project and bid ids) live in a single context mapping
bound by the Marketplace facade and are merged into each record.
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from contextvars import ContextVar
from datetime import UTC, datetime
from types import MappingProxyType
from typing import Any, Mapping

_LOGGER_PREFIX = "marketplace_kernel"

_CONTEXT_FIELDS = ("correlation_id", "actor_id", "operation", "project_id", "bid_id")

_context: ContextVar[Mapping[str, str]] = ContextVar(
    "marketplace_log_context", default=MappingProxyType({})
)


def _merged(fields: Mapping[str, Any]) -> Mapping[str, str]:
    current = dict(_context.get())
    for key, val in fields.items():
        if key not in _CONTEXT_FIELDS:
            raise TypeError(f"unknown log context field: {key}")
        if val is not None:
            current[key] = str(val)
    return MappingProxyType(current)


class LogContext:
    """Operation-scoped log fields, isolated per thread and per task."""

    @staticmethod
    def set(**fields: Any) -> None:
        """Update context fields. None values are ignored."""
        _context.set(_merged(fields))

    @staticmethod
    def get_all() -> dict[str, str]:
        return dict(_context.get())

    @staticmethod
    def clear() -> None:
        _context.set(MappingProxyType({}))

    @staticmethod
    def bind(**fields: Any) -> "_Binding":
        """Context manager: apply ``fields`` on entry, restore the previous mapping on exit."""
        return _Binding(fields)


class _Binding:
    def __init__(self, fields: Mapping[str, Any]):
        self._fields = fields
        self._token = None

    def __enter__(self) -> type[LogContext]:
        self._token = _context.set(_merged(self._fields))
        return LogContext

    def __exit__(self, *exc: Any) -> None:
        _context.reset(self._token)


_RESERVED = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message",
    "taskName",
}


class StructuredFormatter(logging.Formatter):
    """One JSON object per record: core fields, context, then extras."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_context.get(),
        }
        payload.update(
            (key, val)
            for key, val in vars(record).items()
            if key not in _RESERVED and key not in payload
        )

        exc = record.exc_info[1] if record.exc_info else None
        if exc is not None:
            payload["exc_type"] = type(exc).__name__
            payload["exc_message"] = str(exc)
            code = getattr(exc, "code", None)
            if code is not None:
                payload["exc_code"] = code
            payload.update(
                (f"exc_{key}", val)
                for key, val in vars(exc).items()
                if not key.startswith("_") and key != "args"
            )
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


def get_logger(name: str) -> logging.Logger:
    """Logger under the marketplace_kernel namespace."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


_configured = False
_lock = threading.Lock()


def configure_logging(
    *,
    level: int = logging.INFO,
    handler: logging.Handler | None = None,
) -> None:
    """Install the JSON handler on the kernel's logger. Later calls are no-ops."""
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

    if handler is None:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(StructuredFormatter())

    kernel_logger = logging.getLogger(_LOGGER_PREFIX)
    kernel_logger.setLevel(level)
    kernel_logger.propagate = False
    kernel_logger.addHandler(handler)


def reset_logging() -> None:
    """Undo configure_logging. Tests only."""
    global _configured
    with _lock:
        _configured = False
    kernel_logger = logging.getLogger(_LOGGER_PREFIX)
    kernel_logger.handlers.clear()
    kernel_logger.setLevel(logging.WARNING)
