"""
Structured JSON logging for the inventory packages.

Every logger handed out by ``get_logger`` lives under ``inventory_kernel``
and writes one JSON object per line.  Two context fields ride along on
every record emitted while they are bound:

    scan_id   -- set by DuplicateScanService for the duration of one scan
    item_id   -- set by LedgerAggregator while computing one item's metrics

Fields are held in a single ContextVar, so worker threads and asyncio
tasks each see their own copy.
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
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

_LOGGER_PREFIX = "inventory_kernel"
_HANDLER_NAME = "inventory_kernel.structured"

_CONTEXT_FIELDS = ("scan_id", "item_id")
_context: ContextVar[tuple[tuple[str, str], ...]] = ContextVar(
    "inventory_log_context", default=()
)


class LogContext:
    """Scan- and item-scoped fields merged into every log record."""

    @staticmethod
    def _updated(**fields: str | None) -> tuple[tuple[str, str], ...]:
        unknown = set(fields) - set(_CONTEXT_FIELDS)
        if unknown:
            raise TypeError(f"unknown log context field(s): {sorted(unknown)}")
        current = dict(_context.get())
        current.update({k: v for k, v in fields.items() if v is not None})
        return tuple((k, current[k]) for k in _CONTEXT_FIELDS if k in current)

    @classmethod
    def set(cls, *, scan_id: str | None = None, item_id: str | None = None) -> None:
        """Set fields for the rest of the current context. None leaves a field as is."""
        _context.set(cls._updated(scan_id=scan_id, item_id=item_id))

    @staticmethod
    def get_all() -> dict[str, str]:
        return dict(_context.get())

    @staticmethod
    def clear() -> None:
        _context.set(())

    @classmethod
    @contextmanager
    def bind(cls, **fields: str | None) -> Iterator[None]:
        """Set fields inside a ``with`` block and restore the previous values after."""
        token = _context.set(cls._updated(**fields))
        try:
            yield
        finally:
            _context.reset(token)


# Attributes every LogRecord carries; anything else came in through ``extra``.
_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _json_default(value: Any) -> Any:
    if isinstance(value, (UUID, Decimal)):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return str(value)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    # Kernel errors keep their structured arguments as public attributes
    for name, value in vars(exc).items():
        if not name.startswith("_") and name != "code":
            fields[f"exc_{name}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per record: base fields, context, extras, then exception."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS:
                payload.setdefault(key, value)

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_json_default)


def get_logger(name: str) -> logging.Logger:
    """``get_logger("engines.ledger")`` -> the ``inventory_kernel.engines.ledger`` logger."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


_setup_lock = threading.Lock()


def _installed_handlers(logger: logging.Logger) -> list[logging.Handler]:
    return [h for h in logger.handlers if h.get_name() == _HANDLER_NAME]


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach the structured handler to the ``inventory_kernel`` logger.

    A second call is a no-op while a handler from the first call is still
    attached; other handlers on the logger are left alone.
    """
    root = logging.getLogger(_LOGGER_PREFIX)
    with _setup_lock:
        if _installed_handlers(root):
            return
        h = handler if handler is not None else logging.StreamHandler(stream or sys.stderr)
        h.set_name(_HANDLER_NAME)
        h.setFormatter(StructuredFormatter())
        root.addHandler(h)
        root.setLevel(level)
        root.propagate = False


def reset_logging() -> None:
    """Detach the structured handler and drop back to WARNING. Used by tests."""
    root = logging.getLogger(_LOGGER_PREFIX)
    with _setup_lock:
        for h in _installed_handlers(root):
            root.removeHandler(h)
        root.setLevel(logging.WARNING)
