"""
Structured logging for the work order kernel.

Every record is emitted as one JSON object per line.  Fields bound through
``LogContext`` (the acting user, the work order and invoice number being
handled) are merged into each record, followed by the record's ``extra``
payload and, when present, the structured attributes of the raised
``WorkOrderKernelError``.

Services never configure handlers themselves; they obtain a logger with
``get_logger("services.<name>")`` and log snake_case event names.
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
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, TextIO
from uuid import UUID

LOGGER_NAMESPACE = "workorder_kernel"

CONTEXT_FIELDS = ("correlation_id", "actor_id", "work_order_id", "invoice_number")

_bound_fields: ContextVar[Mapping[str, str]] = ContextVar(
    "workorder_log_fields", default={}
)


class LogContext:
    """Request-scoped fields copied into every log record.

    Values live in a single ``ContextVar`` holding an immutable snapshot, so
    threads and asyncio tasks each see their own bindings.
    """

    @staticmethod
    def _merged(fields: Mapping[str, Any]) -> dict[str, str]:
        unknown = set(fields) - set(CONTEXT_FIELDS)
        if unknown:
            raise KeyError(f"Unknown log context field(s): {sorted(unknown)}")
        merged = dict(_bound_fields.get())
        merged.update({k: str(v) for k, v in fields.items() if v is not None})
        return merged

    @classmethod
    def set(cls, **fields: Any) -> None:
        """Bind fields for the rest of the current context. None is ignored."""
        _bound_fields.set(cls._merged(fields))

    @classmethod
    def get_all(cls) -> dict[str, str]:
        return dict(_bound_fields.get())

    @classmethod
    def clear(cls) -> None:
        _bound_fields.set({})

    @classmethod
    @contextmanager
    def bind(cls, **fields: Any) -> Iterator[type["LogContext"]]:
        """Bind fields for the duration of a ``with`` block."""
        token = _bound_fields.set(cls._merged(fields))
        try:
            yield cls
        finally:
            _bound_fields.reset(token)


def _jsonable(value: Any) -> Any:
    if isinstance(value, (UUID, Decimal)):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    return str(value)


# Attributes every LogRecord carries; anything else arrived through ``extra``.
_RECORD_ATTRS = frozenset(
    vars(logging.makeLogRecord({})).keys()
) | {"message", "asctime", "taskName"}


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    for name, value in vars(exc).items():
        if name.startswith("_") or name == "code":
            continue
        fields[f"exc_{name}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """Render a LogRecord as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(LogContext.get_all())

        for name, value in vars(record).items():
            if name in _RECORD_ATTRS:
                continue
            entry.setdefault(name, value)

        if record.exc_info and record.exc_info[1] is not None:
            entry.update(_exception_fields(record.exc_info[1]))
            entry["traceback"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=_jsonable)


def get_logger(name: str) -> logging.Logger:
    """Logger under the kernel namespace, e.g. ``get_logger("services.invoice")``."""
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")


_state_lock = threading.Lock()
_installed_handler: logging.Handler | None = None


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: TextIO | None = None,
    handler: logging.Handler | None = None,
) -> None:
    """Attach the JSON handler to the kernel logger.

    Only the first call has an effect until ``reset_logging()`` runs.
    """
    global _installed_handler
    with _state_lock:
        if _installed_handler is not None:
            return
        if handler is None:
            handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(StructuredFormatter())

        kernel_logger = logging.getLogger(LOGGER_NAMESPACE)
        kernel_logger.setLevel(level)
        kernel_logger.propagate = False
        kernel_logger.addHandler(handler)
        _installed_handler = handler


def reset_logging() -> None:
    """Detach the handler installed by ``configure_logging`` (tests only)."""
    global _installed_handler
    with _state_lock:
        kernel_logger = logging.getLogger(LOGGER_NAMESPACE)
        if _installed_handler is not None:
            kernel_logger.removeHandler(_installed_handler)
            _installed_handler = None
        kernel_logger.setLevel(logging.WARNING)
