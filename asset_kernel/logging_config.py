"""
Module: asset_kernel.logging_config
Responsibility:
    One JSON object per log line for everything under the ``asset_kernel``
    logger namespace, with request-scoped context (who asked, which asset,
    which report) merged into every record.

Usage:
    from asset_kernel.logging_config import LogContext, get_logger

    logger = get_logger("modules.registry.service")
    with LogContext.bind(report_id="by-2020-2021", actor_id=str(actor_id)):
        logger.info("budget_year_report_started", extra={"budget_year": "2020/2021"})
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
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Iterator
from uuid import UUID

_LOGGER_PREFIX = "asset_kernel"

# Request-scoped fields, in the order they appear in a log line.
_CONTEXT_VARS: dict[str, ContextVar[str | None]] = {
    name: ContextVar(f"asset_log_{name}", default=None)
    for name in ("correlation_id", "actor_id", "asset_id", "report_id", "trace_id")
}


class LogContext:
    """Context-var backed fields attached to every record (thread and task safe)."""

    @staticmethod
    def set(**fields: str | None) -> None:
        """Set context fields; None leaves a field unchanged."""
        for name, value in fields.items():
            if name not in _CONTEXT_VARS:
                raise TypeError(f"Unknown log context field: {name}")
            if value is not None:
                _CONTEXT_VARS[name].set(value)

    @staticmethod
    def get_all() -> dict[str, str]:
        return {
            name: value
            for name, var in _CONTEXT_VARS.items()
            if (value := var.get()) is not None
        }

    @staticmethod
    def clear() -> None:
        for var in _CONTEXT_VARS.values():
            var.set(None)

    @staticmethod
    @contextmanager
    def bind(**fields: str | None) -> Iterator[type["LogContext"]]:
        """Set fields for the duration of a block, restoring prior values on exit."""
        tokens = [
            (_CONTEXT_VARS[name], _CONTEXT_VARS[name].set(value))
            for name, value in fields.items()
            if value is not None and name in _CONTEXT_VARS
        ]
        try:
            yield LogContext
        finally:
            for var, token in reversed(tokens):
                var.reset(token)


# Attributes every LogRecord carries; anything else arrived through ``extra``.
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


class StructuredFormatter(logging.Formatter):
    """
    Render a record as a single JSON line.

    Keys: ``ts``, ``level``, ``logger``, ``message``, then context fields,
    then ``extra`` fields.  Exceptions add ``exc_type``, ``exc_message``,
    ``exc_code`` (asset kernel errors), one ``exc_<attr>`` per public
    exception attribute, and ``traceback``.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS:
                payload.setdefault(key, value)

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(self._exception_fields(record))

        return json.dumps(payload, default=_json_default)

    def _exception_fields(self, record: logging.LogRecord) -> dict[str, Any]:
        exc = record.exc_info[1]
        fields: dict[str, Any] = {
            "exc_type": type(exc).__name__,
            "exc_message": str(exc),
        }
        code = getattr(exc, "code", None)
        if code is not None:
            fields["exc_code"] = code
        for attr, value in vars(exc).items():
            if not attr.startswith("_"):
                fields[f"exc_{attr}"] = value
        fields["traceback"] = self.formatException(record.exc_info)
        return fields


def get_logger(name: str) -> logging.Logger:
    """Logger ``asset_kernel.<name>``."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


_state_lock = threading.Lock()
_configured = False
_installed_handler: logging.Handler | None = None


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach a JSON handler to the ``asset_kernel`` logger.

    Only the first call has any effect until ``reset_logging()``.  Records
    do not propagate to the root logger.
    """
    global _configured, _installed_handler
    with _state_lock:
        if _configured:
            return
        _configured = True

    namespace = logging.getLogger(_LOGGER_PREFIX)
    namespace.setLevel(level)
    namespace.propagate = False

    target = handler or logging.StreamHandler(stream or sys.stderr)
    target.setFormatter(StructuredFormatter())
    namespace.addHandler(target)
    _installed_handler = target


def reset_logging() -> None:
    """Detach the handler configure_logging() added and forget configuration.

    Handlers attached by anything else are left alone.  Tests only.
    """
    global _configured, _installed_handler
    with _state_lock:
        _configured = False
        handler, _installed_handler = _installed_handler, None
    namespace = logging.getLogger(_LOGGER_PREFIX)
    if handler is not None:
        namespace.removeHandler(handler)
    namespace.setLevel(logging.WARNING)
