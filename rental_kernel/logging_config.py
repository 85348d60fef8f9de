"""Structured JSON logging for the rental kernel."""

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
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

# ---------------------------------------------------------------------------
# Context propagation
# ---------------------------------------------------------------------------


class LogContext:
    """Thread-safe / async-safe holder for request-scoped log fields."""

    _correlation_id: ContextVar[str | None] = ContextVar(
        "log_correlation_id", default=None
    )
    _actor_id: ContextVar[str | None] = ContextVar("log_actor_id", default=None)
    _lease_id: ContextVar[str | None] = ContextVar("log_lease_id", default=None)
    _payment_id: ContextVar[str | None] = ContextVar(
        "log_payment_id", default=None
    )
    _job_name: ContextVar[str | None] = ContextVar("log_job_name", default=None)

    _FIELD_NAMES = (
        "correlation_id",
        "actor_id",
        "lease_id",
        "payment_id",
        "job_name",
    )

    @classmethod
    def set(
        cls,
        *,
        correlation_id: str | None = None,
        actor_id: str | None = None,
        lease_id: str | None = None,
        payment_id: str | None = None,
        job_name: str | None = None,
    ) -> None:
        """Set context fields. Only non-None values are updated."""
        if correlation_id is not None:
            cls._correlation_id.set(correlation_id)
        if actor_id is not None:
            cls._actor_id.set(actor_id)
        if lease_id is not None:
            cls._lease_id.set(lease_id)
        if payment_id is not None:
            cls._payment_id.set(payment_id)
        if job_name is not None:
            cls._job_name.set(job_name)

    @classmethod
    def get_all(cls) -> dict[str, str]:
        """Return all non-None context fields as a dict."""
        ctx: dict[str, str] = {}
        for name in cls._FIELD_NAMES:
            val = getattr(cls, f"_{name}").get()
            if val is not None:
                ctx[name] = val
        return ctx

    @classmethod
    def clear(cls) -> None:
        for name in cls._FIELD_NAMES:
            getattr(cls, f"_{name}").set(None)

    @classmethod
    def bind(cls, **kwargs: Any) -> "_LogContextManager":
        """Context manager that sets fields on entry and restores on exit."""
        return _LogContextManager(**kwargs)


class _LogContextManager:
    def __init__(self, **kwargs: Any):
        self._kwargs = kwargs
        self._tokens: dict[str, Any] = {}

    def __enter__(self) -> type[LogContext]:
        for key, val in self._kwargs.items():
            if val is None:
                continue
            var = getattr(LogContext, f"_{key}", None)
            if var is not None:
                self._tokens[key] = var.set(str(val))
        return LogContext

    def __exit__(self, *exc: Any) -> None:
        for key, token in self._tokens.items():
            getattr(LogContext, f"_{key}").reset(token)
        self._tokens.clear()


# ---------------------------------------------------------------------------
# JSON Formatter
# ---------------------------------------------------------------------------

_STDLIB_KEYS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "taskName"}


class _JSONEncoder(json.JSONEncoder):
    """Handle UUID, date, Decimal and Enum values in log payloads."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, UUID):
            return str(obj)
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        if isinstance(obj, Decimal):
            return str(obj)
        if isinstance(obj, Enum):
            return obj.value
        return super().default(obj)


class StructuredFormatter(logging.Formatter):
    """Formats each log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        payload.update(LogContext.get_all())

        for key, val in vars(record).items():
            if key not in _STDLIB_KEYS and key not in payload:
                payload[key] = val

        if record.exc_info and record.exc_info[1] is not None:
            exc = record.exc_info[1]
            payload["exc_type"] = type(exc).__name__
            payload["exc_message"] = str(exc)
            if hasattr(exc, "code"):
                payload["exc_code"] = exc.code
            # Structured attributes of RentalKernelError subclasses
            for k, v in vars(exc).items():
                if not k.startswith("_") and k not in ("args", "code", "cause"):
                    payload[f"exc_{k}"] = v
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, cls=_JSONEncoder, default=str)


# ---------------------------------------------------------------------------
# Logger factory
# ---------------------------------------------------------------------------

_LOGGER_PREFIX = "rental_kernel"


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the rental_kernel namespace."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


# ---------------------------------------------------------------------------
# Initialization
# ---------------------------------------------------------------------------

_configured = False
_lock = threading.Lock()


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """Configure the rental_kernel logger hierarchy (idempotent)."""
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    root_logger = logging.getLogger(_LOGGER_PREFIX)
    root_logger.setLevel(level)
    root_logger.propagate = False

    h = handler if handler is not None else logging.StreamHandler(
        stream or sys.stderr
    )
    h.setFormatter(StructuredFormatter())
    root_logger.addHandler(h)


def reset_logging() -> None:
    """Reset logging configuration. FOR TESTING ONLY."""
    global _configured
    with _lock:
        _configured = False
    logger = logging.getLogger(_LOGGER_PREFIX)
    logger.handlers.clear()
    logger.setLevel(logging.WARNING)
