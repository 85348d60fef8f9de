"""Tests for the structured logging system (rental_kernel/logging_config.py)."""

import json
import logging
from datetime import date
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest

from rental_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


def _make_handler() -> tuple[logging.Handler, StringIO]:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    return handler, stream


def _parse_log(stream: StringIO) -> dict:
    """Parse the first JSON log line from a stream."""
    line = stream.getvalue().strip().split("\n")[0]
    return json.loads(line)


def _parse_all_logs(stream: StringIO) -> list[dict]:
    lines = stream.getvalue().strip().split("\n")
    return [json.loads(line) for line in lines if line]


# ---------------------------------------------------------------------------
# StructuredFormatter tests
# ---------------------------------------------------------------------------


class TestStructuredFormatter:
    """Tests for JSON log output format."""

    def test_basic_json_output(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("hello")

        record = _parse_log(stream)
        assert record["level"] == "INFO"
        assert record["message"] == "hello"
        assert record["logger"] == "rental_kernel.test"
        assert "ts" in record

    def test_extra_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("lease_created", extra={"generation": 2, "status": "active"})

        record = _parse_log(stream)
        assert record["generation"] == 2
        assert record["status"] == "active"

    def test_context_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        LogContext.set(correlation_id="abc-123", lease_id="lease-1")
        get_logger("test").info("test_msg")

        record = _parse_log(stream)
        assert record["correlation_id"] == "abc-123"
        assert record["lease_id"] == "lease-1"

    def test_domain_values_serialized(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        uid = uuid4()
        get_logger("test").info(
            "values",
            extra={"lease_ref": uid, "due": date(2025, 4, 10), "amount": Decimal("333.34")},
        )

        record = _parse_log(stream)
        assert record["lease_ref"] == str(uid)
        assert record["due"] == "2025-04-10"
        assert record["amount"] == "333.34"

    def test_exception_fields(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        try:
            raise ValueError("boom")
        except ValueError:
            logger.error("failed", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_type"] == "ValueError"
        assert record["exc_message"] == "boom"
        assert "traceback" in record

    def test_kernel_exception_code_extracted(self):
        """Kernel exceptions carry .code and structured attributes."""
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        from rental_kernel.exceptions import CannotRenewLeaseError

        try:
            raise CannotRenewLeaseError("lease-9", "expired")
        except CannotRenewLeaseError:
            get_logger("test").error("renew_failed", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_code"] == "CANNOT_RENEW_LEASE"
        assert record["exc_type"] == "CannotRenewLeaseError"
        assert record["exc_lease_id"] == "lease-9"
        assert record["exc_status"] == "expired"

    def test_no_context_fields_when_empty(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        get_logger("test").info("bare_message")

        record = _parse_log(stream)
        assert "correlation_id" not in record
        assert "lease_id" not in record

    def test_valid_json_every_line(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("first")
        logger.warning("second", extra={"k": "v"})
        logger.debug("third")

        logs = _parse_all_logs(stream)
        # default level is INFO, so the debug line is dropped
        assert len(logs) == 2
        for record in logs:
            assert {"ts", "level", "logger", "message"} <= set(record)


# ---------------------------------------------------------------------------
# LogContext tests
# ---------------------------------------------------------------------------


class TestLogContext:
    """Tests for context propagation."""

    def test_set_and_get(self):
        LogContext.set(correlation_id="x", job_name="payments.overdue_sweep")
        assert LogContext.get_all() == {
            "correlation_id": "x",
            "job_name": "payments.overdue_sweep",
        }

    def test_clear(self):
        LogContext.set(correlation_id="x")
        LogContext.clear()
        assert LogContext.get_all() == {}

    def test_bind_context_manager(self):
        LogContext.set(lease_id="outer")
        with LogContext.bind(lease_id="inner"):
            assert LogContext.get_all()["lease_id"] == "inner"
        assert LogContext.get_all()["lease_id"] == "outer"

    def test_bind_restores_none(self):
        assert "payment_id" not in LogContext.get_all()
        with LogContext.bind(payment_id="temp"):
            assert LogContext.get_all()["payment_id"] == "temp"
        assert "payment_id" not in LogContext.get_all()

    def test_all_fields(self):
        LogContext.set(
            correlation_id="c",
            actor_id="a",
            lease_id="l",
            payment_id="p",
            job_name="j",
        )
        assert len(LogContext.get_all()) == 5


# ---------------------------------------------------------------------------
# configure_logging tests
# ---------------------------------------------------------------------------


class TestConfigureLogging:
    """Tests for initialization."""

    def test_idempotent(self):
        h1, _ = _make_handler()
        configure_logging(handler=h1)
        h2, _ = _make_handler()
        configure_logging(handler=h2)  # second call is no-op
        assert len(logging.getLogger("rental_kernel").handlers) == 1

    def test_level_by_name(self):
        handler, _ = _make_handler()
        configure_logging(handler=handler, level="debug")
        assert logging.getLogger("rental_kernel").level == logging.DEBUG

    def test_get_logger_returns_child(self):
        logger = get_logger("modules.leases.service")
        assert logger.name == "rental_kernel.modules.leases.service"
