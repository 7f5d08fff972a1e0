"""
Integration tests for core/observability.py

Tests structured logging, correlation IDs and operation timing.
"""
import logging
import json
import time as time_module

from core.observability import (
    generate_correlation_id,
    set_correlation_id,
    get_correlation_id,
    correlation_context,
    Timer,
    StructuredFormatter,
    HumanReadableFormatter,
    get_logger,
)


def make_record(msg: str = "Order query", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="core.orders",
        level=logging.INFO,
        pathname="orders.py",
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestCorrelationId:
    """Tests for correlation ID management."""

    def test_generate_correlation_id_not_empty(self):
        """Generated ID is not empty."""
        cid = generate_correlation_id()
        assert cid is not None
        assert len(cid) == 8

    def test_set_and_get_correlation_id(self):
        """Can set and retrieve correlation ID."""
        set_correlation_id("test-correlation-123")
        assert get_correlation_id() == "test-correlation-123"

    def test_correlation_context_restores(self):
        set_correlation_id("outer")
        with correlation_context("job-cache_sweep") as cid:
            assert cid == "job-cache_sweep"
            assert get_correlation_id() == "job-cache_sweep"
        assert get_correlation_id() == "outer"

    def test_correlation_context_generates_id(self):
        with correlation_context() as cid:
            assert cid
            assert get_correlation_id() == cid


class TestTimer:
    """Tests for Timer context manager."""

    def test_measures_elapsed_time(self):
        """Timer measures elapsed time correctly."""
        with Timer("order_search") as timer:
            time_module.sleep(0.05)

        assert timer.elapsed_ms >= 45
        assert timer.elapsed_ms < 1000

    def test_logs_duration(self, caplog):
        logger = get_logger("test.timer")
        with caplog.at_level(logging.DEBUG, logger="test.timer"):
            with Timer("token_request", logger):
                pass

        assert "token_request completed" in caplog.text
        assert hasattr(caplog.records[-1], "duration_ms")


class TestStructuredFormatter:
    """Tests for JSON log formatting."""

    def test_basic_fields(self):
        set_correlation_id("req-1")
        output = json.loads(StructuredFormatter().format(make_record()))

        assert output["level"] == "INFO"
        assert output["logger"] == "core.orders"
        assert output["message"] == "Order query"
        assert output["correlation_id"] == "req-1"
        assert output["timestamp"].endswith("Z")

    def test_extra_fields_included(self):
        output = json.loads(StructuredFormatter().format(
            make_record(environment="PRD", cache_key="orders:PRD:a:b")
        ))

        assert output["environment"] == "PRD"
        assert output["cache_key"] == "orders:PRD:a:b"

    def test_non_serializable_extra(self):
        output = json.loads(StructuredFormatter().format(make_record(filters={"orderType"})))
        assert "orderType" in output["filters"]

    def test_service_name(self):
        output = json.loads(StructuredFormatter().format(make_record()))
        assert output["service"] == "sales-dashboard-api"


class TestHumanReadableFormatter:
    """Tests for text log formatting."""

    def test_includes_correlation_and_extras(self):
        set_correlation_id("abc123")
        line = HumanReadableFormatter().format(make_record(environment="DEV"))

        assert "INFO" in line
        assert "core.orders [abc123] - Order query" in line
        assert "'environment': 'DEV'" in line


class TestCredentialRedaction:
    """Credentials passed as extras never reach the output."""

    def test_json_masks_credentials(self):
        output = json.loads(StructuredFormatter().format(
            make_record(auth_header="Basic ZGV2OnNlY3JldA==", access_token="abc", environment="DEV")
        ))

        assert output["auth_header"] == "***"
        assert output["access_token"] == "***"
        assert output["environment"] == "DEV"

    def test_text_masks_credentials(self):
        line = HumanReadableFormatter().format(make_record(authorization="Bearer abc"))

        assert "Bearer abc" not in line
        assert "'authorization': '***'" in line

    def test_status_flags_untouched(self):
        """describe() reports SET/NOT SET under camelCase keys, not credentials."""
        output = json.loads(StructuredFormatter().format(make_record(authHeader="SET")))
        assert output["authHeader"] == "SET"
