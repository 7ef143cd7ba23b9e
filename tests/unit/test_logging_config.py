"""Tests for the structured logging system (timeclock_kernel/logging_config.py)."""

import json
import logging
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from io import StringIO

import pytest

from timeclock_kernel.domain.timekeeping import PunchKind
from timeclock_kernel.exceptions import MissingCompensationFieldError
from timeclock_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


def _logger_with_stream(name: str) -> tuple[logging.Logger, logging.Handler, StringIO]:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    logger = get_logger(name)
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    return logger, handler, stream


def _parse_all_logs(stream: StringIO) -> list[dict]:
    lines = stream.getvalue().strip().split("\n")
    return [json.loads(line) for line in lines if line]


class TestGetLogger:
    def test_namespace(self):
        assert get_logger("engines.sessions").name == "timeclock.engines.sessions"


class TestStructuredFormatter:
    """Each record becomes one JSON line."""

    def test_basic_fields(self):
        logger, handler, stream = _logger_with_stream("test.basic")
        try:
            logger.info("payroll_period_assembled", extra={"line_item_count": 3})
        finally:
            logger.removeHandler(handler)
        record = _parse_all_logs(stream)[0]
        assert record["message"] == "payroll_period_assembled"
        assert record["level"] == "INFO"
        assert record["logger"] == "timeclock.test.basic"
        assert record["line_item_count"] == 3
        assert "ts" in record

    def test_domain_types_serialize(self):
        logger, handler, stream = _logger_with_stream("test.types")
        try:
            logger.info(
                "typed",
                extra={
                    "amount": Decimal("1.50"),
                    "day": date(2024, 3, 4),
                    "at": datetime(2024, 3, 4, 9, 0, tzinfo=timezone.utc),
                    "gap": timedelta(minutes=2),
                    "kind": PunchKind.CLOCK_IN,
                },
            )
        finally:
            logger.removeHandler(handler)
        record = _parse_all_logs(stream)[0]
        assert record["amount"] == "1.50"
        assert record["day"] == "2024-03-04"
        assert record["at"] == "2024-03-04T09:00:00+00:00"
        assert record["gap"] == 120.0
        assert record["kind"] == "clock_in"

    def test_exception_fields(self):
        logger, handler, stream = _logger_with_stream("test.exc")
        try:
            try:
                raise MissingCompensationFieldError("E1", "hourly", "hourly_rate_cents")
            except MissingCompensationFieldError:
                logger.exception("employee_payroll_failed")
        finally:
            logger.removeHandler(handler)
        record = _parse_all_logs(stream)[0]
        assert record["exc_type"] == "MissingCompensationFieldError"
        assert record["exc_code"] == "MISSING_COMPENSATION_FIELD"
        assert record["exc_field_name"] == "hourly_rate_cents"
        assert "traceback" in record


class TestLogContext:
    """Context fields merge into every record."""

    def test_set_and_clear(self):
        LogContext.set(employee_id="E1", period_id="P1")
        assert LogContext.get_all() == {"employee_id": "E1", "period_id": "P1"}
        LogContext.clear()
        assert LogContext.get_all() == {}

    def test_bind_restores(self):
        LogContext.set(period_id="P1")
        with LogContext.bind(employee_id="E7"):
            assert LogContext.get_all()["employee_id"] == "E7"
        assert "employee_id" not in LogContext.get_all()
        assert LogContext.get_all()["period_id"] == "P1"

    def test_context_in_record(self):
        logger, handler, stream = _logger_with_stream("test.ctx")
        try:
            with LogContext.bind(restaurant_id="R1", employee_id="E2"):
                logger.info("ctx_test")
        finally:
            logger.removeHandler(handler)
        record = _parse_all_logs(stream)[0]
        assert record["restaurant_id"] == "R1"
        assert record["employee_id"] == "E2"

    def test_unknown_field_rejected(self):
        with pytest.raises(ValueError):
            LogContext.set(shift_id="S1")
        with pytest.raises(ValueError):
            with LogContext.bind(shift_id="S1"):
                pass

    def test_nested_bind_restores_outer_value(self):
        with LogContext.bind(employee_id="E1"):
            with LogContext.bind(employee_id="E2"):
                assert LogContext.get_all()["employee_id"] == "E2"
            assert LogContext.get_all()["employee_id"] == "E1"
        assert LogContext.get_all() == {}


class TestConfigureLogging:
    """Handler installation on the timeclock logger tree."""

    def test_writes_json_to_stream_once(self):
        stream = StringIO()
        reset_logging()
        try:
            configure_logging(level=logging.INFO, stream=stream)
            configure_logging(level=logging.DEBUG, stream=StringIO())
            root = logging.getLogger("timeclock")
            assert len(root.handlers) == 1
            get_logger("test.configure").debug("hidden")
            get_logger("test.configure").info("shown")
        finally:
            reset_logging()
            configure_logging(level=logging.DEBUG)
        assert [r["message"] for r in _parse_all_logs(stream)] == ["shown"]
