"""
Tests for the typed exception hierarchy.

Every error is caught by type and identified by a class-level ``code``;
context travels as attributes, never inside the message only.
"""

import pytest

from timeclock_kernel.exceptions import (
    CompensationError,
    ConfigurationError,
    InputError,
    MalformedInputError,
    MissingCompensationFieldError,
    MixedEmployeePunchesError,
    ProtocolViolationError,
    ReconstructionError,
    SessionInvariantError,
    TimeclockError,
    UnknownCompensationTypeError,
)


class TestHierarchy:
    """Subclass relationships."""

    @pytest.mark.parametrize(
        "exc_type, parent",
        [
            (MalformedInputError, InputError),
            (MixedEmployeePunchesError, InputError),
            (MissingCompensationFieldError, CompensationError),
            (UnknownCompensationTypeError, CompensationError),
            (ProtocolViolationError, ReconstructionError),
            (SessionInvariantError, ReconstructionError),
            (ConfigurationError, TimeclockError),
        ],
    )
    def test_parent(self, exc_type, parent):
        assert issubclass(exc_type, parent)
        assert issubclass(exc_type, TimeclockError)

    def test_configuration_error_is_value_error(self):
        assert issubclass(ConfigurationError, ValueError)


class TestCodes:
    """Machine-readable codes are unique."""

    def test_codes_are_unique(self):
        classes = [
            TimeclockError,
            InputError,
            MalformedInputError,
            MixedEmployeePunchesError,
            CompensationError,
            MissingCompensationFieldError,
            UnknownCompensationTypeError,
            ReconstructionError,
            ProtocolViolationError,
            SessionInvariantError,
            ConfigurationError,
        ]
        codes = [c.code for c in classes]
        assert len(codes) == len(set(codes))


class TestStructuredAttributes:
    """Context is carried as attributes."""

    def test_missing_compensation_field_names_the_field(self):
        exc = MissingCompensationFieldError("E1", "hourly", "hourly_rate_cents")
        assert exc.employee_id == "E1"
        assert exc.compensation_type == "hourly"
        assert exc.field_name == "hourly_rate_cents"
        assert exc.code == "MISSING_COMPENSATION_FIELD"
        assert "hourly_rate_cents" in str(exc)

    def test_malformed_input(self):
        exc = MalformedInputError("p-1", "at", "timestamp is required")
        assert exc.punch_id == "p-1"
        assert exc.field == "at"
        assert exc.code == "MALFORMED_INPUT"

    def test_mixed_employee_punches(self):
        exc = MixedEmployeePunchesError(["E1", "E2"])
        assert exc.employee_ids == ["E1", "E2"]
        assert "E1, E2" in str(exc)

    def test_protocol_violation(self):
        exc = ProtocolViolationError("E1", "p-9", "in_session")
        assert exc.state == "in_session"
        assert exc.code == "PROTOCOL_VIOLATION"

    def test_configuration_error(self):
        exc = ConfigurationError("max_workers", 0, "must be at least 1")
        assert exc.field == "max_workers"
        assert exc.value == 0
        assert "max_workers=0" in str(exc)
