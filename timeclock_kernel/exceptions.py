"""
Typed Exception Hierarchy for the Timeclock Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Payroll must distinguish "this employee legitimately earned nothing" from
"this employee's profile is broken".  Generic exceptions force callers to
parse message strings to tell those apart, which is fragile and untestable.

Every exception in this module therefore:
  1. Has its own class (catch by type, not by message)
  2. Carries a class-level ``code`` (machine-readable, API-safe)
  3. Stores its context as attributes (structured, survives logging)

Example - WRONG way to handle errors:
    try:
        breakdown = dispatch_compensation(profile, hours, ...)
    except Exception as e:
        if "hourly_rate" in str(e):  # FRAGILE
            ...

Example - RIGHT way:
    try:
        breakdown = dispatch_compensation(profile, hours, ...)
    except MissingCompensationFieldError as e:
        report(e.employee_id, e.code, e.field_name)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    TimeclockError (base)
    |
    +-- InputError
    |   +-- MalformedInputError
    |   +-- MixedEmployeePunchesError
    |
    +-- CompensationError
    |   +-- MissingCompensationFieldError
    |   +-- UnknownCompensationTypeError
    |
    +-- ReconstructionError
    |   +-- ProtocolViolationError
    |   +-- SessionInvariantError
    |
    +-- ConfigurationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                         | When Raised
----------------|------------------------------|----------------------------------------
Input           | MALFORMED_INPUT              | Punch without a usable timestamp/kind
                | MIXED_EMPLOYEE_PUNCHES       | One-employee engine given many employees
----------------|------------------------------|----------------------------------------
Compensation    | MISSING_COMPENSATION_FIELD   | Profile lacks a field its type requires
                | UNKNOWN_COMPENSATION_TYPE    | No calculator registered for the type
----------------|------------------------------|----------------------------------------
Reconstruction  | PROTOCOL_VIOLATION           | ClockIn while a session is open (strict)
                | SESSION_INVARIANT_VIOLATION  | Session built with impossible intervals
----------------|------------------------------|----------------------------------------
Configuration   | CONFIGURATION_ERROR          | Invalid payroll configuration value

===============================================================================
HANDLING PATTERNS
===============================================================================

1. Anomalies are NOT exceptions.  Open sessions, very short sessions,
   incomplete or canceled breaks are returned as data on the session.

2. ``MissingCompensationFieldError`` is fatal for ONE employee's line item.
   ``PayrollPeriodAssembler`` collects it and keeps going with everyone else.

3. ``ProtocolViolationError`` is only raised under the ``strict`` clock-in
   policy.  The default policy force-closes the previous session instead.
"""


class TimeclockError(Exception):
    """
    Base exception for all timeclock kernel errors.

    All subclasses must have a ``code`` class attribute for machine-readable
    error identification.
    """

    code: str = "TIMECLOCK_ERROR"


# Input exceptions


class InputError(TimeclockError):
    """Base exception for caller-supplied input that cannot be processed."""

    code: str = "INPUT_ERROR"


class MalformedInputError(InputError):
    """A punch event is missing a timestamp, kind, or employee id."""

    code: str = "MALFORMED_INPUT"

    def __init__(self, punch_id: str | None, field: str, reason: str):
        self.punch_id = punch_id
        self.field = field
        self.reason = reason
        super().__init__(f"Malformed punch {punch_id}: {field} {reason}")


class MixedEmployeePunchesError(InputError):
    """A per-employee engine received punches for more than one employee."""

    code: str = "MIXED_EMPLOYEE_PUNCHES"

    def __init__(self, employee_ids: list[str]):
        self.employee_ids = employee_ids
        super().__init__(
            f"Expected punches for one employee, got {len(employee_ids)}: "
            f"{', '.join(employee_ids)}"
        )


# Compensation exceptions


class CompensationError(TimeclockError):
    """Base exception for compensation dispatch errors."""

    code: str = "COMPENSATION_ERROR"


class MissingCompensationFieldError(CompensationError):
    """
    Profile is configured for a compensation type but lacks a required field.

    Never converted into zero pay: a malformed profile must surface.
    """

    code: str = "MISSING_COMPENSATION_FIELD"

    def __init__(self, employee_id: str, compensation_type: str, field_name: str):
        self.employee_id = employee_id
        self.compensation_type = compensation_type
        self.field_name = field_name
        super().__init__(
            f"Employee {employee_id} has compensation type {compensation_type} "
            f"but no {field_name}"
        )


class UnknownCompensationTypeError(CompensationError):
    """No calculator is registered for the profile's compensation type."""

    code: str = "UNKNOWN_COMPENSATION_TYPE"

    def __init__(self, compensation_type: str):
        self.compensation_type = compensation_type
        super().__init__(f"No calculator registered for {compensation_type}")


# Reconstruction exceptions


class ReconstructionError(TimeclockError):
    """Base exception for session reconstruction errors."""

    code: str = "RECONSTRUCTION_ERROR"


class ProtocolViolationError(ReconstructionError):
    """A ClockIn arrived while the employee already had an open session."""

    code: str = "PROTOCOL_VIOLATION"

    def __init__(self, employee_id: str, punch_id: str | None, state: str):
        self.employee_id = employee_id
        self.punch_id = punch_id
        self.state = state
        super().__init__(
            f"ClockIn {punch_id} for employee {employee_id} arrived in state {state}"
        )


class SessionInvariantError(ReconstructionError):
    """A work session was constructed with inconsistent intervals."""

    code: str = "SESSION_INVARIANT_VIOLATION"

    def __init__(self, employee_id: str, reason: str):
        self.employee_id = employee_id
        self.reason = reason
        super().__init__(f"Invalid session for employee {employee_id}: {reason}")


# Configuration exceptions


class ConfigurationError(TimeclockError, ValueError):
    """A payroll configuration value is invalid."""

    code: str = "CONFIGURATION_ERROR"

    def __init__(self, field: str, value: object, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {field}={value!r}: {reason}")
