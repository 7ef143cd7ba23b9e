"""
Compensation Dispatcher -- Route an employee's hours to the right pay formula.

Responsibility:
    Given an EmployeeCompensationProfile, the AggregatedHours for a period
    and the period bounds, compute the pay components in integer cents.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Pay models:
    HOURLY      regular = regular time x rate; overtime = overtime time x
                rate x multiplier.  Each rounded half-up once.
    SALARY      salary_amount_cents, optionally prorated by elapsed/total
                calendar days supplied by the caller.
    CONTRACTOR  contractor_amount_cents for weekly, bi-weekly and monthly
                intervals; per-job contractors are paid the sum of their
                manual payments dated inside the period.  Punches never
                gate contractor pay.
    DAILY_RATE  unique days worked x daily_rate_cents.  Hours are ignored
                and there is no overtime.

Invariants enforced:
    - Every CompensationType has exactly one registered calculator; the
      registry is checked when this module is imported.
    - At most one pay-type component is nonzero for any profile.
    - A profile missing a field its type requires raises
      MissingCompensationFieldError naming that field; it never silently
      pays zero.  An employee with no punches legitimately earns zero.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from fractions import Fraction

from timeclock_engines.hours import AggregatedHours
from timeclock_engines.tracer import traced_engine
from timeclock_kernel.domain.compensation import (
    CompensationType,
    ContractorInterval,
    EmployeeCompensationProfile,
    ManualPayment,
    SalaryProration,
)
from timeclock_kernel.domain.values import (
    multiply_cents,
    pay_for_seconds,
    round_half_up_cents,
)
from timeclock_kernel.exceptions import (
    MissingCompensationFieldError,
    UnknownCompensationTypeError,
)
from timeclock_kernel.logging_config import get_logger

logger = get_logger("engines.compensation")

DEFAULT_OVERTIME_MULTIPLIER = Decimal("1.5")


@dataclass(frozen=True)
class CompensationBreakdown:
    """Pay components for one employee and period, all integer cents."""
    compensation_type: CompensationType
    regular_pay_cents: int = 0
    overtime_pay_cents: int = 0
    salary_pay_cents: int = 0
    contractor_pay_cents: int = 0
    daily_rate_pay_cents: int = 0
    days_worked: int | None = None
    manual_payments_cents: int = 0

    @property
    def gross_pay_cents(self) -> int:
        return (
            self.regular_pay_cents
            + self.overtime_pay_cents
            + self.salary_pay_cents
            + self.contractor_pay_cents
            + self.daily_rate_pay_cents
        )


@dataclass(frozen=True)
class _PayContext:
    profile: EmployeeCompensationProfile
    hours: AggregatedHours
    period_start: date
    period_end: date
    overtime_multiplier: Decimal
    salary_proration: SalaryProration | None
    manual_payments_cents: int

    def require(self, field_name: str):
        value = getattr(self.profile, field_name)
        if value is None:
            raise MissingCompensationFieldError(
                self.profile.employee_id,
                self.profile.compensation_type.value,
                field_name,
            )
        return value


_CALCULATORS: dict[CompensationType, Callable[[_PayContext], CompensationBreakdown]] = {}


def _register(compensation_type: CompensationType):
    def decorator(func: Callable[[_PayContext], CompensationBreakdown]):
        _CALCULATORS[compensation_type] = func
        return func
    return decorator


@_register(CompensationType.HOURLY)
def _hourly(ctx: _PayContext) -> CompensationBreakdown:
    rate = ctx.require("hourly_rate_cents")
    return CompensationBreakdown(
        compensation_type=CompensationType.HOURLY,
        regular_pay_cents=pay_for_seconds(rate, ctx.hours.regular_seconds),
        overtime_pay_cents=pay_for_seconds(
            rate, ctx.hours.overtime_seconds, ctx.overtime_multiplier
        ),
        manual_payments_cents=ctx.manual_payments_cents,
    )


@_register(CompensationType.SALARY)
def _salary(ctx: _PayContext) -> CompensationBreakdown:
    amount = ctx.require("salary_amount_cents")
    if ctx.salary_proration is not None:
        proration = ctx.salary_proration
        amount = round_half_up_cents(
            Fraction(amount * proration.elapsed_days, proration.total_days)
        )
    return CompensationBreakdown(
        compensation_type=CompensationType.SALARY,
        salary_pay_cents=amount,
        manual_payments_cents=ctx.manual_payments_cents,
    )


@_register(CompensationType.CONTRACTOR)
def _contractor(ctx: _PayContext) -> CompensationBreakdown:
    interval = ctx.require("contractor_interval")
    if interval == ContractorInterval.PER_JOB:
        amount = ctx.manual_payments_cents
    else:
        amount = ctx.require("contractor_amount_cents")
    return CompensationBreakdown(
        compensation_type=CompensationType.CONTRACTOR,
        contractor_pay_cents=amount,
        manual_payments_cents=ctx.manual_payments_cents,
    )


@_register(CompensationType.DAILY_RATE)
def _daily_rate(ctx: _PayContext) -> CompensationBreakdown:
    rate = ctx.require("daily_rate_cents")
    days = ctx.hours.days_worked
    return CompensationBreakdown(
        compensation_type=CompensationType.DAILY_RATE,
        daily_rate_pay_cents=multiply_cents(rate, days),
        days_worked=days,
        manual_payments_cents=ctx.manual_payments_cents,
    )


_unregistered = [t.value for t in CompensationType if t not in _CALCULATORS]
if _unregistered:
    raise UnknownCompensationTypeError(_unregistered[0])


def manual_payments_in_period(
    payments: Sequence[ManualPayment],
    employee_id: str,
    period_start: date,
    period_end: date,
) -> int:
    """Sum of the employee's manual payments dated inside the period."""
    return sum(
        p.amount_cents
        for p in payments
        if p.employee_id == employee_id and period_start <= p.date <= period_end
    )


@traced_engine(
    "compensation_dispatcher",
    "1.0",
    fingerprint_fields=(
        "profile",
        "hours",
        "period_start",
        "period_end",
        "overtime_multiplier",
        "salary_proration",
        "manual_payments",
    ),
)
def dispatch_compensation(
    profile: EmployeeCompensationProfile,
    hours: AggregatedHours,
    *,
    period_start: date,
    period_end: date,
    overtime_multiplier: Decimal = DEFAULT_OVERTIME_MULTIPLIER,
    salary_proration: SalaryProration | None = None,
    manual_payments: Sequence[ManualPayment] = (),
) -> CompensationBreakdown:
    """
    Compute pay components for one employee.

    Raises:
        MissingCompensationFieldError: profile lacks a field its type needs.
        UnknownCompensationTypeError: no calculator for the profile's type.
    """
    calculator = _CALCULATORS.get(profile.compensation_type)
    if calculator is None:
        raise UnknownCompensationTypeError(str(profile.compensation_type))

    ctx = _PayContext(
        profile=profile,
        hours=hours,
        period_start=period_start,
        period_end=period_end,
        overtime_multiplier=overtime_multiplier,
        salary_proration=salary_proration,
        manual_payments_cents=manual_payments_in_period(
            manual_payments, profile.employee_id, period_start, period_end
        ),
    )
    breakdown = calculator(ctx)

    logger.debug(
        "compensation_dispatched",
        extra={
            "employee_id": profile.employee_id,
            "compensation_type": profile.compensation_type.value,
            "gross_pay_cents": breakdown.gross_pay_cents,
        },
    )
    return breakdown
