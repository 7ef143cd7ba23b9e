"""
Labor Cost Allocator -- Spread each employee's cost across calendar dates.

Responsibility:
    Produce a per-date labor cost for one employee, for the labor-cost view
    of a period, and fold allocations into a breakdown by pay model.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Allocation per date in the range:
    HOURLY      worked seconds attributed to the date x hourly rate
                (straight time; overtime premium is a period concept)
    SALARY      salary_amount_cents / pay_period_days (the number of dates
                in the range when pay_period_days is not set)
    CONTRACTOR  contractor_amount_cents / days in the interval
                (weekly 7, bi-weekly 14, monthly 30.44; per-job 0)
    DAILY_RATE  daily_rate_cents on each unique date worked

Every division and multiplication is rounded half-up to the cent per date.

Failure modes:
    - MissingCompensationFieldError when the profile lacks a field its
      allocation needs.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal

from timeclock_engines.hours import AggregatedHours
from timeclock_engines.tracer import traced_engine
from timeclock_kernel.domain.compensation import (
    CompensationType,
    ContractorInterval,
    EmployeeCompensationProfile,
)
from timeclock_kernel.domain.values import divide_cents, pay_for_seconds
from timeclock_kernel.exceptions import MissingCompensationFieldError

CONTRACTOR_INTERVAL_DAYS: dict[ContractorInterval, Decimal] = {
    ContractorInterval.WEEKLY: Decimal("7"),
    ContractorInterval.BIWEEKLY: Decimal("14"),
    ContractorInterval.MONTHLY: Decimal("30.44"),
}


@dataclass(frozen=True)
class DailyLaborCost:
    employee_id: str
    date: date
    compensation_type: CompensationType
    cost_cents: int


@dataclass(frozen=True)
class LaborCostBreakdown:
    hourly_cents: int = 0
    salary_cents: int = 0
    contractor_cents: int = 0
    daily_rate_cents: int = 0

    @property
    def total_cents(self) -> int:
        return self.hourly_cents + self.salary_cents + self.contractor_cents + self.daily_rate_cents


def _required(profile: EmployeeCompensationProfile, field_name: str):
    value = getattr(profile, field_name)
    if value is None:
        raise MissingCompensationFieldError(
            profile.employee_id, profile.compensation_type.value, field_name
        )
    return value


def _daily_cost_function(
    profile: EmployeeCompensationProfile,
    hours: AggregatedHours,
    range_days: int,
):
    kind = profile.compensation_type
    if kind == CompensationType.HOURLY:
        rate = _required(profile, "hourly_rate_cents")
        return lambda day: pay_for_seconds(rate, hours.daily_worked_seconds.get(day, 0))
    if kind == CompensationType.SALARY:
        per_day = divide_cents(
            _required(profile, "salary_amount_cents"), profile.pay_period_days or range_days
        )
        return lambda day: per_day
    if kind == CompensationType.CONTRACTOR:
        interval = _required(profile, "contractor_interval")
        if interval == ContractorInterval.PER_JOB:
            return lambda day: 0
        per_day = divide_cents(
            _required(profile, "contractor_amount_cents"), CONTRACTOR_INTERVAL_DAYS[interval]
        )
        return lambda day: per_day
    rate = _required(profile, "daily_rate_cents")
    return lambda day: rate if day in hours.unique_days_worked else 0


@traced_engine(
    "labor_cost_allocator",
    "1.0",
    fingerprint_fields=("profile", "hours", "start_date", "end_date"),
)
def allocate_daily_labor_cost(
    profile: EmployeeCompensationProfile,
    hours: AggregatedHours,
    *,
    start_date: date,
    end_date: date,
) -> tuple[DailyLaborCost, ...]:
    """One DailyLaborCost per calendar date in ``[start_date, end_date]``."""
    if end_date < start_date:
        raise ValueError(f"end_date {end_date} precedes start_date {start_date}")
    cost_for = _daily_cost_function(profile, hours, (end_date - start_date).days + 1)
    allocations: list[DailyLaborCost] = []
    day = start_date
    while day <= end_date:
        allocations.append(
            DailyLaborCost(
                employee_id=profile.employee_id,
                date=day,
                compensation_type=profile.compensation_type,
                cost_cents=cost_for(day),
            )
        )
        day += timedelta(days=1)
    return tuple(allocations)


def summarize_labor_costs(allocations: Iterable[DailyLaborCost]) -> LaborCostBreakdown:
    totals = {kind: 0 for kind in CompensationType}
    for allocation in allocations:
        totals[allocation.compensation_type] += allocation.cost_cents
    return LaborCostBreakdown(
        hourly_cents=totals[CompensationType.HOURLY],
        salary_cents=totals[CompensationType.SALARY],
        contractor_cents=totals[CompensationType.CONTRACTOR],
        daily_rate_cents=totals[CompensationType.DAILY_RATE],
    )
