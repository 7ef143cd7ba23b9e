"""
Payroll Period Assembler (``timeclock_modules.payroll.service``).

Responsibility
--------------
Runs the full pipeline for every employee in a period (validate,
normalize, reconstruct, aggregate, dispatch pay, offset tips, allocate
labor cost) and folds the per-employee results into one
``PayrollPeriodResult``.

Architecture position
---------------------
**Modules layer** -- thin orchestration.  ``PayrollPeriodAssembler`` is the
sole public entry point; every calculation is delegated to
``timeclock_engines``.  The caller fetches punches, profiles and tip
records beforehand and passes them by value.

Invariants enforced
-------------------
* Partial-failure isolation -- ``MalformedInputError`` and any
  ``CompensationError`` (missing field, unknown compensation type) fail one
  employee, are recorded as an ``EmployeeError`` and never abort the
  period.  Anything else propagates.
* Determinism -- employees are processed and reported in ``employee_id``
  order; no clock reads, no random ids in the result.  Fan-out across
  threads (``max_workers > 1``) yields the same result as a sequential run.
* ``total_pay_cents = gross_pay_cents + tips_owed_cents`` per line item.

Failure modes
-------------
* ``ValueError`` when the same employee appears twice in one run.
* ``ProtocolViolationError`` when the config selects the strict clock-in
  policy and an employee's punches violate it.

Usage::

    assembler = PayrollPeriodAssembler(PayrollConfig(reference_timezone="UTC"))
    result = assembler.assemble(
        PayrollPeriod(start_date=date(2024, 3, 4), end_date=date(2024, 3, 17)),
        employees=[EmployeePayrollInput(employee_id="E1", profile=profile, punches=punches)],
    )
"""

from __future__ import annotations

import contextvars
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from timeclock_engines import (
    DailyLaborCost,
    aggregate_hours,
    allocate_daily_labor_cost,
    dispatch_compensation,
    normalize_punches,
    reconstruct_sessions,
    summarize_labor_costs,
    summarize_tips,
    validate_punch_events,
)
from timeclock_kernel.exceptions import CompensationError, MalformedInputError
from timeclock_kernel.logging_config import LogContext, get_logger
from timeclock_modules.payroll.config import PayrollConfig
from timeclock_modules.payroll.models import (
    EmployeeError,
    EmployeePayrollInput,
    EmployeeTimecard,
    PayrollLineItem,
    PayrollPeriod,
    PayrollPeriodResult,
    PayrollTotals,
)

logger = get_logger("modules.payroll.service")


@dataclass(frozen=True)
class _EmployeeOutcome:
    line_item: PayrollLineItem | None = None
    timecard: EmployeeTimecard | None = None
    error: EmployeeError | None = None
    labor_costs: tuple[DailyLaborCost, ...] = ()


class PayrollPeriodAssembler:
    """Assemble one payroll period from per-employee inputs."""

    def __init__(self, config: PayrollConfig):
        self._config = config
        self._reference_tz = config.tzinfo

    def assemble(
        self,
        period: PayrollPeriod,
        employees: Sequence[EmployeePayrollInput],
    ) -> PayrollPeriodResult:
        ordered = sorted(employees, key=lambda e: e.employee_id)
        seen: set[str] = set()
        for employee in ordered:
            if employee.employee_id in seen:
                raise ValueError(f"employee {employee.employee_id} appears more than once")
            seen.add(employee.employee_id)

        with LogContext.bind(period_id=period.period_id, restaurant_id=period.restaurant_id):
            logger.info(
                "payroll_period_assembly_started",
                extra={
                    "start_date": period.start_date,
                    "end_date": period.end_date,
                    "employee_count": len(ordered),
                    "max_workers": self._config.max_workers,
                },
            )
            outcomes = self._run_all(period, ordered)

            line_items = tuple(o.line_item for o in outcomes if o.line_item is not None)
            timecards = tuple(o.timecard for o in outcomes if o.timecard is not None)
            errors = tuple(o.error for o in outcomes if o.error is not None)
            result = PayrollPeriodResult(
                period=period,
                line_items=line_items,
                timecards=timecards,
                errors=errors,
                totals=PayrollTotals.from_line_items(line_items),
                labor_cost=summarize_labor_costs(
                    cost for o in outcomes for cost in o.labor_costs
                ),
            )

            logger.info(
                "payroll_period_assembled",
                extra={
                    "line_item_count": len(line_items),
                    "error_count": len(errors),
                    "total_gross_pay_cents": result.totals.total_gross_pay_cents,
                    "total_pay_cents": result.totals.total_pay_cents,
                    "labor_cost_cents": result.labor_cost.total_cents,
                },
            )
            return result

    def _run_all(
        self,
        period: PayrollPeriod,
        employees: list[EmployeePayrollInput],
    ) -> list[_EmployeeOutcome]:
        if self._config.max_workers <= 1 or len(employees) <= 1:
            return [self._process_employee(period, e) for e in employees]
        # Each task runs in its own copy of the caller's context so LogContext
        # fields reach the worker threads.
        with ThreadPoolExecutor(max_workers=self._config.max_workers) as executor:
            futures = [
                executor.submit(
                    contextvars.copy_context().run, self._process_employee, period, e
                )
                for e in employees
            ]
            return [f.result() for f in futures]

    def _process_employee(
        self,
        period: PayrollPeriod,
        employee: EmployeePayrollInput,
    ) -> _EmployeeOutcome:
        with LogContext.bind(employee_id=employee.employee_id):
            try:
                return self._calculate(period, employee)
            except (MalformedInputError, CompensationError) as exc:
                logger.warning(
                    "employee_payroll_failed",
                    extra={"error_code": exc.code, "error_message": str(exc)},
                )
                field_name = getattr(exc, "field_name", None) or getattr(exc, "field", None)
                return _EmployeeOutcome(
                    error=EmployeeError(
                        employee_id=employee.employee_id,
                        code=exc.code,
                        message=str(exc),
                        field_name=field_name,
                    )
                )

    def _calculate(
        self,
        period: PayrollPeriod,
        employee: EmployeePayrollInput,
    ) -> _EmployeeOutcome:
        config = self._config
        if employee.profile.employee_id != employee.employee_id:
            raise MalformedInputError(
                None, "profile.employee_id", f"does not match {employee.employee_id}"
            )
        validate_punch_events(employee.punches)
        for punch in employee.punches:
            if punch.employee_id != employee.employee_id:
                raise MalformedInputError(
                    punch.punch_id, "employee_id", f"does not match {employee.employee_id}"
                )

        normalized = normalize_punches(
            employee.punches,
            burst_window_seconds=config.burst_window_seconds,
            burst_min_punches=config.burst_min_punches,
            duplicate_window_seconds=config.duplicate_window_seconds,
            break_cancel_window_seconds=config.break_cancel_window_seconds,
        )
        reconstruction = reconstruct_sessions(
            normalized,
            reference_tz=self._reference_tz,
            policy=config.clock_in_policy,
            very_short_minutes=config.very_short_session_minutes,
            max_shift=config.max_shift,
            break_cancel_window_seconds=config.break_cancel_window_seconds,
        )
        hours = aggregate_hours(
            reconstruction.sessions,
            start_date=period.start_date,
            end_date=period.end_date,
            reference_tz=self._reference_tz,
            week_start=config.week_start_index,
            overtime_threshold_hours=config.overtime_threshold_hours,
        )
        breakdown = dispatch_compensation(
            employee.profile,
            hours,
            period_start=period.start_date,
            period_end=period.end_date,
            overtime_multiplier=config.overtime_multiplier,
            salary_proration=employee.salary_proration,
            manual_payments=employee.manual_payments,
        )
        tips = summarize_tips(
            employee.tip_records, employee.employee_id, period.start_date, period.end_date
        )
        labor_costs = allocate_daily_labor_cost(
            employee.profile,
            hours,
            start_date=period.start_date,
            end_date=period.end_date,
        )

        line_item = PayrollLineItem(
            employee_id=employee.employee_id,
            compensation_type=employee.profile.compensation_type,
            regular_pay_cents=breakdown.regular_pay_cents,
            overtime_pay_cents=breakdown.overtime_pay_cents,
            salary_pay_cents=breakdown.salary_pay_cents,
            contractor_pay_cents=breakdown.contractor_pay_cents,
            daily_rate_pay_cents=breakdown.daily_rate_pay_cents,
            tips_earned_cents=tips.tips_earned_cents,
            tips_paid_out_cents=tips.tips_paid_out_cents,
            tips_owed_cents=tips.tips_owed_cents,
            days_worked=breakdown.days_worked,
            regular_hours=hours.regular_hours,
            overtime_hours=hours.overtime_hours,
            gross_pay_cents=breakdown.gross_pay_cents,
            total_pay_cents=breakdown.gross_pay_cents + tips.tips_owed_cents,
            manual_payments_cents=breakdown.manual_payments_cents,
        )
        timecard = EmployeeTimecard(
            employee_id=employee.employee_id,
            punches=normalized,
            sessions=reconstruction.sessions,
            anomalies=reconstruction.all_anomalies(),
        )

        logger.debug(
            "employee_payroll_calculated",
            extra={
                "compensation_type": employee.profile.compensation_type.value,
                "gross_pay_cents": line_item.gross_pay_cents,
                "tips_owed_cents": line_item.tips_owed_cents,
                "anomaly_count": reconstruction.anomaly_count,
            },
        )
        return _EmployeeOutcome(line_item=line_item, timecard=timecard, labor_costs=labor_costs)
