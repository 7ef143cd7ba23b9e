"""
Payroll Domain Models (``timeclock_modules.payroll.models``).

Responsibility
--------------
Frozen dataclass value objects for one payroll period run: the inputs the
caller fetched (period, per-employee punches, profiles, tips, manual
payments) and the reviewable result (line items, timecards, per-employee
errors, totals).

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.  Built by
``PayrollPeriodAssembler`` and returned to callers.

Invariants enforced
-------------------
* All models are ``frozen=True``; a re-run produces a new result.
* All monetary fields are integer cents.
* ``PayrollPeriodResult.to_dict()`` is fully ordered, so two runs on the
  same input serialize (and fingerprint) byte-identically.

Audit relevance
---------------
* ``fingerprint()`` proves that a re-run reproduced an assembled period.
* Timecards keep every punch (noise included) next to the sessions built
  from it, so a reviewer can trace any hour back to its punches.
"""

from dataclasses import asdict, dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any

from timeclock_engines.labor_cost import LaborCostBreakdown
from timeclock_kernel.domain.compensation import (
    CompensationType,
    EmployeeCompensationProfile,
    ManualPayment,
    SalaryProration,
    TipRecord,
)
from timeclock_kernel.domain.timekeeping import (
    Anomaly,
    NormalizedPunch,
    PunchEvent,
    WorkSession,
)
from timeclock_kernel.utils.hashing import canonicalize_json, hash_payload


@dataclass(frozen=True)
class PayrollPeriod:
    """Inclusive date range being paid, optionally tagged with ids for logs."""
    start_date: date
    end_date: date
    period_id: str | None = None
    restaurant_id: str | None = None

    def __post_init__(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")

    @property
    def days(self) -> int:
        return (self.end_date - self.start_date).days + 1


@dataclass(frozen=True)
class EmployeePayrollInput:
    """Everything the caller fetched for one employee."""
    employee_id: str
    profile: EmployeeCompensationProfile
    punches: tuple[PunchEvent, ...] = ()
    tip_records: tuple[TipRecord, ...] = ()
    manual_payments: tuple[ManualPayment, ...] = ()
    salary_proration: SalaryProration | None = None


@dataclass(frozen=True)
class PayrollLineItem:
    """One employee's pay for the period."""
    employee_id: str
    compensation_type: CompensationType
    regular_pay_cents: int
    overtime_pay_cents: int
    salary_pay_cents: int
    contractor_pay_cents: int
    daily_rate_pay_cents: int
    tips_earned_cents: int
    tips_paid_out_cents: int
    tips_owed_cents: int
    days_worked: int | None
    regular_hours: Decimal
    overtime_hours: Decimal
    gross_pay_cents: int
    total_pay_cents: int
    manual_payments_cents: int = 0


@dataclass(frozen=True)
class EmployeeTimecard:
    """Normalized punches and reconstructed sessions for review screens."""
    employee_id: str
    punches: tuple[NormalizedPunch, ...]
    sessions: tuple[WorkSession, ...]
    anomalies: tuple[Anomaly, ...]

    @property
    def noise_count(self) -> int:
        return sum(1 for p in self.punches if p.is_noise)


@dataclass(frozen=True)
class EmployeeError:
    """A per-employee failure that did not stop the rest of the period."""
    employee_id: str
    code: str
    message: str
    field_name: str | None = None


@dataclass(frozen=True)
class PayrollTotals:
    total_regular_pay_cents: int = 0
    total_overtime_pay_cents: int = 0
    total_salary_pay_cents: int = 0
    total_contractor_pay_cents: int = 0
    total_daily_rate_pay_cents: int = 0
    total_tips_earned_cents: int = 0
    total_tips_paid_out_cents: int = 0
    total_tips_owed_cents: int = 0
    total_gross_pay_cents: int = 0
    total_pay_cents: int = 0
    total_regular_hours: Decimal = Decimal("0")
    total_overtime_hours: Decimal = Decimal("0")

    @classmethod
    def from_line_items(cls, items: tuple[PayrollLineItem, ...]) -> "PayrollTotals":
        return cls(
            total_regular_pay_cents=sum(i.regular_pay_cents for i in items),
            total_overtime_pay_cents=sum(i.overtime_pay_cents for i in items),
            total_salary_pay_cents=sum(i.salary_pay_cents for i in items),
            total_contractor_pay_cents=sum(i.contractor_pay_cents for i in items),
            total_daily_rate_pay_cents=sum(i.daily_rate_pay_cents for i in items),
            total_tips_earned_cents=sum(i.tips_earned_cents for i in items),
            total_tips_paid_out_cents=sum(i.tips_paid_out_cents for i in items),
            total_tips_owed_cents=sum(i.tips_owed_cents for i in items),
            total_gross_pay_cents=sum(i.gross_pay_cents for i in items),
            total_pay_cents=sum(i.total_pay_cents for i in items),
            total_regular_hours=sum((i.regular_hours for i in items), Decimal("0")),
            total_overtime_hours=sum((i.overtime_hours for i in items), Decimal("0")),
        )


@dataclass(frozen=True)
class PayrollPeriodResult:
    """The complete, reviewable output of one assembly run."""
    period: PayrollPeriod
    line_items: tuple[PayrollLineItem, ...]
    timecards: tuple[EmployeeTimecard, ...]
    errors: tuple[EmployeeError, ...]
    totals: PayrollTotals
    labor_cost: LaborCostBreakdown = field(default_factory=LaborCostBreakdown)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def line_item_for(self, employee_id: str) -> PayrollLineItem | None:
        for item in self.line_items:
            if item.employee_id == employee_id:
                return item
        return None

    def timecard_for(self, employee_id: str) -> EmployeeTimecard | None:
        for card in self.timecards:
            if card.employee_id == employee_id:
                return card
        return None

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["labor_cost"]["total_cents"] = self.labor_cost.total_cents
        return payload

    def to_json(self) -> str:
        return canonicalize_json(self.to_dict())

    def fingerprint(self) -> str:
        return hash_payload(self.to_dict())
