"""
Compensation -- Employee pay profiles, tips and manual payments.

Responsibility:
    Read-only inputs the compensation engines consume.  Profiles are owned
    by the employee directory; tip records by the tip pool; manual payments
    by whoever books per-job contractor work.

Architecture position:
    Kernel > Domain -- pure data definitions with ZERO I/O.

Invariants enforced:
    - All models are ``frozen=True``.
    - All money fields are integer cents.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum


class CompensationType(Enum):
    """Closed set of pay models. Adding one requires a registered calculator."""
    HOURLY = "hourly"
    SALARY = "salary"
    CONTRACTOR = "contractor"
    DAILY_RATE = "daily_rate"


class ContractorInterval(Enum):
    """How often a contractor's fixed amount is due."""
    WEEKLY = "weekly"
    BIWEEKLY = "bi-weekly"
    MONTHLY = "monthly"
    PER_JOB = "per-job"


class TipKind(Enum):
    EARNED = "earned"
    PAID_OUT = "paid_out"


@dataclass(frozen=True)
class EmployeeCompensationProfile:
    """
    How one employee is paid.

    Only the fields relevant to ``compensation_type`` are required; the
    compensation dispatcher raises ``MissingCompensationFieldError`` when
    one of them is absent.
    """
    employee_id: str
    compensation_type: CompensationType
    hourly_rate_cents: int | None = None
    salary_amount_cents: int | None = None
    pay_period_days: int | None = None
    contractor_amount_cents: int | None = None
    contractor_interval: ContractorInterval | None = None
    daily_rate_cents: int | None = None

    def __post_init__(self) -> None:
        for name in (
            "hourly_rate_cents",
            "salary_amount_cents",
            "contractor_amount_cents",
            "daily_rate_cents",
        ):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise ValueError(f"{name} cannot be negative")
        if self.pay_period_days is not None and self.pay_period_days <= 0:
            raise ValueError("pay_period_days must be positive")


@dataclass(frozen=True)
class TipRecord:
    """A tip amount earned by, or paid out in cash to, an employee."""
    employee_id: str
    date: date
    amount_cents: int
    kind: TipKind


@dataclass(frozen=True)
class ManualPayment:
    """A manually booked payment, e.g. one job for a per-job contractor."""
    payment_id: str
    employee_id: str
    date: date
    amount_cents: int
    description: str | None = None


@dataclass(frozen=True)
class SalaryProration:
    """Caller-supplied tenure coverage of a salary period, in calendar days."""
    elapsed_days: int
    total_days: int

    def __post_init__(self) -> None:
        if self.total_days <= 0:
            raise ValueError("total_days must be positive")
        if not 0 <= self.elapsed_days <= self.total_days:
            raise ValueError("elapsed_days must be between 0 and total_days")
