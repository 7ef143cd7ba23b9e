"""Pure domain value objects for the timeclock kernel."""

from timeclock_kernel.domain.compensation import (
    CompensationType,
    ContractorInterval,
    EmployeeCompensationProfile,
    ManualPayment,
    SalaryProration,
    TipKind,
    TipRecord,
)
from timeclock_kernel.domain.timekeeping import (
    Anomaly,
    AnomalyKind,
    BreakInterval,
    NoiseReason,
    NormalizedPunch,
    PunchEvent,
    PunchKind,
    WorkSession,
    utc_instant,
)
from timeclock_kernel.domain.values import (
    divide_cents,
    hours_from_seconds,
    multiply_cents,
    pay_for_seconds,
    round_half_up_cents,
    seconds_from_hours,
)

__all__ = [
    "Anomaly",
    "AnomalyKind",
    "BreakInterval",
    "CompensationType",
    "ContractorInterval",
    "EmployeeCompensationProfile",
    "ManualPayment",
    "NoiseReason",
    "NormalizedPunch",
    "PunchEvent",
    "PunchKind",
    "SalaryProration",
    "TipKind",
    "TipRecord",
    "WorkSession",
    "divide_cents",
    "hours_from_seconds",
    "multiply_cents",
    "pay_for_seconds",
    "round_half_up_cents",
    "seconds_from_hours",
    "utc_instant",
]
