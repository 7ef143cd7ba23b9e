"""
Tip Offset Calculator -- Tips earned minus tips already paid out, floored at zero.

Overpayment (a manager advanced more cash than was earned) is accepted as
input but never produces a negative amount owed; the excess is not clawed
back here.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date

from timeclock_engines.tracer import traced_engine
from timeclock_kernel.domain.compensation import TipKind, TipRecord


@dataclass(frozen=True)
class TipSummary:
    employee_id: str
    tips_earned_cents: int
    tips_paid_out_cents: int
    tips_owed_cents: int


def calculate_tips_owed(tips_earned_cents: int, tips_paid_out_cents: int) -> int:
    return max(0, tips_earned_cents - tips_paid_out_cents)


@traced_engine(
    "tip_offset",
    "1.0",
    fingerprint_fields=("records", "employee_id", "start_date", "end_date"),
)
def summarize_tips(
    records: Sequence[TipRecord],
    employee_id: str,
    start_date: date,
    end_date: date,
) -> TipSummary:
    """Fold one employee's tip records dated in ``[start_date, end_date]``."""
    earned = 0
    paid_out = 0
    for record in records:
        if record.employee_id != employee_id or not start_date <= record.date <= end_date:
            continue
        if record.kind == TipKind.EARNED:
            earned += record.amount_cents
        else:
            paid_out += record.amount_cents
    return TipSummary(
        employee_id=employee_id,
        tips_earned_cents=earned,
        tips_paid_out_cents=paid_out,
        tips_owed_cents=calculate_tips_owed(earned, paid_out),
    )
