"""
Hours Aggregator -- Reduce work sessions to regular/overtime hours and days.

Responsibility:
    For one employee and an inclusive date range, sum worked time, split it
    into regular and overtime per work week, and collect the set of unique
    dates worked.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Consumes WorkSessions; feeds the compensation dispatcher and the labor
    cost allocator.

Invariants enforced:
    - A session belongs entirely to the calendar date of its clock_in in
      ``reference_tz``; overnight shifts are never split.
    - Worked time is kept in whole seconds, so pay is computed from exact
      values and only rounded once, at the cent.
    - Open sessions (including force-closed ones) contribute zero seconds.
    - A date counts once in ``unique_days_worked`` no matter how many
      sessions it has.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, timedelta, tzinfo
from decimal import Decimal

from timeclock_engines.sessions import attribution_date
from timeclock_engines.tracer import traced_engine
from timeclock_kernel.domain.timekeeping import WorkSession
from timeclock_kernel.domain.values import hours_from_seconds, seconds_from_hours
from timeclock_kernel.logging_config import get_logger

logger = get_logger("engines.hours")

DEFAULT_OVERTIME_THRESHOLD_HOURS = Decimal("40")
MONDAY = 0


@dataclass(frozen=True)
class AggregatedHours:
    """Worked time for one employee over one date range."""
    regular_seconds: int
    overtime_seconds: int
    unique_days_worked: frozenset[date] = frozenset()
    daily_worked_seconds: dict[date, int] = field(default_factory=dict)

    @property
    def regular_hours(self) -> Decimal:
        return hours_from_seconds(self.regular_seconds)

    @property
    def overtime_hours(self) -> Decimal:
        return hours_from_seconds(self.overtime_seconds)

    @property
    def total_seconds(self) -> int:
        return self.regular_seconds + self.overtime_seconds

    @property
    def days_worked(self) -> int:
        return len(self.unique_days_worked)

    @classmethod
    def empty(cls) -> AggregatedHours:
        return cls(regular_seconds=0, overtime_seconds=0)


def week_start_for(day: date, week_start: int = MONDAY) -> date:
    """First day of the work week containing ``day`` (0=Monday ... 6=Sunday)."""
    return day - timedelta(days=(day.weekday() - week_start) % 7)


@traced_engine(
    "hours_aggregator",
    "1.0",
    fingerprint_fields=(
        "sessions",
        "start_date",
        "end_date",
        "week_start",
        "overtime_threshold_hours",
    ),
)
def aggregate_hours(
    sessions: Sequence[WorkSession],
    *,
    start_date: date,
    end_date: date,
    reference_tz: tzinfo,
    week_start: int = MONDAY,
    overtime_threshold_hours: Decimal | int = DEFAULT_OVERTIME_THRESHOLD_HOURS,
) -> AggregatedHours:
    """
    Aggregate sessions attributed to ``[start_date, end_date]``.

    Overtime is weekly only: within each work week (starting on
    ``week_start``) seconds beyond ``overtime_threshold_hours`` are overtime.

    Raises:
        ValueError: if ``end_date`` precedes ``start_date`` or ``week_start``
            is not a weekday index.
    """
    if end_date < start_date:
        raise ValueError(f"end_date {end_date} precedes start_date {start_date}")
    if not 0 <= week_start <= 6:
        raise ValueError(f"week_start must be 0..6, got {week_start}")

    daily: dict[date, int] = defaultdict(int)
    sessions_per_day: dict[date, int] = defaultdict(int)
    for session in sessions:
        day = attribution_date(session.clock_in, reference_tz)
        if not start_date <= day <= end_date:
            continue
        sessions_per_day[day] += 1
        daily[day] += int(session.worked_duration.total_seconds())

    # A day counts when some of its time was worked, or when its only
    # session is the whole (possibly open) shift.
    unique_days = frozenset(
        day for day, count in sessions_per_day.items() if daily[day] > 0 or count == 1
    )

    weekly: dict[date, int] = defaultdict(int)
    for day, seconds in daily.items():
        weekly[week_start_for(day, week_start)] += seconds

    threshold = seconds_from_hours(overtime_threshold_hours)
    regular = 0
    overtime = 0
    for week in sorted(weekly):
        worked = weekly[week]
        regular += min(worked, threshold)
        overtime += max(worked - threshold, 0)

    return AggregatedHours(
        regular_seconds=regular,
        overtime_seconds=overtime,
        unique_days_worked=unique_days,
        daily_worked_seconds={day: daily[day] for day in sorted(daily)},
    )
