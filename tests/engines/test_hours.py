"""
Tests for the Hours Aggregator.

Verifies date attribution, weekly overtime split, day dedup and
open-session handling.
"""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from timeclock_engines.hours import AggregatedHours, aggregate_hours, week_start_for
from timeclock_kernel.domain.timekeeping import BreakInterval, WorkSession

UTC = timezone.utc


def _session(day: int, start_hour: int, hours: int, month: int = 3) -> WorkSession:
    clock_in = datetime(2024, month, day, start_hour, 0, tzinfo=UTC)
    return WorkSession("E1", clock_in=clock_in, clock_out=clock_in + timedelta(hours=hours))


def _open_session(day: int, start_hour: int) -> WorkSession:
    return WorkSession("E1", clock_in=datetime(2024, 3, day, start_hour, 0, tzinfo=UTC))


def _aggregate(sessions, start=date(2024, 3, 4), end=date(2024, 3, 17), **kwargs):
    kwargs.setdefault("reference_tz", UTC)
    return aggregate_hours(sessions, start_date=start, end_date=end, **kwargs)


class TestOvertimeSplit:
    """Weekly threshold, default 40 hours, Monday-start weeks."""

    def test_forty_five_hours_in_one_week(self):
        # 2024-03-04 is a Monday
        sessions = [_session(day, 8, 9) for day in range(4, 9)]
        hours = _aggregate(sessions)
        assert hours.regular_hours == Decimal("40.0000")
        assert hours.overtime_hours == Decimal("5.0000")
        assert hours.regular_seconds == 40 * 3600
        assert hours.overtime_seconds == 5 * 3600

    def test_weeks_are_independent(self):
        week_one = [_session(day, 8, 6) for day in range(4, 9)]  # 30h
        week_two = [_session(day, 8, 6) for day in range(11, 16)]  # 30h
        hours = _aggregate(week_one + week_two)
        assert hours.regular_seconds == 60 * 3600
        assert hours.overtime_seconds == 0

    def test_week_start_moves_bucket_boundary(self):
        sessions = [_session(day, 8, 9) for day in range(4, 8)]  # Mon-Thu, 36h
        sessions.append(_session(10, 8, 10))  # Sunday, 10h
        monday_weeks = _aggregate(sessions)
        sunday_weeks = _aggregate(sessions, week_start=6)
        assert monday_weeks.overtime_seconds == 6 * 3600
        assert sunday_weeks.overtime_seconds == 0

    def test_configurable_threshold(self):
        sessions = [_session(4, 8, 10)]
        hours = _aggregate(sessions, overtime_threshold_hours=Decimal("8"))
        assert hours.regular_seconds == 8 * 3600
        assert hours.overtime_seconds == 2 * 3600

    def test_breaks_are_deducted(self):
        clock_in = datetime(2024, 3, 4, 9, 0, tzinfo=UTC)
        session = WorkSession(
            "E1",
            clock_in=clock_in,
            clock_out=clock_in + timedelta(hours=8),
            breaks=(BreakInterval(clock_in + timedelta(hours=3), clock_in + timedelta(hours=3, minutes=30)),),
        )
        assert _aggregate([session]).regular_seconds == int(7.5 * 3600)


class TestDateAttribution:
    """Sessions belong to their clock-in date in the reference zone."""

    def test_overnight_shift_not_split(self):
        hours = _aggregate([_session(4, 22, 8)])
        assert hours.daily_worked_seconds == {date(2024, 3, 4): 8 * 3600}

    def test_reference_timezone_shifts_date(self):
        # 02:00 UTC on the 5th is 21:00 on the 4th in UTC-5
        eastern = timezone(timedelta(hours=-5))
        hours = _aggregate([_session(5, 2, 4)], reference_tz=eastern)
        assert hours.unique_days_worked == frozenset({date(2024, 3, 4)})

    def test_sessions_outside_range_ignored(self):
        hours = _aggregate([_session(1, 9, 8), _session(4, 9, 8), _session(18, 9, 8)])
        assert hours.total_seconds == 8 * 3600
        assert hours.days_worked == 1


class TestUniqueDays:
    """Dates count once."""

    def test_day_dedup(self):
        sessions = [
            _session(4, 9, 3),
            _session(4, 14, 3),
            _session(5, 9, 8),
            _session(6, 9, 8),
        ]
        hours = _aggregate(sessions)
        assert hours.unique_days_worked == frozenset(
            {date(2024, 3, 4), date(2024, 3, 5), date(2024, 3, 6)}
        )
        assert hours.days_worked == 3

    def test_lone_open_session_counts_as_day(self):
        hours = _aggregate([_open_session(4, 9)])
        assert hours.days_worked == 1
        assert hours.total_seconds == 0

    def test_open_session_beside_worked_session(self):
        hours = _aggregate([_open_session(4, 9), _session(4, 13, 4)])
        assert hours.days_worked == 1
        assert hours.total_seconds == 4 * 3600

    def test_open_sessions_only_on_busy_day_do_not_count(self):
        hours = _aggregate([_open_session(4, 9), _open_session(4, 13)])
        assert hours.days_worked == 0


class TestEdgeCases:
    def test_no_sessions(self):
        hours = _aggregate([])
        assert hours == AggregatedHours.empty()

    def test_end_before_start_rejected(self):
        with pytest.raises(ValueError):
            _aggregate([], start=date(2024, 3, 5), end=date(2024, 3, 4))

    def test_invalid_week_start_rejected(self):
        with pytest.raises(ValueError):
            _aggregate([], week_start=7)

    def test_week_start_for(self):
        assert week_start_for(date(2024, 3, 7)) == date(2024, 3, 4)
        assert week_start_for(date(2024, 3, 7), week_start=6) == date(2024, 3, 3)
