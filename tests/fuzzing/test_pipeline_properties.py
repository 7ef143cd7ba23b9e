"""
Hypothesis-based fuzzing of the punch-to-pay pipeline.

Properties checked over random punch streams:
- Normalization is deterministic and idempotent on its own output.
- Reconstructed sessions never overlap and are emitted in clock_in order.
- Worked time is never negative; regular + overtime equals total worked.
- Tips owed never go below zero.
- Period assembly is independent of input order.
- Punches written in a DST zone behave like the same instants in UTC.
"""

from dataclasses import replace
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from timeclock_engines import (
    ClockInPolicy,
    aggregate_hours,
    calculate_tips_owed,
    normalize_punches,
    reconstruct_sessions,
)
from timeclock_kernel.domain.compensation import CompensationType, EmployeeCompensationProfile
from timeclock_kernel.domain.timekeeping import PunchEvent, PunchKind
from timeclock_modules.payroll import (
    EmployeePayrollInput,
    PayrollConfig,
    PayrollPeriod,
    PayrollPeriodAssembler,
)

ORIGIN = datetime(2024, 3, 4, 6, 0, tzinfo=timezone.utc)
TWO_DAYS = 2 * 24 * 3600
NEW_YORK = ZoneInfo("America/New_York")
# Two days from each of these span a New York DST change.
DST_ORIGINS = (
    datetime(2024, 3, 9, 12, 0, tzinfo=timezone.utc),
    datetime(2024, 11, 2, 12, 0, tzinfo=timezone.utc),
)

FUZZ_SETTINGS = settings(
    max_examples=150,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
)


@st.composite
def punch_streams(draw, employee_id="E1", max_size=30, origin=ORIGIN):
    """Random punch kinds at second resolution, clustered enough to hit the noise windows."""
    entries = draw(
        st.lists(
            st.tuples(
                st.sampled_from(list(PunchKind)),
                st.one_of(
                    st.integers(min_value=0, max_value=TWO_DAYS),
                    st.integers(min_value=0, max_value=600),
                ),
            ),
            max_size=max_size,
        )
    )
    return [
        PunchEvent(f"{employee_id}-{n}", employee_id, kind, origin + timedelta(seconds=offset))
        for n, (kind, offset) in enumerate(entries)
    ]


class TestNormalizerProperties:
    @FUZZ_SETTINGS
    @given(punches=punch_streams())
    def test_deterministic(self, punches):
        assert normalize_punches(punches) == normalize_punches(punches)

    @FUZZ_SETTINGS
    @given(punches=punch_streams())
    def test_idempotent_on_kept_punches(self, punches):
        kept = [p.punch for p in normalize_punches(punches) if not p.is_noise]
        assert not any(p.is_noise for p in normalize_punches(kept))

    @FUZZ_SETTINGS
    @given(punches=punch_streams())
    def test_every_punch_retained(self, punches):
        normalized = normalize_punches(punches)
        assert sorted(p.punch.punch_id for p in normalized) == sorted(p.punch_id for p in punches)


class TestReconstructionProperties:
    @FUZZ_SETTINGS
    @given(
        punches=punch_streams(),
        policy=st.sampled_from([ClockInPolicy.FORCE_CLOSE, ClockInPolicy.DISCARD]),
    )
    def test_sessions_ordered_and_disjoint(self, punches, policy):
        result = reconstruct_sessions(
            normalize_punches(punches), reference_tz=timezone.utc, policy=policy
        )
        sessions = result.sessions
        for earlier, later in zip(sessions, sessions[1:]):
            assert earlier.clock_in <= later.clock_in
            assert earlier.occupied_until is not None
            assert earlier.occupied_until <= later.clock_in
        for session in sessions:
            assert session.worked_duration >= timedelta(0)
            if not session.is_open:
                assert session.clock_out > session.clock_in

    @FUZZ_SETTINGS
    @given(punches=punch_streams())
    def test_hours_split_is_exact(self, punches):
        result = reconstruct_sessions(normalize_punches(punches), reference_tz=timezone.utc)
        hours = aggregate_hours(
            result.sessions,
            start_date=date(2024, 3, 4),
            end_date=date(2024, 3, 10),
            reference_tz=timezone.utc,
        )
        worked = sum(int(s.worked_duration.total_seconds()) for s in result.sessions)
        assert hours.regular_seconds >= 0
        assert hours.overtime_seconds >= 0
        assert hours.total_seconds == worked


class TestDaylightSavingProperties:
    """The same instants written in a DST zone give the same result as in UTC."""

    @staticmethod
    def _localized(punches):
        return [replace(p, at=p.at.astimezone(NEW_YORK)) for p in punches]

    @FUZZ_SETTINGS
    @given(data=st.data(), origin=st.sampled_from(DST_ORIGINS))
    def test_noise_marks_match_utc(self, data, origin):
        punches = data.draw(punch_streams(origin=origin))
        in_utc = normalize_punches(punches)
        local = normalize_punches(self._localized(punches))
        assert [p.punch.punch_id for p in local] == [p.punch.punch_id for p in in_utc]
        assert [p.noise_reason for p in local] == [p.noise_reason for p in in_utc]

    @FUZZ_SETTINGS
    @given(data=st.data(), origin=st.sampled_from(DST_ORIGINS))
    def test_sessions_match_utc(self, data, origin):
        punches = data.draw(punch_streams(origin=origin))
        in_utc = reconstruct_sessions(normalize_punches(punches), reference_tz=NEW_YORK)
        local = reconstruct_sessions(
            normalize_punches(self._localized(punches)), reference_tz=NEW_YORK
        )
        assert [s.clock_in for s in local.sessions] == [s.clock_in for s in in_utc.sessions]
        assert [s.worked_duration for s in local.sessions] == [
            s.worked_duration for s in in_utc.sessions
        ]
        assert len(local.all_anomalies()) == len(in_utc.all_anomalies())

    @FUZZ_SETTINGS
    @given(data=st.data(), origin=st.sampled_from(DST_ORIGINS))
    def test_hours_split_is_exact_in_dst_zone(self, data, origin):
        punches = self._localized(data.draw(punch_streams(origin=origin)))
        result = reconstruct_sessions(normalize_punches(punches), reference_tz=NEW_YORK)
        first_day = origin.astimezone(NEW_YORK).date()
        hours = aggregate_hours(
            result.sessions,
            start_date=first_day,
            end_date=first_day + timedelta(days=3),
            reference_tz=NEW_YORK,
        )
        worked = sum(int(s.worked_duration.total_seconds()) for s in result.sessions)
        assert hours.total_seconds == worked


class TestTipProperties:
    @FUZZ_SETTINGS
    @given(
        earned=st.integers(min_value=0, max_value=10**9),
        paid_out=st.integers(min_value=0, max_value=10**9),
    )
    def test_owed_never_negative(self, earned, paid_out):
        owed = calculate_tips_owed(earned, paid_out)
        assert owed >= 0
        assert owed == max(0, earned - paid_out)


class TestAssemblyProperties:
    @FUZZ_SETTINGS
    @given(
        first=punch_streams("E1", max_size=12),
        second=punch_streams("E2", max_size=12),
    )
    def test_input_order_does_not_change_result(self, first, second):
        config = PayrollConfig(reference_timezone="UTC")
        period = PayrollPeriod(start_date=date(2024, 3, 4), end_date=date(2024, 3, 10))
        employees = [
            EmployeePayrollInput(
                employee_id=employee_id,
                profile=EmployeeCompensationProfile(
                    employee_id, CompensationType.HOURLY, hourly_rate_cents=1725
                ),
                punches=tuple(punches),
            )
            for employee_id, punches in (("E1", first), ("E2", second))
        ]
        assembler = PayrollPeriodAssembler(config)
        forward = assembler.assemble(period, employees)
        backward = assembler.assemble(period, list(reversed(employees)))
        assert forward.fingerprint() == backward.fingerprint()
        for item in forward.line_items:
            assert item.total_pay_cents == item.gross_pay_cents + item.tips_owed_cents
