"""
Session Reconstructor -- Turn normalized punches into work sessions.

Responsibility:
    Run the per-employee punch state machine over a normalized punch list
    and produce ordered WorkSessions (with breaks and anomalies) plus the
    punch-level anomalies that belong to no session.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Consumes ``normalize_punches`` output; feeds ``aggregate_hours``.

States and transitions:
    AWAITING_CLOCK_IN + ClockIn    -> open session, IN_SESSION
    IN_SESSION        + BreakStart -> open break, IN_BREAK
    IN_BREAK          + BreakEnd   -> close break, IN_SESSION
    IN_SESSION        + ClockOut   -> close session, AWAITING_CLOCK_IN
    IN_BREAK          + ClockOut   -> close break incomplete, close session
    end of input while open        -> emit session with clock_out=None

    A ClockIn that arrives while a session is open is handled as follows:
    - right after a canceled BreakStart (noise, within the cancel window)
      it is absorbed and the session gets a CANCELED_BREAK anomaly;
    - while IN_BREAK and within the cancel window of the break start it is
      absorbed and the break continues;
    - otherwise ``ClockInPolicy`` decides: FORCE_CLOSE ends the previous
      session as open (forced_close_at = the new ClockIn) and starts a new
      one, DISCARD ignores the punch with an ORPHAN_PUNCH anomaly, STRICT
      raises ``ProtocolViolationError``.

    Punches that match no transition (ClockOut while awaiting, BreakEnd
    while not on break, ...) are recorded as ORPHAN_PUNCH and change nothing.

Invariants enforced:
    - Sessions never overlap and are emitted in clock_in order.
    - Every closed session has clock_out > clock_in.
    - Breaks lie inside their session except an incomplete break.
    - Session and break boundaries are UTC instants.  ``reference_tz`` only
      decides which calendar date a session is attributed to.

Failure modes:
    - MixedEmployeePunchesError if punches belong to more than one employee.
    - ProtocolViolationError under ClockInPolicy.STRICT only.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta, tzinfo
from enum import Enum

from timeclock_engines.tracer import traced_engine
from timeclock_kernel.domain.timekeeping import (
    Anomaly,
    BreakInterval,
    NoiseReason,
    NormalizedPunch,
    PunchEvent,
    PunchKind,
    WorkSession,
    utc_instant,
)
from timeclock_kernel.exceptions import MixedEmployeePunchesError, ProtocolViolationError
from timeclock_kernel.logging_config import get_logger

logger = get_logger("engines.sessions")

DEFAULT_VERY_SHORT_MINUTES = 3
DEFAULT_MAX_SHIFT = timedelta(hours=16)
DEFAULT_BREAK_CANCEL_WINDOW_SECONDS = 120


class ClockInPolicy(Enum):
    """What to do with a ClockIn that arrives while a session is open."""
    FORCE_CLOSE = "force_close"
    DISCARD = "discard"
    STRICT = "strict"


class SessionState(Enum):
    AWAITING_CLOCK_IN = "awaiting_clock_in"
    IN_SESSION = "in_session"
    IN_BREAK = "in_break"


def attribution_date(moment: datetime, reference_tz: tzinfo) -> date:
    """Calendar date a session starting at ``moment`` belongs to."""
    return moment.astimezone(reference_tz).date()


@dataclass(frozen=True)
class ReconstructionResult:
    """Sessions for one employee plus anomalies not tied to any session."""
    employee_id: str | None
    sessions: tuple[WorkSession, ...]
    anomalies: tuple[Anomaly, ...]
    noise_count: int

    def all_anomalies(self) -> tuple[Anomaly, ...]:
        collected = [a for s in self.sessions for a in s.anomalies]
        collected.extend(self.anomalies)
        return tuple(sorted(collected, key=lambda a: (utc_instant(a.at), a.kind.value)))

    @property
    def anomaly_count(self) -> int:
        return sum(len(s.anomalies) for s in self.sessions) + len(self.anomalies)

    @property
    def open_sessions(self) -> tuple[WorkSession, ...]:
        return tuple(s for s in self.sessions if s.is_open)


class _SessionBuilder:
    """Mutable accumulator for the session currently being reconstructed."""

    def __init__(self, employee_id: str, clock_in: datetime, max_shift: timedelta):
        self.employee_id = employee_id
        self.clock_in = clock_in
        self.max_shift = max_shift
        self.breaks: list[BreakInterval] = []
        self.break_start: datetime | None = None
        self.anomalies: list[Anomaly] = []

    def _close_open_break(self) -> None:
        if self.break_start is not None:
            self.breaks.append(BreakInterval(start=self.break_start, end=None))
            self.anomalies.append(Anomaly.incomplete_break(self.break_start))
            self.break_start = None

    def close(self, clock_out: datetime) -> WorkSession:
        self._close_open_break()
        elapsed = clock_out - self.clock_in
        if elapsed > self.max_shift:
            self.anomalies.append(Anomaly.shift_too_long(self.clock_in, elapsed))
        return self._build(clock_out=clock_out)

    def leave_open(self, forced_close_at: datetime | None = None) -> WorkSession:
        self._close_open_break()
        self.anomalies.append(Anomaly.open_session(self.clock_in, forced_close_at))
        return self._build(forced_close_at=forced_close_at)

    def _build(
        self,
        clock_out: datetime | None = None,
        forced_close_at: datetime | None = None,
    ) -> WorkSession:
        return WorkSession(
            employee_id=self.employee_id,
            clock_in=self.clock_in,
            clock_out=clock_out,
            breaks=tuple(self.breaks),
            anomalies=tuple(self.anomalies),
            forced_close_at=forced_close_at,
        )


def _flag_very_short_sessions(
    sessions: list[WorkSession],
    reference_tz: tzinfo,
    threshold: timedelta,
) -> list[WorkSession]:
    per_day = Counter(attribution_date(s.clock_in, reference_tz) for s in sessions)
    flagged: list[WorkSession] = []
    for session in sessions:
        if (
            not session.is_open
            and session.elapsed < threshold
            and per_day[attribution_date(session.clock_in, reference_tz)] > 1
        ):
            session = replace(
                session,
                anomalies=session.anomalies
                + (Anomaly.very_short_session(session.clock_in, session.elapsed),),
            )
        flagged.append(session)
    return flagged


@traced_engine(
    "session_reconstructor",
    "1.0",
    fingerprint_fields=("normalized", "policy", "very_short_minutes", "max_shift"),
)
def reconstruct_sessions(
    normalized: Sequence[NormalizedPunch],
    *,
    reference_tz: tzinfo,
    policy: ClockInPolicy = ClockInPolicy.FORCE_CLOSE,
    very_short_minutes: int = DEFAULT_VERY_SHORT_MINUTES,
    max_shift: timedelta = DEFAULT_MAX_SHIFT,
    break_cancel_window_seconds: int = DEFAULT_BREAK_CANCEL_WINDOW_SECONDS,
) -> ReconstructionResult:
    """Reconstruct one employee's sessions. See module docstring."""
    employee_ids = sorted({p.punch.employee_id for p in normalized})
    if len(employee_ids) > 1:
        raise MixedEmployeePunchesError(employee_ids)
    employee_id = employee_ids[0] if employee_ids else None

    cancel_window = timedelta(seconds=break_cancel_window_seconds)
    ordered = sorted(normalized, key=lambda p: (p.at, p.sequence))

    sessions: list[WorkSession] = []
    orphans: list[Anomaly] = []
    current: _SessionBuilder | None = None
    state = SessionState.AWAITING_CLOCK_IN
    canceled_break: NormalizedPunch | None = None

    def orphan(punch: PunchEvent) -> None:
        orphans.append(Anomaly.orphan_punch(punch, state.value))

    for item in ordered:
        if item.is_noise:
            if item.noise_reason == NoiseReason.CANCELED_BREAK:
                canceled_break = item
            continue

        punch = item.punch
        at = item.at
        aborted, canceled_break = canceled_break, None

        if punch.kind == PunchKind.CLOCK_IN:
            if aborted is not None and at - aborted.at <= cancel_window:
                anomaly = Anomaly.canceled_break(aborted.at, aborted.punch.punch_id)
                if current is None:
                    current = _SessionBuilder(punch.employee_id, at, max_shift)
                    state = SessionState.IN_SESSION
                current.anomalies.append(anomaly)
                continue
            if current is None:
                current = _SessionBuilder(punch.employee_id, at, max_shift)
                state = SessionState.IN_SESSION
                continue
            if (
                state == SessionState.IN_BREAK
                and current.break_start is not None
                and at - current.break_start <= cancel_window
            ):
                continue
            if policy == ClockInPolicy.STRICT:
                raise ProtocolViolationError(punch.employee_id, punch.punch_id, state.value)
            if policy == ClockInPolicy.DISCARD:
                orphan(punch)
                continue
            logger.info(
                "session_force_closed",
                extra={
                    "employee_id": punch.employee_id,
                    "clock_in": current.clock_in,
                    "forced_close_at": at,
                },
            )
            sessions.append(current.leave_open(forced_close_at=at))
            current = _SessionBuilder(punch.employee_id, at, max_shift)
            state = SessionState.IN_SESSION

        elif punch.kind == PunchKind.BREAK_START:
            if state != SessionState.IN_SESSION:
                orphan(punch)
                continue
            current.break_start = at
            state = SessionState.IN_BREAK

        elif punch.kind == PunchKind.BREAK_END:
            if state != SessionState.IN_BREAK:
                orphan(punch)
                continue
            current.breaks.append(BreakInterval(start=current.break_start, end=at))
            current.break_start = None
            state = SessionState.IN_SESSION

        elif punch.kind == PunchKind.CLOCK_OUT:
            if current is None or at <= current.clock_in:
                orphan(punch)
                continue
            sessions.append(current.close(at))
            current = None
            state = SessionState.AWAITING_CLOCK_IN

    if current is not None:
        sessions.append(current.leave_open())

    sessions = _flag_very_short_sessions(
        sessions, reference_tz, timedelta(minutes=very_short_minutes)
    )

    result = ReconstructionResult(
        employee_id=employee_id,
        sessions=tuple(sessions),
        anomalies=tuple(orphans),
        noise_count=sum(1 for p in normalized if p.is_noise),
    )
    if employee_id is not None:
        logger.debug(
            "sessions_reconstructed",
            extra={
                "employee_id": employee_id,
                "session_count": len(result.sessions),
                "anomaly_count": result.anomaly_count,
                "noise_count": result.noise_count,
            },
        )
    return result
