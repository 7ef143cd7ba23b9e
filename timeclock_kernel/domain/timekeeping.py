"""
Timekeeping -- Punch, session, break and anomaly value objects.

Responsibility:
    The nouns of the punch pipeline: what a terminal records (PunchEvent),
    what the normalizer annotates (NormalizedPunch), and what the
    reconstructor produces (WorkSession, BreakInterval, Anomaly).

Architecture position:
    Kernel > Domain -- pure data definitions with ZERO I/O.

Invariants enforced:
    - All objects are frozen; corrections are new PunchEvents, never edits.
    - ``WorkSession``: ``clock_out > clock_in`` when present; every break
      starts at or after ``clock_in``; closed breaks end at or before
      ``clock_out``; breaks never overlap.

Failure modes:
    - SessionInvariantError when a WorkSession violates the invariants above.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum

from timeclock_kernel.exceptions import SessionInvariantError

_ZERO = timedelta(0)


def utc_instant(moment: datetime) -> datetime:
    """
    The same moment expressed in UTC.

    Aware datetimes sharing one tzinfo compare and subtract by wall clock,
    which is wrong across a DST change.  All ordering and arithmetic on
    punch times goes through this.
    """
    return moment.astimezone(timezone.utc)


class PunchKind(Enum):
    """Kinds of punch a clock terminal can record."""
    CLOCK_IN = "clock_in"
    CLOCK_OUT = "clock_out"
    BREAK_START = "break_start"
    BREAK_END = "break_end"


class NoiseReason(Enum):
    """Why the normalizer excluded a punch from reconstruction."""
    BURST = "burst"
    DUPLICATE = "duplicate"
    CANCELED_BREAK = "canceled_break"


class AnomalyKind(Enum):
    """Human-reviewable flags. Anomalies are data, not errors."""
    OPEN_SESSION = "open_session"
    VERY_SHORT_SESSION = "very_short_session"
    INCOMPLETE_BREAK = "incomplete_break"
    CANCELED_BREAK = "canceled_break"
    SHIFT_TOO_LONG = "shift_too_long"
    ORPHAN_PUNCH = "orphan_punch"


@dataclass(frozen=True)
class PunchEvent:
    """A single timestamped clock event, immutable once persisted."""
    punch_id: str
    employee_id: str
    kind: PunchKind
    at: datetime
    source_note: str | None = None


@dataclass(frozen=True)
class NormalizedPunch:
    """
    A PunchEvent annotated by the normalizer.

    ``sequence`` is the punch's position in the caller's input list and is
    the tie-breaker for punches sharing a timestamp.
    """
    punch: PunchEvent
    sequence: int
    noise_reason: NoiseReason | None = None

    @property
    def is_noise(self) -> bool:
        return self.noise_reason is not None

    @property
    def kind(self) -> PunchKind:
        return self.punch.kind

    @property
    def at(self) -> datetime:
        """The punch time as a UTC instant."""
        return utc_instant(self.punch.at)


@dataclass(frozen=True)
class Anomaly:
    """A non-fatal flag on a session or on an unmatched punch."""
    kind: AnomalyKind
    at: datetime
    duration: timedelta | None = None
    punch_id: str | None = None
    detail: str | None = None

    @classmethod
    def open_session(cls, clock_in: datetime, forced_close_at: datetime | None = None) -> Anomaly:
        if forced_close_at is None:
            return cls(AnomalyKind.OPEN_SESSION, clock_in, detail="missing clock out")
        return cls(
            AnomalyKind.OPEN_SESSION,
            clock_in,
            duration=utc_instant(forced_close_at) - utc_instant(clock_in),
            detail=f"forced close at next clock in {forced_close_at.isoformat()}",
        )

    @classmethod
    def very_short_session(cls, clock_in: datetime, duration: timedelta) -> Anomaly:
        return cls(AnomalyKind.VERY_SHORT_SESSION, clock_in, duration=duration)

    @classmethod
    def incomplete_break(cls, break_start: datetime) -> Anomaly:
        return cls(AnomalyKind.INCOMPLETE_BREAK, break_start, detail="missing break end")

    @classmethod
    def canceled_break(cls, break_start: datetime, punch_id: str | None = None) -> Anomaly:
        return cls(AnomalyKind.CANCELED_BREAK, break_start, punch_id=punch_id)

    @classmethod
    def shift_too_long(cls, clock_in: datetime, duration: timedelta) -> Anomaly:
        return cls(AnomalyKind.SHIFT_TOO_LONG, clock_in, duration=duration)

    @classmethod
    def orphan_punch(cls, punch: PunchEvent, state: str) -> Anomaly:
        return cls(
            AnomalyKind.ORPHAN_PUNCH,
            utc_instant(punch.at),
            punch_id=punch.punch_id,
            detail=f"{punch.kind.value} while {state}",
        )


@dataclass(frozen=True)
class BreakInterval:
    """A break inside a session. ``end is None`` means the break never closed."""
    start: datetime
    end: datetime | None = None

    @property
    def is_complete(self) -> bool:
        return self.end is not None

    @property
    def duration(self) -> timedelta:
        """Closed-break length; incomplete breaks deduct nothing."""
        if self.end is None:
            return _ZERO
        return utc_instant(self.end) - utc_instant(self.start)


@dataclass(frozen=True)
class WorkSession:
    """
    One continuous work stint from an accepted ClockIn to its ClockOut.

    ``clock_out is None`` marks an open session.  ``forced_close_at`` is set
    when the session was cut short by a later ClockIn; the session still
    counts as open (it contributes no hours) but its occupied interval ends
    there.
    """
    employee_id: str
    clock_in: datetime
    clock_out: datetime | None = None
    breaks: tuple[BreakInterval, ...] = field(default_factory=tuple)
    anomalies: tuple[Anomaly, ...] = field(default_factory=tuple)
    forced_close_at: datetime | None = None

    def __post_init__(self) -> None:
        clock_in = utc_instant(self.clock_in)
        clock_out = utc_instant(self.clock_out) if self.clock_out is not None else None
        if clock_out is not None and clock_out <= clock_in:
            raise SessionInvariantError(
                self.employee_id,
                f"clock_out {self.clock_out.isoformat()} is not after "
                f"clock_in {self.clock_in.isoformat()}",
            )
        previous_end: datetime | None = None
        for brk in self.breaks:
            start = utc_instant(brk.start)
            end = utc_instant(brk.end) if brk.end is not None else None
            if start < clock_in:
                raise SessionInvariantError(
                    self.employee_id, f"break at {brk.start.isoformat()} starts before clock_in"
                )
            if end is not None:
                if end < start:
                    raise SessionInvariantError(
                        self.employee_id, f"break at {brk.start.isoformat()} ends before it starts"
                    )
                if clock_out is not None and end > clock_out:
                    raise SessionInvariantError(
                        self.employee_id, f"break at {brk.start.isoformat()} ends after clock_out"
                    )
            if previous_end is not None and start < previous_end:
                raise SessionInvariantError(
                    self.employee_id, f"break at {brk.start.isoformat()} overlaps the previous break"
                )
            previous_end = end if end is not None else start

    @property
    def is_open(self) -> bool:
        return self.clock_out is None

    @property
    def occupied_until(self) -> datetime | None:
        """End of the interval this session occupies on the timeline."""
        return self.clock_out if self.clock_out is not None else self.forced_close_at

    @property
    def elapsed(self) -> timedelta:
        if self.clock_out is None:
            return _ZERO
        return utc_instant(self.clock_out) - utc_instant(self.clock_in)

    @property
    def break_duration(self) -> timedelta:
        return sum((b.duration for b in self.breaks), _ZERO)

    @property
    def worked_duration(self) -> timedelta:
        """Elapsed minus closed breaks; open sessions contribute zero."""
        if self.clock_out is None:
            return _ZERO
        return max(self.elapsed - self.break_duration, _ZERO)

    def has_anomaly(self, kind: AnomalyKind) -> bool:
        return any(a.kind == kind for a in self.anomalies)
