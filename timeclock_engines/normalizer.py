"""
Punch Normalizer -- Tag device and human noise in a raw punch list.

Responsibility:
    Sort one employee's punches chronologically and mark which of them are
    noise (burst taps, duplicates, aborted breaks).  Nothing is deleted:
    the output has exactly one NormalizedPunch per input PunchEvent.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Input to ``timeclock_engines.sessions.reconstruct_sessions``.

Invariants enforced:
    - Output length equals input length.
    - Ordering is by ``at`` as a UTC instant, then by input position
      (stable).  All windows are measured on UTC instants, so DST changes
      in the punch zone do not bend them.
    - Normalization is a pure function of its input list.
    - Re-normalizing the non-noise punches of a normalized list marks
      nothing new.

Failure modes:
    - ``normalize_punches`` is total.  Malformed punches are rejected
      beforehand by ``validate_punch_events`` with ``MalformedInputError``.

Noise rules, applied in order:
    1. Burst: whenever ``burst_min_punches`` or more punches fall inside a
       ``burst_window_seconds`` window, the window is a burst.  Overlapping
       burst windows merge into one cluster; the cluster keeps its first
       punch and marks the rest BURST.
    2. Duplicate: a punch of the same kind as the last kept punch, within
       ``duplicate_window_seconds`` of it, is marked DUPLICATE.
    3. Canceled break: a kept BreakStart whose next kept punch is a ClockIn
       within ``break_cancel_window_seconds`` is marked CANCELED_BREAK,
       unless the kept punch right after that ClockIn is a BreakEnd (the
       break carried on).  A BreakEnd that follows a later BreakStart
       belongs to that later break.
       The ClockIn itself always keeps normal status.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timedelta

from timeclock_engines.tracer import traced_engine
from timeclock_kernel.domain.timekeeping import (
    NoiseReason,
    NormalizedPunch,
    PunchEvent,
    PunchKind,
    utc_instant,
)
from timeclock_kernel.exceptions import MalformedInputError
from timeclock_kernel.logging_config import get_logger

logger = get_logger("engines.normalizer")

DEFAULT_BURST_WINDOW_SECONDS = 60
DEFAULT_BURST_MIN_PUNCHES = 3
DEFAULT_DUPLICATE_WINDOW_SECONDS = 60
DEFAULT_BREAK_CANCEL_WINDOW_SECONDS = 120


def validate_punch_events(events: Sequence[PunchEvent]) -> None:
    """
    Reject punches the normalizer cannot reason about.

    Raises:
        MalformedInputError: missing employee id, unknown kind, or a
            missing / naive timestamp.
    """
    for event in events:
        if not event.employee_id:
            raise MalformedInputError(event.punch_id, "employee_id", "employee_id is required")
        if not isinstance(event.kind, PunchKind):
            raise MalformedInputError(
                event.punch_id, "kind", f"unknown punch kind {event.kind!r}"
            )
        if event.at is None:
            raise MalformedInputError(event.punch_id, "at", "timestamp is required")
        if event.at.tzinfo is None or event.at.utcoffset() is None:
            raise MalformedInputError(
                event.punch_id, "at", "timestamp must be timezone-aware"
            )


def _burst_clusters(
    instants: list[datetime],
    window: timedelta,
    min_punches: int,
) -> list[tuple[int, int]]:
    """Return merged (first, last) index ranges of burst windows."""
    clusters: list[tuple[int, int]] = []
    j = 0
    for i in range(len(instants)):
        j = max(j, i)
        while j + 1 < len(instants) and instants[j + 1] - instants[i] < window:
            j += 1
        if j - i + 1 < min_punches:
            continue
        if clusters and i <= clusters[-1][1]:
            first, last = clusters[-1]
            clusters[-1] = (first, max(last, j))
        else:
            clusters.append((i, j))
    return clusters


def _mark_canceled_breaks(
    ordered: list[PunchEvent],
    instants: list[datetime],
    reasons: list[NoiseReason | None],
    window: timedelta,
) -> None:
    # Walk backwards so a later canceled BreakStart is already excluded when
    # an earlier BreakStart looks for its next kept punch.
    for i in range(len(ordered) - 1, -1, -1):
        if reasons[i] is not None or ordered[i].kind != PunchKind.BREAK_START:
            continue
        following = [k for k in range(i + 1, len(ordered)) if reasons[k] is None]
        if not following:
            continue
        nxt = ordered[following[0]]
        if nxt.kind != PunchKind.CLOCK_IN or instants[following[0]] - instants[i] > window:
            continue
        # The break survives only if its own BreakEnd comes next; a later
        # break, clock in or clock out means this one was aborted.
        break_closed = (
            len(following) > 1 and ordered[following[1]].kind == PunchKind.BREAK_END
        )
        if not break_closed:
            reasons[i] = NoiseReason.CANCELED_BREAK


@traced_engine(
    "punch_normalizer",
    "1.0",
    fingerprint_fields=(
        "events",
        "burst_window_seconds",
        "burst_min_punches",
        "duplicate_window_seconds",
        "break_cancel_window_seconds",
    ),
)
def normalize_punches(
    events: Sequence[PunchEvent],
    *,
    burst_window_seconds: int = DEFAULT_BURST_WINDOW_SECONDS,
    burst_min_punches: int = DEFAULT_BURST_MIN_PUNCHES,
    duplicate_window_seconds: int = DEFAULT_DUPLICATE_WINDOW_SECONDS,
    break_cancel_window_seconds: int = DEFAULT_BREAK_CANCEL_WINDOW_SECONDS,
) -> tuple[NormalizedPunch, ...]:
    """Sort punches chronologically and tag noise. See module docstring."""
    indexed = sorted(enumerate(events), key=lambda pair: (utc_instant(pair[1].at), pair[0]))
    ordered = [event for _, event in indexed]
    instants = [utc_instant(event.at) for event in ordered]
    reasons: list[NoiseReason | None] = [None] * len(ordered)

    for first, last in _burst_clusters(
        instants, timedelta(seconds=burst_window_seconds), burst_min_punches
    ):
        for k in range(first + 1, last + 1):
            reasons[k] = NoiseReason.BURST

    duplicate_window = timedelta(seconds=duplicate_window_seconds)
    last_kept: PunchEvent | None = None
    last_kept_at: datetime | None = None
    for k, event in enumerate(ordered):
        if reasons[k] is not None:
            continue
        if (
            last_kept is not None
            and event.kind == last_kept.kind
            and instants[k] - last_kept_at < duplicate_window
        ):
            reasons[k] = NoiseReason.DUPLICATE
            continue
        last_kept = event
        last_kept_at = instants[k]

    _mark_canceled_breaks(ordered, instants, reasons, timedelta(seconds=break_cancel_window_seconds))

    normalized = tuple(
        NormalizedPunch(punch=event, sequence=position, noise_reason=reason)
        for (position, event), reason in zip(indexed, reasons)
    )

    if normalized:
        logger.debug(
            "punches_normalized",
            extra={
                "employee_id": ordered[0].employee_id,
                "punch_count": len(normalized),
                "noise_count": sum(1 for p in normalized if p.is_noise),
            },
        )
    return normalized
