"""
Module: timeclock_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the import surface for timeclock_modules.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import timeclock_kernel (and sibling engine modules).
    MUST NOT import timeclock_modules or timeclock_config.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()`` or ``date.today()``.
      Dates, timestamps and the reference timezone are explicit parameters.
    - Integer-cent money: floats are never used for amounts.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Every engine entry point is traced via ``@traced_engine`` (see
    ``timeclock_engines.tracer``), emitting TIMECLOCK_ENGINE_TRACE records.

Usage:
    from timeclock_engines import normalize_punches, reconstruct_sessions
    from timeclock_engines import aggregate_hours, dispatch_compensation
"""

from timeclock_engines.compensation import (
    CompensationBreakdown,
    dispatch_compensation,
    manual_payments_in_period,
)
from timeclock_engines.hours import AggregatedHours, aggregate_hours, week_start_for
from timeclock_engines.labor_cost import (
    DailyLaborCost,
    LaborCostBreakdown,
    allocate_daily_labor_cost,
    summarize_labor_costs,
)
from timeclock_engines.normalizer import normalize_punches, validate_punch_events
from timeclock_engines.sessions import (
    ClockInPolicy,
    ReconstructionResult,
    SessionState,
    attribution_date,
    reconstruct_sessions,
)
from timeclock_engines.tips import TipSummary, calculate_tips_owed, summarize_tips
from timeclock_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    # Normalizer
    "normalize_punches",
    "validate_punch_events",
    # Sessions
    "ClockInPolicy",
    "ReconstructionResult",
    "SessionState",
    "attribution_date",
    "reconstruct_sessions",
    # Hours
    "AggregatedHours",
    "aggregate_hours",
    "week_start_for",
    # Compensation
    "CompensationBreakdown",
    "dispatch_compensation",
    "manual_payments_in_period",
    # Tips
    "TipSummary",
    "calculate_tips_owed",
    "summarize_tips",
    # Labor cost
    "DailyLaborCost",
    "LaborCostBreakdown",
    "allocate_daily_labor_cost",
    "summarize_labor_costs",
    # Tracer
    "compute_input_fingerprint",
    "traced_engine",
]
