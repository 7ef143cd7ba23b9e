"""
Payroll Configuration Schema.

Defines the structure and sensible defaults for payroll period assembly.
Actual values are loaded from restaurant configuration at runtime (see
``timeclock_config.load_payroll_config``).
"""

from dataclasses import dataclass
from datetime import timedelta, timezone, tzinfo
from decimal import Decimal
from typing import Self
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from timeclock_engines.sessions import ClockInPolicy
from timeclock_kernel.domain.values import seconds_from_hours
from timeclock_kernel.exceptions import ConfigurationError
from timeclock_kernel.logging_config import get_logger

logger = get_logger("modules.payroll.config")

WORK_DAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
VALID_CLOCK_IN_POLICIES = {policy.value for policy in ClockInPolicy}

_DECIMAL_FIELDS = ("overtime_threshold_hours", "overtime_multiplier", "max_shift_hours")


def _resolve_timezone(name: str) -> tzinfo:
    if name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigurationError("reference_timezone", name, "unknown time zone") from exc


@dataclass(frozen=True)
class PayrollConfig:
    """
    Configuration schema for payroll period assembly.

    ``reference_timezone`` has no default: every date attribution depends
    on it, so it must be chosen explicitly.

        config = PayrollConfig(
            reference_timezone="America/New_York",
            clock_in_while_open="discard",
        )
    """

    reference_timezone: str

    # Overtime (weekly only)
    overtime_threshold_hours: Decimal = Decimal("40")
    overtime_multiplier: Decimal = Decimal("1.5")
    work_week_start: str = "monday"

    # Noise filtering
    burst_window_seconds: int = 60
    burst_min_punches: int = 3
    duplicate_window_seconds: int = 60
    break_cancel_window_seconds: int = 120

    # Anomaly thresholds
    very_short_session_minutes: int = 3
    max_shift_hours: Decimal = Decimal("16")

    # ClockIn while a session is open: force_close, discard or strict
    clock_in_while_open: str = "force_close"

    # Fan-out across employees (1 = sequential)
    max_workers: int = 1

    def __post_init__(self):
        if not isinstance(self.reference_timezone, str) or not self.reference_timezone:
            raise ConfigurationError(
                "reference_timezone", self.reference_timezone, "must be a time zone name"
            )
        _resolve_timezone(self.reference_timezone)

        if self.overtime_threshold_hours <= 0:
            raise ConfigurationError(
                "overtime_threshold_hours", self.overtime_threshold_hours, "must be positive"
            )
        if self.overtime_multiplier < 1:
            raise ConfigurationError(
                "overtime_multiplier", self.overtime_multiplier, "must be at least 1"
            )
        if self.work_week_start not in WORK_DAYS:
            raise ConfigurationError(
                "work_week_start", self.work_week_start, f"must be one of {WORK_DAYS}"
            )

        for name in ("burst_window_seconds", "duplicate_window_seconds", "break_cancel_window_seconds"):
            if getattr(self, name) < 0:
                raise ConfigurationError(name, getattr(self, name), "cannot be negative")
        if self.burst_min_punches < 2:
            raise ConfigurationError(
                "burst_min_punches", self.burst_min_punches, "must be at least 2"
            )

        if self.very_short_session_minutes < 0:
            raise ConfigurationError(
                "very_short_session_minutes", self.very_short_session_minutes, "cannot be negative"
            )
        if self.max_shift_hours <= 0:
            raise ConfigurationError("max_shift_hours", self.max_shift_hours, "must be positive")

        if self.clock_in_while_open not in VALID_CLOCK_IN_POLICIES:
            raise ConfigurationError(
                "clock_in_while_open",
                self.clock_in_while_open,
                f"must be one of {sorted(VALID_CLOCK_IN_POLICIES)}",
            )
        if self.max_workers < 1:
            raise ConfigurationError("max_workers", self.max_workers, "must be at least 1")

        logger.info(
            "payroll_config_initialized",
            extra={
                "reference_timezone": self.reference_timezone,
                "overtime_threshold_hours": str(self.overtime_threshold_hours),
                "overtime_multiplier": str(self.overtime_multiplier),
                "work_week_start": self.work_week_start,
                "clock_in_while_open": self.clock_in_while_open,
                "max_workers": self.max_workers,
            },
        )

    @property
    def tzinfo(self) -> tzinfo:
        return _resolve_timezone(self.reference_timezone)

    @property
    def week_start_index(self) -> int:
        return WORK_DAYS.index(self.work_week_start)

    @property
    def clock_in_policy(self) -> ClockInPolicy:
        return ClockInPolicy(self.clock_in_while_open)

    @property
    def max_shift(self) -> timedelta:
        return timedelta(seconds=seconds_from_hours(self.max_shift_hours))

    @classmethod
    def with_defaults(cls, reference_timezone: str) -> Self:
        """Create config with default thresholds for the given zone."""
        logger.info(
            "payroll_config_created_with_defaults",
            extra={"reference_timezone": reference_timezone},
        )
        return cls(reference_timezone=reference_timezone)

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """Create config from dictionary (e.g., loaded from a YAML file)."""
        logger.info(
            "payroll_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        known = set(cls.__dataclass_fields__)
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(unknown[0], data[unknown[0]], "unknown setting")
        if "reference_timezone" not in data:
            raise ConfigurationError("reference_timezone", None, "is required")
        values = dict(data)
        for name in _DECIMAL_FIELDS:
            if name in values:
                values[name] = Decimal(str(values[name]))
        return cls(**values)
