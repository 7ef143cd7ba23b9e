"""
Values -- Integer-cent money arithmetic.

Responsibility:
    Provides the rounding primitives every pay computation goes through.
    Amounts are integer cents at rest; intermediate products are Decimal
    and are rounded half-up exactly once, at the point of multiplication.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by every engine that produces a cent amount.

Invariants enforced:
    - Amounts are ``int`` cents; ``float`` is rejected at every boundary.
    - Rounding is ROUND_HALF_UP to the whole cent, never banker's rounding.
    - Fractional cents are never carried between multiplications.

Failure modes:
    - TypeError when a float (or bool) is passed as an amount or factor.
    - ValueError when a Decimal is NaN or infinite.

Audit relevance:
    Half-up rounding is applied in one place so a reviewer can verify that
    ``41667.5`` cents always becomes ``41668`` and never ``41667``.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from fractions import Fraction

SECONDS_PER_HOUR = 3600
HOURS_QUANTUM = Decimal("0.0001")

_ONE = Decimal("1")


def _as_decimal(value: int | Decimal | Fraction | str, name: str) -> Decimal:
    if isinstance(value, bool) or isinstance(value, float):
        raise TypeError(f"{name} must be int, Decimal, Fraction or str, got {type(value).__name__}")
    if isinstance(value, Fraction):
        return Decimal(value.numerator) / Decimal(value.denominator)
    result = Decimal(value) if not isinstance(value, Decimal) else value
    if not result.is_finite():
        raise ValueError(f"{name} must be finite, got {result}")
    return result


def round_half_up_cents(amount: Decimal | Fraction | int) -> int:
    """
    Round a (possibly fractional) cent amount to whole cents, half-up.

    Postconditions:
        - Returns an ``int``.
        - ``x.5`` rounds away from zero (``41667.5 -> 41668``).
    """
    value = _as_decimal(amount, "amount")
    return int(value.quantize(_ONE, rounding=ROUND_HALF_UP))


def multiply_cents(amount_cents: int, factor: int | Decimal | Fraction | str) -> int:
    """
    Multiply a cent amount by a factor and round half-up to whole cents.

    Preconditions:
        - ``amount_cents`` is an ``int``.
        - ``factor`` is an exact numeric (no floats).

    Example:
        multiply_cents(16667, Decimal("2.5"))  # 41668
    """
    if isinstance(amount_cents, bool) or not isinstance(amount_cents, int):
        raise TypeError(f"amount_cents must be int, got {type(amount_cents).__name__}")
    return round_half_up_cents(Decimal(amount_cents) * _as_decimal(factor, "factor"))


def pay_for_seconds(
    rate_cents_per_hour: int,
    seconds: int,
    multiplier: Decimal | int = 1,
) -> int:
    """
    Pay for ``seconds`` of work at an hourly cent rate, rounded half-up.

    The product is formed from integers before dividing by 3600, so the
    half-cent boundary is decided on the exact value.
    """
    if isinstance(rate_cents_per_hour, bool) or not isinstance(rate_cents_per_hour, int):
        raise TypeError("rate_cents_per_hour must be int")
    numerator = Decimal(rate_cents_per_hour * seconds) * _as_decimal(multiplier, "multiplier")
    return round_half_up_cents(numerator / SECONDS_PER_HOUR)


def hours_from_seconds(seconds: int) -> Decimal:
    """Express a whole number of seconds as hours, quantized to 0.0001."""
    return (Decimal(seconds) / SECONDS_PER_HOUR).quantize(
        HOURS_QUANTUM, rounding=ROUND_HALF_UP
    )


def seconds_from_hours(hours: Decimal | int) -> int:
    """Convert a whole or decimal hour count into whole seconds (half-up)."""
    return round_half_up_cents(_as_decimal(hours, "hours") * SECONDS_PER_HOUR)


def divide_cents(amount_cents: int, divisor: int | Decimal | str) -> int:
    """Divide a cent amount by a positive divisor, rounding half-up."""
    d = _as_decimal(divisor, "divisor")
    if d <= 0:
        raise ValueError(f"divisor must be positive, got {d}")
    return round_half_up_cents(Decimal(amount_cents) / d)
