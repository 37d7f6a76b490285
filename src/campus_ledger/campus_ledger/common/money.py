from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(value) -> Decimal:
    """Convert a JSON/DB amount to Decimal; missing or malformed values become 0."""
    if isinstance(value, Decimal):
        return value if value.is_finite() else ZERO
    if isinstance(value, bool):
        return ZERO
    try:
        result = Decimal(str(value if value not in (None, "") else "0"))
    except (InvalidOperation, ValueError):
        return ZERO
    return result if result.is_finite() else ZERO


def quantize(value) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def percentage(part, whole) -> Decimal:
    whole = to_decimal(whole)
    if whole <= 0:
        return ZERO
    return quantize(to_decimal(part) / whole * 100)
