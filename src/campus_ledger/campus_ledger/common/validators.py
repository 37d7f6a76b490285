from __future__ import annotations

from decimal import Decimal
from typing import Optional

from ..core.exceptions import ValidationError
from .money import quantize


def require_non_empty(value: Optional[str], field_name: str) -> str:
    text = "" if value is None else str(value).strip()
    if not text:
        raise ValidationError(f"{field_name} is required")
    return text


def require_positive_amount(value, field_name: str) -> Decimal:
    """Round to cents; anything that rounds to 0.00 or below is rejected."""
    amount = quantize(value)
    if amount <= 0:
        raise ValidationError(f"{field_name} must be greater than zero")
    return amount


def require_hour(value, field_name: str) -> int:
    try:
        hour = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an hour between 0 and 23")
    if not 0 <= hour <= 23:
        raise ValidationError(f"{field_name} must be an hour between 0 and 23")
    return hour
