"""Validation helpers shared across expense dashboard services."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from .exceptions import ValidationError
from .models import MAX_AMOUNT_EXPONENT, parse_calendar_date

CATEGORY_MAX_LENGTH = 50
COMMENT_MAX_LENGTH = 200


def _quantize_two_decimals(amount: Decimal) -> Decimal:
    """Round the amount to two decimal places using HALF_UP rounding."""
    return amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def parse_amount(raw: object, field: str) -> Decimal:
    """Convert raw input to a finite, non-negative Decimal with two fraction digits."""
    if raw is None or isinstance(raw, bool):
        raise ValidationError(f"{field} must be a numeric value")
    try:
        amount = Decimal(str(raw).strip())
    except (InvalidOperation, TypeError) as exc:  # type: ignore[arg-type]
        raise ValidationError(f"{field} must be a numeric value") from exc

    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    if amount < 0:
        raise ValidationError(f"{field} must not be negative")

    try:
        amount = _quantize_two_decimals(amount)
    except InvalidOperation as exc:
        raise ValidationError(f"{field} is too large") from exc
    if amount and amount.adjusted() > MAX_AMOUNT_EXPONENT:
        raise ValidationError(f"{field} is too large")
    return amount


def validate_date(value: object, field: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} must be a date in YYYY-MM-DD format")
    try:
        return parse_calendar_date(value)
    except ValueError as exc:
        raise ValidationError(f"{field} must be a valid calendar date (YYYY-MM-DD)") from exc


def validate_required_str(value: object, field: str, max_length: int) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    trimmed = value.strip()
    if not trimmed:
        raise ValidationError(f"{field} cannot be empty")
    if len(trimmed) > max_length:
        raise ValidationError(f"{field} must be at most {max_length} characters")
    return trimmed


def normalize_comment(value: object, max_length: int = COMMENT_MAX_LENGTH) -> str:
    """Trim surrounding whitespace; case and inner spacing are kept as typed."""
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError("comment must be a string")
    trimmed = value.strip()
    if len(trimmed) > max_length:
        raise ValidationError(f"comment must be at most {max_length} characters")
    return trimmed
