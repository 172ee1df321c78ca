"""Shared date and amount helpers for derivations and services."""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional

from dateutil import parser

from forklift_rental.config import CURRENCY_CODE
from forklift_rental.services.errors import ValidationError

DateLike = str | date | datetime


def to_datetime(value: DateLike, field: str) -> datetime:
    """Parse a date-like value into a naive datetime (dates map to midnight)."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return datetime.combine(value, time.min)
    elif isinstance(value, str) and value.strip():
        try:
            parsed = parser.isoparse(value.strip())
        except (ValueError, OverflowError) as exc:
            raise ValidationError(
                f"Invalid date for {field}: {value!r}.", field=field
            ) from exc
    else:
        raise ValidationError(f"Invalid date for {field}: {value!r}.", field=field)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def to_date(value: DateLike, field: str) -> date:
    """Parse a date-like value into a calendar date."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    return to_datetime(value, field).date()


def to_iso_date(value: DateLike, field: str) -> str:
    return to_date(value, field).isoformat()


def optional_iso_date(value: Optional[DateLike], field: str) -> Optional[str]:
    if value is None or value == "":
        return None
    return to_iso_date(value, field)


def today_iso() -> str:
    return date.today().isoformat()


def now_iso() -> str:
    return datetime.now().isoformat(timespec="seconds")


def to_decimal(value: object, field: str) -> Decimal:
    """Convert a numeric amount to Decimal, rejecting booleans and junk."""
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"Invalid amount for {field}: {value!r}.", field=field)
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError(
            f"Invalid amount for {field}: {value!r}.", field=field
        ) from exc
    if not amount.is_finite():
        raise ValidationError(f"Invalid amount for {field}: {value!r}.", field=field)
    return amount


def validate_amount(
    value: object, field: str, *, allow_none: bool = False
) -> Optional[float]:
    """Return a non-negative amount as float, or None when allowed."""
    if value is None and allow_none:
        return None
    amount = to_decimal(value, field)
    if amount < 0:
        raise ValidationError(f"{field} must not be negative.", field=field)
    return float(amount)


def round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_currency(value: float | int | Decimal) -> str:
    return f"{round_half_up(Decimal(str(value))):,} {CURRENCY_CODE}"
