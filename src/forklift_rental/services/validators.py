"""Input coercion shared by the write services."""

from __future__ import annotations

from enum import Enum
from typing import Optional, Type, TypeVar

from forklift_rental.services.errors import ValidationError

E = TypeVar("E", bound=Enum)


def require_text(value: object, field: str) -> str:
    text = str(value).strip() if value is not None else ""
    if not text:
        raise ValidationError(f"{field} is required.", field=field)
    return text


def optional_text(value: object) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def coerce_enum(enum_cls: Type[E], value: object, field: str) -> E:
    try:
        return enum_cls(value)
    except ValueError as exc:
        raise ValidationError(f"Unknown {field}: {value!r}.", field=field) from exc
