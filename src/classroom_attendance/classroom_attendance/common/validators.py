from __future__ import annotations

from enum import Enum
from typing import Type, TypeVar

from ..core.exceptions import ValidationError

E = TypeVar("E", bound=Enum)


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_positive_int(value, field_name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is invalid") from None
    if number <= 0:
        raise ValidationError(f"{field_name} is invalid")
    return number


def require_choice(value, enum_cls: Type[E], field_name: str, *, allowed=None) -> E:
    """Coerce ``value`` into ``enum_cls``, optionally restricted to ``allowed``."""
    try:
        member = enum_cls(value)
    except ValueError:
        raise ValidationError(f"{field_name} is invalid") from None
    if allowed is not None and member not in allowed:
        raise ValidationError(f"{field_name} is invalid")
    return member


def require_json_object(data) -> dict:
    """Body of a JSON request: a missing or unparsable body counts as empty."""
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data
