from __future__ import annotations

from typing import Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def optional_text(value: Optional[str]) -> Optional[str]:
    """Strip ``value``; blank strings become None."""
    if value is None:
        return None
    return value.strip() or None


def require_coordinate(value, field_name: str, *, limit: float) -> float:
    try:
        v = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")
    if not -limit <= v <= limit:
        raise ValidationError(f"{field_name} out of range")
    return v
