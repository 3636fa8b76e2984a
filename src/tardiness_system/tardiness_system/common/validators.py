from __future__ import annotations

from ..core.exceptions import ValidationError


def require_non_negative_int(value, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field_name} must be an integer")
    if value < 0:
        raise ValidationError(f"{field_name} must be >= 0")
    return value


def require_month(month: int, year: int) -> tuple[int, int]:
    if not 1 <= int(month) <= 12:
        raise ValidationError(f"Invalid month: {month}")
    if int(year) < 1:
        raise ValidationError(f"Invalid year: {year}")
    return int(month), int(year)
