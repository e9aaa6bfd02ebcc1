from __future__ import annotations

from datetime import date
from typing import Optional

from ..core.exceptions import ValidationError
from .datetime_utils import parse_iso_date, parse_wall_clock


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required.")
    return str(value).strip()


def require_wall_clock(value: Optional[str], field_name: str) -> Optional[str]:
    """Validate an optional "HH:MM" input; empty means not provided."""
    v = (value or "").strip()
    if not v:
        return None
    if parse_wall_clock(v) is None:
        raise ValidationError(f"{field_name} must be in 24h HH:MM format.")
    return v


def require_iso_date(value: Optional[str], field_name: str) -> date:
    v = require_non_empty(value, field_name)
    try:
        return parse_iso_date(v)
    except ValueError:
        raise ValidationError(f"{field_name} must be in YYYY-MM-DD format.")


def require_month(month: int, year: int) -> tuple[int, int]:
    try:
        month, year = int(month), int(year)
    except (TypeError, ValueError):
        raise ValidationError("Month and year must be whole numbers.")
    if not 1 <= month <= 12:
        raise ValidationError("Month must be between 1 and 12.")
    if not 1970 <= year <= 9999:
        raise ValidationError("Year is out of range.")
    return month, year
