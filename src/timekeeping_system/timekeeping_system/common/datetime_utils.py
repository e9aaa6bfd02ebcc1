from __future__ import annotations

import re
from datetime import date, datetime, timedelta, timezone
from typing import Iterator, Optional

_WALL_CLOCK = re.compile(r"^\s*(\d{1,2}):(\d{2})(?::\d{2})?\s*$")


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_wall_clock(value: Optional[str]) -> Optional[tuple[int, int]]:
    """Parse "H:MM" / "HH:MM" (optional seconds) into (hour, minute).

    Returns None for empty, malformed or out-of-range values.
    """
    if not value:
        return None
    match = _WALL_CLOCK.match(str(value))
    if not match:
        return None
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        return None
    return hour, minute


def now_utc() -> datetime:
    """Current instant in UTC.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Normalize an instant to aware UTC; naive values are read as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def month_range(year: int, month: int) -> tuple[date, date]:
    """Return [first day of month, first day of next month)."""
    start = date(year, month, 1)
    end = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
    return start, end


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield each day in the half-open range [start, end)."""
    cursor = start
    while cursor < end:
        yield cursor
        cursor += timedelta(days=1)
