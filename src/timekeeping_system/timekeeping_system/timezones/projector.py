from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

from ..common.datetime_utils import ensure_utc, parse_wall_clock
from ..core.constants import EMPTY_TIME_LABEL
from .resolver import TimeZoneResolver


class LocalTimeProjector:
    """Convert zone-local wall-clock times to UTC instants and back.

    Projection does not depend on the host's default zone when a zone is
    given. Without a usable zone the wall clock is read in host-local time,
    which is the documented degraded mode.
    """

    def __init__(self, resolver: TimeZoneResolver):
        self._resolver = resolver

    def offset_at(self, instant: datetime, zone: str) -> timedelta:
        """UTC offset of ``zone`` at ``instant``, measured from local fields."""
        tz = self._resolver.get_zone(zone)
        utc_instant = ensure_utc(instant)
        local_fields = utc_instant.astimezone(tz).replace(tzinfo=None)
        return local_fields - utc_instant.replace(tzinfo=None)

    def project_to_instant(self, day: date, hour: int, minute: int, zone: Optional[str]) -> datetime:
        if not self._resolver.is_valid_zone(zone):
            # Host-local wall clock, then normalized to UTC.
            return datetime.combine(day, time(hour, minute)).astimezone().astimezone(timezone.utc)

        base = datetime(day.year, day.month, day.day, hour, minute, tzinfo=timezone.utc)
        initial_offset = self.offset_at(base, zone)
        candidate = base - initial_offset
        verified_offset = self.offset_at(candidate, zone)
        if verified_offset != initial_offset:
            return base - verified_offset
        return candidate

    def parse_wall_clock(self, value: Optional[str], day: date, zone: Optional[str]) -> Optional[datetime]:
        parsed = parse_wall_clock(value)
        if parsed is None:
            return None
        hour, minute = parsed
        return self.project_to_instant(day, hour, minute, zone)

    def to_local(self, instant: datetime, zone: Optional[str]) -> datetime:
        tz = self._resolver.get_zone(zone)
        utc_instant = ensure_utc(instant)
        if tz is None:
            return utc_instant.astimezone()
        return utc_instant.astimezone(tz)

    def local_date(self, instant: datetime, zone: Optional[str]) -> date:
        return self.to_local(instant, zone).date()

    def local_minutes(self, instant: datetime, zone: Optional[str]) -> int:
        """Minutes after local midnight."""
        local = self.to_local(instant, zone)
        return local.hour * 60 + local.minute

    def format_time(self, instant: Optional[datetime], zone: Optional[str]) -> str:
        if instant is None:
            return EMPTY_TIME_LABEL
        return self.to_local(instant, zone).strftime("%H:%M")
