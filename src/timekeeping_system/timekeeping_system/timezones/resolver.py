from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError, available_timezones

from ..core.logging import get_logger

logger = get_logger("TimeZoneResolver")

_ZONE_TOKEN = re.compile(r"([A-Za-z]+/[A-Za-z0-9_\-+]+(?:/[A-Za-z0-9_\-+]+)?)")


@dataclass
class ZoneCache:
    """Per-process cache of zone validity and zone objects.

    Entries are written once per key and never mutated afterwards, so a
    concurrent miss only recomputes the same value. ``zones`` is keyed by the
    canonical IANA name; ``canonical`` maps each accepted spelling to it.
    """

    validity: dict[str, bool] = field(default_factory=dict)
    zones: dict[str, ZoneInfo] = field(default_factory=dict)
    canonical: dict[str, str] = field(default_factory=dict)
    names_by_lower: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class LocationHint:
    """Keyword -> zone mapping applied to free-text locations."""

    pattern: re.Pattern
    zone: str

    @classmethod
    def keyword(cls, word: str, zone: str) -> "LocationHint":
        return cls(re.compile(rf"\b{re.escape(word)}\b", re.IGNORECASE), zone)

    def matches(self, text: str) -> bool:
        return bool(self.pattern.search(text))


DEFAULT_LOCATION_HINTS: tuple[LocationHint, ...] = (
    LocationHint.keyword("dhaka", "Asia/Dhaka"),
    LocationHint.keyword("singapore", "Asia/Singapore"),
    LocationHint.keyword("tokyo", "Asia/Tokyo"),
    LocationHint.keyword("seoul", "Asia/Seoul"),
    LocationHint.keyword("kolkata", "Asia/Kolkata"),
    LocationHint.keyword("bangalore", "Asia/Kolkata"),
    LocationHint.keyword("mumbai", "Asia/Kolkata"),
    LocationHint.keyword("delhi", "Asia/Kolkata"),
    LocationHint.keyword("dubai", "Asia/Dubai"),
    LocationHint.keyword("doha", "Asia/Qatar"),
    LocationHint.keyword("london", "Europe/London"),
    LocationHint.keyword("berlin", "Europe/Berlin"),
    LocationHint.keyword("paris", "Europe/Paris"),
    LocationHint.keyword("toronto", "America/Toronto"),
    LocationHint.keyword("new york", "America/New_York"),
    LocationHint.keyword("san francisco", "America/Los_Angeles"),
    LocationHint.keyword("los angeles", "America/Los_Angeles"),
    LocationHint.keyword("austin", "America/Chicago"),
    LocationHint.keyword("sydney", "Australia/Sydney"),
    LocationHint.keyword("melbourne", "Australia/Melbourne"),
    LocationHint.keyword("brisbane", "Australia/Brisbane"),
)


class TimeZoneResolver:
    """Validate IANA zone names and infer a zone from location text."""

    def __init__(self, cache: ZoneCache | None = None, hints: tuple[LocationHint, ...] | list[LocationHint] | None = None):
        self._cache = cache if cache is not None else ZoneCache()
        self._hints: list[LocationHint] = list(DEFAULT_LOCATION_HINTS if hints is None else hints)

    def add_hint(self, hint: LocationHint) -> None:
        """Append a hint; earlier hints keep priority."""
        self._hints.append(hint)

    def _lookup_name(self, candidate: str) -> str:
        """Canonical spelling of ``candidate`` when the zone database knows it in any case."""
        if not self._cache.names_by_lower:
            names = {name.lower(): name for name in available_timezones()}
            self._cache.names_by_lower.update(names)
        return self._cache.names_by_lower.get(candidate.lower(), candidate)

    def is_valid_zone(self, candidate: Optional[str]) -> bool:
        if not candidate:
            return False
        cached = self._cache.validity.get(candidate)
        if cached is not None:
            return cached

        name = self._lookup_name(candidate)
        try:
            zone = ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError, OSError):
            logger.debug("Rejected time zone %r", candidate)
            self._cache.validity[candidate] = False
            return False

        self._cache.zones.setdefault(name, zone)
        self._cache.canonical[candidate] = name
        self._cache.validity[candidate] = True
        return True

    def canonical_zone(self, candidate: Optional[str]) -> Optional[str]:
        """IANA name for ``candidate`` (e.g. "europe/madrid" -> "Europe/Madrid"), or None."""
        if not self.is_valid_zone(candidate):
            return None
        return self._cache.canonical.get(candidate) or self._lookup_name(candidate)

    def get_zone(self, name: Optional[str]) -> Optional[ZoneInfo]:
        canonical = self.canonical_zone(name)
        if canonical is None:
            return None
        zone = self._cache.zones.get(canonical)
        if zone is None:
            zone = self._cache.zones.setdefault(canonical, ZoneInfo(canonical))
        return zone

    def extract_zone_token(self, text: Optional[str]) -> Optional[str]:
        if not isinstance(text, str):
            return None
        trimmed = text.strip()
        if not trimmed:
            return None

        if self.is_valid_zone(trimmed):
            return self.canonical_zone(trimmed)

        match = _ZONE_TOKEN.search(trimmed)
        if match and self.is_valid_zone(match.group(1)):
            return self.canonical_zone(match.group(1))

        for hint in self._hints:
            if hint.matches(trimmed):
                return hint.zone
        return None

    def resolve_for_employee(self, primary_location: Optional[str], organization_zone: Optional[str]) -> Optional[str]:
        extracted = self.extract_zone_token(primary_location)
        if extracted:
            return extracted

        fallback = organization_zone.strip() if organization_zone else None
        if self.is_valid_zone(fallback):
            return self.canonical_zone(fallback)

        if primary_location or organization_zone:
            logger.debug(
                "No time zone for location=%r org_zone=%r; using host-local time",
                primary_location,
                organization_zone,
            )
        return None
