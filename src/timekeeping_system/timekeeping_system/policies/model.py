from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..core.enums import Weekday


@dataclass(frozen=True)
class WorkPolicy:
    """Raw organization work policy as stored; any field may be missing."""

    organization_id: str
    onsite_start: Optional[str] = None
    onsite_end: Optional[str] = None
    remote_start: Optional[str] = None
    remote_end: Optional[str] = None
    working_days: list[str] = field(default_factory=list)
    weekend_days: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class PolicyTimings:
    onsite_start: str
    onsite_end: str
    remote_start: str
    remote_end: str


@dataclass(frozen=True)
class WeekSchedule:
    working_days: tuple[Weekday, ...]
    weekend_days: tuple[Weekday, ...]

    def to_dict(self) -> dict:
        return {
            "working_days": [d.value for d in self.working_days],
            "weekend_days": [d.value for d in self.weekend_days],
        }
