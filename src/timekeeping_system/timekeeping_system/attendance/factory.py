from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import AttendanceStatus
from .model import ResolvedSchedule
from .strategies.base import AttendanceStrategy
from .strategies.explicit_strategy import ExplicitStatusStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.on_time_strategy import OnTimeStrategy

EXPLICIT_STATUSES = frozenset({AttendanceStatus.ABSENT, AttendanceStatus.HOLIDAY, AttendanceStatus.HALF_DAY})


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_checkin(self, *, check_in_at: Optional[datetime], schedule: Optional[ResolvedSchedule]) -> AttendanceStrategy:
        if check_in_at is None or schedule is None:
            return OnTimeStrategy()
        if schedule.is_late(check_in_at):
            return LateStrategy()
        return OnTimeStrategy()

    def for_explicit(self, status: AttendanceStatus) -> AttendanceStrategy:
        return ExplicitStatusStrategy(status)
