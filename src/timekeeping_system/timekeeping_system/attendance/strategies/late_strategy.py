from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus, WorkType
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Late check-in."""

    def decide(self, *, check_in_at: Optional[datetime], work_type: WorkType) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.LATE)
