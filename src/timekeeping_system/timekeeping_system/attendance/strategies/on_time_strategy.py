from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus, WorkType
from .base import AttendanceStrategy, StatusDecision


class OnTimeStrategy(AttendanceStrategy):
    """Check-in within tolerance, or no check-in to judge."""

    def decide(self, *, check_in_at: Optional[datetime], work_type: WorkType) -> StatusDecision:
        if check_in_at is not None and work_type == WorkType.REMOTE:
            return StatusDecision(status=AttendanceStatus.REMOTE)
        return StatusDecision(status=AttendanceStatus.PRESENT)
