from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus, WorkType
from .base import AttendanceStrategy, StatusDecision


class ExplicitStatusStrategy(AttendanceStrategy):
    """HR-supplied status (absence, holiday, half day); no time-based rule."""

    def __init__(self, status: AttendanceStatus):
        self._status = status

    def decide(self, *, check_in_at: Optional[datetime], work_type: WorkType) -> StatusDecision:
        return StatusDecision(status=self._status, note="Status set by HR")
