from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.constants import SYSTEM_SOURCE
from ..core.enums import AttendanceStatus, WorkType


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one employee's attendance for one calendar day.

    Instants are aware UTC datetimes. ``record_id`` is None until stored.
    """

    record_id: Optional[int]
    employee_id: str
    attendance_date: date
    check_in_at: Optional[datetime]
    check_out_at: Optional[datetime]
    status: AttendanceStatus
    total_work_seconds: Optional[int] = None
    total_break_seconds: Optional[int] = None
    source: str = SYSTEM_SOURCE
    location: Optional[str] = None
    note: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.check_in_at is not None and self.check_out_at is None

    @property
    def is_manual(self) -> bool:
        return bool(self.source) and "manual" in self.source.lower()

    def to_dict(self) -> dict:
        return {
            "id": self.record_id,
            "employee_id": self.employee_id,
            "attendance_date": self.attendance_date.isoformat(),
            "check_in_at": self.check_in_at.isoformat() if self.check_in_at else None,
            "check_out_at": self.check_out_at.isoformat() if self.check_out_at else None,
            "status": self.status.value,
            "total_work_seconds": self.total_work_seconds,
            "total_break_seconds": self.total_break_seconds,
            "source": self.source,
            "location": self.location,
            "note": self.note,
        }


@dataclass(frozen=True)
class ResolvedSchedule:
    """Scheduled start derived from policy + work type + zone; never persisted."""

    attendance_date: date
    work_type: WorkType
    zone: Optional[str]
    scheduled_start: datetime
    late_after: datetime

    def is_late(self, check_in_at: datetime) -> bool:
        return check_in_at > self.late_after
