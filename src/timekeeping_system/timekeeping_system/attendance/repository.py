from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    """Attendance store keyed by the (employee_id, attendance_date) invariant."""

    def find_by_employee_and_date(self, employee_id: str, attendance_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def find_open_for_employee(self, employee_id: str) -> Optional[AttendanceRecord]:
        """Latest record with check-in set and check-out unset."""

        raise NotImplementedError

    def find_range(
        self,
        *,
        start: date,
        end: date,
        employee_id: Optional[str] = None,
        organization_id: Optional[str] = None,
    ) -> Sequence[AttendanceRecord]:
        """Records with start <= attendance_date < end."""

        raise NotImplementedError

    def insert(self, record: AttendanceRecord) -> AttendanceRecord:
        """Insert-or-fail: raises ConflictError if the day is already recorded."""

        raise NotImplementedError

    def upsert(self, record: AttendanceRecord) -> AttendanceRecord:
        raise NotImplementedError

    def update_checkout(
        self,
        *,
        record_id: int,
        check_out_at: datetime,
        total_work_seconds: int,
        total_break_seconds: Optional[int],
    ) -> bool:
        """Close an open record; returns False if it was already closed."""

        raise NotImplementedError
