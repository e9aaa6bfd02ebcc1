from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Optional

from ..common.datetime_utils import ensure_utc
from ..core.constants import LATE_TOLERANCE_MINUTES, MANUAL_SOURCE, MAX_DAILY_WORK_SECONDS, SYSTEM_SOURCE
from ..core.enums import AttendanceStatus, WorkModel, WorkType
from ..core.exceptions import NotFoundError, ValidationError
from ..policies.model import PolicyTimings
from ..policies.resolver import PolicyResolver
from ..timezones.projector import LocalTimeProjector
from .factory import EXPLICIT_STATUSES, AttendanceStrategyFactory
from .model import AttendanceRecord, ResolvedSchedule
from .strategies.base import StatusDecision


class AttendanceClassifier:
    """Turn attendance events into records with a classified status.

    Every path here is pure: callers load the policy, zone and existing
    record, and persist what comes back.
    """

    def __init__(
        self,
        projector: LocalTimeProjector,
        policy_resolver: PolicyResolver | None = None,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
        tolerance_minutes: int = LATE_TOLERANCE_MINUTES,
    ):
        self._projector = projector
        self._policies = policy_resolver or PolicyResolver()
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._tolerance = timedelta(minutes=int(tolerance_minutes))

    @property
    def projector(self) -> LocalTimeProjector:
        return self._projector

    def resolve_schedule(
        self,
        day: date,
        work_type: WorkType,
        timings: PolicyTimings,
        zone: Optional[str],
    ) -> ResolvedSchedule:
        hour, minute = self._policies.start_of_day(timings, work_type)
        scheduled_start = self._projector.project_to_instant(day, hour, minute, zone)
        return ResolvedSchedule(
            attendance_date=day,
            work_type=work_type,
            zone=zone,
            scheduled_start=scheduled_start,
            late_after=scheduled_start + self._tolerance,
        )

    def classify_check_in(
        self,
        *,
        check_in_at: Optional[datetime],
        attendance_date: date,
        work_type: WorkType,
        timings: PolicyTimings,
        zone: Optional[str],
    ) -> StatusDecision:
        schedule = None
        if check_in_at is not None:
            check_in_at = ensure_utc(check_in_at)
            schedule = self.resolve_schedule(attendance_date, work_type, timings, zone)
        strategy = self._factory.for_checkin(check_in_at=check_in_at, schedule=schedule)
        return strategy.decide(check_in_at=check_in_at, work_type=work_type)

    def open_record(
        self,
        *,
        employee_id: str,
        check_in_at: datetime,
        work_type: WorkType,
        timings: PolicyTimings,
        zone: Optional[str],
    ) -> AttendanceRecord:
        """Check-in event: implicit ABSENT -> PRESENT / LATE / REMOTE."""
        check_in_at = ensure_utc(check_in_at)
        attendance_date = self._projector.local_date(check_in_at, zone)
        decision = self.classify_check_in(
            check_in_at=check_in_at,
            attendance_date=attendance_date,
            work_type=work_type,
            timings=timings,
            zone=zone,
        )
        return AttendanceRecord(
            record_id=None,
            employee_id=employee_id,
            attendance_date=attendance_date,
            check_in_at=check_in_at,
            check_out_at=None,
            status=decision.status,
            total_work_seconds=None,
            total_break_seconds=None,
            source=SYSTEM_SOURCE,
            location=work_type.label,
            note=decision.note,
        )

    @staticmethod
    def close_record(
        record: Optional[AttendanceRecord],
        *,
        check_out_at: datetime,
        worked_seconds: int,
        break_seconds: Optional[int],
    ) -> AttendanceRecord:
        """Check-out event; the status set at check-in is kept."""
        if record is None or not record.is_open:
            raise NotFoundError("No active attendance record found for completion.")
        worked = max(0, min(int(worked_seconds), MAX_DAILY_WORK_SECONDS))
        return replace(
            record,
            check_out_at=ensure_utc(check_out_at),
            total_work_seconds=worked,
            total_break_seconds=int(break_seconds) if break_seconds is not None else None,
        )

    def manual_record(
        self,
        *,
        employee_id: str,
        attendance_date: date,
        check_in: Optional[str],
        check_out: Optional[str],
        work_type: WorkType,
        timings: PolicyTimings,
        zone: Optional[str],
        explicit_status: Optional[AttendanceStatus] = None,
        note: Optional[str] = None,
    ) -> AttendanceRecord:
        """HR manual entry parsed in the employee's zone."""
        check_in_at = self._projector.parse_wall_clock(check_in, attendance_date, zone)
        check_out_at = self._projector.parse_wall_clock(check_out, attendance_date, zone)
        if check_in and check_in_at is None:
            raise ValidationError("Check-in must be in 24h HH:MM format.")
        if check_out and check_out_at is None:
            raise ValidationError("Check-out must be in 24h HH:MM format.")
        if check_in_at and check_out_at and check_out_at < check_in_at:
            raise ValidationError("Check-out cannot be earlier than check-in.")

        if explicit_status is not None:
            if explicit_status not in EXPLICIT_STATUSES:
                raise ValidationError(f"Status {explicit_status.value} cannot be set manually.")
            strategy = self._factory.for_explicit(explicit_status)
            decision = strategy.decide(check_in_at=check_in_at, work_type=work_type)
        else:
            decision = self.classify_check_in(
                check_in_at=check_in_at,
                attendance_date=attendance_date,
                work_type=work_type,
                timings=timings,
                zone=zone,
            )

        total_work_seconds = None
        if check_in_at and check_out_at:
            total_work_seconds = int((check_out_at - check_in_at).total_seconds())

        return AttendanceRecord(
            record_id=None,
            employee_id=employee_id,
            attendance_date=attendance_date,
            check_in_at=check_in_at,
            check_out_at=check_out_at,
            status=decision.status,
            total_work_seconds=total_work_seconds,
            total_break_seconds=None,
            source=MANUAL_SOURCE,
            location=work_type.label,
            note=note or decision.note,
        )

    @staticmethod
    def infer_work_type(record: AttendanceRecord, work_model: Optional[WorkModel] = None) -> WorkType:
        """Work type of a stored record.

        Order: explicit REMOTE status, then a "remote" location label, then
        the employee's profile work model.
        """
        if record.status == AttendanceStatus.REMOTE:
            return WorkType.REMOTE
        if "remote" in (record.location or "").strip().lower():
            return WorkType.REMOTE
        if work_model == WorkModel.REMOTE:
            return WorkType.REMOTE
        return WorkType.ONSITE

    def effective_status(
        self,
        record: AttendanceRecord,
        timings: Optional[PolicyTimings],
        zone: Optional[str],
        work_model: Optional[WorkModel] = None,
    ) -> AttendanceStatus:
        """Stored status re-checked against the current policy for read views."""
        if timings is None or record.check_in_at is None:
            return record.status
        if record.status not in (AttendanceStatus.PRESENT, AttendanceStatus.REMOTE):
            return record.status

        work_type = self.infer_work_type(record, work_model)
        schedule = self.resolve_schedule(record.attendance_date, work_type, timings, zone)
        if schedule.is_late(ensure_utc(record.check_in_at)):
            return AttendanceStatus.LATE
        return record.status
