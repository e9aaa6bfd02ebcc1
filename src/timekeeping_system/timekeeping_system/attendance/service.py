from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from functools import wraps
from typing import Optional, Sequence

from ..common.datetime_utils import month_range, now_utc
from ..common.validators import require_month, require_non_empty
from ..core.constants import DEFAULT_DASHBOARD_TREND_DAYS, DEFAULT_OVERVIEW_TREND_DAYS
from ..core.enums import AttendanceStatus, HrStatus, WorkModel, WorkType
from ..core.exceptions import ConflictError, DomainError, InternalError, NotFoundError, ValidationError
from ..core.logging import get_logger
from ..directory.model import EmployeeProfile
from ..directory.repository import DirectoryRepository
from ..policies.model import PolicyTimings, WeekSchedule
from ..policies.repository import PolicyRepository
from ..policies.resolver import PolicyResolver
from ..timezones.resolver import TimeZoneResolver
from .aggregator import (
    AttendanceAggregator,
    CalendarDay,
    EmployeeContext,
    MonthlySummary,
    PersonalTrendPoint,
    TrendPoint,
)
from .classifier import AttendanceClassifier
from .model import AttendanceRecord
from .repository import AttendanceRepository

logger = get_logger("TimekeepingService")


@dataclass(frozen=True)
class AttendanceLog:
    record_id: Optional[int]
    employee_id: str
    name: str
    department: Optional[str]
    check_in: str
    check_out: str
    status: HrStatus
    source: str

    def to_dict(self) -> dict:
        return {
            "id": self.record_id,
            "employee_id": self.employee_id,
            "name": self.name,
            "department": self.department,
            "check_in": self.check_in,
            "check_out": self.check_out,
            "status": self.status.value,
            "source": self.source,
        }


@dataclass(frozen=True)
class HistoryRow:
    date: str
    check_in: str
    check_out: str
    status: str
    source: str

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "check_in": self.check_in,
            "check_out": self.check_out,
            "status": self.status,
            "source": self.source,
        }


@dataclass(frozen=True)
class EmployeeHistory:
    employee_id: str
    month: int
    year: int
    rows: list[HistoryRow]
    week_schedule: Optional[WeekSchedule] = None

    def to_dict(self) -> dict:
        return {
            "employee_id": self.employee_id,
            "month": self.month,
            "year": self.year,
            "rows": [r.to_dict() for r in self.rows],
            "week_schedule": self.week_schedule.to_dict() if self.week_schedule else None,
        }


@dataclass(frozen=True)
class DayOverview:
    date: date
    logs: list[AttendanceLog]
    status_counts: dict[HrStatus, int]
    calendar: list[CalendarDay]
    weekly_trend: list[TrendPoint]

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "logs": [log.to_dict() for log in self.logs],
            "status_counts": {s.value: n for s, n in self.status_counts.items()},
            "calendar": [d.to_dict() for d in self.calendar],
            "weekly_trend": [p.to_dict() for p in self.weekly_trend],
        }


@dataclass(frozen=True)
class TodayStatus:
    record: Optional[AttendanceRecord]
    work_model: Optional[WorkModel]

    def to_dict(self) -> dict:
        return {
            "record": self.record.to_dict() if self.record else None,
            "work_model": self.work_model.value if self.work_model else None,
        }


@dataclass(frozen=True)
class DashboardSummary:
    month_start: date
    summary: MonthlySummary
    trend: list[PersonalTrendPoint] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "month_start": self.month_start.isoformat(),
            "summary": self.summary.to_dict(),
            "trend": [p.to_dict() for p in self.trend],
        }


def error_boundary(method):
    """Pass domain errors through; log anything else and hide it."""

    @wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except DomainError:
            raise
        except Exception as e:
            logger.exception("Unexpected failure in %s", method.__name__)
            raise InternalError() from e

    return wrapper


def _source_label(record: AttendanceRecord) -> str:
    return "Manual" if record.is_manual else "System"


def _as_work_type(value) -> WorkType:
    try:
        return value if isinstance(value, WorkType) else WorkType(str(value).strip().upper())
    except ValueError:
        raise ValidationError("Work type must be ONSITE or REMOTE.")


class TimekeepingService:
    """Single entry point for the employee, HR console and dashboard callers.

    The only component that reads or writes the stores.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        directory: DirectoryRepository,
        policies: PolicyRepository,
        *,
        zone_resolver: TimeZoneResolver,
        classifier: AttendanceClassifier,
        aggregator: AttendanceAggregator,
        policy_resolver: PolicyResolver | None = None,
        default_timezone: Optional[str] = None,
    ):
        self._attendance = attendance
        self._directory = directory
        self._policies = policies
        self._zones = zone_resolver
        self._classifier = classifier
        self._aggregator = aggregator
        self._policy_resolver = policy_resolver or PolicyResolver()
        self._default_timezone = default_timezone

    # ---- lookups -------------------------------------------------------

    def _get_employee(self, employee_id: str, organization_id: Optional[str] = None) -> EmployeeProfile:
        employee = self._directory.get_employee(require_non_empty(employee_id, "Employee"))
        if not employee or (organization_id is not None and employee.organization_id != organization_id):
            raise NotFoundError("Employee not found.")
        return employee

    def _organization_zone(self, organization_id: str) -> Optional[str]:
        org = self._directory.get_organization(organization_id)
        candidate = (org.timezone if org else None) or self._default_timezone
        return self._zones.canonical_zone(candidate)

    def _employee_zone(self, employee: EmployeeProfile) -> Optional[str]:
        return self._zones.resolve_for_employee(
            employee.primary_location,
            self._organization_zone(employee.organization_id),
        )

    def _timings(self, organization_id: str) -> PolicyTimings:
        return self._policy_resolver.resolve_timings(self._policies.get_for_organization(organization_id))

    def _week_schedule(self, organization_id: str) -> WeekSchedule:
        return self._policy_resolver.resolve_week_schedule(self._policies.get_for_organization(organization_id))

    def _month_or_current(
        self, month: Optional[int], year: Optional[int], zone: Optional[str], now: Optional[datetime]
    ) -> tuple[int, int]:
        """Fill a missing month or year from today's date in ``zone``."""
        if month is None or year is None:
            today = self._classifier.projector.local_date(now or now_utc(), zone)
            month = today.month if month is None else month
            year = today.year if year is None else year
        return require_month(month, year)

    def _profiles(self, records: Sequence[AttendanceRecord]) -> dict[str, EmployeeProfile]:
        ids = sorted({r.employee_id for r in records})
        return {e.employee_id: e for e in self._directory.list_employees(ids)} if ids else {}

    def _contexts(self, profiles: dict[str, EmployeeProfile]) -> dict[str, EmployeeContext]:
        zones_by_org: dict[str, Optional[str]] = {}
        contexts: dict[str, EmployeeContext] = {}
        for employee_id, e in profiles.items():
            if e.organization_id not in zones_by_org:
                zones_by_org[e.organization_id] = self._organization_zone(e.organization_id)
            zone = self._zones.resolve_for_employee(e.primary_location, zones_by_org[e.organization_id])
            contexts[employee_id] = EmployeeContext(zone=zone, work_model=e.work_model)
        return contexts

    # ---- employee self-service ------------------------------------------

    @error_boundary
    def check_in(self, employee_id: str, work_type, *, now: datetime | None = None) -> AttendanceRecord:
        now = now or now_utc()
        work_type = _as_work_type(work_type)
        employee = self._get_employee(employee_id)
        zone = self._employee_zone(employee)

        record = self._classifier.open_record(
            employee_id=employee.employee_id,
            check_in_at=now,
            work_type=work_type,
            timings=self._timings(employee.organization_id),
            zone=zone,
        )

        if self._attendance.find_by_employee_and_date(employee.employee_id, record.attendance_date):
            raise ConflictError(
                "Attendance has already been recorded for today. Please contact HR if you need to make a change."
            )

        stored = self._attendance.insert(record)
        logger.info(
            "Check-in employee=%s date=%s type=%s status=%s zone=%s",
            employee.employee_id,
            stored.attendance_date,
            work_type.value,
            stored.status.value,
            zone or "host-local",
        )
        return stored

    @error_boundary
    def check_out(
        self,
        employee_id: str,
        worked_seconds: int,
        break_seconds: Optional[int] = None,
        *,
        now: datetime | None = None,
    ) -> AttendanceRecord:
        now = now or now_utc()
        try:
            worked = int(worked_seconds)
            breaks = int(break_seconds) if break_seconds is not None else None
        except (TypeError, ValueError):
            raise ValidationError("Worked and break durations must be whole seconds.")

        active = self._attendance.find_open_for_employee(require_non_empty(employee_id, "Employee"))
        closed = self._classifier.close_record(active, check_out_at=now, worked_seconds=worked, break_seconds=breaks)

        updated = self._attendance.update_checkout(
            record_id=closed.record_id,
            check_out_at=closed.check_out_at,
            total_work_seconds=closed.total_work_seconds,
            total_break_seconds=closed.total_break_seconds,
        )
        if not updated:
            raise NotFoundError("No active attendance record found for completion.")

        logger.info(
            "Check-out employee=%s date=%s worked=%ss break=%ss",
            closed.employee_id,
            closed.attendance_date,
            closed.total_work_seconds,
            closed.total_break_seconds,
        )
        return closed

    @error_boundary
    def today(self, employee_id: str, *, now: datetime | None = None) -> TodayStatus:
        now = now or now_utc()
        employee = self._get_employee(employee_id)
        local_day = self._classifier.projector.local_date(now, self._employee_zone(employee))
        record = self._attendance.find_by_employee_and_date(employee.employee_id, local_day)
        return TodayStatus(record=record, work_model=employee.work_model)

    @error_boundary
    def history(
        self,
        employee_id: str,
        month: Optional[int] = None,
        year: Optional[int] = None,
        *,
        now: datetime | None = None,
    ) -> EmployeeHistory:
        employee = self._get_employee(employee_id)
        zone = self._employee_zone(employee)
        month, year = self._month_or_current(month, year, zone, now)
        start, end = month_range(year, month)

        records = sorted(
            self._attendance.find_range(start=start, end=end, employee_id=employee.employee_id),
            key=lambda r: r.attendance_date,
            reverse=True,
        )
        projector = self._classifier.projector
        rows = [
            HistoryRow(
                date=r.attendance_date.isoformat(),
                check_in=projector.format_time(r.check_in_at, zone),
                check_out=projector.format_time(r.check_out_at, zone),
                status=r.status.value,
                source=_source_label(r),
            )
            for r in records
        ]
        return EmployeeHistory(
            employee_id=employee.employee_id,
            month=month,
            year=year,
            rows=rows,
            week_schedule=self._week_schedule(employee.organization_id),
        )

    @error_boundary
    def dashboard_summary(self, employee_id: str, *, now: datetime | None = None) -> DashboardSummary:
        now = now or now_utc()
        employee = self._get_employee(employee_id)
        zone = self._employee_zone(employee)
        today = self._classifier.projector.local_date(now, zone)

        month_start, month_end = month_range(today.year, today.month)
        trend_start = today - timedelta(days=DEFAULT_DASHBOARD_TREND_DAYS - 1)
        records = self._attendance.find_range(
            start=min(month_start, trend_start),
            end=max(month_end, today + timedelta(days=1)),
            employee_id=employee.employee_id,
        )

        summary = self._aggregator.monthly_summary(
            [r for r in records if r.attendance_date < month_end], month_start, zone
        )
        trend = self._aggregator.build_attendance_trend(
            trend_start,
            DEFAULT_DASHBOARD_TREND_DAYS,
            records,
            self._week_schedule(employee.organization_id),
        )
        return DashboardSummary(month_start=month_start, summary=summary, trend=trend)

    # ---- HR console --------------------------------------------------------

    @error_boundary
    def manual_entry(
        self,
        organization_id: str,
        employee_id: str,
        attendance_date: date,
        check_in: Optional[str] = None,
        check_out: Optional[str] = None,
        work_type=WorkType.ONSITE,
        explicit_status: Optional[AttendanceStatus] = None,
        note: Optional[str] = None,
    ) -> AttendanceRecord:
        work_type = _as_work_type(work_type)
        if explicit_status is not None and not isinstance(explicit_status, AttendanceStatus):
            try:
                explicit_status = AttendanceStatus(str(explicit_status).strip().upper())
            except ValueError:
                raise ValidationError("Unknown attendance status.")

        employee = self._get_employee(employee_id, organization_id)
        zone = self._employee_zone(employee)

        record = self._classifier.manual_record(
            employee_id=employee.employee_id,
            attendance_date=attendance_date,
            check_in=check_in,
            check_out=check_out,
            work_type=work_type,
            timings=self._timings(organization_id),
            zone=zone,
            explicit_status=explicit_status,
            note=(note or "").strip() or None,
        )
        stored = self._attendance.upsert(record)
        logger.info(
            "Manual entry employee=%s date=%s status=%s",
            stored.employee_id,
            stored.attendance_date,
            stored.status.value,
        )
        return stored

    @error_boundary
    def day_overview(
        self, organization_id: str, day: Optional[date] = None, *, now: datetime | None = None
    ) -> DayOverview:
        org_zone = self._organization_zone(organization_id)
        if day is None:
            day = self._classifier.projector.local_date(now or now_utc(), org_zone)
        timings = self._timings(organization_id)

        month_start, month_end = month_range(day.year, day.month)
        trend_start = day - timedelta(days=DEFAULT_OVERVIEW_TREND_DAYS - 1)
        day_end = day + timedelta(days=1)

        records = self._attendance.find_range(
            start=min(month_start, trend_start),
            end=max(month_end, day_end),
            organization_id=organization_id,
        )
        profiles = self._profiles(records)
        employees = self._contexts(profiles)

        month_records = [r for r in records if month_start <= r.attendance_date < month_end]
        trend_records = [r for r in records if trend_start <= r.attendance_date < day_end]
        day_records = [r for r in records if r.attendance_date == day]

        logs = [self._to_log(r, profiles.get(r.employee_id), timings, org_zone, employees) for r in day_records]
        logs.sort(key=lambda log: (log.name.lower(), log.employee_id))

        return DayOverview(
            date=day,
            logs=logs,
            status_counts=self._aggregator.status_histogram(day_records, timings, org_zone, employees),
            calendar=self._aggregator.build_calendar(month_start, month_end, month_records, timings, org_zone, employees),
            weekly_trend=self._aggregator.build_weekly_trend(
                trend_start,
                DEFAULT_OVERVIEW_TREND_DAYS,
                trend_records,
                self._directory.count_active_employees(organization_id),
                timings,
                org_zone,
                employees,
            ),
        )

    @error_boundary
    def hr_history(
        self,
        organization_id: str,
        employee_id: str,
        month: Optional[int] = None,
        year: Optional[int] = None,
        *,
        now: datetime | None = None,
    ) -> EmployeeHistory:
        employee = self._get_employee(employee_id, organization_id)
        zone = self._employee_zone(employee)
        month, year = self._month_or_current(month, year, zone, now)
        timings = self._timings(organization_id)
        start, end = month_range(year, month)

        records = sorted(
            self._attendance.find_range(start=start, end=end, employee_id=employee.employee_id),
            key=lambda r: r.attendance_date,
            reverse=True,
        )
        contexts = {employee.employee_id: EmployeeContext(zone=zone, work_model=employee.work_model)}
        projector = self._classifier.projector
        rows = [
            HistoryRow(
                date=r.attendance_date.isoformat(),
                check_in=projector.format_time(r.check_in_at, zone),
                check_out=projector.format_time(r.check_out_at, zone),
                status=self._aggregator.hr_status(r, timings, zone, contexts).value,
                source=_source_label(r),
            )
            for r in records
        ]
        return EmployeeHistory(employee_id=employee.employee_id, month=month, year=year, rows=rows)

    def _to_log(
        self,
        record: AttendanceRecord,
        employee: Optional[EmployeeProfile],
        timings: PolicyTimings,
        org_zone: Optional[str],
        employees: dict[str, EmployeeContext],
    ) -> AttendanceLog:
        ctx = employees.get(record.employee_id)
        zone = ctx.zone if ctx and ctx.zone else org_zone
        projector = self._classifier.projector
        return AttendanceLog(
            record_id=record.record_id,
            employee_id=record.employee_id,
            name=employee.display_name if employee else record.employee_id,
            department=employee.department if employee else None,
            check_in=projector.format_time(record.check_in_at, zone),
            check_out=projector.format_time(record.check_out_at, zone),
            status=self._aggregator.hr_status(record, timings, org_zone, employees),
            source=_source_label(record),
        )
