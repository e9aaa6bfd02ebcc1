from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Iterable, Mapping, Optional, Sequence

from ..common.datetime_utils import iter_days
from ..core.enums import AttendanceStatus, CalendarSignal, HrStatus, WorkModel
from ..policies.model import PolicyTimings, WeekSchedule
from ..policies.resolver import PolicyResolver
from .classifier import AttendanceClassifier
from .model import AttendanceRecord

HR_STATUS_BY_ATTENDANCE: dict[AttendanceStatus, HrStatus] = {
    AttendanceStatus.PRESENT: HrStatus.ON_TIME,
    AttendanceStatus.LATE: HrStatus.LATE,
    AttendanceStatus.HALF_DAY: HrStatus.ON_LEAVE,
    AttendanceStatus.ABSENT: HrStatus.ABSENT,
    AttendanceStatus.REMOTE: HrStatus.ON_TIME,
    AttendanceStatus.HOLIDAY: HrStatus.ON_LEAVE,
}

# Highest precedence first.
SIGNAL_PRECEDENCE: tuple[tuple[HrStatus, CalendarSignal], ...] = (
    (HrStatus.ABSENT, CalendarSignal.ABSENT),
    (HrStatus.LATE, CalendarSignal.LATE),
    (HrStatus.ON_LEAVE, CalendarSignal.LEAVE),
    (HrStatus.ON_TIME, CalendarSignal.ONTIME),
)

WORKED_STATUSES = frozenset(
    {AttendanceStatus.PRESENT, AttendanceStatus.LATE, AttendanceStatus.HALF_DAY, AttendanceStatus.REMOTE}
)
ON_TIME_STATUSES = frozenset({AttendanceStatus.PRESENT, AttendanceStatus.REMOTE})


def to_hr_status(status: AttendanceStatus) -> HrStatus:
    return HR_STATUS_BY_ATTENDANCE.get(status, HrStatus.ON_TIME)


def minutes_to_label(minutes: Optional[float]) -> Optional[str]:
    """Minutes after midnight -> "09:05 AM"."""
    if minutes is None:
        return None
    normalized = round(minutes) % (24 * 60)
    hours, mins = divmod(normalized, 60)
    period = "PM" if hours >= 12 else "AM"
    display = hours % 12 or 12
    return f"{display:02d}:{mins:02d} {period}"


@dataclass(frozen=True)
class EmployeeContext:
    """Per-employee inputs for policy-aware status evaluation."""

    zone: Optional[str] = None
    work_model: Optional[WorkModel] = None


@dataclass(frozen=True)
class CalendarDay:
    date: date
    signal: CalendarSignal

    def to_dict(self) -> dict:
        return {"date": self.date.isoformat(), "signal": self.signal.value}


@dataclass(frozen=True)
class TrendPoint:
    date: date
    label: str
    present_count: int
    present_percentage: int

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "label": self.label,
            "present_count": self.present_count,
            "present_percentage": self.present_percentage,
        }


@dataclass(frozen=True)
class PersonalTrendPoint:
    date: date
    status: AttendanceStatus
    worked_seconds: int
    check_in_at: Optional[datetime]
    check_out_at: Optional[datetime]
    is_working_day: bool

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "status": self.status.value,
            "worked_seconds": self.worked_seconds,
            "check_in_at": self.check_in_at.isoformat() if self.check_in_at else None,
            "check_out_at": self.check_out_at.isoformat() if self.check_out_at else None,
            "is_working_day": self.is_working_day,
        }


@dataclass(frozen=True)
class MonthlySummary:
    total_records: int
    days_worked: int
    on_time_count: int
    status_counts: dict[AttendanceStatus, int] = field(default_factory=dict)
    average_check_in_minutes: Optional[float] = None
    average_work_seconds: Optional[int] = None
    total_work_seconds: int = 0

    @property
    def on_time_percentage(self) -> float:
        if not self.total_records:
            return 0.0
        return round(self.on_time_count / self.total_records * 100, 1)

    def to_dict(self) -> dict:
        return {
            "total_records": self.total_records,
            "days_worked": self.days_worked,
            "on_time_count": self.on_time_count,
            "on_time_percentage": self.on_time_percentage,
            "status_counts": {s.value: n for s, n in self.status_counts.items()},
            "average_check_in_minutes": self.average_check_in_minutes,
            "average_check_in": minutes_to_label(self.average_check_in_minutes),
            "average_work_seconds": self.average_work_seconds,
            "hours_logged": round(self.total_work_seconds / 3600, 1),
        }


def empty_histogram() -> dict[HrStatus, int]:
    return {status: 0 for status in HrStatus}


class AttendanceAggregator:
    """Fold classified records into histograms, calendars and trends."""

    def __init__(self, classifier: AttendanceClassifier, policy_resolver: PolicyResolver | None = None):
        self._classifier = classifier
        self._policies = policy_resolver or PolicyResolver()

    def hr_status(
        self,
        record: AttendanceRecord,
        timings: Optional[PolicyTimings],
        zone: Optional[str],
        employees: Optional[Mapping[str, EmployeeContext]] = None,
    ) -> HrStatus:
        ctx = (employees or {}).get(record.employee_id)
        record_zone = ctx.zone if ctx and ctx.zone else zone
        work_model = ctx.work_model if ctx else None
        return to_hr_status(self._classifier.effective_status(record, timings, record_zone, work_model))

    def status_histogram(
        self,
        records: Iterable[AttendanceRecord],
        timings: Optional[PolicyTimings] = None,
        zone: Optional[str] = None,
        employees: Optional[Mapping[str, EmployeeContext]] = None,
    ) -> dict[HrStatus, int]:
        counts = empty_histogram()
        for record in records:
            counts[self.hr_status(record, timings, zone, employees)] += 1
        return counts

    @staticmethod
    def determine_signal(statuses: set[HrStatus]) -> CalendarSignal:
        for status, signal in SIGNAL_PRECEDENCE:
            if status in statuses:
                return signal
        return CalendarSignal.NONE

    def build_calendar(
        self,
        month_start: date,
        month_end: date,
        records: Iterable[AttendanceRecord],
        timings: Optional[PolicyTimings],
        zone: Optional[str],
        employees: Optional[Mapping[str, EmployeeContext]] = None,
    ) -> list[CalendarDay]:
        statuses_by_date: dict[date, set[HrStatus]] = defaultdict(set)
        for record in records:
            statuses_by_date[record.attendance_date].add(self.hr_status(record, timings, zone, employees))

        return [
            CalendarDay(date=day, signal=self.determine_signal(statuses_by_date.get(day, set())))
            for day in iter_days(month_start, month_end)
        ]

    def build_weekly_trend(
        self,
        window_start: date,
        days: int,
        records: Iterable[AttendanceRecord],
        total_employees: int,
        timings: Optional[PolicyTimings],
        zone: Optional[str],
        employees: Optional[Mapping[str, EmployeeContext]] = None,
    ) -> list[TrendPoint]:
        present_by_date: dict[date, int] = defaultdict(int)
        for record in records:
            if self.hr_status(record, timings, zone, employees) == HrStatus.ON_TIME:
                present_by_date[record.attendance_date] += 1

        points: list[TrendPoint] = []
        for offset in range(int(days)):
            day = window_start + timedelta(days=offset)
            present = present_by_date.get(day, 0)
            percentage = round(present / total_employees * 100) if total_employees > 0 else 0
            points.append(
                TrendPoint(date=day, label=day.strftime("%a"), present_count=present, present_percentage=percentage)
            )
        return points

    def monthly_summary(
        self,
        records: Iterable[AttendanceRecord],
        month_start: date,
        zone: Optional[str] = None,
    ) -> MonthlySummary:
        total = worked_days = on_time = 0
        status_counts = {status: 0 for status in AttendanceStatus}
        work_total = work_samples = 0
        check_in_total = check_in_samples = 0

        for record in records:
            if record.attendance_date < month_start:
                continue

            total += 1
            status_counts[record.status] += 1
            if record.status in WORKED_STATUSES:
                worked_days += 1
            if record.status in ON_TIME_STATUSES:
                on_time += 1
            if record.total_work_seconds is not None:
                work_total += record.total_work_seconds
                work_samples += 1
            if record.check_in_at is not None:
                check_in_total += self._classifier.projector.local_minutes(record.check_in_at, zone)
                check_in_samples += 1

        return MonthlySummary(
            total_records=total,
            days_worked=worked_days,
            on_time_count=on_time,
            status_counts=status_counts,
            average_check_in_minutes=check_in_total / check_in_samples if check_in_samples else None,
            average_work_seconds=round(work_total / work_samples) if work_samples else None,
            total_work_seconds=work_total,
        )

    def build_attendance_trend(
        self,
        window_start: date,
        days: int,
        records: Sequence[AttendanceRecord],
        schedule: WeekSchedule,
    ) -> list[PersonalTrendPoint]:
        """One employee's daily series; days without a record read as ABSENT."""
        by_date = {r.attendance_date: r for r in records}
        points: list[PersonalTrendPoint] = []
        for offset in range(int(days)):
            day = window_start + timedelta(days=offset)
            record = by_date.get(day)
            points.append(
                PersonalTrendPoint(
                    date=day,
                    status=record.status if record else AttendanceStatus.ABSENT,
                    worked_seconds=(record.total_work_seconds or 0) if record else 0,
                    check_in_at=record.check_in_at if record else None,
                    check_out_at=record.check_out_at if record else None,
                    is_working_day=self._policies.is_working_day(schedule, day),
                )
            )
        return points
