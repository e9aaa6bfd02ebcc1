from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from src.timekeeping_system.timekeeping_system.attendance.model import AttendanceRecord
from src.timekeeping_system.timekeeping_system.attendance.service import TimekeepingService
from src.timekeeping_system.timekeeping_system.core.constants import MANUAL_SOURCE, MAX_DAILY_WORK_SECONDS
from src.timekeeping_system.timekeeping_system.core.enums import AttendanceStatus, HrStatus, WorkModel, WorkType
from src.timekeeping_system.timekeeping_system.core.exceptions import (
    ConflictError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from src.timekeeping_system.timekeeping_system.directory.model import EmployeeProfile, Organization
from src.timekeeping_system.timekeeping_system.policies.model import WorkPolicy

DAY = date(2025, 3, 4)  # Tuesday


def dhaka(hour: int, minute: int, day: date = DAY) -> datetime:
    """Dhaka wall clock (UTC+6) as a UTC instant."""
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=timezone.utc) - timedelta(hours=6)


def test_check_in_on_time(service, attendance):
    record = service.check_in("emp-1", WorkType.ONSITE, now=dhaka(9, 5))

    assert record.record_id is not None
    assert record.status == AttendanceStatus.PRESENT
    assert record.attendance_date == DAY
    assert attendance.find_by_employee_and_date("emp-1", DAY) == record


def test_check_in_late(service):
    record = service.check_in("emp-1", "ONSITE", now=dhaka(9, 11))

    assert record.status == AttendanceStatus.LATE


def test_remote_check_in_accepts_lowercase_work_type(service):
    record = service.check_in("emp-4", "remote", now=dhaka(8, 5))

    assert record.status == AttendanceStatus.REMOTE
    assert record.location == "Remote"


def test_second_check_in_same_day_is_rejected(service):
    service.check_in("emp-1", WorkType.ONSITE, now=dhaka(9, 0))

    with pytest.raises(ConflictError) as exc:
        service.check_in("emp-1", WorkType.REMOTE, now=dhaka(13, 0))
    assert exc.value.code == "CONFLICT"


def test_store_level_conflict_is_reported(service, attendance, monkeypatch):
    service.check_in("emp-1", WorkType.ONSITE, now=dhaka(9, 0))
    # Simulates a concurrent request that passed the read before this one wrote.
    monkeypatch.setattr(attendance, "find_by_employee_and_date", lambda *_: None)

    with pytest.raises(ConflictError):
        service.check_in("emp-1", WorkType.ONSITE, now=dhaka(9, 1))


def test_check_in_rejects_unknown_employee_and_work_type(service):
    with pytest.raises(NotFoundError):
        service.check_in("nobody", WorkType.ONSITE, now=dhaka(9, 0))
    with pytest.raises(ValidationError):
        service.check_in("emp-1", "HYBRID", now=dhaka(9, 0))
    with pytest.raises(ValidationError):
        service.check_in("", WorkType.ONSITE, now=dhaka(9, 0))


def test_default_timezone_applies_when_organization_has_none(service):
    # org-2 has no zone configured; the service default is UTC.
    on_time = service.check_in("emp-3", WorkType.ONSITE, now=datetime(2025, 3, 4, 9, 10, tzinfo=timezone.utc))
    late = service.check_in("emp-3", WorkType.ONSITE, now=datetime(2025, 3, 5, 9, 11, tzinfo=timezone.utc))

    assert on_time.status == AttendanceStatus.PRESENT
    assert late.status == AttendanceStatus.LATE


def test_stored_policy_drives_classification(service, policies):
    policies.save(WorkPolicy("org-1", onsite_start="10:00"))

    assert service.check_in("emp-1", WorkType.ONSITE, now=dhaka(10, 5)).status == AttendanceStatus.PRESENT
    assert service.check_in("emp-2", WorkType.ONSITE, now=dhaka(10, 11)).status == AttendanceStatus.LATE


def test_malformed_policy_does_not_block_check_in(service, policies):
    policies.save(WorkPolicy("org-1", onsite_start="garbage"))

    assert service.check_in("emp-1", WorkType.ONSITE, now=dhaka(9, 5)).status == AttendanceStatus.PRESENT


def test_check_out_closes_the_open_record(service, attendance):
    service.check_in("emp-1", WorkType.ONSITE, now=dhaka(9, 20))

    closed = service.check_out("emp-1", MAX_DAILY_WORK_SECONDS + 3600, 900, now=dhaka(18, 30))

    assert closed.status == AttendanceStatus.LATE
    assert closed.total_work_seconds == MAX_DAILY_WORK_SECONDS
    assert closed.total_break_seconds == 900
    stored = attendance.find_by_employee_and_date("emp-1", DAY)
    assert stored.check_out_at == dhaka(18, 30)
    assert not stored.is_open


def test_check_out_without_open_session(service):
    with pytest.raises(NotFoundError):
        service.check_out("emp-1", 3600, 0, now=dhaka(18, 0))

    service.check_in("emp-1", WorkType.ONSITE, now=dhaka(9, 0))
    service.check_out("emp-1", 3600, 0, now=dhaka(18, 0))
    with pytest.raises(NotFoundError):
        service.check_out("emp-1", 3600, 0, now=dhaka(18, 5))


def test_check_out_rejects_non_numeric_durations(service):
    service.check_in("emp-1", WorkType.ONSITE, now=dhaka(9, 0))

    with pytest.raises(ValidationError):
        service.check_out("emp-1", "eight hours", 0, now=dhaka(18, 0))


def test_unexpected_failures_become_internal_errors(service, attendance, monkeypatch):
    def boom(*_args, **_kwargs):
        raise RuntimeError("store unavailable")

    monkeypatch.setattr(attendance, "find_by_employee_and_date", boom)

    with pytest.raises(InternalError) as exc:
        service.check_in("emp-1", WorkType.ONSITE, now=dhaka(9, 0))
    assert exc.value.code == "INTERNAL"
    assert "store unavailable" not in str(exc.value)
    assert isinstance(exc.value.__cause__, RuntimeError)


def test_manual_entry_with_only_check_out(service):
    record = service.manual_entry("org-1", "emp-1", DAY, check_out="18:00")

    assert record.status == AttendanceStatus.PRESENT
    assert record.total_work_seconds is None
    assert record.source == MANUAL_SOURCE
    assert record.check_out_at == dhaka(18, 0)


def test_manual_entry_overrides_the_existing_day(service, attendance):
    original = service.check_in("emp-1", WorkType.ONSITE, now=dhaka(9, 0))

    record = service.manual_entry("org-1", "emp-1", DAY, explicit_status="absent", note="Sick")

    assert record.record_id == original.record_id
    assert record.status == AttendanceStatus.ABSENT
    assert record.note == "Sick"
    assert len(attendance.all()) == 1


def test_manual_entry_is_scoped_to_the_organization(service):
    with pytest.raises(NotFoundError):
        service.manual_entry("org-1", "emp-3", DAY, check_in="09:00")


def test_manual_entry_rejects_bad_input(service):
    with pytest.raises(ValidationError):
        service.manual_entry("org-1", "emp-1", DAY, check_in="9am")
    with pytest.raises(ValidationError):
        service.manual_entry("org-1", "emp-1", DAY, explicit_status="ON_BREAK")
    with pytest.raises(ValidationError):
        service.manual_entry("org-1", "emp-1", DAY, explicit_status=AttendanceStatus.LATE)


def _seed_day(service):
    service.check_in("emp-1", WorkType.ONSITE, now=dhaka(9, 5))
    service.check_in("emp-2", WorkType.ONSITE, now=dhaka(9, 30))
    service.check_in("emp-4", WorkType.REMOTE, now=dhaka(8, 5))
    service.check_in("emp-1", WorkType.ONSITE, now=dhaka(9, 0, day=date(2025, 3, 3)))
    # Other organization, must not leak into org-1 views.
    service.check_in("emp-3", WorkType.ONSITE, now=datetime(2025, 3, 4, 9, 0, tzinfo=timezone.utc))


def test_day_overview(service):
    _seed_day(service)

    overview = service.day_overview("org-1", DAY)

    assert [log.name for log in overview.logs] == ["Alice", "Bob", "Dana"]
    alice = overview.logs[0]
    assert (alice.check_in, alice.check_out, alice.status, alice.source) == ("09:05", "—", HrStatus.ON_TIME, "System")
    assert alice.department == "Engineering"
    assert overview.status_counts == {
        HrStatus.ON_TIME: 2,
        HrStatus.LATE: 1,
        HrStatus.ON_LEAVE: 0,
        HrStatus.ABSENT: 0,
    }

    assert len(overview.calendar) == 31
    assert overview.calendar[3].date == DAY
    assert overview.calendar[3].signal.value == "late"
    assert overview.calendar[2].signal.value == "ontime"

    trend = overview.weekly_trend
    assert [p.date for p in trend] == [DAY - timedelta(days=4 - i) for i in range(5)]
    assert [p.present_count for p in trend] == [0, 0, 0, 1, 2]
    assert [p.present_percentage for p in trend] == [0, 0, 0, 33, 67]


def test_day_overview_is_independent_of_record_order(
    service, attendance, directory, policies, zone_resolver, classifier, aggregator
):
    _seed_day(service)
    first = service.day_overview("org-1", DAY).to_dict()

    reordered = type(attendance)(directory)
    reordered.seed(reversed(attendance.all()))
    other = TimekeepingService(
        reordered,
        directory,
        policies,
        zone_resolver=zone_resolver,
        classifier=classifier,
        aggregator=aggregator,
        default_timezone="UTC",
    )

    assert other.day_overview("org-1", DAY).to_dict() == first
    assert service.day_overview("org-1", DAY).to_dict() == first


def test_history_for_employee(service):
    service.check_in("emp-1", WorkType.ONSITE, now=dhaka(9, 5, day=date(2025, 3, 3)))
    service.manual_entry("org-1", "emp-1", DAY, check_in="09:30", check_out="18:00")
    service.check_in("emp-1", WorkType.ONSITE, now=dhaka(9, 0, day=date(2025, 4, 1)))

    history = service.history("emp-1", 3, 2025)

    assert [r.to_dict() for r in history.rows] == [
        {"date": "2025-03-04", "check_in": "09:30", "check_out": "18:00", "status": "LATE", "source": "Manual"},
        {"date": "2025-03-03", "check_in": "09:05", "check_out": "—", "status": "PRESENT", "source": "System"},
    ]
    assert history.week_schedule.to_dict()["weekend_days"] == ["SATURDAY", "SUNDAY"]


def test_history_validates_month(service):
    with pytest.raises(ValidationError):
        service.history("emp-1", 13, 2025)
    with pytest.raises(NotFoundError):
        service.history("nobody", 3, 2025)


def test_hr_history_uses_current_policy(service, attendance):
    # Stored as present before the policy was tightened.
    attendance.insert(
        AttendanceRecord(
            record_id=None,
            employee_id="emp-2",
            attendance_date=DAY,
            check_in_at=dhaka(9, 30),
            check_out_at=None,
            status=AttendanceStatus.PRESENT,
        )
    )

    history = service.hr_history("org-1", "emp-2", 3, 2025)

    assert [r.status for r in history.rows] == ["Late"]
    with pytest.raises(NotFoundError):
        service.hr_history("org-2", "emp-2", 3, 2025)


def test_today_uses_the_employee_local_date(service):
    now = datetime(2025, 3, 4, 19, 30, tzinfo=timezone.utc)  # 01:30 on the 5th in Dhaka

    assert service.today("emp-1", now=now).record is None
    service.check_in("emp-1", WorkType.ONSITE, now=now)

    today = service.today("emp-1", now=now)
    assert today.record.attendance_date == date(2025, 3, 5)
    assert today.work_model == WorkModel.ONSITE


def test_dashboard_summary(service):
    service.check_in("emp-1", WorkType.ONSITE, now=dhaka(9, 0, day=date(2025, 2, 28)))
    service.check_in("emp-1", WorkType.ONSITE, now=dhaka(9, 5, day=date(2025, 3, 3)))
    service.check_in("emp-1", WorkType.ONSITE, now=dhaka(9, 30, day=date(2025, 3, 4)))
    service.check_out("emp-1", 28800, 1800, now=dhaka(18, 0, day=date(2025, 3, 4)))

    dashboard = service.dashboard_summary("emp-1", now=dhaka(12, 0, day=date(2025, 3, 6)))

    assert dashboard.month_start == date(2025, 3, 1)
    summary = dashboard.summary
    assert summary.total_records == 2
    assert summary.days_worked == 2
    assert summary.on_time_count == 1
    assert summary.average_work_seconds == 28800
    assert summary.average_check_in_minutes == pytest.approx((9 * 60 + 5 + 9 * 60 + 30) / 2)

    assert [p.date for p in dashboard.trend] == [date(2025, 2, 28) + timedelta(days=i) for i in range(7)]
    assert [p.status for p in dashboard.trend] == [
        AttendanceStatus.PRESENT,
        AttendanceStatus.ABSENT,
        AttendanceStatus.ABSENT,
        AttendanceStatus.PRESENT,
        AttendanceStatus.LATE,
        AttendanceStatus.ABSENT,
        AttendanceStatus.ABSENT,
    ]
    assert [p.is_working_day for p in dashboard.trend] == [True, False, False, True, True, True, True]


def test_lowercase_organization_zone_drives_classification(service, directory):
    directory.organizations["org-5"] = Organization("org-5", "Initech", timezone="asia/tokyo")
    directory.add(EmployeeProfile("emp-5", "org-5", "Eve"))

    # 09:30 in Tokyo; it would be on time if read as UTC.
    record = service.check_in("emp-5", WorkType.ONSITE, now=datetime(2025, 3, 4, 0, 30, tzinfo=timezone.utc))

    assert record.status == AttendanceStatus.LATE
    assert record.attendance_date == DAY
    assert service.history("emp-5", 3, 2025).rows[0].check_in == "09:30"


def test_day_overview_defaults_to_the_organization_local_date(service):
    now = datetime(2025, 3, 4, 19, 30, tzinfo=timezone.utc)  # 01:30 on the 5th in Dhaka
    service.check_in("emp-1", WorkType.ONSITE, now=now)

    overview = service.day_overview("org-1", now=now)

    assert overview.date == date(2025, 3, 5)
    assert [log.name for log in overview.logs] == ["Alice"]


def test_history_defaults_to_the_employee_local_month(service):
    now = datetime(2025, 3, 31, 19, 0, tzinfo=timezone.utc)  # 01:00 on 1 April in Dhaka

    history = service.history("emp-1", now=now)
    assert (history.month, history.year) == (4, 2025)

    hr = service.hr_history("org-1", "emp-1", month=2, now=now)
    assert (hr.month, hr.year) == (2, 2025)
