from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Optional

import pytest

from src.timekeeping_system.timekeeping_system.attendance.aggregator import AttendanceAggregator
from src.timekeeping_system.timekeeping_system.attendance.classifier import AttendanceClassifier
from src.timekeeping_system.timekeeping_system.attendance.model import AttendanceRecord
from src.timekeeping_system.timekeeping_system.attendance.service import TimekeepingService
from src.timekeeping_system.timekeeping_system.core.enums import WorkModel
from src.timekeeping_system.timekeeping_system.core.exceptions import ConflictError
from src.timekeeping_system.timekeeping_system.directory.model import EmployeeProfile, Organization
from src.timekeeping_system.timekeeping_system.policies.model import WorkPolicy
from src.timekeeping_system.timekeeping_system.policies.resolver import PolicyResolver
from src.timekeeping_system.timekeeping_system.policies.service import WorkPolicyService
from src.timekeeping_system.timekeeping_system.timezones.projector import LocalTimeProjector
from src.timekeeping_system.timekeeping_system.timezones.resolver import TimeZoneResolver


@dataclass
class InMemoryDirectory:
    employees: dict[str, EmployeeProfile] = field(default_factory=dict)
    organizations: dict[str, Organization] = field(default_factory=dict)

    def add(self, profile: EmployeeProfile) -> EmployeeProfile:
        self.employees[profile.employee_id] = profile
        return profile

    def get_employee(self, employee_id: str) -> Optional[EmployeeProfile]:
        return self.employees.get(employee_id)

    def get_organization(self, organization_id: str) -> Optional[Organization]:
        return self.organizations.get(organization_id)

    def list_employees(self, employee_ids):
        return [self.employees[i] for i in employee_ids if i in self.employees]

    def count_active_employees(self, organization_id: str) -> int:
        return sum(1 for e in self.employees.values() if e.organization_id == organization_id and e.is_active)


@dataclass
class InMemoryPolicies:
    policies: dict[str, WorkPolicy] = field(default_factory=dict)

    def get_for_organization(self, organization_id: str) -> Optional[WorkPolicy]:
        return self.policies.get(organization_id)

    def save(self, policy: WorkPolicy) -> None:
        self.policies[policy.organization_id] = policy


class InMemoryAttendance:
    def __init__(self, directory: InMemoryDirectory):
        self._directory = directory
        self._by_employee_date: dict[tuple[str, date], AttendanceRecord] = {}
        self._id = 0

    def all(self) -> list[AttendanceRecord]:
        return list(self._by_employee_date.values())

    def seed(self, records) -> None:
        """Load stored records as-is, keeping their ids."""
        for r in records:
            self._by_employee_date[(r.employee_id, r.attendance_date)] = r
            self._id = max(self._id, r.record_id or 0)

    def find_by_employee_and_date(self, employee_id: str, attendance_date: date) -> Optional[AttendanceRecord]:
        return self._by_employee_date.get((employee_id, attendance_date))

    def find_open_for_employee(self, employee_id: str) -> Optional[AttendanceRecord]:
        items = [r for r in self._by_employee_date.values() if r.employee_id == employee_id and r.is_open]
        items.sort(key=lambda r: r.attendance_date, reverse=True)
        return items[0] if items else None

    def find_range(self, *, start: date, end: date, employee_id=None, organization_id=None):
        out = []
        for r in self._by_employee_date.values():
            if not start <= r.attendance_date < end:
                continue
            if employee_id is not None and r.employee_id != employee_id:
                continue
            if organization_id is not None:
                profile = self._directory.get_employee(r.employee_id)
                if profile is None or profile.organization_id != organization_id:
                    continue
            out.append(r)
        return out

    def insert(self, record: AttendanceRecord) -> AttendanceRecord:
        key = (record.employee_id, record.attendance_date)
        if key in self._by_employee_date:
            raise ConflictError("Attendance has already been recorded for today.")
        self._id += 1
        stored = replace(record, record_id=self._id)
        self._by_employee_date[key] = stored
        return stored

    def upsert(self, record: AttendanceRecord) -> AttendanceRecord:
        key = (record.employee_id, record.attendance_date)
        existing = self._by_employee_date.get(key)
        if existing is None:
            return self.insert(record)
        stored = replace(record, record_id=existing.record_id)
        self._by_employee_date[key] = stored
        return stored

    def update_checkout(
        self,
        *,
        record_id: int,
        check_out_at: datetime,
        total_work_seconds: int,
        total_break_seconds: Optional[int],
    ) -> bool:
        for key, r in self._by_employee_date.items():
            if r.record_id == record_id and r.check_out_at is None:
                self._by_employee_date[key] = replace(
                    r,
                    check_out_at=check_out_at,
                    total_work_seconds=total_work_seconds,
                    total_break_seconds=total_break_seconds,
                )
                return True
        return False


@pytest.fixture()
def zone_resolver() -> TimeZoneResolver:
    return TimeZoneResolver()


@pytest.fixture()
def projector(zone_resolver) -> LocalTimeProjector:
    return LocalTimeProjector(zone_resolver)


@pytest.fixture()
def classifier(projector) -> AttendanceClassifier:
    return AttendanceClassifier(projector, PolicyResolver())


@pytest.fixture()
def aggregator(classifier) -> AttendanceAggregator:
    return AttendanceAggregator(classifier, PolicyResolver())


@pytest.fixture()
def directory() -> InMemoryDirectory:
    d = InMemoryDirectory()
    d.organizations["org-1"] = Organization("org-1", "Acme", timezone="Asia/Dhaka")
    d.organizations["org-2"] = Organization("org-2", "Globex", timezone=None)
    d.add(
        EmployeeProfile(
            "emp-1",
            "org-1",
            "Alice",
            primary_location="Dhaka HQ",
            work_model=WorkModel.ONSITE,
            department="Engineering",
        )
    )
    d.add(EmployeeProfile("emp-2", "org-1", "Bob", department="Finance"))
    d.add(EmployeeProfile("emp-4", "org-1", "Dana", primary_location="Remote", work_model=WorkModel.REMOTE))
    d.add(EmployeeProfile("emp-3", "org-2", "Carol"))
    return d


@pytest.fixture()
def policies() -> InMemoryPolicies:
    return InMemoryPolicies()


@pytest.fixture()
def attendance(directory) -> InMemoryAttendance:
    return InMemoryAttendance(directory)


@pytest.fixture()
def service(attendance, directory, policies, zone_resolver, classifier, aggregator) -> TimekeepingService:
    return TimekeepingService(
        attendance,
        directory,
        policies,
        zone_resolver=zone_resolver,
        classifier=classifier,
        aggregator=aggregator,
        default_timezone="UTC",
    )


@pytest.fixture()
def policy_service(policies) -> WorkPolicyService:
    return WorkPolicyService(policies)
