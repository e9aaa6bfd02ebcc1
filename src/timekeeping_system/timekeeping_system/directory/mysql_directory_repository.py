from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import WorkModel
from ..core.logging import get_logger
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import EmployeeProfile, Organization
from .repository import DirectoryRepository

logger = get_logger("MySQLDirectoryRepository")

_EMPLOYEE_COLUMNS = """
    employee_id, organization_id, display_name, department,
    employment_type, primary_location, work_model, is_active
"""


def _to_work_model(value) -> Optional[WorkModel]:
    if not value:
        return None
    try:
        return WorkModel(str(value).strip().upper())
    except ValueError:
        logger.warning("Unknown work model %r; ignoring", value)
        return None


def _to_profile(r: dict) -> EmployeeProfile:
    return EmployeeProfile(
        employee_id=str(r["employee_id"]),
        organization_id=str(r["organization_id"]),
        display_name=r["display_name"],
        employment_type=r.get("employment_type"),
        primary_location=r.get("primary_location"),
        work_model=_to_work_model(r.get("work_model")),
        department=r.get("department"),
        is_active=bool(r.get("is_active", 1)),
    )


class MySQLDirectoryRepository(DirectoryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_employee(self, employee_id: str) -> Optional[EmployeeProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_EMPLOYEE_COLUMNS} FROM employees WHERE employee_id=%s", (employee_id,))
            r = fetchone(cur)
            return _to_profile(r) if r else None

    def get_organization(self, organization_id: str) -> Optional[Organization]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT organization_id, name, timezone FROM organizations WHERE organization_id=%s",
                (organization_id,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Organization(
                organization_id=str(r["organization_id"]),
                name=r["name"],
                timezone=r.get("timezone"),
            )

    def list_employees(self, employee_ids: Sequence[str]) -> Sequence[EmployeeProfile]:
        ids = list(dict.fromkeys(employee_ids))
        if not ids:
            return []
        placeholders = ",".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_EMPLOYEE_COLUMNS} FROM employees WHERE employee_id IN ({placeholders}) ORDER BY display_name",
                tuple(ids),
            )
            return [_to_profile(r) for r in fetchall(cur)]

    def count_active_employees(self, organization_id: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COUNT(*) AS total FROM employees WHERE organization_id=%s AND is_active=1",
                (organization_id,),
            )
            r = fetchone(cur)
            return int(r["total"]) if r else 0
