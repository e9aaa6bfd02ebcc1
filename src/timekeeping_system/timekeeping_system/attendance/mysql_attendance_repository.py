from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Optional, Sequence

from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from ..core.enums import AttendanceStatus
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_db_instant, to_db_instant
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    ar.record_id, ar.employee_id, ar.attendance_date, ar.check_in_at, ar.check_out_at,
    ar.status, ar.total_work_seconds, ar.total_break_seconds, ar.source, ar.location, ar.note
"""


def _to_record(r: dict) -> AttendanceRecord:
    work = r.get("total_work_seconds")
    brk = r.get("total_break_seconds")
    return AttendanceRecord(
        record_id=int(r["record_id"]),
        employee_id=str(r["employee_id"]),
        attendance_date=r["attendance_date"],
        check_in_at=from_db_instant(r.get("check_in_at")),
        check_out_at=from_db_instant(r.get("check_out_at")),
        status=AttendanceStatus(r["status"]),
        total_work_seconds=int(work) if work is not None else None,
        total_break_seconds=int(brk) if brk is not None else None,
        source=r.get("source") or "WEB",
        location=r.get("location"),
        note=r.get("note"),
    )


def _params(record: AttendanceRecord) -> tuple:
    return (
        record.employee_id,
        record.attendance_date,
        to_db_instant(record.check_in_at),
        to_db_instant(record.check_out_at),
        record.status.value,
        record.total_work_seconds,
        record.total_break_seconds,
        record.source,
        record.location,
        record.note,
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find_by_employee_and_date(self, employee_id: str, attendance_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records ar
                WHERE ar.employee_id=%s AND ar.attendance_date=%s
                """,
                (employee_id, attendance_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def find_open_for_employee(self, employee_id: str) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records ar
                WHERE ar.employee_id=%s AND ar.check_in_at IS NOT NULL AND ar.check_out_at IS NULL
                ORDER BY ar.attendance_date DESC
                LIMIT 1
                """,
                (employee_id,),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def find_range(
        self,
        *,
        start: date,
        end: date,
        employee_id: Optional[str] = None,
        organization_id: Optional[str] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["ar.attendance_date >= %s", "ar.attendance_date < %s"]
        params: list[object] = [start, end]

        if employee_id is not None:
            clauses.append("ar.employee_id=%s")
            params.append(employee_id)
        if organization_id is not None:
            clauses.append("e.organization_id=%s")
            params.append(organization_id)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records ar
                JOIN employees e ON e.employee_id = ar.employee_id
                WHERE {where}
                ORDER BY ar.attendance_date DESC, e.display_name ASC
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def insert(self, record: AttendanceRecord) -> AttendanceRecord:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(
                        employee_id, attendance_date, check_in_at, check_out_at, status,
                        total_work_seconds, total_break_seconds, source, location, note
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    _params(record),
                )
                record_id = int(cur.lastrowid)
        except IntegrityError as e:
            if e.errno == errorcode.ER_DUP_ENTRY:
                raise ConflictError("Attendance has already been recorded for today.") from e
            raise
        return replace(record, record_id=record_id)

    def upsert(self, record: AttendanceRecord) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(
                    employee_id, attendance_date, check_in_at, check_out_at, status,
                    total_work_seconds, total_break_seconds, source, location, note
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    check_in_at=VALUES(check_in_at),
                    check_out_at=VALUES(check_out_at),
                    status=VALUES(status),
                    total_work_seconds=COALESCE(VALUES(total_work_seconds), total_work_seconds),
                    total_break_seconds=COALESCE(VALUES(total_break_seconds), total_break_seconds),
                    source=VALUES(source),
                    location=VALUES(location),
                    note=COALESCE(VALUES(note), note)
                """,
                _params(record),
            )
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records ar
                WHERE ar.employee_id=%s AND ar.attendance_date=%s
                """,
                (record.employee_id, record.attendance_date),
            )
            return _to_record(fetchone(cur))

    def update_checkout(
        self,
        *,
        record_id: int,
        check_out_at: datetime,
        total_work_seconds: int,
        total_break_seconds: Optional[int],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_out_at=%s, total_work_seconds=%s, total_break_seconds=%s
                WHERE record_id=%s AND check_out_at IS NULL
                """,
                (to_db_instant(check_out_at), int(total_work_seconds), total_break_seconds, int(record_id)),
            )
            return cur.rowcount > 0
