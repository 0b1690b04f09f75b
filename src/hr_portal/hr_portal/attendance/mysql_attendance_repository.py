from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence

from ..core.enums import AttendanceStatus, TimesheetStatus
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_float, db_cursor, fetchall, fetchone, unique_violation_as
from .model import AttendanceRecord, AttendanceReportRow
from .repository import AttendanceRepository
from .timesheet import TimesheetEntryDraft

_COLUMNS = """
    attendance_id, profile_id, work_date, check_in_time, check_out_time,
    check_in_address, check_out_address, total_hours, status, timesheet_completed, notes
"""


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        profile_id=int(r["profile_id"]),
        work_date=r["work_date"],
        check_in_time=r.get("check_in_time"),
        check_out_time=r.get("check_out_time"),
        check_in_address=r.get("check_in_address"),
        check_out_address=r.get("check_out_address"),
        total_hours=as_float(r.get("total_hours")),
        status=AttendanceStatus(r.get("status") or AttendanceStatus.PRESENT.value),
        timesheet_completed=bool(r.get("timesheet_completed")),
        notes=r.get("notes"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_recent_for_profile(self, profile_id: int, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance
                WHERE profile_id=%s
                ORDER BY work_date DESC
                LIMIT %s
                """,
                (profile_id, int(limit)),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def get_for_profile_and_date(self, profile_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance WHERE profile_id=%s AND work_date=%s",
                (profile_id, work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def create_checkin(
        self,
        *,
        profile_id: int,
        work_date: date,
        check_in_time: datetime,
        check_in_address: Optional[str],
    ) -> AttendanceRecord:
        with unique_violation_as("You have already checked in today"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance(profile_id, work_date, check_in_time, check_in_address, status)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (profile_id, work_date, check_in_time, check_in_address, AttendanceStatus.PRESENT.value),
            )
            attendance_id = int(cur.lastrowid)

        return AttendanceRecord(
            attendance_id=attendance_id,
            profile_id=profile_id,
            work_date=work_date,
            check_in_time=check_in_time,
            check_in_address=check_in_address,
        )

    def complete_checkout(
        self,
        *,
        attendance_id: int,
        profile_id: int,
        work_date: date,
        check_out_time: datetime,
        check_out_address: Optional[str],
        total_hours: float,
        entries: Sequence[TimesheetEntryDraft],
    ) -> int:
        # One transaction: db_cursor rolls every statement back if any of them fails.
        with unique_violation_as("A timesheet for today already exists"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance
                SET check_out_time=%s, check_out_address=%s, total_hours=%s, timesheet_completed=1
                WHERE attendance_id=%s AND check_out_time IS NULL
                """,
                (check_out_time, check_out_address, total_hours, int(attendance_id)),
            )
            if cur.rowcount == 0:
                raise ConflictError("You have already checked out today")

            cur.execute(
                """
                INSERT INTO timesheets(profile_id, timesheet_date, status, total_hours, submitted_at)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (profile_id, work_date, TimesheetStatus.SUBMITTED.value, total_hours, check_out_time),
            )
            timesheet_id = int(cur.lastrowid)

            if entries:
                cur.executemany(
                    """
                    INSERT INTO timesheet_entries(timesheet_id, entry_number, from_time, to_time, description, hours)
                    VALUES(%s,%s,%s,%s,%s,%s)
                    """,
                    [
                        (timesheet_id, e.entry_number, e.from_time, e.to_time, e.description, e.hours)
                        for e in entries
                    ],
                )
            return timesheet_id

    def get_report_rows(
        self,
        *,
        start_date: date,
        end_date: date,
        profile_id: Optional[int] = None,
    ) -> Sequence[AttendanceReportRow]:
        clauses = ["a.work_date BETWEEN %s AND %s"]
        params: list[object] = [start_date, end_date]

        if profile_id is not None:
            clauses.append("a.profile_id=%s")
            params.append(int(profile_id))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT
                    p.profile_id, p.first_name, p.last_name, p.employee_code,
                    a.work_date, a.check_in_time, a.check_out_time, a.total_hours, a.status,
                    a.check_in_address, a.check_out_address
                FROM attendance a
                JOIN profiles p ON p.profile_id = a.profile_id
                WHERE {where}
                ORDER BY a.work_date DESC, p.profile_id ASC
                """,
                tuple(params),
            )
            rows = fetchall(cur)

            return [
                AttendanceReportRow(
                    profile_id=int(r["profile_id"]),
                    full_name=" ".join(x for x in (r.get("first_name"), r.get("last_name")) if x),
                    employee_code=r.get("employee_code"),
                    work_date=r["work_date"],
                    check_in_time=r.get("check_in_time"),
                    check_out_time=r.get("check_out_time"),
                    total_hours=as_float(r.get("total_hours")),
                    status=AttendanceStatus(r.get("status") or AttendanceStatus.PRESENT.value),
                    check_in_address=r.get("check_in_address"),
                    check_out_address=r.get("check_out_address"),
                )
                for r in rows
            ]
