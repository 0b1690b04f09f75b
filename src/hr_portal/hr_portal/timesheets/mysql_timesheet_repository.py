from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..core.enums import TimesheetStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_float, db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import Timesheet, TimesheetEntry
from .repository import TimesheetRepository

_SELECT = """
    SELECT t.timesheet_id, t.profile_id, t.timesheet_date, t.status, t.total_hours, t.submitted_at,
           p.first_name, p.last_name, p.employee_code
    FROM timesheets t
    JOIN profiles p ON p.profile_id = t.profile_id
"""


def _to_timesheet(r: Dict[str, Any]) -> Timesheet:
    return Timesheet(
        timesheet_id=int(r["timesheet_id"]),
        profile_id=int(r["profile_id"]),
        timesheet_date=r["timesheet_date"],
        status=TimesheetStatus(r["status"]),
        total_hours=as_float(r.get("total_hours")),
        submitted_at=r.get("submitted_at"),
        full_name=" ".join(x for x in (r.get("first_name"), r.get("last_name")) if x),
        employee_code=r.get("employee_code"),
    )


class MySQLTimesheetRepository(TimesheetRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_timesheets(
        self,
        *,
        start_date: date,
        end_date: date,
        profile_id: Optional[int] = None,
    ) -> Sequence[Timesheet]:
        clauses = ["t.timesheet_date BETWEEN %s AND %s"]
        params: list[object] = [start_date, end_date]
        if profile_id is not None:
            clauses.append("t.profile_id=%s")
            params.append(int(profile_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT} WHERE {' AND '.join(clauses)} ORDER BY t.timesheet_date DESC, p.first_name ASC",
                tuple(params),
            )
            return [_to_timesheet(r) for r in fetchall(cur)]

    def get_timesheet(self, timesheet_id: int) -> Optional[Timesheet]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE t.timesheet_id=%s", (int(timesheet_id),))
            r = fetchone(cur)
            return _to_timesheet(r) if r else None

    def list_entries(self, timesheet_id: int) -> Sequence[TimesheetEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT entry_id, timesheet_id, entry_number, from_time, to_time, description, hours
                FROM timesheet_entries
                WHERE timesheet_id=%s
                ORDER BY entry_number ASC
                """,
                (int(timesheet_id),),
            )
            return [
                TimesheetEntry(
                    entry_id=int(r["entry_id"]),
                    timesheet_id=int(r["timesheet_id"]),
                    entry_number=int(r["entry_number"]),
                    from_time=normalize_mysql_time(r.get("from_time")),
                    to_time=normalize_mysql_time(r.get("to_time")),
                    description=r.get("description"),
                    hours=as_float(r.get("hours")),
                )
                for r in fetchall(cur)
            ]
