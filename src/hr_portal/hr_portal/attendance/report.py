from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..common.datetime_utils import format_hours
from ..core.exceptions import ValidationError
from ..core.policies import AccessPolicy, Action, Actor
from .model import AttendanceReportRow
from .repository import AttendanceRepository

CSV_HEADER = [
    "Employee Code",
    "Full Name",
    "Date",
    "Check In",
    "Check Out",
    "Worked Hours",
    "Status",
    "Check In Address",
    "Check Out Address",
]


@dataclass(frozen=True)
class ReportData:
    rows: list[dict]
    summary: list[dict]


def worked_minutes(row: AttendanceReportRow) -> int:
    """Stored total hours once checked out, otherwise 0 for an open day."""

    if not row.check_out_time:
        return 0
    if row.total_hours is not None:
        return max(int(round(row.total_hours * 60)), 0)
    if row.check_in_time is None:
        return 0
    return max(int((row.check_out_time - row.check_in_time).total_seconds() // 60), 0)


class AttendanceReportService:
    def __init__(self, attendance: AttendanceRepository, *, policy: Optional[AccessPolicy] = None):
        self._attendance = attendance
        self._policy = policy or AccessPolicy()

    def build_attendance_report(
        self,
        actor: Actor,
        *,
        start: date,
        end: date,
        profile_id: Optional[int] = None,
    ) -> ReportData:
        if end < start:
            raise ValidationError("End date must be on or after start date")

        scope = self._policy.read_scope(actor, "attendance")
        if scope is not None:
            # Employees only ever see their own rows.
            profile_id = scope
        self._policy.require(actor, "attendance", Action.READ, owner_profile_id=profile_id)

        query_rows = self._attendance.get_report_rows(start_date=start, end_date=end, profile_id=profile_id)

        summary_map: dict[int, dict] = {}
        out_rows: list[dict] = []

        for r in query_rows:
            minutes = worked_minutes(r)
            out_rows.append(
                {
                    "profile_id": r.profile_id,
                    "full_name": r.full_name,
                    "employee_code": r.employee_code or "-",
                    "work_date": r.work_date.strftime("%Y-%m-%d"),
                    "check_in": r.check_in_time.strftime("%H:%M") if r.check_in_time else "-",
                    "check_out": r.check_out_time.strftime("%H:%M") if r.check_out_time else "-",
                    "worked_hours": format_hours(minutes / 60),
                    "status": r.status.value,
                    "check_in_address": r.check_in_address or "-",
                    "check_out_address": r.check_out_address or "-",
                }
            )

            s = summary_map.get(r.profile_id)
            if not s:
                s = {
                    "profile_id": r.profile_id,
                    "full_name": r.full_name,
                    "employee_code": r.employee_code or "-",
                    "days_present": 0,
                    "total_minutes": 0,
                }
                summary_map[r.profile_id] = s
            s["days_present"] += 1
            s["total_minutes"] += minutes

        ordered = sorted(summary_map.values(), key=lambda x: x["total_minutes"], reverse=True)
        summary = [
            {
                "profile_id": s["profile_id"],
                "full_name": s["full_name"],
                "employee_code": s["employee_code"],
                "days_present": s["days_present"],
                "total_hours": format_hours(s["total_minutes"] / 60),
            }
            for s in ordered
        ]
        return ReportData(rows=out_rows, summary=summary)


def report_to_csv(report: ReportData) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(CSV_HEADER)
    for r in report.rows:
        writer.writerow(
            [
                r["employee_code"],
                r["full_name"],
                r["work_date"],
                r["check_in"],
                r["check_out"],
                r["worked_hours"],
                r["status"],
                r["check_in_address"],
                r["check_out_address"],
            ]
        )
    return buf.getvalue()
