from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord, AttendanceReportRow
from .timesheet import TimesheetEntryDraft


class AttendanceRepository(Protocol):
    def get_recent_for_profile(self, profile_id: int, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def get_for_profile_and_date(self, profile_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create_checkin(
        self,
        *,
        profile_id: int,
        work_date: date,
        check_in_time: datetime,
        check_in_address: Optional[str],
    ) -> AttendanceRecord:
        """Insert today's record; raises ``ConflictError`` if (profile, date) already exists."""

        raise NotImplementedError

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
        """Close the record, create the day's timesheet and its entries in one transaction.

        Returns the new timesheet id.
        """

        raise NotImplementedError

    def get_report_rows(
        self,
        *,
        start_date: date,
        end_date: date,
        profile_id: Optional[int] = None,
    ) -> Sequence[AttendanceReportRow]:
        raise NotImplementedError
