from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one profile's attendance for one calendar day."""

    attendance_id: int
    profile_id: int
    work_date: date
    check_in_time: Optional[datetime]
    check_out_time: Optional[datetime] = None
    check_in_address: Optional[str] = None
    check_out_address: Optional[str] = None
    total_hours: Optional[float] = None
    status: AttendanceStatus = AttendanceStatus.PRESENT
    timesheet_completed: bool = False
    notes: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.check_in_time is not None and self.check_out_time is None

    @property
    def is_complete(self) -> bool:
        return self.check_out_time is not None


@dataclass(frozen=True)
class AttendanceReportRow:
    """Read-model for the attendance report/export (query-optimized)."""

    profile_id: int
    full_name: str
    employee_code: Optional[str]
    work_date: date
    check_in_time: Optional[datetime]
    check_out_time: Optional[datetime]
    total_hours: Optional[float]
    status: AttendanceStatus
    check_in_address: Optional[str] = None
    check_out_address: Optional[str] = None
