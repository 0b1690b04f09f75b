from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..core.enums import TimesheetStatus


@dataclass(frozen=True)
class Timesheet:
    timesheet_id: int
    profile_id: int
    timesheet_date: date
    status: TimesheetStatus
    total_hours: Optional[float]
    submitted_at: Optional[datetime]
    full_name: str = ""
    employee_code: Optional[str] = None


@dataclass(frozen=True)
class TimesheetEntry:
    entry_id: int
    timesheet_id: int
    entry_number: int
    from_time: Optional[time]
    to_time: Optional[time]
    description: Optional[str]
    hours: Optional[float]
