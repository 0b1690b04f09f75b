from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import Timesheet, TimesheetEntry


class TimesheetRepository(Protocol):
    def list_timesheets(
        self,
        *,
        start_date: date,
        end_date: date,
        profile_id: Optional[int] = None,
    ) -> Sequence[Timesheet]:
        raise NotImplementedError

    def get_timesheet(self, timesheet_id: int) -> Optional[Timesheet]:
        raise NotImplementedError

    def list_entries(self, timesheet_id: int) -> Sequence[TimesheetEntry]:
        raise NotImplementedError
