from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from ..common.datetime_utils import format_hours
from ..core.exceptions import NotFoundError, ValidationError
from ..core.policies import AccessPolicy, Action, Actor
from .model import Timesheet
from .repository import TimesheetRepository


@dataclass(frozen=True)
class TimesheetDetail:
    timesheet: dict
    entries: List[dict]


class TimesheetService:
    def __init__(self, timesheets: TimesheetRepository, *, policy: Optional[AccessPolicy] = None):
        self._timesheets = timesheets
        self._policy = policy or AccessPolicy()

    def list_timesheets(
        self,
        actor: Actor,
        *,
        start: date,
        end: date,
        profile_id: Optional[int] = None,
    ) -> List[dict]:
        if end < start:
            raise ValidationError("End date must be on or after start date")
        scope = self._policy.read_scope(actor, "timesheets")
        if scope is not None:
            profile_id = scope
        self._policy.require(actor, "timesheets", Action.READ, owner_profile_id=profile_id)

        rows = self._timesheets.list_timesheets(start_date=start, end_date=end, profile_id=profile_id)
        return [self._to_ui(t) for t in rows]

    def get_detail(self, actor: Actor, timesheet_id: int) -> TimesheetDetail:
        ts = self._timesheets.get_timesheet(int(timesheet_id))
        if not ts:
            raise NotFoundError("Timesheet not found")
        self._policy.require(actor, "timesheets", Action.READ, owner_profile_id=ts.profile_id)

        entries = [
            {
                "entry_number": e.entry_number,
                "from_time": e.from_time.strftime("%H:%M") if e.from_time else "-",
                "to_time": e.to_time.strftime("%H:%M") if e.to_time else "-",
                "description": e.description or "",
                "hours": e.hours,
            }
            for e in self._timesheets.list_entries(ts.timesheet_id)
        ]
        return TimesheetDetail(timesheet=self._to_ui(ts), entries=entries)

    def _to_ui(self, t: Timesheet) -> dict:
        return {
            "timesheet_id": t.timesheet_id,
            "profile_id": t.profile_id,
            "full_name": t.full_name,
            "employee_code": t.employee_code or "-",
            "date": t.timesheet_date.strftime("%Y-%m-%d"),
            "status": t.status.value,
            "total_hours": t.total_hours,
            "total_display": format_hours(t.total_hours),
            "submitted_at": t.submitted_at.strftime("%Y-%m-%d %H:%M") if t.submitted_at else "-",
        }
