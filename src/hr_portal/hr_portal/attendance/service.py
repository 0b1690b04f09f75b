from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, List, Optional, Sequence

from ..common.datetime_utils import format_hours, hours_between, now_local
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.exceptions import ConflictError, ValidationError
from ..core.policies import AccessPolicy, Action, Actor
from .model import AttendanceRecord
from .repository import AttendanceRepository
from .timesheet import TimesheetEntryInput, build_entries

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckoutResult:
    attendance_id: int
    timesheet_id: int
    check_out_time: datetime
    total_hours: float
    entry_count: int


def elapsed_hours(check_in_time: datetime, now: datetime) -> float:
    """Fractional hours from check-in to ``now``, rounded to 2 decimals."""

    return max(0.0, round(hours_between(check_in_time, now), 2))


class AttendanceService:
    """Use cases around one day's attendance record: check-in, check-out and history."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        *,
        policy: Optional[AccessPolicy] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._attendance = attendance
        self._policy = policy or AccessPolicy()
        self._clock = clock

    def get_today_record(self, actor: Actor, *, today: Optional[date] = None) -> Optional[AttendanceRecord]:
        self._policy.require(actor, "attendance", Action.READ, owner_profile_id=actor.profile_id)
        today = today or self._clock().date()
        return self._attendance.get_for_profile_and_date(actor.profile_id, today)

    def check_in(self, actor: Actor, *, address: Optional[str] = None, now: Optional[datetime] = None) -> AttendanceRecord:
        self._policy.require(actor, "attendance", Action.CREATE, owner_profile_id=actor.profile_id)
        now = now or self._clock()
        today = now.date()

        existing = self._attendance.get_for_profile_and_date(actor.profile_id, today)
        if existing and existing.is_complete:
            raise ValidationError("Attendance for today is already completed. You can check in again tomorrow.")
        if existing:
            raise ConflictError("You have already checked in today")

        record = self._attendance.create_checkin(
            profile_id=actor.profile_id,
            work_date=today,
            check_in_time=now,
            check_in_address=address,
        )
        logger.info("Profile %s checked in at %s from %s", actor.profile_id, now.isoformat(), address or "-")
        return record

    def check_out(
        self,
        actor: Actor,
        entries: Sequence[TimesheetEntryInput],
        *,
        address: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> CheckoutResult:
        # Reject a bad form before touching the database.
        drafts = build_entries(entries)

        self._policy.require(actor, "attendance", Action.UPDATE, owner_profile_id=actor.profile_id)
        self._policy.require(actor, "timesheets", Action.CREATE, owner_profile_id=actor.profile_id)
        now = now or self._clock()
        today = now.date()

        record = self._attendance.get_for_profile_and_date(actor.profile_id, today)
        if not record or record.check_in_time is None:
            raise ValidationError("You have not checked in today")
        if record.is_complete:
            raise ValidationError("You have already checked out today")

        total_hours = elapsed_hours(record.check_in_time, now)
        timesheet_id = self._attendance.complete_checkout(
            attendance_id=record.attendance_id,
            profile_id=actor.profile_id,
            work_date=record.work_date,
            check_out_time=now,
            check_out_address=address,
            total_hours=total_hours,
            entries=drafts,
        )
        logger.info(
            "Profile %s checked out after %.2f h with %d timesheet entries",
            actor.profile_id,
            total_hours,
            len(drafts),
        )
        return CheckoutResult(
            attendance_id=record.attendance_id,
            timesheet_id=timesheet_id,
            check_out_time=now,
            total_hours=total_hours,
            entry_count=len(drafts),
        )

    def get_history_ui(self, actor: Actor, *, limit: int = DEFAULT_HISTORY_LIMIT) -> List[dict]:
        self._policy.require(actor, "attendance", Action.READ, owner_profile_id=actor.profile_id)
        rows = self._attendance.get_recent_for_profile(actor.profile_id, int(limit))
        return [self._to_ui(r) for r in rows]

    def _to_ui(self, r: AttendanceRecord) -> dict:
        return {
            "date": r.work_date.strftime("%Y-%m-%d"),
            "check_in": r.check_in_time.strftime("%H:%M:%S") if r.check_in_time else "-",
            "check_out": r.check_out_time.strftime("%H:%M:%S") if r.check_out_time else "-",
            "total_hours": format_hours(r.total_hours),
            "status": r.status.value,
            "timesheet_completed": r.timesheet_completed,
            "check_in_address": r.check_in_address or "-",
            "check_out_address": r.check_out_address or "-",
        }
