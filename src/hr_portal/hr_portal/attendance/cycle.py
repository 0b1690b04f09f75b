"""Per-session attendance cycle.

A cycle tracks one signed-in user's day: ``NOT_CHECKED_IN`` until check-in,
``CHECKED_IN`` until the timesheet is submitted at check-out, then
``COMPLETED_TODAY``. At local midnight it drops back to ``NOT_CHECKED_IN``
and re-reads the backend; a ``focus`` event re-reads it as well, so changes
made from another session converge.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Dict, Optional, Sequence

from ..common.datetime_utils import format_hms, now_local, seconds_until_next_midnight
from ..common.events import EventHub, Subscription
from ..common.scheduling import ScheduledCall, Scheduler
from ..core.constants import FOCUS_TOPIC
from ..core.enums import CycleState
from ..core.exceptions import ConflictError, ValidationError
from ..core.policies import Actor
from .model import AttendanceRecord
from .service import AttendanceService, CheckoutResult
from .timesheet import CheckoutForm, TimesheetEntryInput, blank_slots

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CycleSnapshot:
    state: CycleState
    work_date: date
    attendance_id: Optional[int]
    check_in_time: Optional[datetime]
    check_out_time: Optional[datetime]
    total_hours: Optional[float]
    elapsed_seconds: float

    @property
    def elapsed_display(self) -> str:
        return format_hms(self.elapsed_seconds)

    def to_dict(self) -> dict:
        return {
            "state": self.state.value,
            "work_date": self.work_date.isoformat(),
            "attendance_id": self.attendance_id,
            "check_in_time": self.check_in_time.isoformat() if self.check_in_time else None,
            "check_out_time": self.check_out_time.isoformat() if self.check_out_time else None,
            "total_hours": self.total_hours,
            "elapsed": self.elapsed_display,
        }


class AttendanceCycle:
    def __init__(
        self,
        service: AttendanceService,
        actor: Actor,
        *,
        scheduler: Scheduler,
        events: Optional[EventHub] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._service = service
        self._actor = actor
        self._scheduler = scheduler
        self._events = events
        self._clock = clock
        self._lock = threading.RLock()

        self._state = CycleState.NOT_CHECKED_IN
        self._record: Optional[AttendanceRecord] = None
        self._work_date: date = clock().date()
        self._midnight: Optional[ScheduledCall] = None
        self._focus: Optional[Subscription] = None
        self._closed = False

    @property
    def state(self) -> CycleState:
        return self._state

    @property
    def record(self) -> Optional[AttendanceRecord]:
        return self._record

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self) -> "AttendanceCycle":
        self._sync_quietly()
        self._schedule_midnight()
        if self._events is not None:
            self._focus = self._events.subscribe(FOCUS_TOPIC, self._sync_quietly)
        return self

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            if self._midnight is not None:
                self._midnight.cancel()
                self._midnight = None
            if self._focus is not None:
                self._focus.unsubscribe()
                self._focus = None

    def sync(self) -> CycleState:
        """Re-read today's record and derive the state from it."""

        today = self._clock().date()
        record = self._service.get_today_record(self._actor, today=today)
        with self._lock:
            self._work_date = today
            self._apply(record)
            return self._state

    def check_in(self, *, address: Optional[str] = None) -> AttendanceRecord:
        with self._lock:
            if self._state == CycleState.CHECKED_IN:
                raise ConflictError("You have already checked in today")
            if self._state == CycleState.COMPLETED_TODAY:
                raise ValidationError("Attendance for today is already completed. You can check in again tomorrow.")

            record = self._service.check_in(self._actor, address=address, now=self._clock())
            self._apply(record)
            return record

    def request_check_out(self) -> CheckoutForm:
        with self._lock:
            if self._state != CycleState.CHECKED_IN or self._record is None:
                raise ValidationError("You have not checked in today")
            return CheckoutForm(check_in_time=self._record.check_in_time, out_time=self._clock(), slots=blank_slots())

    def submit_check_out(
        self,
        entries: Sequence[TimesheetEntryInput],
        *,
        address: Optional[str] = None,
    ) -> CheckoutResult:
        with self._lock:
            if self._state != CycleState.CHECKED_IN or self._record is None:
                raise ValidationError("You have not checked in today")

            result = self._service.check_out(self._actor, entries, address=address, now=self._clock())
            record = self._record
            self._apply(
                AttendanceRecord(
                    attendance_id=record.attendance_id,
                    profile_id=record.profile_id,
                    work_date=record.work_date,
                    check_in_time=record.check_in_time,
                    check_out_time=result.check_out_time,
                    check_in_address=record.check_in_address,
                    check_out_address=address,
                    total_hours=result.total_hours,
                    status=record.status,
                    timesheet_completed=True,
                    notes=record.notes,
                )
            )
            return result

    def elapsed_seconds(self, now: Optional[datetime] = None) -> float:
        with self._lock:
            record = self._record
            if self._state == CycleState.CHECKED_IN and record and record.check_in_time:
                return max(((now or self._clock()) - record.check_in_time).total_seconds(), 0.0)
            if self._state == CycleState.COMPLETED_TODAY and record and record.total_hours is not None:
                return float(record.total_hours) * 3600
            return 0.0

    def snapshot(self, now: Optional[datetime] = None) -> CycleSnapshot:
        with self._lock:
            record = self._record
            return CycleSnapshot(
                state=self._state,
                work_date=self._work_date,
                attendance_id=record.attendance_id if record else None,
                check_in_time=record.check_in_time if record else None,
                check_out_time=record.check_out_time if record else None,
                total_hours=record.total_hours if record else None,
                elapsed_seconds=self.elapsed_seconds(now),
            )

    def _apply(self, record: Optional[AttendanceRecord]) -> None:
        self._record = record
        if record is None or record.check_in_time is None:
            self._state = CycleState.NOT_CHECKED_IN
        elif record.check_out_time is None:
            self._state = CycleState.CHECKED_IN
        else:
            self._state = CycleState.COMPLETED_TODAY

    def _sync_quietly(self) -> None:
        # Background resyncs keep the last known state when the backend fails.
        try:
            self.sync()
        except Exception:
            logger.exception("Attendance resync failed for profile %s", self._actor.profile_id)

    def _schedule_midnight(self) -> None:
        with self._lock:
            if self._closed:
                return
            delay = seconds_until_next_midnight(self._clock())
            self._midnight = self._scheduler.call_later(delay, self._on_midnight)

    def _on_midnight(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._work_date = self._clock().date()
            self._apply(None)
        logger.info("Attendance cycle reset at midnight for profile %s", self._actor.profile_id)
        self._sync_quietly()
        self._schedule_midnight()


class AttendanceCycleRegistry:
    """Starts a cycle for every opened session and closes it with the session."""

    def __init__(
        self,
        service: AttendanceService,
        *,
        scheduler: Scheduler,
        clock: Callable[[], datetime] = now_local,
    ):
        self._service = service
        self._scheduler = scheduler
        self._clock = clock
        self._cycles: Dict[str, AttendanceCycle] = {}
        self._lock = threading.Lock()

    def attach(self, user_session) -> AttendanceCycle:
        cycle = AttendanceCycle(
            self._service,
            user_session.user,
            scheduler=self._scheduler,
            events=user_session.events,
            clock=self._clock,
        )
        token = user_session.token
        with self._lock:
            self._cycles[token] = cycle
        user_session.on_close(lambda: self.detach(token))
        return cycle.start()

    def detach(self, token: str) -> None:
        with self._lock:
            cycle = self._cycles.pop(token, None)
        if cycle is not None:
            cycle.close()

    def get(self, token: Optional[str]) -> Optional[AttendanceCycle]:
        if not token:
            return None
        with self._lock:
            return self._cycles.get(token)

    def __len__(self) -> int:
        with self._lock:
            return len(self._cycles)
