from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, time
from typing import Callable, List, Optional

from ..common.datetime_utils import parse_clock_time
from ..common.validators import optional_text, require_enum, require_non_empty
from ..core.enums import TrainingStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..core.policies import AccessPolicy, Action, Actor
from ..users.repository import UserRepository
from .model import DailyTraining, OngoingTraining
from .repository import TrainingRepository


@dataclass(frozen=True)
class TrainingDetails:
    profile_id: int
    full_name: str
    ongoing: List[dict]
    daily: List[dict]

    def to_dict(self) -> dict:
        return {
            "profile_id": self.profile_id,
            "full_name": self.full_name,
            "ongoing": self.ongoing,
            "daily": self.daily,
        }


def month_bounds(day: date) -> tuple[date, date]:
    last = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=1), day.replace(day=last)


def _fmt_time(t: Optional[time]) -> str:
    return t.strftime("%H:%M") if t else "-"


def _check_range(time_from: Optional[time], time_to: Optional[time]) -> None:
    if time_from and time_to and time_to <= time_from:
        raise ValidationError("End time must be after start time")


class TrainingService:
    def __init__(
        self,
        training: TrainingRepository,
        users: UserRepository,
        *,
        policy: Optional[AccessPolicy] = None,
        today: Callable[[], date] = date.today,
    ):
        self._training = training
        self._users = users
        self._policy = policy or AccessPolicy()
        self._today = today

    def add_daily(
        self,
        actor: Actor,
        *,
        name: str,
        training_date: date,
        domain: Optional[str] = None,
        description: Optional[str] = None,
        time_from: Optional[str] = None,
        time_to: Optional[str] = None,
    ) -> int:
        self._policy.require(actor, "training", Action.CREATE, owner_profile_id=actor.profile_id)
        t_from, t_to = parse_clock_time(time_from), parse_clock_time(time_to)
        _check_range(t_from, t_to)
        return self._training.add_daily(
            profile_id=actor.profile_id,
            name=require_non_empty(name, "Training name"),
            domain=optional_text(domain),
            description=optional_text(description),
            training_date=training_date,
            time_from=t_from,
            time_to=t_to,
        )

    def update_daily(
        self,
        actor: Actor,
        training_id: int,
        *,
        name: str,
        training_date: date,
        domain: Optional[str] = None,
        description: Optional[str] = None,
        time_from: Optional[str] = None,
        time_to: Optional[str] = None,
    ) -> None:
        item = self._training.get_daily(int(training_id))
        if not item:
            raise NotFoundError("Training not found")
        self._policy.require(actor, "training", Action.UPDATE, owner_profile_id=item.profile_id)
        t_from, t_to = parse_clock_time(time_from), parse_clock_time(time_to)
        _check_range(t_from, t_to)
        self._training.update_daily(
            training_id=item.training_id,
            name=require_non_empty(name, "Training name"),
            domain=optional_text(domain),
            description=optional_text(description),
            training_date=training_date,
            time_from=t_from,
            time_to=t_to,
        )

    def add_ongoing(
        self,
        actor: Actor,
        *,
        name: str,
        from_date: date,
        to_date: Optional[date] = None,
        domain: Optional[str] = None,
        time_from: Optional[str] = None,
        time_to: Optional[str] = None,
        status: str = TrainingStatus.ONGOING.value,
    ) -> int:
        self._policy.require(actor, "training", Action.CREATE, owner_profile_id=actor.profile_id)
        if to_date and to_date < from_date:
            raise ValidationError("To date must be on or after from date")
        t_from, t_to = parse_clock_time(time_from), parse_clock_time(time_to)
        return self._training.add_ongoing(
            profile_id=actor.profile_id,
            name=require_non_empty(name, "Training name"),
            domain=optional_text(domain),
            from_date=from_date,
            to_date=to_date,
            time_from=t_from,
            time_to=t_to,
            status=require_enum(TrainingStatus, status or TrainingStatus.ONGOING.value, "Status"),
        )

    def update_ongoing(
        self,
        actor: Actor,
        training_id: int,
        *,
        name: str,
        from_date: date,
        to_date: Optional[date] = None,
        domain: Optional[str] = None,
        time_from: Optional[str] = None,
        time_to: Optional[str] = None,
        status: str = TrainingStatus.ONGOING.value,
    ) -> None:
        item = self._training.get_ongoing(int(training_id))
        if not item:
            raise NotFoundError("Training not found")
        self._policy.require(actor, "training", Action.UPDATE, owner_profile_id=item.profile_id)
        if to_date and to_date < from_date:
            raise ValidationError("To date must be on or after from date")
        self._training.update_ongoing(
            training_id=item.training_id,
            name=require_non_empty(name, "Training name"),
            domain=optional_text(domain),
            from_date=from_date,
            to_date=to_date,
            time_from=parse_clock_time(time_from),
            time_to=parse_clock_time(time_to),
            status=require_enum(TrainingStatus, status or TrainingStatus.ONGOING.value, "Status"),
        )

    def today_daily(self, actor: Actor) -> List[dict]:
        today = self._today()
        return [self._daily_ui(d) for d in self._training.list_daily(profile_id=actor.profile_id, start_date=today, end_date=today)]

    def user_details(self, actor: Actor, profile_id: Optional[int] = None) -> TrainingDetails:
        """Name, ongoing items and this month's daily items of one profile."""

        profile_id = int(profile_id) if profile_id is not None else actor.profile_id
        self._policy.require(actor, "training", Action.READ, owner_profile_id=profile_id)
        profile = self._users.get_profile(profile_id)
        if not profile:
            raise NotFoundError("Employee not found")

        start, end = month_bounds(self._today())
        return TrainingDetails(
            profile_id=profile_id,
            full_name=profile.full_name,
            ongoing=[self._ongoing_ui(o) for o in self._training.list_ongoing(profile_id=profile_id)],
            daily=[self._daily_ui(d) for d in self._training.list_daily(profile_id=profile_id, start_date=start, end_date=end)],
        )

    def summary(self, actor: Actor) -> List[dict]:
        self._policy.require(actor, "training", Action.READ)
        start, end = month_bounds(self._today())
        return [
            {
                "profile_id": r.profile_id,
                "full_name": r.full_name,
                "employee_code": r.employee_code or "-",
                "ongoing_count": r.ongoing_count,
                "daily_count": r.daily_count,
            }
            for r in self._training.summary(start_date=start, end_date=end)
        ]

    def _daily_ui(self, d: DailyTraining) -> dict:
        return {
            "training_id": d.training_id,
            "name": d.name,
            "domain": d.domain or "",
            "description": d.description or "",
            "date": d.training_date.strftime("%Y-%m-%d"),
            "time_from": _fmt_time(d.time_from),
            "time_to": _fmt_time(d.time_to),
        }

    def _ongoing_ui(self, o: OngoingTraining) -> dict:
        return {
            "training_id": o.training_id,
            "name": o.name,
            "domain": o.domain or "",
            "from_date": o.from_date.strftime("%Y-%m-%d"),
            "to_date": o.to_date.strftime("%Y-%m-%d") if o.to_date else "-",
            "time_from": _fmt_time(o.time_from),
            "time_to": _fmt_time(o.time_to),
            "status": o.status.value,
        }
