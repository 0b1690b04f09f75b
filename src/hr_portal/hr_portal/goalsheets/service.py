from __future__ import annotations

import calendar
import logging
from datetime import date
from typing import List, Mapping, Optional, Sequence, Tuple

from ..common.validators import optional_text, require_percentage
from ..core.constants import GOAL_WEEKS
from ..core.enums import GoalStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..core.policies import AccessPolicy, Action, Actor
from .model import GoalItem, Goalsheet, NewGoalItem, TargetType
from .repository import GoalsheetRepository

logger = logging.getLogger(__name__)


def overall_progress(percentages: Sequence[int]) -> int:
    """Rounded average of the item percentages (halves round up)."""

    if not percentages:
        return 0
    return int(sum(percentages) / len(percentages) + 0.5)


class GoalsheetService:
    def __init__(self, goalsheets: GoalsheetRepository, *, policy: Optional[AccessPolicy] = None):
        self._goalsheets = goalsheets
        self._policy = policy or AccessPolicy()

    def list_target_types(self) -> Sequence[TargetType]:
        return self._goalsheets.list_target_types()

    def create_goalsheet(
        self,
        actor: Actor,
        *,
        profile_id: int,
        month: int,
        year: int,
        items: Sequence[Tuple[Optional[int], Optional[str]]],
    ) -> int:
        self._policy.require(actor, "goalsheets", Action.CREATE)
        if not 1 <= int(month) <= 12:
            raise ValidationError("Month must be between 1 and 12")

        valid = [
            NewGoalItem(target_type_id=int(type_id), title=optional_text(goal))
            for type_id, goal in items
            if type_id and optional_text(goal)
        ]
        if not valid:
            raise ValidationError("Add at least one goal with a target type")

        month, year = int(month), int(year)
        last_day = calendar.monthrange(year, month)[1]
        goalsheet_id = self._goalsheets.create_goalsheet(
            profile_id=int(profile_id),
            title=f"Goalsheet|{calendar.month_name[month]} {year}",
            month=month,
            year=year,
            period_start=date(year, month, 1),
            period_end=date(year, month, last_day),
            created_by=actor.profile_id,
            items=valid,
        )
        logger.info("Goalsheet %s created for profile %s", goalsheet_id, profile_id)
        return goalsheet_id

    def get_goalsheet(self, actor: Actor, goalsheet_id: int) -> Goalsheet:
        sheet = self._goalsheets.get_goalsheet(int(goalsheet_id))
        if not sheet:
            raise NotFoundError("Goalsheet not found")
        self._policy.require(actor, "goalsheets", Action.READ, owner_profile_id=sheet.profile_id)
        return sheet

    def list_goalsheets(self, actor: Actor) -> List[dict]:
        scope = self._policy.read_scope(actor, "goalsheets")
        return [self.to_dict(s) for s in self._goalsheets.list_goalsheets(profile_id=scope)]

    def submit_week(
        self,
        actor: Actor,
        goalsheet_id: int,
        *,
        week: int,
        values: Mapping[int, Optional[str]],
        out_of_box: Optional[Mapping[int, Optional[str]]] = None,
    ) -> None:
        sheet = self._require_updatable(actor, goalsheet_id)
        week = int(week)
        if not 1 <= week <= GOAL_WEEKS:
            raise ValidationError(f"Week must be between 1 and {GOAL_WEEKS}")

        item_ids = {i.item_id for i in sheet.items}
        cleaned = {item_id: optional_text(values.get(item_id)) for item_id in item_ids}
        extra = None
        if week == GOAL_WEEKS:
            extra = {item_id: optional_text((out_of_box or {}).get(item_id)) for item_id in item_ids}

        self._goalsheets.submit_week(goalsheet_id=sheet.goalsheet_id, week=week, values=cleaned, out_of_box=extra)

    def set_percentages(self, actor: Actor, goalsheet_id: int, percentages: Mapping[int, object]) -> Tuple[int, GoalStatus]:
        sheet = self._require_updatable(actor, goalsheet_id)

        cleaned = {i.item_id: require_percentage(percentages.get(i.item_id, 0), "Percentage") for i in sheet.items}
        progress = overall_progress(list(cleaned.values()))
        status = GoalStatus.COMPLETED if progress == 100 else GoalStatus.IN_PROGRESS

        self._goalsheets.save_percentages(
            goalsheet_id=sheet.goalsheet_id,
            percentages=cleaned,
            overall_progress=progress,
            status=status,
        )
        return progress, status

    def _require_updatable(self, actor: Actor, goalsheet_id: int) -> Goalsheet:
        sheet = self._goalsheets.get_goalsheet(int(goalsheet_id))
        if not sheet:
            raise NotFoundError("Goalsheet not found")
        self._policy.require(actor, "goalsheets", Action.UPDATE, owner_profile_id=sheet.profile_id)
        return sheet

    @staticmethod
    def to_dict(sheet: Goalsheet) -> dict:
        return {
            "goalsheet_id": sheet.goalsheet_id,
            "profile_id": sheet.profile_id,
            "full_name": sheet.full_name,
            "title": sheet.title,
            "month": sheet.month,
            "year": sheet.year,
            "period_start": sheet.period_start.strftime("%Y-%m-%d"),
            "period_end": sheet.period_end.strftime("%Y-%m-%d"),
            "status": sheet.status.value,
            "overall_progress": sheet.overall_progress,
            "items": [_item_dict(i) for i in sheet.items],
        }


def _item_dict(item: GoalItem) -> dict:
    out = {
        "item_id": item.item_id,
        "target_type_id": item.target_type_id,
        "title": item.title,
        "target_value": item.target_value,
        "out_of_box": item.out_of_box,
        "overall_percentage": item.overall_percentage,
    }
    for n, (value, submitted) in enumerate(zip(item.week_values, item.week_submitted), start=1):
        out[f"week{n}_value"] = value
        out[f"week{n}_submitted"] = submitted
    return out
