from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional, Tuple

from ..core.enums import GoalStatus


@dataclass(frozen=True)
class TargetType:
    target_type_id: int
    name: str
    description: Optional[str] = None
    sort_order: int = 0


@dataclass(frozen=True)
class GoalItem:
    item_id: int
    goalsheet_id: int
    target_type_id: Optional[int]
    title: str
    target_value: Optional[str] = None
    week_values: Tuple[Optional[str], ...] = (None, None, None, None)
    week_submitted: Tuple[bool, ...] = (False, False, False, False)
    out_of_box: Optional[str] = None
    overall_percentage: int = 0


@dataclass(frozen=True)
class Goalsheet:
    goalsheet_id: int
    profile_id: int
    title: str
    month: int
    year: int
    period_start: date
    period_end: date
    status: GoalStatus = GoalStatus.NOT_STARTED
    overall_progress: int = 0
    created_by: Optional[int] = None
    full_name: str = ""
    items: Tuple[GoalItem, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class NewGoalItem:
    target_type_id: int
    title: str
