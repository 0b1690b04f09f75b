from __future__ import annotations

from datetime import date
from typing import Mapping, Optional, Protocol, Sequence

from ..core.enums import GoalStatus
from .model import Goalsheet, NewGoalItem, TargetType


class GoalsheetRepository(Protocol):
    def list_target_types(self) -> Sequence[TargetType]:
        raise NotImplementedError

    def create_goalsheet(
        self,
        *,
        profile_id: int,
        title: str,
        month: int,
        year: int,
        period_start: date,
        period_end: date,
        created_by: int,
        items: Sequence[NewGoalItem],
    ) -> int:
        """Insert the sheet and its items in one transaction."""

        raise NotImplementedError

    def get_goalsheet(self, goalsheet_id: int) -> Optional[Goalsheet]:
        """The sheet with its items loaded."""

        raise NotImplementedError

    def list_goalsheets(self, *, profile_id: Optional[int] = None) -> Sequence[Goalsheet]:
        """Sheets without items, newest period first."""

        raise NotImplementedError

    def submit_week(
        self,
        *,
        goalsheet_id: int,
        week: int,
        values: Mapping[int, Optional[str]],
        out_of_box: Optional[Mapping[int, Optional[str]]] = None,
    ) -> None:
        """Write one week's value per item, flag the week submitted and set the sheet in progress."""

        raise NotImplementedError

    def save_percentages(
        self,
        *,
        goalsheet_id: int,
        percentages: Mapping[int, int],
        overall_progress: int,
        status: GoalStatus,
    ) -> None:
        raise NotImplementedError
