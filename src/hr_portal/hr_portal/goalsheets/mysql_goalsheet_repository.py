from __future__ import annotations

from datetime import date
from typing import Any, Dict, Mapping, Optional, Sequence

from ..core.constants import GOAL_WEEKS
from ..core.enums import GoalStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import GoalItem, Goalsheet, NewGoalItem, TargetType
from .repository import GoalsheetRepository

_WEEKS = range(1, GOAL_WEEKS + 1)

_SHEET_SELECT = """
    SELECT g.goalsheet_id, g.profile_id, g.title, g.month, g.year, g.period_start, g.period_end,
           g.status, g.overall_progress, g.created_by, p.first_name, p.last_name
    FROM goalsheets g
    JOIN profiles p ON p.profile_id = g.profile_id
"""


def _to_sheet(r: Dict[str, Any], items=()) -> Goalsheet:
    return Goalsheet(
        goalsheet_id=int(r["goalsheet_id"]),
        profile_id=int(r["profile_id"]),
        title=r["title"],
        month=int(r["month"]),
        year=int(r["year"]),
        period_start=r["period_start"],
        period_end=r["period_end"],
        status=GoalStatus(r.get("status") or GoalStatus.NOT_STARTED.value),
        overall_progress=int(r.get("overall_progress") or 0),
        created_by=r.get("created_by"),
        full_name=" ".join(x for x in (r.get("first_name"), r.get("last_name")) if x),
        items=tuple(items),
    )


def _to_item(r: Dict[str, Any]) -> GoalItem:
    return GoalItem(
        item_id=int(r["item_id"]),
        goalsheet_id=int(r["goalsheet_id"]),
        target_type_id=r.get("target_type_id"),
        title=r["title"],
        target_value=r.get("target_value"),
        week_values=tuple(r.get(f"week{w}_value") for w in _WEEKS),
        week_submitted=tuple(bool(r.get(f"week{w}_submitted")) for w in _WEEKS),
        out_of_box=r.get("out_of_box"),
        overall_percentage=int(r.get("overall_percentage") or 0),
    )


class MySQLGoalsheetRepository(GoalsheetRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_target_types(self) -> Sequence[TargetType]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT target_type_id, name, description, sort_order
                FROM target_types
                WHERE is_active=1
                ORDER BY sort_order ASC, name ASC
                """
            )
            return [
                TargetType(
                    target_type_id=int(r["target_type_id"]),
                    name=r["name"],
                    description=r.get("description"),
                    sort_order=int(r.get("sort_order") or 0),
                )
                for r in fetchall(cur)
            ]

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO goalsheets(profile_id, title, month, year, period_start, period_end, status,
                                       overall_progress, created_by)
                VALUES(%s,%s,%s,%s,%s,%s,%s,0,%s)
                """,
                (
                    int(profile_id),
                    title,
                    int(month),
                    int(year),
                    period_start,
                    period_end,
                    GoalStatus.NOT_STARTED.value,
                    int(created_by),
                ),
            )
            goalsheet_id = int(cur.lastrowid)
            cur.executemany(
                "INSERT INTO goal_items(goalsheet_id, target_type_id, title) VALUES(%s,%s,%s)",
                [(goalsheet_id, int(i.target_type_id), i.title) for i in items],
            )
            return goalsheet_id

    def get_goalsheet(self, goalsheet_id: int) -> Optional[Goalsheet]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SHEET_SELECT} WHERE g.goalsheet_id=%s", (int(goalsheet_id),))
            sheet = fetchone(cur)
            if not sheet:
                return None

            week_columns = ", ".join(f"week{w}_value, week{w}_submitted" for w in _WEEKS)
            cur.execute(
                f"""
                SELECT item_id, goalsheet_id, target_type_id, title, target_value, {week_columns},
                       out_of_box, overall_percentage
                FROM goal_items
                WHERE goalsheet_id=%s
                ORDER BY item_id ASC
                """,
                (int(goalsheet_id),),
            )
            return _to_sheet(sheet, [_to_item(r) for r in fetchall(cur)])

    def list_goalsheets(self, *, profile_id: Optional[int] = None) -> Sequence[Goalsheet]:
        where, params = "1=1", ()
        if profile_id is not None:
            where, params = "g.profile_id=%s", (int(profile_id),)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SHEET_SELECT} WHERE {where} ORDER BY g.year DESC, g.month DESC, g.goalsheet_id DESC", params)
            return [_to_sheet(r) for r in fetchall(cur)]

    def submit_week(
        self,
        *,
        goalsheet_id: int,
        week: int,
        values: Mapping[int, Optional[str]],
        out_of_box: Optional[Mapping[int, Optional[str]]] = None,
    ) -> None:
        if week not in _WEEKS:
            raise ValueError(f"week out of range: {week}")

        with db_cursor(self._conn_factory) as (_, cur):
            for item_id, value in values.items():
                if out_of_box is not None:
                    cur.execute(
                        f"""
                        UPDATE goal_items SET week{week}_value=%s, week{week}_submitted=1, out_of_box=%s
                        WHERE item_id=%s AND goalsheet_id=%s
                        """,
                        (value, out_of_box.get(item_id), int(item_id), int(goalsheet_id)),
                    )
                else:
                    cur.execute(
                        f"""
                        UPDATE goal_items SET week{week}_value=%s, week{week}_submitted=1
                        WHERE item_id=%s AND goalsheet_id=%s
                        """,
                        (value, int(item_id), int(goalsheet_id)),
                    )
            cur.execute(
                "UPDATE goalsheets SET status=%s WHERE goalsheet_id=%s",
                (GoalStatus.IN_PROGRESS.value, int(goalsheet_id)),
            )

    def save_percentages(
        self,
        *,
        goalsheet_id: int,
        percentages: Mapping[int, int],
        overall_progress: int,
        status: GoalStatus,
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                "UPDATE goal_items SET overall_percentage=%s WHERE item_id=%s AND goalsheet_id=%s",
                [(int(pct), int(item_id), int(goalsheet_id)) for item_id, pct in percentages.items()],
            )
            cur.execute(
                "UPDATE goalsheets SET overall_progress=%s, status=%s WHERE goalsheet_id=%s",
                (int(overall_progress), status.value, int(goalsheet_id)),
            )
