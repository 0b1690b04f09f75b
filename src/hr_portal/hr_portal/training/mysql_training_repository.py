from __future__ import annotations

from datetime import date, time
from typing import Any, Dict, Optional, Sequence

from ..core.enums import Role, TrainingStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import DailyTraining, OngoingTraining, TrainingSummaryRow
from .repository import TrainingRepository

_DAILY_COLUMNS = "training_id, profile_id, name, domain, description, training_date, time_from, time_to"
_ONGOING_COLUMNS = "training_id, profile_id, name, domain, from_date, to_date, time_from, time_to, status"


def _to_daily(r: Dict[str, Any]) -> DailyTraining:
    return DailyTraining(
        training_id=int(r["training_id"]),
        profile_id=int(r["profile_id"]),
        name=r["name"],
        domain=r.get("domain"),
        description=r.get("description"),
        training_date=r["training_date"],
        time_from=normalize_mysql_time(r.get("time_from")),
        time_to=normalize_mysql_time(r.get("time_to")),
    )


def _to_ongoing(r: Dict[str, Any]) -> OngoingTraining:
    return OngoingTraining(
        training_id=int(r["training_id"]),
        profile_id=int(r["profile_id"]),
        name=r["name"],
        domain=r.get("domain"),
        from_date=r["from_date"],
        to_date=r.get("to_date"),
        time_from=normalize_mysql_time(r.get("time_from")),
        time_to=normalize_mysql_time(r.get("time_to")),
        status=TrainingStatus(r.get("status") or TrainingStatus.ONGOING.value),
    )


class MySQLTrainingRepository(TrainingRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def add_daily(
        self,
        *,
        profile_id: int,
        name: str,
        domain: Optional[str],
        description: Optional[str],
        training_date: date,
        time_from: Optional[time],
        time_to: Optional[time],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO daily_training(profile_id, name, domain, description, training_date, time_from, time_to)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (int(profile_id), name, domain, description, training_date, time_from, time_to),
            )
            return int(cur.lastrowid)

    def get_daily(self, training_id: int) -> Optional[DailyTraining]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_DAILY_COLUMNS} FROM daily_training WHERE training_id=%s", (int(training_id),))
            r = fetchone(cur)
            return _to_daily(r) if r else None

    def update_daily(
        self,
        *,
        training_id: int,
        name: str,
        domain: Optional[str],
        description: Optional[str],
        training_date: date,
        time_from: Optional[time],
        time_to: Optional[time],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE daily_training
                SET name=%s, domain=%s, description=%s, training_date=%s, time_from=%s, time_to=%s
                WHERE training_id=%s
                """,
                (name, domain, description, training_date, time_from, time_to, int(training_id)),
            )
            return cur.rowcount > 0

    def list_daily(self, *, profile_id: int, start_date: date, end_date: date) -> Sequence[DailyTraining]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_DAILY_COLUMNS}
                FROM daily_training
                WHERE profile_id=%s AND training_date BETWEEN %s AND %s
                ORDER BY training_date DESC, time_from ASC
                """,
                (int(profile_id), start_date, end_date),
            )
            return [_to_daily(r) for r in fetchall(cur)]

    def add_ongoing(
        self,
        *,
        profile_id: int,
        name: str,
        domain: Optional[str],
        from_date: date,
        to_date: Optional[date],
        time_from: Optional[time],
        time_to: Optional[time],
        status: TrainingStatus,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO ongoing_training(profile_id, name, domain, from_date, to_date, time_from, time_to, status)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (int(profile_id), name, domain, from_date, to_date, time_from, time_to, status.value),
            )
            return int(cur.lastrowid)

    def get_ongoing(self, training_id: int) -> Optional[OngoingTraining]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_ONGOING_COLUMNS} FROM ongoing_training WHERE training_id=%s", (int(training_id),))
            r = fetchone(cur)
            return _to_ongoing(r) if r else None

    def update_ongoing(
        self,
        *,
        training_id: int,
        name: str,
        domain: Optional[str],
        from_date: date,
        to_date: Optional[date],
        time_from: Optional[time],
        time_to: Optional[time],
        status: TrainingStatus,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE ongoing_training
                SET name=%s, domain=%s, from_date=%s, to_date=%s, time_from=%s, time_to=%s, status=%s
                WHERE training_id=%s
                """,
                (name, domain, from_date, to_date, time_from, time_to, status.value, int(training_id)),
            )
            return cur.rowcount > 0

    def list_ongoing(self, *, profile_id: int) -> Sequence[OngoingTraining]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_ONGOING_COLUMNS} FROM ongoing_training WHERE profile_id=%s ORDER BY from_date DESC",
                (int(profile_id),),
            )
            return [_to_ongoing(r) for r in fetchall(cur)]

    def summary(self, *, start_date: date, end_date: date) -> Sequence[TrainingSummaryRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT p.profile_id, p.first_name, p.last_name, p.employee_code,
                       (SELECT COUNT(*) FROM ongoing_training o WHERE o.profile_id = p.profile_id) AS ongoing_count,
                       (SELECT COUNT(*) FROM daily_training d
                        WHERE d.profile_id = p.profile_id AND d.training_date BETWEEN %s AND %s) AS daily_count
                FROM profiles p
                JOIN users u ON u.user_id = p.user_id
                WHERE u.role <> %s
                ORDER BY p.first_name ASC, p.last_name ASC
                """,
                (start_date, end_date, Role.ADMIN.value),
            )
            return [
                TrainingSummaryRow(
                    profile_id=int(r["profile_id"]),
                    full_name=" ".join(x for x in (r.get("first_name"), r.get("last_name")) if x),
                    employee_code=r.get("employee_code"),
                    ongoing_count=int(r.get("ongoing_count") or 0),
                    daily_count=int(r.get("daily_count") or 0),
                )
                for r in fetchall(cur)
            ]
