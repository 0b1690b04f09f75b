from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence

from ..core.enums import LeaveStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, unique_violation_as
from .model import LeaveBalance, LeaveRequest, LeaveType
from .repository import LeaveRepository


def _to_leave(r: Dict[str, Any]) -> LeaveRequest:
    return LeaveRequest(
        leave_id=int(r["leave_id"]),
        profile_id=int(r["profile_id"]),
        leave_type_id=int(r["leave_type_id"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        total_days=int(r["total_days"]),
        reason=r.get("reason"),
        status=LeaveStatus(r["status"]),
        created_at=r["created_at"],
        approved_by=r.get("approved_by"),
        approved_at=r.get("approved_at"),
        rejection_reason=r.get("rejection_reason"),
    )


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_types(self) -> Sequence[LeaveType]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT leave_type_id, name, default_days, is_paid, description FROM leave_types ORDER BY name ASC"
            )
            return [
                LeaveType(
                    leave_type_id=int(r["leave_type_id"]),
                    name=r["name"],
                    default_days=int(r.get("default_days") or 0),
                    is_paid=bool(r.get("is_paid", True)),
                    description=r.get("description"),
                )
                for r in fetchall(cur)
            ]

    def create_balance(self, *, profile_id: int, leave_type_id: int, year: int, total_days: int) -> int:
        with unique_violation_as("Leave balance already exists"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_balances(profile_id, leave_type_id, year, total_days, used_days)
                VALUES(%s,%s,%s,%s,0)
                """,
                (int(profile_id), int(leave_type_id), int(year), int(total_days)),
            )
            return int(cur.lastrowid)

    def list_balances(self, *, profile_id: int, year: int) -> Sequence[LeaveBalance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT balance_id, profile_id, leave_type_id, year, total_days, used_days
                FROM leave_balances
                WHERE profile_id=%s AND year=%s
                ORDER BY leave_type_id ASC
                """,
                (int(profile_id), int(year)),
            )
            return [
                LeaveBalance(
                    balance_id=int(r["balance_id"]),
                    profile_id=int(r["profile_id"]),
                    leave_type_id=int(r["leave_type_id"]),
                    year=int(r["year"]),
                    total_days=int(r["total_days"]),
                    used_days=int(r.get("used_days") or 0),
                )
                for r in fetchall(cur)
            ]

    def create_leave(
        self,
        *,
        profile_id: int,
        leave_type_id: int,
        start_date: date,
        end_date: date,
        total_days: int,
        reason: Optional[str],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leaves(profile_id, leave_type_id, start_date, end_date, total_days, reason, status)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(profile_id),
                    int(leave_type_id),
                    start_date,
                    end_date,
                    int(total_days),
                    reason,
                    LeaveStatus.PENDING.value,
                ),
            )
            return int(cur.lastrowid)

    def get_leave(self, leave_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT leave_id, profile_id, leave_type_id, start_date, end_date, total_days, reason,
                       status, created_at, approved_by, approved_at, rejection_reason
                FROM leaves
                WHERE leave_id=%s
                """,
                (int(leave_id),),
            )
            r = fetchone(cur)
            return _to_leave(r) if r else None

    def list_leaves(
        self,
        *,
        profile_id: Optional[int] = None,
        status: Optional[LeaveStatus] = None,
        limit: int = 200,
    ) -> Sequence[dict]:
        clauses = ["1=1"]
        params: list[object] = []

        if status is not None:
            clauses.append("l.status=%s")
            params.append(status.value)
        if profile_id is not None:
            clauses.append("l.profile_id=%s")
            params.append(int(profile_id))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT l.leave_id, l.profile_id, p.first_name, p.last_name, p.employee_code,
                       lt.name AS leave_type, l.start_date, l.end_date, l.total_days, l.reason,
                       l.status, l.created_at, l.rejection_reason
                FROM leaves l
                JOIN profiles p ON p.profile_id = l.profile_id
                JOIN leave_types lt ON lt.leave_type_id = l.leave_type_id
                WHERE {where}
                ORDER BY l.created_at DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [
                {
                    "leave_id": int(r["leave_id"]),
                    "profile_id": int(r["profile_id"]),
                    "full_name": " ".join(x for x in (r.get("first_name"), r.get("last_name")) if x),
                    "employee_code": r.get("employee_code") or "-",
                    "leave_type": r["leave_type"],
                    "start_date": r["start_date"].strftime("%Y-%m-%d"),
                    "end_date": r["end_date"].strftime("%Y-%m-%d"),
                    "total_days": int(r["total_days"]),
                    "reason": r.get("reason") or "",
                    "status": r["status"],
                    "created_at": r["created_at"].strftime("%Y-%m-%d %H:%M"),
                    "rejection_reason": r.get("rejection_reason") or "",
                }
                for r in fetchall(cur)
            ]

    def count_leaves(self, *, profile_id: int, status: LeaveStatus) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COUNT(*) AS c FROM leaves WHERE profile_id=%s AND status=%s",
                (int(profile_id), status.value),
            )
            r = fetchone(cur)
            return int(r["c"]) if r else 0

    def approve_leave(self, *, leave_id: int, decided_by: int, decided_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leaves
                SET status=%s, approved_by=%s, approved_at=%s
                WHERE leave_id=%s AND status=%s
                """,
                (LeaveStatus.APPROVED.value, int(decided_by), decided_at, int(leave_id), LeaveStatus.PENDING.value),
            )
            if cur.rowcount == 0:
                return False

            cur.execute(
                """
                UPDATE leave_balances b
                JOIN leaves l ON l.profile_id = b.profile_id
                    AND l.leave_type_id = b.leave_type_id
                    AND b.year = YEAR(l.start_date)
                SET b.used_days = b.used_days + l.total_days
                WHERE l.leave_id=%s
                """,
                (int(leave_id),),
            )
            return True

    def reject_leave(
        self,
        *,
        leave_id: int,
        decided_by: int,
        decided_at: datetime,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leaves
                SET status=%s, approved_by=%s, approved_at=%s, rejection_reason=%s
                WHERE leave_id=%s AND status=%s
                """,
                (
                    LeaveStatus.REJECTED.value,
                    int(decided_by),
                    decided_at,
                    rejection_reason,
                    int(leave_id),
                    LeaveStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0

    def cancel_leave(self, *, leave_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE leaves SET status=%s WHERE leave_id=%s AND status=%s",
                (LeaveStatus.CANCELLED.value, int(leave_id), LeaveStatus.PENDING.value),
            )
            return cur.rowcount > 0
