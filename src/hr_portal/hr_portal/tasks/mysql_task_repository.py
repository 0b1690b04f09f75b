from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence

from ..core.enums import TaskPriority, TaskStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Task
from .repository import TaskRepository

_SELECT = """
    SELECT t.task_id, t.title, t.description, t.assigned_to, t.assigned_by, t.priority, t.status,
           t.progress, t.due_date, t.created_at, t.completed_at, p.first_name, p.last_name
    FROM tasks t
    JOIN profiles p ON p.profile_id = t.assigned_to
"""


def _to_task(r: Dict[str, Any]) -> Task:
    return Task(
        task_id=int(r["task_id"]),
        title=r["title"],
        description=r.get("description"),
        assigned_to=int(r["assigned_to"]),
        assigned_by=r.get("assigned_by"),
        priority=TaskPriority(r.get("priority") or TaskPriority.MEDIUM.value),
        status=TaskStatus(r.get("status") or TaskStatus.PENDING.value),
        progress=int(r.get("progress") or 0),
        due_date=r.get("due_date"),
        created_at=r.get("created_at"),
        completed_at=r.get("completed_at"),
        assignee_name=" ".join(x for x in (r.get("first_name"), r.get("last_name")) if x),
    )


class MySQLTaskRepository(TaskRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_task(
        self,
        *,
        title: str,
        description: Optional[str],
        assigned_to: int,
        assigned_by: int,
        priority: TaskPriority,
        due_date: Optional[date],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO tasks(title, description, assigned_to, assigned_by, priority, status, progress, due_date)
                VALUES(%s,%s,%s,%s,%s,%s,0,%s)
                """,
                (
                    title,
                    description,
                    int(assigned_to),
                    int(assigned_by),
                    priority.value,
                    TaskStatus.PENDING.value,
                    due_date,
                ),
            )
            return int(cur.lastrowid)

    def get_task(self, task_id: int) -> Optional[Task]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE t.task_id=%s", (int(task_id),))
            r = fetchone(cur)
            return _to_task(r) if r else None

    def list_tasks(
        self,
        *,
        assigned_to: Optional[int] = None,
        statuses: Optional[Sequence[TaskStatus]] = None,
        limit: int = 200,
    ) -> Sequence[Task]:
        clauses = ["1=1"]
        params: list[object] = []
        if assigned_to is not None:
            clauses.append("t.assigned_to=%s")
            params.append(int(assigned_to))
        if statuses:
            clauses.append(f"t.status IN ({', '.join(['%s'] * len(statuses))})")
            params.extend(s.value for s in statuses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT} WHERE {' AND '.join(clauses)} ORDER BY t.due_date IS NULL, t.due_date ASC, t.task_id DESC LIMIT %s",
                tuple(params + [int(limit)]),
            )
            return [_to_task(r) for r in fetchall(cur)]

    def update_status(
        self,
        *,
        task_id: int,
        status: TaskStatus,
        progress: int,
        completed_at: Optional[datetime],
        description: Optional[str],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE tasks
                SET status=%s, progress=%s, completed_at=%s, description=%s
                WHERE task_id=%s
                """,
                (status.value, int(progress), completed_at, description, int(task_id)),
            )
            return cur.rowcount > 0

    def delete_task(self, task_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM tasks WHERE task_id=%s", (int(task_id),))
            return cur.rowcount > 0
