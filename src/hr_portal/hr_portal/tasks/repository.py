from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import TaskPriority, TaskStatus
from .model import Task


class TaskRepository(Protocol):
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
        raise NotImplementedError

    def get_task(self, task_id: int) -> Optional[Task]:
        raise NotImplementedError

    def list_tasks(
        self,
        *,
        assigned_to: Optional[int] = None,
        statuses: Optional[Sequence[TaskStatus]] = None,
        limit: int = 200,
    ) -> Sequence[Task]:
        raise NotImplementedError

    def update_status(
        self,
        *,
        task_id: int,
        status: TaskStatus,
        progress: int,
        completed_at: Optional[datetime],
        description: Optional[str],
    ) -> bool:
        raise NotImplementedError

    def delete_task(self, task_id: int) -> bool:
        raise NotImplementedError
