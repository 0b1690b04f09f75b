from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import TaskPriority, TaskStatus


@dataclass(frozen=True)
class Task:
    task_id: int
    title: str
    description: Optional[str]
    assigned_to: int
    assigned_by: Optional[int]
    priority: TaskPriority
    status: TaskStatus
    progress: int = 0
    due_date: Optional[date] = None
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    assignee_name: str = ""

    @property
    def is_open(self) -> bool:
        return self.status in {TaskStatus.PENDING, TaskStatus.IN_PROGRESS}
