from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, List, Optional

from ..common.datetime_utils import now_local
from ..common.validators import optional_text, require_enum, require_non_empty
from ..core.constants import (
    DEFAULT_LIST_LIMIT,
    NOT_COMPLETED_REASON_TAG,
    TASK_PROGRESS_COMPLETED,
    TASK_PROGRESS_IN_PROGRESS,
)
from ..core.enums import TaskPriority, TaskStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..core.policies import AccessPolicy, Action, Actor
from .model import Task
from .repository import TaskRepository

logger = logging.getLogger(__name__)

# Status choices offered to the assignee; "not_completed" closes the task with a reason.
NOT_COMPLETED = "not_completed"


class TaskService:
    def __init__(
        self,
        tasks: TaskRepository,
        *,
        policy: Optional[AccessPolicy] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._tasks = tasks
        self._policy = policy or AccessPolicy()
        self._clock = clock

    def create_task(
        self,
        actor: Actor,
        *,
        title: str,
        assigned_to: int,
        description: Optional[str] = None,
        priority: str = TaskPriority.MEDIUM.value,
        due_date: Optional[date] = None,
    ) -> int:
        self._policy.require(actor, "tasks", Action.CREATE)
        task_id = self._tasks.create_task(
            title=require_non_empty(title, "Title"),
            description=optional_text(description),
            assigned_to=int(assigned_to),
            assigned_by=actor.profile_id,
            priority=require_enum(TaskPriority, priority or TaskPriority.MEDIUM.value, "Priority"),
            due_date=due_date,
        )
        logger.info("Task %s assigned to profile %s by profile %s", task_id, assigned_to, actor.profile_id)
        return task_id

    def update_status(self, actor: Actor, task_id: int, *, status: str, reason: Optional[str] = None) -> Task:
        task = self._tasks.get_task(int(task_id))
        if not task:
            raise NotFoundError("Task not found")
        self._policy.require(actor, "tasks", Action.UPDATE, owner_profile_id=task.assigned_to)

        description = task.description
        completed_at = None
        if status == NOT_COMPLETED:
            reason = require_non_empty(reason, "Reason")
            new_status = TaskStatus.CANCELLED
            progress = task.progress
            tagged = f"{NOT_COMPLETED_REASON_TAG}: {reason}"
            description = f"{description}\n\n{tagged}" if description else tagged
        else:
            new_status = require_enum(TaskStatus, status, "Status")
            progress = task.progress
            if new_status == TaskStatus.COMPLETED:
                progress = TASK_PROGRESS_COMPLETED
                completed_at = self._clock()
            elif new_status == TaskStatus.IN_PROGRESS:
                progress = TASK_PROGRESS_IN_PROGRESS

        if not self._tasks.update_status(
            task_id=task.task_id,
            status=new_status,
            progress=progress,
            completed_at=completed_at,
            description=description,
        ):
            raise ValidationError("Updating the task failed")

        return Task(
            task_id=task.task_id,
            title=task.title,
            description=description,
            assigned_to=task.assigned_to,
            assigned_by=task.assigned_by,
            priority=task.priority,
            status=new_status,
            progress=progress,
            due_date=task.due_date,
            created_at=task.created_at,
            completed_at=completed_at,
            assignee_name=task.assignee_name,
        )

    def delete_task(self, actor: Actor, task_id: int) -> None:
        self._policy.require(actor, "tasks", Action.DELETE)
        if not self._tasks.delete_task(int(task_id)):
            raise NotFoundError("Task not found")
        logger.info("Task %s deleted by profile %s", task_id, actor.profile_id)

    def list_tasks(self, actor: Actor) -> List[dict]:
        scope = self._policy.read_scope(actor, "tasks")
        return [self._to_ui(t) for t in self._tasks.list_tasks(assigned_to=scope, limit=DEFAULT_LIST_LIMIT)]

    def list_open_tasks(self, actor: Actor) -> List[dict]:
        rows = self._tasks.list_tasks(
            assigned_to=actor.profile_id,
            statuses=[TaskStatus.PENDING, TaskStatus.IN_PROGRESS],
            limit=DEFAULT_LIST_LIMIT,
        )
        return [self._to_ui(t) for t in rows]

    def _to_ui(self, t: Task) -> dict:
        return {
            "task_id": t.task_id,
            "title": t.title,
            "description": t.description or "",
            "assigned_to": t.assigned_to,
            "assignee_name": t.assignee_name,
            "priority": t.priority.value,
            "status": t.status.value,
            "progress": t.progress,
            "due_date": t.due_date.strftime("%Y-%m-%d") if t.due_date else "-",
            "completed_at": t.completed_at.strftime("%Y-%m-%d %H:%M") if t.completed_at else "-",
        }
