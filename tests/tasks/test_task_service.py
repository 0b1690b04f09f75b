from __future__ import annotations

from dataclasses import replace
from datetime import date

import pytest

from src.hr_portal.hr_portal.core.enums import TaskPriority, TaskStatus
from src.hr_portal.hr_portal.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.hr_portal.hr_portal.tasks.model import Task
from src.hr_portal.hr_portal.tasks.service import NOT_COMPLETED, TaskService


class InMemoryTasks:
    def __init__(self):
        self.tasks: dict[int, Task] = {}

    def create_task(self, *, title, description, assigned_to, assigned_by, priority, due_date):
        task_id = len(self.tasks) + 1
        self.tasks[task_id] = Task(
            task_id, title, description, assigned_to, assigned_by, priority, TaskStatus.PENDING, due_date=due_date
        )
        return task_id

    def get_task(self, task_id):
        return self.tasks.get(task_id)

    def list_tasks(self, *, assigned_to=None, statuses=None, limit=200):
        return [
            t
            for t in self.tasks.values()
            if (assigned_to is None or t.assigned_to == assigned_to) and (statuses is None or t.status in statuses)
        ][:limit]

    def update_status(self, *, task_id, status, progress, completed_at, description):
        if task_id not in self.tasks:
            return False
        self.tasks[task_id] = replace(
            self.tasks[task_id], status=status, progress=progress, completed_at=completed_at, description=description
        )
        return True

    def delete_task(self, task_id):
        return self.tasks.pop(task_id, None) is not None


@pytest.fixture
def repo():
    return InMemoryTasks()


@pytest.fixture
def service(repo, fixed_now):
    return TaskService(repo, clock=lambda: fixed_now)


@pytest.fixture
def task_id(service, hr_user, employee):
    return service.create_task(
        hr_user, title="Prepare Q1 report", assigned_to=employee.profile_id, description="Numbers", priority="high",
        due_date=date(2026, 3, 20),
    )


def test_create_task_assigns_priority(repo, task_id, hr_user):
    task = repo.tasks[task_id]
    assert task.priority == TaskPriority.HIGH
    assert task.assigned_by == hr_user.profile_id
    assert task.is_open


def test_employee_cannot_create_tasks(service, employee):
    with pytest.raises(AuthorizationError):
        service.create_task(employee, title="x", assigned_to=employee.profile_id)


def test_in_progress_then_completed_sets_progress(service, task_id, employee, fixed_now):
    assert service.update_status(employee, task_id, status="in_progress").progress == 50

    done = service.update_status(employee, task_id, status="completed")

    assert done.progress == 100
    assert done.completed_at == fixed_now
    assert service.list_open_tasks(employee) == []


def test_not_completed_requires_reason_and_tags_description(service, repo, task_id, employee):
    with pytest.raises(ValidationError):
        service.update_status(employee, task_id, status=NOT_COMPLETED, reason="  ")

    task = service.update_status(employee, task_id, status=NOT_COMPLETED, reason="Blocked by data access")

    assert task.status == TaskStatus.CANCELLED
    assert repo.tasks[task_id].description == "Numbers\n\n[NOT COMPLETED REASON]: Blocked by data access"


def test_only_assignee_or_staff_can_update(service, task_id, actor_factory):
    with pytest.raises(AuthorizationError):
        service.update_status(actor_factory(profile_id=8), task_id, status="completed")


def test_unknown_status_and_task(service, task_id, employee):
    with pytest.raises(ValidationError):
        service.update_status(employee, task_id, status="archived")
    with pytest.raises(NotFoundError):
        service.update_status(employee, 999, status="completed")


def test_delete_is_admin_only(service, repo, task_id, hr_user, admin_user):
    with pytest.raises(AuthorizationError):
        service.delete_task(hr_user, task_id)

    service.delete_task(admin_user, task_id)

    assert repo.tasks == {}
    with pytest.raises(NotFoundError):
        service.delete_task(admin_user, task_id)


def test_list_tasks_ui_rows(service, task_id, employee, actor_factory):
    [row] = service.list_tasks(employee)
    assert row["due_date"] == "2026-03-20"
    assert row["priority"] == "high"
    assert service.list_tasks(actor_factory(profile_id=8)) == []
