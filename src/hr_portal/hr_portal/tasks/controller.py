from __future__ import annotations

from flask import Flask, g

from ..common.web import guards, ok, optional_date, optional_int, payload
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    guard = guards(container)

    @app.route("/tasks", methods=["GET"], endpoint="tasks")
    @guard.login_required
    def tasks():
        return ok(tasks=container.task_service.list_tasks(g.actor))

    @app.route("/tasks/open", methods=["GET"], endpoint="tasks_open")
    @guard.login_required
    def tasks_open():
        return ok(tasks=container.task_service.list_open_tasks(g.actor))

    @app.route("/tasks", methods=["POST"], endpoint="tasks_create")
    @guard.staff_required
    def tasks_create():
        data = payload()
        assigned_to = optional_int(data.get("assigned_to"), "Assignee")
        if assigned_to is None:
            raise ValidationError("Assignee is required")
        task_id = container.task_service.create_task(
            g.actor,
            title=data.get("title", ""),
            assigned_to=assigned_to,
            description=data.get("description"),
            priority=data.get("priority") or "medium",
            due_date=optional_date(data.get("due_date")),
        )
        return ok(201, task_id=task_id)

    @app.route("/tasks/<int:task_id>/status", methods=["POST"], endpoint="task_status")
    @guard.login_required
    def task_status(task_id: int):
        data = payload()
        task = container.task_service.update_status(
            g.actor, task_id, status=str(data.get("status") or ""), reason=data.get("reason")
        )
        return ok(status=task.status.value, progress=task.progress)

    @app.route("/tasks/<int:task_id>", methods=["DELETE"], endpoint="task_delete")
    @guard.admin_required
    def task_delete(task_id: int):
        container.task_service.delete_task(g.actor, task_id)
        return ok(message="Task deleted")
