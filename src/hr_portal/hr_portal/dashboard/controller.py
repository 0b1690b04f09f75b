from __future__ import annotations

from flask import Flask, g

from ..common.web import guards, ok
from ..core.enums import Role
from ..container import Container


def register(app: Flask, container: Container) -> None:
    guard = guards(container)

    @app.route("/dashboard", endpoint="dashboard")
    @guard.login_required
    def dashboard():
        if g.actor.role == Role.EMPLOYEE:
            data = container.dashboard_service.employee_dashboard(g.actor)
        else:
            data = container.dashboard_service.staff_dashboard(g.actor)

        cycle = container.cycles.get(g.user_session.token)
        return ok(dashboard=data, attendance=cycle.snapshot().to_dict() if cycle else None)
