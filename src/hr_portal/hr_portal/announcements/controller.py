from __future__ import annotations

from flask import Flask, g

from ..common.web import guards, ok, payload
from ..container import Container


def register(app: Flask, container: Container) -> None:
    guard = guards(container)

    @app.route("/announcements", methods=["GET"], endpoint="announcements")
    @guard.login_required
    def announcements():
        return ok(announcements=container.announcement_service.list_for(g.actor, limit=20))

    @app.route("/announcements", methods=["POST"], endpoint="announcements_create")
    @guard.staff_required
    def announcements_create():
        data = payload()
        roles = data.get("target_roles") or []
        if isinstance(roles, str):
            roles = [r.strip() for r in roles.split(",")]
        announcement_id = container.announcement_service.create(
            g.actor,
            title=data.get("title", ""),
            content=data.get("content", ""),
            priority=data.get("priority") or "normal",
            target_roles=roles,
        )
        return ok(201, announcement_id=announcement_id)

    @app.route("/announcements/<int:announcement_id>/deactivate", methods=["POST"], endpoint="announcement_deactivate")
    @guard.staff_required
    def announcement_deactivate(announcement_id: int):
        container.announcement_service.deactivate(g.actor, announcement_id)
        return ok(message="Announcement deactivated")
