from __future__ import annotations

from flask import Flask, g

from ..common.web import guards, ok, optional_int, payload
from ..core.exceptions import ValidationError
from ..container import Container


def _keyed(mapping) -> dict:
    """JSON object keys arrive as strings; goal items are addressed by int id."""

    if not isinstance(mapping, dict):
        return {}
    out = {}
    for key, value in mapping.items():
        try:
            out[int(key)] = value
        except (TypeError, ValueError):
            raise ValidationError(f"Unknown goal item: {key!r}")
    return out


def register(app: Flask, container: Container) -> None:
    guard = guards(container)

    @app.route("/target-types", endpoint="target_types")
    @guard.login_required
    def target_types():
        rows = container.goalsheet_service.list_target_types()
        return ok(target_types=[{"target_type_id": t.target_type_id, "name": t.name} for t in rows])

    @app.route("/goalsheets", methods=["GET"], endpoint="goalsheets")
    @guard.login_required
    def goalsheets():
        return ok(goalsheets=container.goalsheet_service.list_goalsheets(g.actor))

    @app.route("/goalsheets", methods=["POST"], endpoint="goalsheets_create")
    @guard.staff_required
    def goalsheets_create():
        data = payload()
        profile_id = optional_int(data.get("profile_id"), "Employee")
        if profile_id is None:
            raise ValidationError("Employee is required")
        items = [
            (optional_int(i.get("target_type_id"), "Target type"), i.get("goal"))
            for i in (data.get("items") or [])
            if isinstance(i, dict)
        ]
        goalsheet_id = container.goalsheet_service.create_goalsheet(
            g.actor,
            profile_id=profile_id,
            month=optional_int(data.get("month"), "Month") or 0,
            year=optional_int(data.get("year"), "Year") or 0,
            items=items,
        )
        return ok(201, goalsheet_id=goalsheet_id)

    @app.route("/goalsheets/<int:goalsheet_id>", endpoint="goalsheet_detail")
    @guard.login_required
    def goalsheet_detail(goalsheet_id: int):
        sheet = container.goalsheet_service.get_goalsheet(g.actor, goalsheet_id)
        return ok(goalsheet=container.goalsheet_service.to_dict(sheet))

    @app.route("/goalsheets/<int:goalsheet_id>/weeks/<int:week>", methods=["POST"], endpoint="goalsheet_week")
    @guard.login_required
    def goalsheet_week(goalsheet_id: int, week: int):
        data = payload()
        container.goalsheet_service.submit_week(
            g.actor,
            goalsheet_id,
            week=week,
            values=_keyed(data.get("values")),
            out_of_box=_keyed(data.get("out_of_box")),
        )
        return ok(message=f"Week {week} entries updated successfully")

    @app.route("/goalsheets/<int:goalsheet_id>/percentages", methods=["POST"], endpoint="goalsheet_percentages")
    @guard.login_required
    def goalsheet_percentages(goalsheet_id: int):
        progress, status = container.goalsheet_service.set_percentages(
            g.actor, goalsheet_id, _keyed(payload().get("percentages"))
        )
        return ok(overall_progress=progress, status=status.value)
