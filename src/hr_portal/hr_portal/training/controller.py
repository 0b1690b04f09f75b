from __future__ import annotations

from flask import Flask, g, request

from ..common.datetime_utils import parse_iso_date
from ..common.web import guards, ok, optional_date, optional_int, payload
from ..container import Container


def register(app: Flask, container: Container) -> None:
    guard = guards(container)

    @app.route("/training/daily", methods=["POST"], endpoint="training_daily_add")
    @guard.login_required
    def training_daily_add():
        data = payload()
        training_id = container.training_service.add_daily(
            g.actor,
            name=data.get("name", ""),
            training_date=parse_iso_date(str(data.get("date") or "")),
            domain=data.get("domain"),
            description=data.get("description"),
            time_from=data.get("time_from"),
            time_to=data.get("time_to"),
        )
        return ok(201, training_id=training_id)

    @app.route("/training/daily/<int:training_id>", methods=["PUT", "POST"], endpoint="training_daily_update")
    @guard.login_required
    def training_daily_update(training_id: int):
        data = payload()
        container.training_service.update_daily(
            g.actor,
            training_id,
            name=data.get("name", ""),
            training_date=parse_iso_date(str(data.get("date") or "")),
            domain=data.get("domain"),
            description=data.get("description"),
            time_from=data.get("time_from"),
            time_to=data.get("time_to"),
        )
        return ok(message="Training updated")

    @app.route("/training/ongoing", methods=["POST"], endpoint="training_ongoing_add")
    @guard.login_required
    def training_ongoing_add():
        data = payload()
        training_id = container.training_service.add_ongoing(
            g.actor,
            name=data.get("name", ""),
            from_date=parse_iso_date(str(data.get("from_date") or "")),
            to_date=optional_date(data.get("to_date")),
            domain=data.get("domain"),
            time_from=data.get("time_from"),
            time_to=data.get("time_to"),
            status=data.get("status") or "ongoing",
        )
        return ok(201, training_id=training_id)

    @app.route("/training/ongoing/<int:training_id>", methods=["PUT", "POST"], endpoint="training_ongoing_update")
    @guard.login_required
    def training_ongoing_update(training_id: int):
        data = payload()
        container.training_service.update_ongoing(
            g.actor,
            training_id,
            name=data.get("name", ""),
            from_date=parse_iso_date(str(data.get("from_date") or "")),
            to_date=optional_date(data.get("to_date")),
            domain=data.get("domain"),
            time_from=data.get("time_from"),
            time_to=data.get("time_to"),
            status=data.get("status") or "ongoing",
        )
        return ok(message="Training updated")

    @app.route("/training/details", endpoint="training_details")
    @guard.login_required
    def training_details():
        details = container.training_service.user_details(
            g.actor, optional_int(request.args.get("profile_id"), "Employee")
        )
        return ok(details=details.to_dict())

    @app.route("/training/summary", endpoint="training_summary")
    @guard.staff_required
    def training_summary():
        return ok(summary=container.training_service.summary(g.actor))
