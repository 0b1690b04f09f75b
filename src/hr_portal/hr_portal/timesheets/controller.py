from __future__ import annotations

from datetime import date, timedelta

from flask import Flask, g, request

from ..common.web import guards, ok, optional_date, optional_int
from ..core.constants import DEFAULT_REPORT_DAYS
from ..container import Container


def register(app: Flask, container: Container) -> None:
    guard = guards(container)

    @app.route("/timesheets", endpoint="timesheets")
    @guard.login_required
    def timesheets():
        end = optional_date(request.args.get("end")) or date.today()
        start = optional_date(request.args.get("start")) or end - timedelta(days=DEFAULT_REPORT_DAYS - 1)
        rows = container.timesheet_service.list_timesheets(
            g.actor,
            start=start,
            end=end,
            profile_id=optional_int(request.args.get("profile_id"), "Employee"),
        )
        return ok(start=start.isoformat(), end=end.isoformat(), timesheets=rows)

    @app.route("/timesheets/<int:timesheet_id>", endpoint="timesheet_detail")
    @guard.login_required
    def timesheet_detail(timesheet_id: int):
        detail = container.timesheet_service.get_detail(g.actor, timesheet_id)
        return ok(timesheet=detail.timesheet, entries=detail.entries)
