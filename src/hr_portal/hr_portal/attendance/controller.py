from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Optional

from flask import Flask, Response, g, request

from ..common.network import client_address
from ..common.web import guards, ok, optional_date, optional_int, payload
from ..core.constants import DEFAULT_HISTORY_LIMIT, DEFAULT_REPORT_DAYS, FOCUS_TOPIC, TIMESHEET_SLOTS
from ..core.exceptions import ValidationError
from ..container import Container
from .cycle import AttendanceCycle
from .report import report_to_csv
from .timesheet import TimesheetEntryInput

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    guard = guards(container)

    def current_cycle() -> AttendanceCycle:
        cycle = container.cycles.get(g.user_session.token)
        if cycle is None:
            cycle = container.cycles.attach(g.user_session)
        return cycle

    def caller_address() -> Optional[str]:
        return client_address(request, trust_proxy_headers=container.trust_proxy_headers)

    def report_range():
        end = optional_date(request.args.get("end")) or date.today()
        start = optional_date(request.args.get("start")) or end - timedelta(days=DEFAULT_REPORT_DAYS - 1)
        return start, end

    @app.route("/attendance/today", endpoint="attendance_today")
    @guard.login_required
    def attendance_today():
        return ok(attendance=current_cycle().snapshot().to_dict())

    @app.route("/attendance/focus", methods=["POST"], endpoint="attendance_focus")
    @guard.login_required
    def attendance_focus():
        cycle = current_cycle()
        g.user_session.events.publish(FOCUS_TOPIC)
        return ok(attendance=cycle.snapshot().to_dict())

    @app.route("/attendance/check-in", methods=["POST"], endpoint="attendance_check_in")
    @guard.login_required
    def attendance_check_in():
        cycle = current_cycle()
        cycle.check_in(address=caller_address())
        return ok(message="Checked in successfully", attendance=cycle.snapshot().to_dict())

    @app.route("/attendance/check-out", methods=["GET"], endpoint="attendance_check_out_form")
    @guard.login_required
    def attendance_check_out_form():
        return ok(form=current_cycle().request_check_out().to_dict())

    @app.route("/attendance/check-out", methods=["POST"], endpoint="attendance_check_out")
    @guard.login_required
    def attendance_check_out():
        raw = payload().get("entries") or []
        if not isinstance(raw, list):
            raise ValidationError("Timesheet entries must be a list")
        if len(raw) > TIMESHEET_SLOTS:
            raise ValidationError(f"At most {TIMESHEET_SLOTS} timesheet entries are allowed")
        if not all(isinstance(e, dict) for e in raw):
            raise ValidationError("Each timesheet entry must be an object")
        entries = [TimesheetEntryInput.from_dict(e) for e in raw]

        cycle = current_cycle()
        result = cycle.submit_check_out(entries, address=caller_address())
        return ok(
            message=f"Checked out successfully. Total hours: {result.total_hours:.2f}",
            total_hours=result.total_hours,
            timesheet_id=result.timesheet_id,
            attendance=cycle.snapshot().to_dict(),
        )

    @app.route("/attendance/history", endpoint="attendance_history")
    @guard.login_required
    def attendance_history():
        limit = optional_int(request.args.get("limit"), "Limit") or DEFAULT_HISTORY_LIMIT
        return ok(history=container.attendance_service.get_history_ui(g.actor, limit=limit))

    @app.route("/attendance/report", endpoint="attendance_report")
    @guard.login_required
    def attendance_report():
        start, end = report_range()
        report = container.attendance_report_service.build_attendance_report(
            g.actor,
            start=start,
            end=end,
            profile_id=optional_int(request.args.get("profile_id"), "Employee"),
        )
        return ok(start=start.isoformat(), end=end.isoformat(), rows=report.rows, summary=report.summary)

    @app.route("/attendance/report.csv", endpoint="attendance_report_csv")
    @guard.staff_required
    def attendance_report_csv():
        start, end = report_range()
        report = container.attendance_report_service.build_attendance_report(
            g.actor,
            start=start,
            end=end,
            profile_id=optional_int(request.args.get("profile_id"), "Employee"),
        )
        filename = f"attendance_{start.isoformat()}_{end.isoformat()}.csv"
        return Response(
            report_to_csv(report),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )
