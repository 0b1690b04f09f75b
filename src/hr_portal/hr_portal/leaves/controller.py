from __future__ import annotations

from flask import Flask, g, request

from ..common.datetime_utils import parse_iso_date
from ..common.validators import require_enum
from ..common.web import guards, ok, optional_int, payload
from ..core.enums import LeaveStatus
from ..container import Container


def register(app: Flask, container: Container) -> None:
    guard = guards(container)

    @app.route("/leave-types", endpoint="leave_types")
    @guard.login_required
    def leave_types():
        rows = container.leave_service.list_types()
        return ok(
            leave_types=[
                {"leave_type_id": t.leave_type_id, "name": t.name, "default_days": t.default_days, "is_paid": t.is_paid}
                for t in rows
            ]
        )

    @app.route("/leaves", methods=["GET"], endpoint="leaves")
    @guard.login_required
    def leaves():
        status = request.args.get("status")
        status = require_enum(LeaveStatus, status, "Status") if status else None
        return ok(leaves=container.leave_service.list_leaves(g.actor, status=status))

    @app.route("/leaves/mine", endpoint="leaves_mine")
    @guard.login_required
    def leaves_mine():
        return ok(
            leaves=container.leave_service.list_my_leaves(g.actor),
            pending=container.leave_service.count_pending(g.actor),
        )

    @app.route("/leaves", methods=["POST"], endpoint="leaves_apply")
    @guard.login_required
    def leaves_apply():
        data = payload()
        leave_id = container.leave_service.apply(
            g.actor,
            leave_type_id=optional_int(data.get("leave_type_id"), "Leave type") or 0,
            start_date=parse_iso_date(str(data.get("start_date") or "")),
            end_date=parse_iso_date(str(data.get("end_date") or "")),
            reason=data.get("reason"),
        )
        return ok(201, leave_id=leave_id)

    @app.route("/leaves/<int:leave_id>/approve", methods=["POST"], endpoint="leave_approve")
    @guard.staff_required
    def leave_approve(leave_id: int):
        container.leave_service.approve(g.actor, leave_id)
        return ok(message="Leave approved")

    @app.route("/leaves/<int:leave_id>/reject", methods=["POST"], endpoint="leave_reject")
    @guard.staff_required
    def leave_reject(leave_id: int):
        container.leave_service.reject(g.actor, leave_id, reason=payload().get("reason"))
        return ok(message="Leave rejected")

    @app.route("/leaves/<int:leave_id>/cancel", methods=["POST"], endpoint="leave_cancel")
    @guard.login_required
    def leave_cancel(leave_id: int):
        container.leave_service.cancel(g.actor, leave_id)
        return ok(message="Leave cancelled")

    @app.route("/leave-balances", endpoint="leave_balances")
    @guard.login_required
    def leave_balances():
        return ok(
            balances=container.leave_service.balances(
                g.actor,
                profile_id=optional_int(request.args.get("profile_id"), "Employee"),
                year=optional_int(request.args.get("year"), "Year"),
            )
        )
