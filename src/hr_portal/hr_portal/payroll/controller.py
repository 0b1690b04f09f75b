from __future__ import annotations

from flask import Flask, g, request

from ..common.web import guards, ok, optional_date, optional_int, payload
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    guard = guards(container)

    @app.route("/payroll", methods=["GET"], endpoint="payroll")
    @guard.login_required
    def payroll():
        rows = container.payroll_service.list_payroll(
            g.actor,
            month=optional_int(request.args.get("month"), "Month"),
            year=optional_int(request.args.get("year"), "Year"),
        )
        return ok(payroll=rows)

    @app.route("/payroll", methods=["POST"], endpoint="payroll_create")
    @guard.staff_required
    def payroll_create():
        data = payload()
        profile_id = optional_int(data.get("profile_id"), "Employee")
        if profile_id is None:
            raise ValidationError("Employee is required")
        payroll_id = container.payroll_service.create_payroll(
            g.actor,
            profile_id=profile_id,
            month=data.get("month"),
            year=data.get("year"),
            amounts=data,
            remarks=data.get("remarks"),
        )
        return ok(201, payroll_id=payroll_id)

    @app.route("/payroll/<int:payroll_id>/paid", methods=["POST"], endpoint="payroll_paid")
    @guard.staff_required
    def payroll_paid(payroll_id: int):
        container.payroll_service.mark_paid(
            g.actor, payroll_id, payment_date=optional_date(payload().get("payment_date"))
        )
        return ok(message="Payroll marked as paid")
