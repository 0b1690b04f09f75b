from __future__ import annotations

import logging

from flask import Flask, g, session

from ..common.validators import require_enum
from ..common.web import SESSION_TOKEN_KEY, guards, ok, optional_date, optional_int, payload
from ..core.enums import Role
from ..container import Container
from .model import Profile
from .service import redirect_path_for

logger = logging.getLogger(__name__)


def _profile_ui(p: Profile) -> dict:
    return {
        "profile_id": p.profile_id,
        "user_id": p.user_id,
        "employee_code": p.employee_code or "-",
        "first_name": p.first_name,
        "last_name": p.last_name,
        "full_name": p.full_name,
        "email": p.email,
        "role": p.role.value,
        "phone": p.phone or "",
        "date_of_birth": p.date_of_birth.strftime("%Y-%m-%d") if p.date_of_birth else None,
        "department_id": p.department_id,
        "designation_id": p.designation_id,
        "joining_date": p.joining_date.strftime("%Y-%m-%d") if p.joining_date else None,
        "reporting_manager": p.reporting_manager or "",
        "employment_status": p.employment_status.value,
    }


def register(app: Flask, container: Container) -> None:
    guard = guards(container)

    @app.route("/login", methods=["POST"], endpoint="login")
    def login():
        data = payload()
        s_user = container.auth_service.authenticate(data.get("email", ""), data.get("password", ""))

        # A fresh sign-in replaces whatever session this browser held.
        container.sessions.close(session.get(SESSION_TOKEN_KEY))
        session.clear()
        user_session = container.sessions.open(s_user)
        session[SESSION_TOKEN_KEY] = user_session.token

        return ok(user=s_user.to_dict(), redirect=redirect_path_for(s_user.role))

    @app.route("/logout", methods=["POST"], endpoint="logout")
    def logout():
        container.sessions.close(session.get(SESSION_TOKEN_KEY))
        session.clear()
        return ok(message="Signed out")

    @app.route("/me", endpoint="me")
    @guard.login_required
    def me():
        return ok(user=g.actor.to_dict(), redirect=redirect_path_for(g.actor.role))

    @app.route("/employees", methods=["GET"], endpoint="employees")
    @guard.staff_required
    def employees():
        rows = container.user_service.list_employees(g.actor)
        return ok(employees=[_profile_ui(p) for p in rows])

    @app.route("/employees", methods=["POST"], endpoint="employees_create")
    @guard.staff_required
    def employees_create():
        data = payload()
        profile = container.user_service.create_user(
            g.actor,
            email=data.get("email", ""),
            password=data.get("password", ""),
            first_name=data.get("first_name", ""),
            last_name=data.get("last_name", ""),
            role=require_enum(Role, data.get("role") or Role.EMPLOYEE.value, "Role"),
            phone=data.get("phone"),
            employee_code=data.get("employee_code"),
            department_id=optional_int(data.get("department_id"), "Department"),
            designation_id=optional_int(data.get("designation_id"), "Designation"),
            date_of_birth=optional_date(data.get("date_of_birth")),
            joining_date=optional_date(data.get("joining_date")),
            reporting_manager=data.get("reporting_manager"),
        )
        return ok(201, employee=_profile_ui(profile))

    @app.route("/employees/<int:profile_id>", methods=["GET"], endpoint="employee_detail")
    @guard.login_required
    def employee_detail(profile_id: int):
        return ok(employee=_profile_ui(container.user_service.get_profile(g.actor, profile_id)))

    @app.route("/employees/<int:profile_id>", methods=["PUT", "POST"], endpoint="employee_update")
    @guard.login_required
    def employee_update(profile_id: int):
        data = payload()
        container.user_service.update_profile(
            g.actor,
            profile_id,
            first_name=data.get("first_name", ""),
            last_name=data.get("last_name", ""),
            phone=data.get("phone"),
            date_of_birth=optional_date(data.get("date_of_birth")),
            department_id=optional_int(data.get("department_id"), "Department"),
            designation_id=optional_int(data.get("designation_id"), "Designation"),
            reporting_manager=data.get("reporting_manager"),
        )
        return ok(message="Profile updated")

    @app.route("/employees/<int:profile_id>/terminate", methods=["POST"], endpoint="employee_terminate")
    @guard.staff_required
    def employee_terminate(profile_id: int):
        container.user_service.terminate(g.actor, profile_id)
        return ok(message="Employee terminated")

    @app.route("/users/<int:user_id>", methods=["DELETE"], endpoint="user_delete")
    @guard.admin_required
    def user_delete(user_id: int):
        container.user_service.delete_user(g.actor, user_id)
        return ok(message="Employee deleted")

    @app.route("/departments", methods=["GET"], endpoint="departments")
    @guard.login_required
    def departments():
        rows = container.user_service.list_departments()
        return ok(departments=[{"department_id": d.department_id, "name": d.name, "description": d.description or ""} for d in rows])

    @app.route("/departments", methods=["POST"], endpoint="departments_create")
    @guard.staff_required
    def departments_create():
        data = payload()
        department_id = container.user_service.create_department(
            g.actor, name=data.get("name", ""), description=data.get("description")
        )
        return ok(201, department_id=department_id)

    @app.route("/designations", methods=["GET"], endpoint="designations")
    @guard.login_required
    def designations():
        rows = container.user_service.list_designations()
        return ok(designations=[{"designation_id": d.designation_id, "name": d.name, "level": d.level} for d in rows])

    @app.route("/designations", methods=["POST"], endpoint="designations_create")
    @guard.staff_required
    def designations_create():
        data = payload()
        designation_id = container.user_service.create_designation(
            g.actor, name=data.get("name", ""), level=optional_int(data.get("level"), "Level") or 1
        )
        return ok(201, designation_id=designation_id)
