from __future__ import annotations

from datetime import timedelta

import pytest
from werkzeug.security import generate_password_hash

from src.hr_portal.hr_portal.container import wire
from src.hr_portal.hr_portal.core.constants import SESSION_IDLE_MINUTES
from src.hr_portal.hr_portal.core.enums import Role
from src.hr_portal.hr_portal.main import create_app
from src.hr_portal.hr_portal.users.model import NewProfile

PASSWORD = "secret123"


def _add_user(users_repo, email, role, first_name):
    return users_repo.create_user(
        email=email,
        password_hash=generate_password_hash(PASSWORD),
        role=role,
        profile=NewProfile(first_name=first_name, last_name="Tester", email=email),
    )


@pytest.fixture
def container(monkeypatch, users_repo, departments_repo, attendance_repo, scheduler, clock):
    monkeypatch.setenv("APP_ENV", "testing")
    _add_user(users_repo, "mai@example.com", Role.EMPLOYEE, "Mai")
    _add_user(users_repo, "hana@example.com", Role.HR, "Hana")
    return wire(
        users_repo=users_repo,
        departments_repo=departments_repo,
        attendance_repo=attendance_repo,
        timesheets_repo=None,
        leaves_repo=None,
        tasks_repo=None,
        payroll_repo=None,
        training_repo=None,
        goalsheets_repo=None,
        announcements_repo=None,
        scheduler=scheduler,
        clock=clock,
    )


@pytest.fixture
def client(container):
    app = create_app(container)
    return app.test_client()


def _login(client, email="mai@example.com", password=PASSWORD):
    return client.post("/login", json={"email": email, "password": password})


def test_login_and_me(client):
    resp = _login(client)

    assert resp.status_code == 200
    assert resp.get_json()["redirect"] == "/employee"
    me = client.get("/me").get_json()
    assert me["user"]["email"] == "mai@example.com"


def test_bad_credentials_and_anonymous_access(client):
    assert _login(client, password="nope").status_code == 401
    resp = client.post("/attendance/check-in")
    assert resp.status_code == 401
    assert resp.get_json()["success"] is False


def test_attendance_day_over_http(client, clock, attendance_repo):
    _login(client)
    assert client.get("/attendance/today").get_json()["attendance"]["state"] == "NOT_CHECKED_IN"

    resp = client.post("/attendance/check-in")
    assert resp.status_code == 200
    assert resp.get_json()["attendance"]["state"] == "CHECKED_IN"
    [record] = attendance_repo.records.values()
    assert record.check_in_address == "127.0.0.1"

    assert client.post("/attendance/check-in").status_code == 409

    clock.now = clock.now.replace(hour=17, minute=30)
    form = client.get("/attendance/check-out").get_json()["form"]
    assert len(form["slots"]) == 10

    blank = client.post("/attendance/check-out", json={"entries": [{"from_time": "", "to_time": "", "description": ""}]})
    assert blank.status_code == 400
    assert "at least one timesheet entry" in blank.get_json()["message"]

    done = client.post(
        "/attendance/check-out",
        json={"entries": [{"from_time": "09:00", "to_time": "17:30", "description": "Release prep"}]},
    )
    body = done.get_json()
    assert done.status_code == 200
    assert body["total_hours"] == 8.5
    assert body["attendance"]["state"] == "COMPLETED_TODAY"

    again = client.post("/attendance/check-in")
    assert again.status_code == 400

    [row] = client.get("/attendance/history").get_json()["history"]
    assert row["total_hours"] == "08:30"


def test_check_out_rejects_oversized_form(client):
    _login(client)
    client.post("/attendance/check-in")

    resp = client.post("/attendance/check-out", json={"entries": [{"from_time": "09:00", "to_time": "10:00"}] * 11})

    assert resp.status_code == 400


def test_check_out_rejects_non_object_entries(client, attendance_repo):
    _login(client)
    client.post("/attendance/check-in")

    resp = client.post("/attendance/check-out", json={"entries": [{"from_time": "09:00", "to_time": "10:00"}, "10:00-11:00"]})

    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Each timesheet entry must be an object"
    assert client.get("/attendance/today").get_json()["attendance"]["state"] == "CHECKED_IN"


def test_unexpected_failure_is_a_500_and_state_survives(client, attendance_repo):
    _login(client)
    client.post("/attendance/check-in")
    attendance_repo.fail_checkout = True

    resp = client.post("/attendance/check-out", json={"entries": [{"from_time": "09:00", "to_time": "10:00"}]})

    assert resp.status_code == 500
    assert resp.get_json()["message"] == "Internal server error"
    assert client.get("/attendance/today").get_json()["attendance"]["state"] == "CHECKED_IN"


def test_focus_resyncs_with_changes_made_elsewhere(client, container, attendance_repo):
    _login(client)
    assert client.get("/attendance/today").get_json()["attendance"]["state"] == "NOT_CHECKED_IN"

    mai = container.auth_service.authenticate("mai@example.com", PASSWORD)
    container.attendance_service.check_in(mai, address="10.1.1.1")

    resp = client.post("/attendance/focus")
    assert resp.get_json()["attendance"]["state"] == "CHECKED_IN"


def test_check_in_race_with_another_session_is_a_409(client, container, attendance_repo):
    _login(client)
    mai = container.auth_service.authenticate("mai@example.com", PASSWORD)
    container.attendance_service.check_in(mai, address="10.1.1.1")
    attendance_repo.get_for_profile_and_date = lambda profile_id, work_date: None

    resp = client.post("/attendance/check-in")

    assert resp.status_code == 409
    assert resp.get_json()["message"] == "You have already checked in today"
    assert len(attendance_repo.records) == 1


def test_role_guards(client):
    _login(client)
    assert client.get("/employees").status_code == 403
    assert client.get("/attendance/report.csv").status_code == 403


def test_staff_can_export_report(client):
    _login(client, email="hana@example.com")

    resp = client.get("/attendance/report.csv?start=2026-03-01&end=2026-03-02")

    assert resp.status_code == 200
    assert resp.mimetype == "text/csv"
    assert resp.get_data(as_text=True).startswith("Employee Code,Full Name,Date")
    assert client.get("/attendance/report?start=2026-03-05&end=2026-03-01").status_code == 400


def test_logout_tears_down_the_cycle(client, container, scheduler):
    _login(client)
    assert len(container.cycles) == 1

    client.post("/logout")

    assert len(container.cycles) == 0
    assert len(container.sessions) == 0
    assert scheduler.pending == []
    assert client.get("/attendance/today").status_code == 401


def test_relogin_replaces_previous_session(client, container):
    _login(client)
    _login(client)

    assert len(container.sessions) == 1
    assert len(container.cycles) == 1


def test_abandoned_sessions_do_not_pile_up(container, clock, scheduler):
    app = create_app(container)
    for _ in range(25):
        _login(app.test_client())
    assert len(container.sessions) == 25

    clock.now += timedelta(minutes=SESSION_IDLE_MINUTES + 1)
    client = app.test_client()
    _login(client)

    assert len(container.sessions) == 1
    assert len(container.cycles) == 1
    assert len(scheduler.pending) == 1
    assert client.get("/me").status_code == 200


def test_idle_browser_must_sign_in_again(client, container, clock):
    _login(client)

    clock.now += timedelta(minutes=SESSION_IDLE_MINUTES + 1)

    assert client.get("/attendance/today").status_code == 401
    assert len(container.sessions) == 0
    assert len(container.cycles) == 0
