from __future__ import annotations

from datetime import date

import pytest
from werkzeug.security import generate_password_hash

from src.hr_portal.hr_portal.core.enums import EmploymentStatus, Role
from src.hr_portal.hr_portal.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ValidationError,
)
from src.hr_portal.hr_portal.leaves.model import LeaveType
from src.hr_portal.hr_portal.users.model import NewProfile
from src.hr_portal.hr_portal.users.service import AuthService, UserService, redirect_path_for


class BalanceRecorder:
    def __init__(self):
        self.created = []

    def list_types(self):
        return [LeaveType(1, "Sick Leave", 12), LeaveType(4, "Unpaid Leave", 0, False)]

    def create_balance(self, *, profile_id, leave_type_id, year, total_days):
        self.created.append((profile_id, leave_type_id, year, total_days))
        return len(self.created)


@pytest.fixture
def leaves():
    return BalanceRecorder()


@pytest.fixture
def service(users_repo, departments_repo, leaves):
    return UserService(users_repo, departments_repo, leaves)


def _seed(users_repo, email="mai@example.com", password="secret123", role=Role.EMPLOYEE):
    return users_repo.create_user(
        email=email,
        password_hash=generate_password_hash(password),
        role=role,
        profile=NewProfile(first_name="Mai", last_name="Nguyen", email=email),
    )


def test_authenticate_returns_session_user(users_repo):
    profile = _seed(users_repo)

    user = AuthService(users_repo).authenticate("  MAI@example.com ", "secret123")

    assert user.profile_id == profile.profile_id
    assert user.role == Role.EMPLOYEE
    assert user.full_name == "Mai Nguyen"
    assert redirect_path_for(user.role) == "/employee"


@pytest.mark.parametrize("email,password", [("mai@example.com", "wrong"), ("nobody@example.com", "secret123"), ("", "")])
def test_authenticate_rejects_bad_credentials(users_repo, email, password):
    _seed(users_repo)
    with pytest.raises(AuthenticationError):
        AuthService(users_repo).authenticate(email, password)


def test_authenticate_rejects_placeholder_hash_and_terminated(users_repo):
    profile = _seed(users_repo)
    users_repo.set_employment_status(profile.profile_id, EmploymentStatus.FIRED)
    with pytest.raises(AuthenticationError):
        AuthService(users_repo).authenticate("mai@example.com", "secret123")

    users_repo.create_user(
        email="old@example.com",
        password_hash="CHANGE_ME",
        role=Role.HR,
        profile=NewProfile(first_name="Old", last_name="Account", email="old@example.com"),
    )
    with pytest.raises(AuthenticationError):
        AuthService(users_repo).authenticate("old@example.com", "CHANGE_ME")


def test_hr_creates_employee_with_leave_balances(service, users_repo, leaves, hr_user):
    profile = service.create_user(
        hr_user,
        email="New.Hire@Example.com",
        password="welcome1",
        first_name="New",
        last_name="Hire",
        role=Role.EMPLOYEE,
        employee_code=" EMP010 ",
        today=date(2026, 3, 2),
    )

    assert users_repo.get_by_email("new.hire@example.com") is not None
    assert profile.employee_code == "EMP010"
    assert profile.joining_date == date(2026, 3, 2)
    assert leaves.created == [(profile.profile_id, 1, 2026, 12), (profile.profile_id, 4, 2026, 0)]


def test_hr_cannot_create_hr_or_admin(service, hr_user):
    with pytest.raises(AuthorizationError):
        service.create_user(hr_user, email="x@example.com", password="welcome1", first_name="X", last_name="Y", role=Role.HR)


def test_create_user_validation(service, users_repo, admin_user):
    _seed(users_repo)
    with pytest.raises(ValidationError):
        service.create_user(admin_user, email="mai@example.com", password="welcome1", first_name="A", last_name="B", role=Role.HR)
    with pytest.raises(ValidationError):
        service.create_user(admin_user, email="short@example.com", password="123", first_name="A", last_name="B", role=Role.HR)
    with pytest.raises(ValidationError):
        service.create_user(admin_user, email="no-at-sign", password="welcome1", first_name="A", last_name="B", role=Role.HR)


def test_employee_updates_only_own_profile(service, users_repo, actor_factory):
    profile = _seed(users_repo)
    me = actor_factory(profile_id=profile.profile_id)

    service.update_profile(me, profile.profile_id, first_name="Mai", last_name="Tran", phone=" 0901 ")
    assert users_repo.get_profile(profile.profile_id).last_name == "Tran"
    assert users_repo.get_profile(profile.profile_id).phone == "0901"

    with pytest.raises(AuthorizationError):
        service.update_profile(actor_factory(profile_id=99), profile.profile_id, first_name="X", last_name="Y")


def test_terminate_rules(service, users_repo, hr_user):
    profile = _seed(users_repo)

    with pytest.raises(ValidationError):
        service.terminate(hr_user, hr_user.profile_id)
    service.terminate(hr_user, profile.profile_id)

    assert users_repo.get_profile(profile.profile_id).employment_status == EmploymentStatus.FIRED
    with pytest.raises(NotFoundError):
        service.terminate(hr_user, 404)


def test_delete_user_is_admin_only_and_spares_admins(service, users_repo, hr_user, admin_user):
    employee = _seed(users_repo)
    admin = _seed(users_repo, email="root@example.com", role=Role.ADMIN)

    with pytest.raises(AuthorizationError):
        service.delete_user(hr_user, employee.user_id)
    with pytest.raises(ValidationError):
        service.delete_user(admin_user, admin.user_id)

    service.delete_user(admin_user, employee.user_id)
    assert users_repo.get_by_id(employee.user_id) is None


def test_org_structure(service, hr_user, employee):
    service.create_department(hr_user, name=" QA ", description="")
    service.create_designation(hr_user, name="Lead", level=3)

    assert [d.name for d in service.list_departments()] == ["Engineering", "QA"]
    assert service.list_designations()[-1].level == 3
    with pytest.raises(ValidationError):
        service.create_designation(hr_user, name="Intern", level=0)
    with pytest.raises(AuthorizationError):
        service.create_department(employee, name="Ops")
