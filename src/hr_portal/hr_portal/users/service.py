from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import optional_text, require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import EmploymentStatus, Role
from ..core.exceptions import AuthenticationError, NotFoundError, ValidationError
from ..core.policies import AccessPolicy, Action
from ..leaves.repository import LeaveRepository
from .department_model import Department, Designation
from .department_repository import DepartmentRepository
from .model import NewProfile, Profile
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """The signed-in identity every service receives as ``actor``."""

    user_id: int
    profile_id: int
    role: Role
    first_name: str
    last_name: str
    email: str

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p)

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "profile_id": self.profile_id,
            "role": self.role.value,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
        }


def redirect_path_for(role: Role) -> str:
    return {Role.ADMIN: "/admin", Role.HR: "/hr", Role.EMPLOYEE: "/employee"}.get(role, "/")


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, email: str, password: str) -> SessionUser:
        email = (email or "").strip().lower()
        user = self._users.get_by_email(email) if email else None
        if not user or not user.is_active:
            raise AuthenticationError("Invalid credentials")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except Exception:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError("Invalid credentials")

        profile = self._users.get_profile_for_user(user.user_id)
        if not profile or profile.employment_status in {EmploymentStatus.FIRED, EmploymentStatus.RESIGNED}:
            raise AuthenticationError("Invalid credentials")

        logger.info("User %s signed in as %s", user.user_id, user.role.value)
        return SessionUser(
            user_id=user.user_id,
            profile_id=profile.profile_id,
            role=user.role,
            first_name=profile.first_name,
            last_name=profile.last_name,
            email=user.email,
        )


class UserService:
    """Use case: manage users, profiles and the org structure (admin/HR)."""

    def __init__(
        self,
        users: UserRepository,
        departments: DepartmentRepository,
        leaves: Optional[LeaveRepository] = None,
        *,
        policy: Optional[AccessPolicy] = None,
    ):
        self._users = users
        self._departments = departments
        self._leaves = leaves
        self._policy = policy or AccessPolicy()

    def create_user(
        self,
        actor: SessionUser,
        *,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        role: Role,
        phone: Optional[str] = None,
        employee_code: Optional[str] = None,
        department_id: Optional[int] = None,
        designation_id: Optional[int] = None,
        date_of_birth: Optional[date] = None,
        joining_date: Optional[date] = None,
        reporting_manager: Optional[str] = None,
        today: Optional[date] = None,
    ) -> Profile:
        self._policy.require(actor, "users", Action.CREATE, target_role=role)

        email = require_non_empty(email, "Email").lower()
        if "@" not in email:
            raise ValidationError("Email is not valid")
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        first_name = require_non_empty(first_name, "First name")
        last_name = require_non_empty(last_name, "Last name")

        if self._users.get_by_email(email):
            raise ValidationError("Email or Employee ID already exists")

        today = today or date.today()
        profile = self._users.create_user(
            email=email,
            password_hash=generate_password_hash(password),
            role=role,
            profile=NewProfile(
                first_name=first_name,
                last_name=last_name,
                email=email,
                employee_code=optional_text(employee_code),
                phone=optional_text(phone),
                date_of_birth=date_of_birth,
                department_id=department_id,
                designation_id=designation_id,
                joining_date=joining_date or today,
                reporting_manager=optional_text(reporting_manager),
            ),
        )

        if self._leaves is not None:
            for leave_type in self._leaves.list_types():
                self._leaves.create_balance(
                    profile_id=profile.profile_id,
                    leave_type_id=leave_type.leave_type_id,
                    year=today.year,
                    total_days=int(leave_type.default_days),
                )

        logger.info("User %s created %s account for profile %s", actor.user_id, role.value, profile.profile_id)
        return profile

    def get_profile(self, actor: SessionUser, profile_id: int) -> Profile:
        self._policy.require(actor, "profiles", Action.READ, owner_profile_id=profile_id)
        profile = self._users.get_profile(int(profile_id))
        if not profile:
            raise NotFoundError("Employee not found")
        return profile

    def list_employees(self, actor: SessionUser) -> Sequence[Profile]:
        self._policy.require(actor, "profiles", Action.READ)
        return self._users.list_profiles(exclude_role=Role.ADMIN)

    def update_profile(
        self,
        actor: SessionUser,
        profile_id: int,
        *,
        first_name: str,
        last_name: str,
        phone: Optional[str] = None,
        date_of_birth: Optional[date] = None,
        department_id: Optional[int] = None,
        designation_id: Optional[int] = None,
        reporting_manager: Optional[str] = None,
    ) -> None:
        self._policy.require(actor, "profiles", Action.UPDATE, owner_profile_id=profile_id)

        ok = self._users.update_profile(
            int(profile_id),
            first_name=require_non_empty(first_name, "First name"),
            last_name=require_non_empty(last_name, "Last name"),
            phone=optional_text(phone),
            date_of_birth=date_of_birth,
            department_id=department_id,
            designation_id=designation_id,
            reporting_manager=optional_text(reporting_manager),
        )
        if not ok:
            raise NotFoundError("Employee not found")

    def terminate(self, actor: SessionUser, profile_id: int) -> None:
        self._policy.require(actor, "employment", Action.UPDATE)
        if int(profile_id) == int(actor.profile_id):
            raise ValidationError("You cannot terminate your own account")

        if not self._users.set_employment_status(int(profile_id), EmploymentStatus.FIRED):
            raise NotFoundError("Employee not found")
        logger.info("Profile %s terminated by user %s", profile_id, actor.user_id)

    def delete_user(self, actor: SessionUser, user_id: int) -> None:
        self._policy.require(actor, "users", Action.DELETE)

        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("Employee not found")
        if user.role == Role.ADMIN:
            raise ValidationError("Admin accounts cannot be deleted")

        if not self._users.delete_by_id(int(user_id)):
            raise ValidationError("Deleting the employee failed")
        logger.info("User %s deleted by user %s", user_id, actor.user_id)

    def list_departments(self) -> Sequence[Department]:
        return self._departments.list_departments()

    def list_designations(self) -> Sequence[Designation]:
        return self._departments.list_designations()

    def create_department(self, actor: SessionUser, *, name: str, description: Optional[str] = None) -> int:
        self._policy.require(actor, "departments", Action.CREATE)
        return self._departments.create_department(
            name=require_non_empty(name, "Department name"),
            description=optional_text(description),
        )

    def create_designation(self, actor: SessionUser, *, name: str, level: int = 1) -> int:
        self._policy.require(actor, "designations", Action.CREATE)
        if int(level) < 1:
            raise ValidationError("Designation level must be at least 1")
        return self._departments.create_designation(name=require_non_empty(name, "Designation name"), level=int(level))
