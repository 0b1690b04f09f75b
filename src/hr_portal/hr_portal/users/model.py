from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import EmploymentStatus, Role


@dataclass(frozen=True)
class User:
    """Login identity (email + password hash + role).

    Note: Plain data object, no DB access code here.
    """

    user_id: int
    email: str
    password_hash: str
    role: Role
    is_active: bool = True


@dataclass(frozen=True)
class Profile:
    """Employee/HR/admin record shown across the portal, distinct from the login user."""

    profile_id: int
    user_id: int
    first_name: str
    last_name: str
    email: str
    role: Role
    employee_code: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    department_id: Optional[int] = None
    designation_id: Optional[int] = None
    joining_date: Optional[date] = None
    reporting_manager: Optional[str] = None
    employment_status: EmploymentStatus = EmploymentStatus.ACTIVE

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p)


@dataclass(frozen=True)
class NewProfile:
    first_name: str
    last_name: str
    email: str
    employee_code: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    department_id: Optional[int] = None
    designation_id: Optional[int] = None
    joining_date: Optional[date] = None
    reporting_manager: Optional[str] = None
