from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..core.enums import EmploymentStatus, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, unique_violation_as
from .model import NewProfile, Profile, User
from .repository import UserRepository

_PROFILE_COLUMNS = """
    p.profile_id, p.user_id, p.employee_code, p.first_name, p.last_name, p.email,
    p.phone, p.date_of_birth, p.department_id, p.designation_id, p.joining_date,
    p.reporting_manager, p.employment_status, u.role
"""


def _to_profile(r: Dict[str, Any]) -> Profile:
    return Profile(
        profile_id=int(r["profile_id"]),
        user_id=int(r["user_id"]),
        first_name=r["first_name"],
        last_name=r["last_name"],
        email=r["email"],
        role=Role(r["role"]),
        employee_code=r.get("employee_code"),
        phone=r.get("phone"),
        date_of_birth=r.get("date_of_birth"),
        department_id=r.get("department_id"),
        designation_id=r.get("designation_id"),
        joining_date=r.get("joining_date"),
        reporting_manager=r.get("reporting_manager"),
        employment_status=EmploymentStatus(r.get("employment_status") or EmploymentStatus.ACTIVE.value),
    )


def _to_user(r: Dict[str, Any]) -> User:
    return User(
        user_id=int(r["user_id"]),
        email=r["email"],
        password_hash=r["password_hash"],
        role=Role(r["role"]),
        is_active=bool(r.get("is_active", True)),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT user_id, email, password_hash, role, is_active FROM users WHERE user_id=%s",
                (user_id,),
            )
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT user_id, email, password_hash, role, is_active FROM users WHERE email=%s",
                (email.lower(),),
            )
            row = fetchone(cur)
            return _to_user(row) if row else None

    def create_user(self, *, email: str, password_hash: str, role: Role, profile: NewProfile) -> Profile:
        with unique_violation_as("Email or Employee ID already exists"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO users(email, password_hash, role, is_active) VALUES(%s,%s,%s,1)",
                (email.lower(), password_hash, role.value),
            )
            user_id = int(cur.lastrowid)
            cur.execute(
                """
                INSERT INTO profiles(
                    user_id, employee_code, first_name, last_name, email, phone, date_of_birth,
                    department_id, designation_id, joining_date, reporting_manager, employment_status
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    user_id,
                    profile.employee_code,
                    profile.first_name,
                    profile.last_name,
                    profile.email.lower(),
                    profile.phone,
                    profile.date_of_birth,
                    profile.department_id,
                    profile.designation_id,
                    profile.joining_date,
                    profile.reporting_manager,
                    EmploymentStatus.ACTIVE.value,
                ),
            )
            profile_id = int(cur.lastrowid)

        return Profile(
            profile_id=profile_id,
            user_id=user_id,
            first_name=profile.first_name,
            last_name=profile.last_name,
            email=profile.email.lower(),
            role=role,
            employee_code=profile.employee_code,
            phone=profile.phone,
            date_of_birth=profile.date_of_birth,
            department_id=profile.department_id,
            designation_id=profile.designation_id,
            joining_date=profile.joining_date,
            reporting_manager=profile.reporting_manager,
        )

    def delete_by_id(self, user_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM users WHERE user_id=%s", (user_id,))
            return cur.rowcount > 0

    def admin_exists(self) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM users WHERE role=%s", (Role.ADMIN.value,))
            row = fetchone(cur)
            return bool(row and int(row["n"]) > 0)

    def get_profile(self, profile_id: int) -> Optional[Profile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_PROFILE_COLUMNS} FROM profiles p JOIN users u ON u.user_id = p.user_id WHERE p.profile_id=%s",
                (profile_id,),
            )
            row = fetchone(cur)
            return _to_profile(row) if row else None

    def get_profile_for_user(self, user_id: int) -> Optional[Profile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_PROFILE_COLUMNS} FROM profiles p JOIN users u ON u.user_id = p.user_id WHERE p.user_id=%s",
                (user_id,),
            )
            row = fetchone(cur)
            return _to_profile(row) if row else None

    def list_profiles(self, *, exclude_role: Optional[Role] = None) -> Sequence[Profile]:
        clauses = []
        params: list[object] = []
        if exclude_role is not None:
            clauses.append("u.role<>%s")
            params.append(exclude_role.value)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_PROFILE_COLUMNS}
                FROM profiles p
                JOIN users u ON u.user_id = p.user_id
                {where}
                ORDER BY p.created_at DESC
                """,
                tuple(params),
            )
            return [_to_profile(r) for r in fetchall(cur)]

    def list_birthdays(self, *, month: int) -> Sequence[Profile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_PROFILE_COLUMNS}
                FROM profiles p
                JOIN users u ON u.user_id = p.user_id
                WHERE p.date_of_birth IS NOT NULL AND MONTH(p.date_of_birth)=%s
                ORDER BY DAY(p.date_of_birth)
                """,
                (int(month),),
            )
            return [_to_profile(r) for r in fetchall(cur)]

    def update_profile(
        self,
        profile_id: int,
        *,
        first_name: str,
        last_name: str,
        phone: Optional[str],
        date_of_birth: Optional[date],
        department_id: Optional[int],
        designation_id: Optional[int],
        reporting_manager: Optional[str],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE profiles
                SET first_name=%s, last_name=%s, phone=%s, date_of_birth=%s,
                    department_id=%s, designation_id=%s, reporting_manager=%s
                WHERE profile_id=%s
                """,
                (
                    first_name,
                    last_name,
                    phone,
                    date_of_birth,
                    department_id,
                    designation_id,
                    reporting_manager,
                    int(profile_id),
                ),
            )
            return cur.rowcount > 0

    def set_employment_status(self, profile_id: int, status: EmploymentStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE profiles SET employment_status=%s WHERE profile_id=%s",
                (status.value, int(profile_id)),
            )
            return cur.rowcount > 0
