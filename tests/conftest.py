from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Optional

import pytest

from src.hr_portal.hr_portal.attendance.model import AttendanceRecord, AttendanceReportRow
from src.hr_portal.hr_portal.core.enums import EmploymentStatus, Role
from src.hr_portal.hr_portal.core.exceptions import ConflictError
from src.hr_portal.hr_portal.users.department_model import Department, Designation
from src.hr_portal.hr_portal.users.model import Profile, User
from src.hr_portal.hr_portal.users.service import SessionUser


class ManualScheduler:
    """Scheduler double: records delayed callbacks and fires them on demand."""

    def __init__(self):
        self.calls: list["ManualCall"] = []

    def call_later(self, delay_seconds, callback):
        call = ManualCall(float(delay_seconds), callback)
        self.calls.append(call)
        return call

    @property
    def pending(self) -> list["ManualCall"]:
        return [c for c in self.calls if not c.cancelled and not c.fired]

    def fire_next(self) -> None:
        call = self.pending[0]
        call.fired = True
        call.callback()


class ManualCall:
    def __init__(self, delay: float, callback):
        self.delay = delay
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class MutableClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 3, 2, 9, 0, 0)


@pytest.fixture
def clock(fixed_now) -> MutableClock:
    return MutableClock(fixed_now)


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


class InMemoryAttendance:
    """Attendance store with the same (profile, date) uniqueness as the table."""

    def __init__(self, names: Optional[dict] = None):
        self.records: dict[tuple[int, date], AttendanceRecord] = {}
        self.timesheets: dict[int, dict] = {}
        self.names = names or {}
        self.calls: list[str] = []
        self.fail_checkout = False
        self._id = 0

    def get_recent_for_profile(self, profile_id: int, limit: int):
        self.calls.append("get_recent_for_profile")
        items = [r for r in self.records.values() if r.profile_id == profile_id]
        items.sort(key=lambda r: r.work_date, reverse=True)
        return items[:limit]

    def get_for_profile_and_date(self, profile_id: int, work_date: date) -> Optional[AttendanceRecord]:
        self.calls.append("get_for_profile_and_date")
        return self.records.get((profile_id, work_date))

    def create_checkin(self, *, profile_id, work_date, check_in_time, check_in_address):
        self.calls.append("create_checkin")
        if (profile_id, work_date) in self.records:
            raise ConflictError("You have already checked in today")
        self._id += 1
        record = AttendanceRecord(
            attendance_id=self._id,
            profile_id=profile_id,
            work_date=work_date,
            check_in_time=check_in_time,
            check_in_address=check_in_address,
        )
        self.records[(profile_id, work_date)] = record
        return record

    def complete_checkout(
        self, *, attendance_id, profile_id, work_date, check_out_time, check_out_address, total_hours, entries
    ):
        self.calls.append("complete_checkout")
        if self.fail_checkout:
            raise RuntimeError("connection lost")
        record = self.records[(profile_id, work_date)]
        if record.check_out_time is not None:
            raise ConflictError("You have already checked out today")
        self.records[(profile_id, work_date)] = replace(
            record,
            check_out_time=check_out_time,
            check_out_address=check_out_address,
            total_hours=total_hours,
            timesheet_completed=True,
        )
        timesheet_id = len(self.timesheets) + 1
        self.timesheets[timesheet_id] = {
            "attendance_id": attendance_id,
            "profile_id": profile_id,
            "timesheet_date": work_date,
            "entries": list(entries),
        }
        return timesheet_id

    def get_report_rows(self, *, start_date, end_date, profile_id=None):
        self.calls.append("get_report_rows")
        rows = []
        for r in sorted(self.records.values(), key=lambda r: (r.work_date, r.profile_id)):
            if not (start_date <= r.work_date <= end_date):
                continue
            if profile_id is not None and r.profile_id != profile_id:
                continue
            rows.append(
                AttendanceReportRow(
                    profile_id=r.profile_id,
                    full_name=self.names.get(r.profile_id, f"Profile {r.profile_id}"),
                    employee_code=f"EMP{r.profile_id:03d}",
                    work_date=r.work_date,
                    check_in_time=r.check_in_time,
                    check_out_time=r.check_out_time,
                    total_hours=r.total_hours,
                    status=r.status,
                    check_in_address=r.check_in_address,
                    check_out_address=r.check_out_address,
                )
            )
        return rows


def make_actor(role: Role = Role.EMPLOYEE, profile_id: int = 7, user_id: Optional[int] = None) -> SessionUser:
    return SessionUser(
        user_id=user_id if user_id is not None else profile_id + 100,
        profile_id=profile_id,
        role=role,
        first_name="Test",
        last_name=role.value.title(),
        email=f"{role.value}{profile_id}@example.com",
    )


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance(names={7: "Mai Nguyen", 8: "Omar Haddad"})


@pytest.fixture
def employee() -> SessionUser:
    return make_actor(Role.EMPLOYEE, 7)


@pytest.fixture
def hr_user() -> SessionUser:
    return make_actor(Role.HR, 2)


@pytest.fixture
def admin_user() -> SessionUser:
    return make_actor(Role.ADMIN, 1)


@pytest.fixture
def actor_factory():
    return make_actor


class InMemoryUsers:
    def __init__(self):
        self.users: dict[int, User] = {}
        self.profiles: dict[int, Profile] = {}

    def get_by_id(self, user_id):
        return self.users.get(user_id)

    def get_by_email(self, email):
        return next((u for u in self.users.values() if u.email == email), None)

    def create_user(self, *, email, password_hash, role, profile):
        if self.get_by_email(email):
            raise ConflictError("Email or Employee ID already exists")
        user_id = len(self.users) + 101
        profile_id = len(self.profiles) + 1
        self.users[user_id] = User(user_id, email, password_hash, role)
        self.profiles[profile_id] = Profile(
            profile_id=profile_id,
            user_id=user_id,
            first_name=profile.first_name,
            last_name=profile.last_name,
            email=profile.email,
            role=role,
            employee_code=profile.employee_code,
            phone=profile.phone,
            date_of_birth=profile.date_of_birth,
            department_id=profile.department_id,
            designation_id=profile.designation_id,
            joining_date=profile.joining_date,
            reporting_manager=profile.reporting_manager,
        )
        return self.profiles[profile_id]

    def delete_by_id(self, user_id):
        if self.users.pop(user_id, None) is None:
            return False
        self.profiles = {k: p for k, p in self.profiles.items() if p.user_id != user_id}
        return True

    def admin_exists(self):
        return any(u.role == Role.ADMIN for u in self.users.values())

    def get_profile(self, profile_id):
        return self.profiles.get(profile_id)

    def get_profile_for_user(self, user_id):
        return next((p for p in self.profiles.values() if p.user_id == user_id), None)

    def list_profiles(self, *, exclude_role=None):
        return [p for p in self.profiles.values() if p.role != exclude_role]

    def list_birthdays(self, *, month):
        return [p for p in self.profiles.values() if p.date_of_birth and p.date_of_birth.month == month]

    def update_profile(self, profile_id, **fields):
        if profile_id not in self.profiles:
            return False
        self.profiles[profile_id] = replace(self.profiles[profile_id], **fields)
        return True

    def set_employment_status(self, profile_id, status: EmploymentStatus):
        if profile_id not in self.profiles:
            return False
        self.profiles[profile_id] = replace(self.profiles[profile_id], employment_status=status)
        return True


class InMemoryDepartments:
    def __init__(self):
        self.departments = [Department(1, "Engineering")]
        self.designations = [Designation(1, "Software Engineer", 1)]

    def list_departments(self):
        return list(self.departments)

    def create_department(self, *, name, description):
        self.departments.append(Department(len(self.departments) + 1, name, description))
        return len(self.departments)

    def list_designations(self):
        return list(self.designations)

    def create_designation(self, *, name, level):
        self.designations.append(Designation(len(self.designations) + 1, name, level))
        return len(self.designations)


@pytest.fixture
def users_repo() -> InMemoryUsers:
    return InMemoryUsers()


@pytest.fixture
def departments_repo() -> InMemoryDepartments:
    return InMemoryDepartments()
