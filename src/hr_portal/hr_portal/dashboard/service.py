"""Read-only aggregates for the landing pages."""

from __future__ import annotations

from datetime import date
from typing import Callable, Optional

from ..announcements.service import AnnouncementService
from ..attendance.repository import AttendanceRepository
from ..core.enums import LeaveStatus, Role, TaskStatus
from ..core.exceptions import AuthorizationError
from ..core.policies import Actor
from ..leaves.repository import LeaveRepository
from ..tasks.service import TaskService
from ..training.service import TrainingService
from ..users.repository import UserRepository


class DashboardService:
    def __init__(
        self,
        *,
        users: UserRepository,
        attendance: AttendanceRepository,
        leaves: LeaveRepository,
        tasks: TaskService,
        training: TrainingService,
        announcements: AnnouncementService,
        today: Callable[[], date] = date.today,
    ):
        self._users = users
        self._attendance = attendance
        self._leaves = leaves
        self._tasks = tasks
        self._training = training
        self._announcements = announcements
        self._today = today

    def _birthdays(self, today: date) -> list[dict]:
        return [
            {
                "profile_id": p.profile_id,
                "name": p.full_name,
                "date": p.date_of_birth.strftime("%m-%d") if p.date_of_birth else "-",
                "today": bool(p.date_of_birth and p.date_of_birth.day == today.day),
            }
            for p in self._users.list_birthdays(month=today.month)
        ]

    def employee_dashboard(self, actor: Actor) -> dict:
        today = self._today()
        return {
            "pending_leaves": self._leaves.count_leaves(profile_id=actor.profile_id, status=LeaveStatus.PENDING),
            "open_tasks": self._tasks.list_open_tasks(actor),
            "today_training": self._training.today_daily(actor),
            "announcements": self._announcements.list_for(actor),
            "birthdays": self._birthdays(today),
        }

    def staff_dashboard(self, actor: Actor, *, today: Optional[date] = None) -> dict:
        if actor.role not in {Role.ADMIN, Role.HR}:
            raise AuthorizationError("You do not have permission for this action")
        today = today or self._today()

        profiles = self._users.list_profiles(exclude_role=Role.ADMIN)
        tasks = self._tasks.list_tasks(actor)
        return {
            "total_employees": sum(1 for p in profiles if p.role == Role.EMPLOYEE),
            "total_hr": sum(1 for p in profiles if p.role == Role.HR),
            "today_attendance": len(self._attendance.get_report_rows(start_date=today, end_date=today)),
            "pending_leaves": len(self._leaves.list_leaves(status=LeaveStatus.PENDING)),
            "completed_tasks": sum(1 for t in tasks if t["status"] == TaskStatus.COMPLETED.value),
            "total_tasks": len(tasks),
            "monthly_training": sum(r["daily_count"] for r in self._training.summary(actor)),
            "announcements": self._announcements.list_for(actor),
            "birthdays": self._birthdays(today),
        }
