from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Optional

from .announcements.mysql_announcement_repository import MySQLAnnouncementRepository
from .announcements.service import AnnouncementService
from .attendance.cycle import AttendanceCycleRegistry
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.report import AttendanceReportService
from .attendance.service import AttendanceService
from .common.datetime_utils import now_local
from .common.scheduling import Scheduler, ThreadingScheduler
from .core.constants import SESSION_IDLE_MINUTES
from .core.policies import AccessPolicy
from .dashboard.service import DashboardService
from .database.connection import DBConfig, DatabaseConnection
from .goalsheets.mysql_goalsheet_repository import MySQLGoalsheetRepository
from .goalsheets.service import GoalsheetService
from .leaves.mysql_leave_repository import MySQLLeaveRepository
from .leaves.service import LeaveService
from .payroll.mysql_payroll_repository import MySQLPayrollRepository
from .payroll.service import PayrollService
from .tasks.mysql_task_repository import MySQLTaskRepository
from .tasks.service import TaskService
from .timesheets.mysql_timesheet_repository import MySQLTimesheetRepository
from .timesheets.service import TimesheetService
from .training.mysql_training_repository import MySQLTrainingRepository
from .training.service import TrainingService
from .users.mysql_department_repository import MySQLDepartmentRepository
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AuthService, UserService
from .users.session import SessionRegistry


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: Any
    departments_repo: Any
    attendance_repo: Any
    timesheets_repo: Any
    leaves_repo: Any
    tasks_repo: Any
    payroll_repo: Any
    training_repo: Any
    goalsheets_repo: Any
    announcements_repo: Any

    policy: AccessPolicy
    auth_service: AuthService
    user_service: UserService
    attendance_service: AttendanceService
    attendance_report_service: AttendanceReportService
    timesheet_service: TimesheetService
    leave_service: LeaveService
    task_service: TaskService
    payroll_service: PayrollService
    training_service: TrainingService
    goalsheet_service: GoalsheetService
    announcement_service: AnnouncementService
    dashboard_service: DashboardService

    sessions: SessionRegistry
    cycles: AttendanceCycleRegistry
    trust_proxy_headers: bool = False

    def close(self) -> None:
        self.sessions.close_all()


def wire(
    *,
    users_repo,
    departments_repo,
    attendance_repo,
    timesheets_repo,
    leaves_repo,
    tasks_repo,
    payroll_repo,
    training_repo,
    goalsheets_repo,
    announcements_repo,
    conn: Optional[DatabaseConnection] = None,
    scheduler: Optional[Scheduler] = None,
    clock: Callable[[], datetime] = now_local,
    trust_proxy_headers: bool = False,
    session_idle_minutes: int = SESSION_IDLE_MINUTES,
) -> Container:
    """Assemble services around the given repositories (MySQL in production, fakes in tests)."""

    policy = AccessPolicy()
    today = lambda: clock().date()  # noqa: E731

    attendance_service = AttendanceService(attendance_repo, policy=policy, clock=clock)
    task_service = TaskService(tasks_repo, policy=policy, clock=clock)
    training_service = TrainingService(training_repo, users_repo, policy=policy, today=today)
    announcement_service = AnnouncementService(announcements_repo, policy=policy, clock=clock)

    cycles = AttendanceCycleRegistry(attendance_service, scheduler=scheduler or ThreadingScheduler(), clock=clock)
    sessions = SessionRegistry(
        on_open=[cycles.attach], clock=clock, idle_timeout=timedelta(minutes=session_idle_minutes)
    )

    return Container(
        conn=conn,
        users_repo=users_repo,
        departments_repo=departments_repo,
        attendance_repo=attendance_repo,
        timesheets_repo=timesheets_repo,
        leaves_repo=leaves_repo,
        tasks_repo=tasks_repo,
        payroll_repo=payroll_repo,
        training_repo=training_repo,
        goalsheets_repo=goalsheets_repo,
        announcements_repo=announcements_repo,
        policy=policy,
        auth_service=AuthService(users_repo),
        user_service=UserService(users_repo, departments_repo, leaves_repo, policy=policy),
        attendance_service=attendance_service,
        attendance_report_service=AttendanceReportService(attendance_repo, policy=policy),
        timesheet_service=TimesheetService(timesheets_repo, policy=policy),
        leave_service=LeaveService(leaves_repo, policy=policy, clock=clock),
        task_service=task_service,
        payroll_service=PayrollService(payroll_repo, policy=policy, today=today),
        training_service=training_service,
        goalsheet_service=GoalsheetService(goalsheets_repo, policy=policy),
        announcement_service=announcement_service,
        dashboard_service=DashboardService(
            users=users_repo,
            attendance=attendance_repo,
            leaves=leaves_repo,
            tasks=task_service,
            training=training_service,
            announcements=announcement_service,
            today=today,
        ),
        sessions=sessions,
        cycles=cycles,
        trust_proxy_headers=trust_proxy_headers,
    )


def build_container(
    *,
    db_config: dict,
    trust_proxy_headers: bool = False,
    session_idle_minutes: int = SESSION_IDLE_MINUTES,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return wire(
        conn=conn,
        users_repo=MySQLUserRepository(conn),
        departments_repo=MySQLDepartmentRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        timesheets_repo=MySQLTimesheetRepository(conn),
        leaves_repo=MySQLLeaveRepository(conn),
        tasks_repo=MySQLTaskRepository(conn),
        payroll_repo=MySQLPayrollRepository(conn),
        training_repo=MySQLTrainingRepository(conn),
        goalsheets_repo=MySQLGoalsheetRepository(conn),
        announcements_repo=MySQLAnnouncementRepository(conn),
        trust_proxy_headers=trust_proxy_headers,
        session_idle_minutes=session_idle_minutes,
    )
