from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role used for access decisions."""

    ADMIN = "admin"
    HR = "hr"
    EMPLOYEE = "employee"


class CycleState(str, Enum):
    """Daily check-in/check-out state of one profile."""

    NOT_CHECKED_IN = "NOT_CHECKED_IN"
    CHECKED_IN = "CHECKED_IN"
    COMPLETED_TODAY = "COMPLETED_TODAY"


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    HALF_DAY = "half_day"


class TimesheetStatus(str, Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"


class EmploymentStatus(str, Enum):
    ACTIVE = "active"
    FIRED = "fired"
    RESIGNED = "resigned"
    ON_LEAVE = "on_leave"


class LeaveStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"


class TrainingStatus(str, Enum):
    ONGOING = "ongoing"
    COMPLETED = "completed"
    DISCONTINUE = "discontinue"


class GoalStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ON_HOLD = "on_hold"


class AnnouncementPriority(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"
