from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import LeaveStatus


@dataclass(frozen=True)
class LeaveType:
    leave_type_id: int
    name: str
    default_days: int = 0
    is_paid: bool = True
    description: Optional[str] = None


@dataclass(frozen=True)
class LeaveBalance:
    balance_id: int
    profile_id: int
    leave_type_id: int
    year: int
    total_days: int
    used_days: int = 0

    @property
    def remaining_days(self) -> int:
        return self.total_days - self.used_days


@dataclass(frozen=True)
class LeaveRequest:
    leave_id: int
    profile_id: int
    leave_type_id: int
    start_date: date
    end_date: date
    total_days: int
    reason: Optional[str]
    status: LeaveStatus
    created_at: datetime
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
