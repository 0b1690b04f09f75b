from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import LeaveStatus
from .model import LeaveBalance, LeaveRequest, LeaveType


class LeaveRepository(Protocol):
    # Leave types and balances
    def list_types(self) -> Sequence[LeaveType]:
        raise NotImplementedError

    def create_balance(self, *, profile_id: int, leave_type_id: int, year: int, total_days: int) -> int:
        raise NotImplementedError

    def list_balances(self, *, profile_id: int, year: int) -> Sequence[LeaveBalance]:
        raise NotImplementedError

    # Leave requests
    def create_leave(
        self,
        *,
        profile_id: int,
        leave_type_id: int,
        start_date: date,
        end_date: date,
        total_days: int,
        reason: Optional[str],
    ) -> int:
        raise NotImplementedError

    def get_leave(self, leave_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def list_leaves(
        self,
        *,
        profile_id: Optional[int] = None,
        status: Optional[LeaveStatus] = None,
        limit: int = 200,
    ) -> Sequence[dict]:
        """Return UI rows (joined with profile and leave type)."""

        raise NotImplementedError

    def count_leaves(self, *, profile_id: int, status: LeaveStatus) -> int:
        raise NotImplementedError

    def approve_leave(self, *, leave_id: int, decided_by: int, decided_at: datetime) -> bool:
        """Mark a pending leave approved and consume its days from the balance, atomically."""

        raise NotImplementedError

    def reject_leave(
        self,
        *,
        leave_id: int,
        decided_by: int,
        decided_at: datetime,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError

    def cancel_leave(self, *, leave_id: int) -> bool:
        raise NotImplementedError
