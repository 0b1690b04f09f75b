from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import Deductions, Earnings, PayrollRecord, PayrollTotals


class PayrollRepository(Protocol):
    def create_payroll(
        self,
        *,
        profile_id: int,
        month: int,
        year: int,
        earnings: Earnings,
        deductions: Deductions,
        totals: PayrollTotals,
        remarks: Optional[str],
        created_by: int,
    ) -> int:
        """Insert one month's payroll; raises ``ConflictError`` when (profile, month, year) exists."""

        raise NotImplementedError

    def get_payroll(self, payroll_id: int) -> Optional[PayrollRecord]:
        raise NotImplementedError

    def list_payroll(
        self,
        *,
        profile_id: Optional[int] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> Sequence[PayrollRecord]:
        raise NotImplementedError

    def mark_paid(self, *, payroll_id: int, payment_date: date) -> bool:
        raise NotImplementedError
