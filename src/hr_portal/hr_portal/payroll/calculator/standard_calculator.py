from __future__ import annotations

from decimal import Decimal

from ..model import Deductions, Earnings, PayrollTotals
from .base import PayrollCalculator


class StandardPayrollCalculator(PayrollCalculator):
    """Standard rule: gross = sum(earnings), net = gross - sum(deductions)."""

    def calculate(self, earnings: Earnings, deductions: Deductions) -> PayrollTotals:
        gross = sum(earnings.as_dict().values(), Decimal("0.00"))
        total_deductions = sum(deductions.as_dict().values(), Decimal("0.00"))
        return PayrollTotals(
            gross_salary=gross,
            total_deductions=total_deductions,
            net_salary=gross - total_deductions,
        )
