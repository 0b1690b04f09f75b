from __future__ import annotations

from abc import ABC, abstractmethod

from ..model import Deductions, Earnings, PayrollTotals


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def calculate(self, earnings: Earnings, deductions: Deductions) -> PayrollTotals:
        raise NotImplementedError
