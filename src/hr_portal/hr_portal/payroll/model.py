from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import date
from decimal import Decimal
from typing import Dict, Optional

from ..core.enums import PaymentStatus

ZERO = Decimal("0.00")


@dataclass(frozen=True)
class Earnings:
    basic_salary: Decimal = ZERO
    hra: Decimal = ZERO
    da: Decimal = ZERO
    conveyance: Decimal = ZERO
    medical: Decimal = ZERO
    special_allowance: Decimal = ZERO
    bonus: Decimal = ZERO
    other_earnings: Decimal = ZERO

    def as_dict(self) -> Dict[str, Decimal]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class Deductions:
    pf: Decimal = ZERO
    esi: Decimal = ZERO
    professional_tax: Decimal = ZERO
    tds: Decimal = ZERO
    loan_deduction: Decimal = ZERO
    other_deductions: Decimal = ZERO

    def as_dict(self) -> Dict[str, Decimal]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class PayrollTotals:
    gross_salary: Decimal
    total_deductions: Decimal
    net_salary: Decimal


@dataclass(frozen=True)
class PayrollRecord:
    payroll_id: int
    profile_id: int
    month: int
    year: int
    earnings: Earnings
    deductions: Deductions
    totals: PayrollTotals
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_date: Optional[date] = None
    remarks: Optional[str] = None
    full_name: str = ""
