from __future__ import annotations

import logging
from dataclasses import fields
from datetime import date
from typing import Any, Callable, List, Mapping, Optional

from ..common.validators import optional_text, require_amount
from ..core.enums import PaymentStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..core.policies import AccessPolicy, Action, Actor
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator
from .model import Deductions, Earnings, PayrollRecord
from .repository import PayrollRepository

logger = logging.getLogger(__name__)


def _amounts(cls, values: Mapping[str, Any]):
    return cls(**{f.name: require_amount(values.get(f.name), f.name.replace("_", " ").capitalize()) for f in fields(cls)})


class PayrollService:
    def __init__(
        self,
        payroll: PayrollRepository,
        *,
        calculator: Optional[PayrollCalculator] = None,
        policy: Optional[AccessPolicy] = None,
        today: Callable[[], date] = date.today,
    ):
        self._payroll = payroll
        self._calculator = calculator or StandardPayrollCalculator()
        self._policy = policy or AccessPolicy()
        self._today = today

    def create_payroll(
        self,
        actor: Actor,
        *,
        profile_id: int,
        month: int,
        year: int,
        amounts: Mapping[str, Any],
        remarks: Optional[str] = None,
    ) -> int:
        self._policy.require(actor, "payroll", Action.CREATE)

        try:
            month, year = int(month), int(year)
        except (TypeError, ValueError):
            raise ValidationError("Month and year must be numbers")
        if month < 1 or month > 12:
            raise ValidationError("Month must be between 1 and 12")

        earnings = _amounts(Earnings, amounts)
        deductions = _amounts(Deductions, amounts)
        totals = self._calculator.calculate(earnings, deductions)

        payroll_id = self._payroll.create_payroll(
            profile_id=int(profile_id),
            month=month,
            year=year,
            earnings=earnings,
            deductions=deductions,
            totals=totals,
            remarks=optional_text(remarks),
            created_by=actor.profile_id,
        )
        logger.info("Payroll %s created for profile %s (%02d/%d)", payroll_id, profile_id, month, year)
        return payroll_id

    def mark_paid(self, actor: Actor, payroll_id: int, *, payment_date: Optional[date] = None) -> None:
        self._policy.require(actor, "payroll", Action.UPDATE)
        record = self._payroll.get_payroll(int(payroll_id))
        if not record:
            raise NotFoundError("Payroll record not found")
        if record.payment_status == PaymentStatus.PAID:
            raise ValidationError("Payroll is already marked as paid")
        self._payroll.mark_paid(payroll_id=record.payroll_id, payment_date=payment_date or self._today())

    def list_payroll(self, actor: Actor, *, month: Optional[int] = None, year: Optional[int] = None) -> List[dict]:
        scope = self._policy.read_scope(actor, "payroll")
        return [self._to_ui(r) for r in self._payroll.list_payroll(profile_id=scope, month=month, year=year)]

    def _to_ui(self, r: PayrollRecord) -> dict:
        out = {
            "payroll_id": r.payroll_id,
            "profile_id": r.profile_id,
            "full_name": r.full_name,
            "period": f"{r.year}-{r.month:02d}",
            "payment_status": r.payment_status.value,
            "payment_date": r.payment_date.strftime("%Y-%m-%d") if r.payment_date else "-",
            "remarks": r.remarks or "",
        }
        for key, value in {**r.earnings.as_dict(), **r.deductions.as_dict()}.items():
            out[key] = str(value)
        out["gross_salary"] = str(r.totals.gross_salary)
        out["total_deductions"] = str(r.totals.total_deductions)
        out["net_salary"] = str(r.totals.net_salary)
        return out
