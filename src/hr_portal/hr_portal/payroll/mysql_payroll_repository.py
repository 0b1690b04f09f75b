from __future__ import annotations

from dataclasses import fields
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional, Sequence

from ..core.enums import PaymentStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, unique_violation_as
from .model import Deductions, Earnings, PayrollRecord, PayrollTotals
from .repository import PayrollRepository

_EARNING_COLUMNS = [f.name for f in fields(Earnings)]
_DEDUCTION_COLUMNS = [f.name for f in fields(Deductions)]
_TOTAL_COLUMNS = ["gross_salary", "total_deductions", "net_salary"]

_SELECT = f"""
    SELECT py.payroll_id, py.profile_id, py.month, py.year,
           {", ".join("py." + c for c in _EARNING_COLUMNS + _DEDUCTION_COLUMNS + _TOTAL_COLUMNS)},
           py.payment_status, py.payment_date, py.remarks, p.first_name, p.last_name
    FROM payroll py
    JOIN profiles p ON p.profile_id = py.profile_id
"""


def _dec(value: Any) -> Decimal:
    return Decimal(str(value)) if value is not None else Decimal("0.00")


def _to_record(r: Dict[str, Any]) -> PayrollRecord:
    return PayrollRecord(
        payroll_id=int(r["payroll_id"]),
        profile_id=int(r["profile_id"]),
        month=int(r["month"]),
        year=int(r["year"]),
        earnings=Earnings(**{c: _dec(r.get(c)) for c in _EARNING_COLUMNS}),
        deductions=Deductions(**{c: _dec(r.get(c)) for c in _DEDUCTION_COLUMNS}),
        totals=PayrollTotals(**{c: _dec(r.get(c)) for c in _TOTAL_COLUMNS}),
        payment_status=PaymentStatus(r.get("payment_status") or PaymentStatus.PENDING.value),
        payment_date=r.get("payment_date"),
        remarks=r.get("remarks"),
        full_name=" ".join(x for x in (r.get("first_name"), r.get("last_name")) if x),
    )


class MySQLPayrollRepository(PayrollRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        columns = ["profile_id", "month", "year"] + _EARNING_COLUMNS + _DEDUCTION_COLUMNS + _TOTAL_COLUMNS
        columns += ["payment_status", "remarks", "created_by"]
        values = [int(profile_id), int(month), int(year)]
        values += list(earnings.as_dict().values()) + list(deductions.as_dict().values())
        values += [totals.gross_salary, totals.total_deductions, totals.net_salary]
        values += [PaymentStatus.PENDING.value, remarks, int(created_by)]

        with unique_violation_as("Payroll for this employee and month already exists"), db_cursor(
            self._conn_factory
        ) as (_, cur):
            cur.execute(
                f"INSERT INTO payroll({', '.join(columns)}) VALUES({', '.join(['%s'] * len(columns))})",
                tuple(values),
            )
            return int(cur.lastrowid)

    def get_payroll(self, payroll_id: int) -> Optional[PayrollRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE py.payroll_id=%s", (int(payroll_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_payroll(
        self,
        *,
        profile_id: Optional[int] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> Sequence[PayrollRecord]:
        clauses = ["1=1"]
        params: list[object] = []
        if profile_id is not None:
            clauses.append("py.profile_id=%s")
            params.append(int(profile_id))
        if month is not None:
            clauses.append("py.month=%s")
            params.append(int(month))
        if year is not None:
            clauses.append("py.year=%s")
            params.append(int(year))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT} WHERE {' AND '.join(clauses)} ORDER BY py.year DESC, py.month DESC, p.first_name ASC",
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def mark_paid(self, *, payroll_id: int, payment_date: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE payroll SET payment_status=%s, payment_date=%s WHERE payroll_id=%s",
                (PaymentStatus.PAID.value, payment_date, int(payroll_id)),
            )
            return cur.rowcount > 0
