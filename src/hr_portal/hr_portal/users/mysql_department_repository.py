from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, unique_violation_as
from .department_model import Department, Designation
from .department_repository import DepartmentRepository


class MySQLDepartmentRepository(DepartmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_departments(self) -> Sequence[Department]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT department_id, name, description FROM departments ORDER BY name")
            rows = fetchall(cur)
            return [
                Department(department_id=int(r["department_id"]), name=r["name"], description=r.get("description"))
                for r in rows
            ]

    def create_department(self, *, name: str, description: Optional[str]) -> int:
        with unique_violation_as("Department already exists"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute("INSERT INTO departments(name, description) VALUES(%s,%s)", (name, description))
            return int(cur.lastrowid)

    def list_designations(self) -> Sequence[Designation]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT designation_id, name, level FROM designations ORDER BY level, name")
            rows = fetchall(cur)
            return [
                Designation(designation_id=int(r["designation_id"]), name=r["name"], level=int(r.get("level") or 1))
                for r in rows
            ]

    def create_designation(self, *, name: str, level: int) -> int:
        with unique_violation_as("Designation already exists"), db_cursor(self._conn_factory) as (_, cur):
            cur.execute("INSERT INTO designations(name, level) VALUES(%s,%s)", (name, int(level)))
            return int(cur.lastrowid)
