from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .department_model import Department, Designation


class DepartmentRepository(Protocol):
    def list_departments(self) -> Sequence[Department]:
        raise NotImplementedError

    def create_department(self, *, name: str, description: Optional[str]) -> int:
        raise NotImplementedError

    def list_designations(self) -> Sequence[Designation]:
        raise NotImplementedError

    def create_designation(self, *, name: str, level: int) -> int:
        raise NotImplementedError
