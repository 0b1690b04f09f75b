from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Department:
    department_id: int
    name: str
    description: Optional[str] = None


@dataclass(frozen=True)
class Designation:
    designation_id: int
    name: str
    level: int = 1
