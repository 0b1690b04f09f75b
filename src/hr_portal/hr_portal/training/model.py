from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import Optional

from ..core.enums import TrainingStatus


@dataclass(frozen=True)
class DailyTraining:
    training_id: int
    profile_id: int
    name: str
    domain: Optional[str]
    description: Optional[str]
    training_date: date
    time_from: Optional[time]
    time_to: Optional[time]


@dataclass(frozen=True)
class OngoingTraining:
    training_id: int
    profile_id: int
    name: str
    domain: Optional[str]
    from_date: date
    to_date: Optional[date]
    time_from: Optional[time]
    time_to: Optional[time]
    status: TrainingStatus = TrainingStatus.ONGOING


@dataclass(frozen=True)
class TrainingSummaryRow:
    profile_id: int
    full_name: str
    employee_code: Optional[str]
    ongoing_count: int
    daily_count: int
