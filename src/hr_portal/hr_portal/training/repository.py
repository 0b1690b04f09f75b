from __future__ import annotations

from datetime import date, time
from typing import Optional, Protocol, Sequence

from ..core.enums import TrainingStatus
from .model import DailyTraining, OngoingTraining, TrainingSummaryRow


class TrainingRepository(Protocol):
    # Daily
    def add_daily(
        self,
        *,
        profile_id: int,
        name: str,
        domain: Optional[str],
        description: Optional[str],
        training_date: date,
        time_from: Optional[time],
        time_to: Optional[time],
    ) -> int:
        raise NotImplementedError

    def get_daily(self, training_id: int) -> Optional[DailyTraining]:
        raise NotImplementedError

    def update_daily(
        self,
        *,
        training_id: int,
        name: str,
        domain: Optional[str],
        description: Optional[str],
        training_date: date,
        time_from: Optional[time],
        time_to: Optional[time],
    ) -> bool:
        raise NotImplementedError

    def list_daily(self, *, profile_id: int, start_date: date, end_date: date) -> Sequence[DailyTraining]:
        raise NotImplementedError

    # Ongoing
    def add_ongoing(
        self,
        *,
        profile_id: int,
        name: str,
        domain: Optional[str],
        from_date: date,
        to_date: Optional[date],
        time_from: Optional[time],
        time_to: Optional[time],
        status: TrainingStatus,
    ) -> int:
        raise NotImplementedError

    def get_ongoing(self, training_id: int) -> Optional[OngoingTraining]:
        raise NotImplementedError

    def update_ongoing(
        self,
        *,
        training_id: int,
        name: str,
        domain: Optional[str],
        from_date: date,
        to_date: Optional[date],
        time_from: Optional[time],
        time_to: Optional[time],
        status: TrainingStatus,
    ) -> bool:
        raise NotImplementedError

    def list_ongoing(self, *, profile_id: int) -> Sequence[OngoingTraining]:
        raise NotImplementedError

    # Aggregate
    def summary(self, *, start_date: date, end_date: date) -> Sequence[TrainingSummaryRow]:
        """Per profile: ongoing item count and daily item count within the date range."""

        raise NotImplementedError
