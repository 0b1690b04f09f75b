from __future__ import annotations

from dataclasses import replace
from datetime import date

import pytest

from src.hr_portal.hr_portal.core.enums import Role, TrainingStatus
from src.hr_portal.hr_portal.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.hr_portal.hr_portal.training.model import DailyTraining, OngoingTraining, TrainingSummaryRow
from src.hr_portal.hr_portal.training.service import TrainingService, month_bounds
from src.hr_portal.hr_portal.users.model import NewProfile


class InMemoryTraining:
    def __init__(self):
        self.daily: dict[int, DailyTraining] = {}
        self.ongoing: dict[int, OngoingTraining] = {}

    def add_daily(self, *, profile_id, **fields):
        training_id = len(self.daily) + 1
        self.daily[training_id] = DailyTraining(training_id=training_id, profile_id=profile_id, **fields)
        return training_id

    def get_daily(self, training_id):
        return self.daily.get(training_id)

    def update_daily(self, *, training_id, **fields):
        self.daily[training_id] = replace(self.daily[training_id], **fields)
        return True

    def list_daily(self, *, profile_id, start_date, end_date):
        return [d for d in self.daily.values() if d.profile_id == profile_id and start_date <= d.training_date <= end_date]

    def add_ongoing(self, *, profile_id, **fields):
        training_id = len(self.ongoing) + 1
        self.ongoing[training_id] = OngoingTraining(training_id=training_id, profile_id=profile_id, **fields)
        return training_id

    def get_ongoing(self, training_id):
        return self.ongoing.get(training_id)

    def update_ongoing(self, *, training_id, **fields):
        self.ongoing[training_id] = replace(self.ongoing[training_id], **fields)
        return True

    def list_ongoing(self, *, profile_id):
        return [o for o in self.ongoing.values() if o.profile_id == profile_id]

    def summary(self, *, start_date, end_date):
        ids = {d.profile_id for d in self.daily.values()} | {o.profile_id for o in self.ongoing.values()}
        return [
            TrainingSummaryRow(
                profile_id=pid,
                full_name=f"Profile {pid}",
                employee_code=None,
                ongoing_count=len(self.list_ongoing(profile_id=pid)),
                daily_count=len(self.list_daily(profile_id=pid, start_date=start_date, end_date=end_date)),
            )
            for pid in sorted(ids)
        ]


@pytest.fixture
def repo():
    return InMemoryTraining()


@pytest.fixture
def me(users_repo, actor_factory):
    profile = users_repo.create_user(
        email="mai@example.com",
        password_hash="x",
        role=Role.EMPLOYEE,
        profile=NewProfile(first_name="Mai", last_name="Nguyen", email="mai@example.com"),
    )
    return actor_factory(profile_id=profile.profile_id)


@pytest.fixture
def service(repo, users_repo):
    return TrainingService(repo, users_repo, today=lambda: date(2026, 3, 2))


def test_month_bounds_handles_leap_year():
    assert month_bounds(date(2028, 2, 10)) == (date(2028, 2, 1), date(2028, 2, 29))


def test_add_daily_and_list_today(service, me):
    service.add_daily(me, name="Docker basics", training_date=date(2026, 3, 2), time_from="09:00", time_to="10:30")
    service.add_daily(me, name="Old", training_date=date(2026, 2, 27))

    [row] = service.today_daily(me)

    assert row["name"] == "Docker basics"
    assert (row["time_from"], row["time_to"]) == ("09:00", "10:30")


def test_daily_time_range_must_move_forward(service, me):
    with pytest.raises(ValidationError):
        service.add_daily(me, name="Backwards", training_date=date(2026, 3, 2), time_from="11:00", time_to="10:00")


def test_only_owner_edits_training(service, me, actor_factory):
    training_id = service.add_daily(me, name="Docker", training_date=date(2026, 3, 2))

    with pytest.raises(AuthorizationError):
        service.update_daily(actor_factory(profile_id=99), training_id, name="Hijack", training_date=date(2026, 3, 2))
    with pytest.raises(NotFoundError):
        service.update_daily(me, 404, name="Missing", training_date=date(2026, 3, 2))

    service.update_daily(me, training_id, name="Docker deep dive", training_date=date(2026, 3, 2))


def test_ongoing_dates_and_status(service, repo, me):
    with pytest.raises(ValidationError):
        service.add_ongoing(me, name="AWS", from_date=date(2026, 3, 10), to_date=date(2026, 3, 1))

    training_id = service.add_ongoing(me, name="AWS", from_date=date(2026, 3, 1))
    service.update_ongoing(me, training_id, name="AWS", from_date=date(2026, 3, 1), to_date=date(2026, 3, 20), status="completed")

    assert repo.ongoing[training_id].status == TrainingStatus.COMPLETED
    with pytest.raises(ValidationError):
        service.update_ongoing(me, training_id, name="AWS", from_date=date(2026, 3, 1), status="paused")


def test_user_details_for_staff_and_self(service, me, hr_user, actor_factory):
    service.add_ongoing(me, name="AWS", from_date=date(2026, 3, 1))
    service.add_daily(me, name="Docker", training_date=date(2026, 3, 15))
    service.add_daily(me, name="Last month", training_date=date(2026, 2, 15))

    details = service.user_details(hr_user, me.profile_id)

    assert details.full_name == "Mai Nguyen"
    assert len(details.ongoing) == 1
    assert [d["name"] for d in details.daily] == ["Docker"]
    assert service.user_details(me).to_dict()["profile_id"] == me.profile_id
    with pytest.raises(AuthorizationError):
        service.user_details(actor_factory(profile_id=99), me.profile_id)


def test_summary_is_staff_only(service, me, hr_user):
    service.add_daily(me, name="Docker", training_date=date(2026, 3, 2))

    [row] = service.summary(hr_user)

    assert (row["ongoing_count"], row["daily_count"], row["employee_code"]) == (0, 1, "-")
    with pytest.raises(AuthorizationError):
        service.summary(me)
