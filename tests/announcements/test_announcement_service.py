from __future__ import annotations

from dataclasses import replace

import pytest

from src.hr_portal.hr_portal.announcements.model import Announcement
from src.hr_portal.hr_portal.announcements.service import AnnouncementService
from src.hr_portal.hr_portal.core.enums import AnnouncementPriority, Role
from src.hr_portal.hr_portal.core.exceptions import AuthorizationError, NotFoundError, ValidationError


class InMemoryAnnouncements:
    def __init__(self):
        self.items: dict[int, Announcement] = {}

    def create(self, *, title, content, priority, target_roles, published_at, created_by):
        announcement_id = len(self.items) + 1
        self.items[announcement_id] = Announcement(
            announcement_id, title, content, priority, tuple(target_roles), True, published_at, created_by
        )
        return announcement_id

    def deactivate(self, announcement_id):
        if announcement_id not in self.items:
            return False
        self.items[announcement_id] = replace(self.items[announcement_id], is_active=False)
        return True

    def list_active(self, *, limit):
        active = [a for a in self.items.values() if a.is_active]
        return sorted(active, key=lambda a: a.announcement_id, reverse=True)[:limit]


@pytest.fixture
def repo():
    return InMemoryAnnouncements()


@pytest.fixture
def service(repo, fixed_now):
    return AnnouncementService(repo, clock=lambda: fixed_now)


def test_targeted_announcements_only_reach_their_roles(service, hr_user, employee):
    service.create(hr_user, title="Payroll cut-off", content="Submit by the 25th", target_roles=["hr", "admin"])
    service.create(hr_user, title="Town hall", content="Friday 4pm", priority="high")

    [visible] = service.list_for(employee)

    assert visible["title"] == "Town hall"
    assert visible["priority"] == AnnouncementPriority.HIGH.value
    assert visible["published_at"] == "2026-03-02 09:00"
    assert [a["title"] for a in service.list_for(hr_user)] == ["Town hall", "Payroll cut-off"]


def test_deactivated_announcements_disappear(service, hr_user, employee):
    announcement_id = service.create(hr_user, title="Old", content="news")

    service.deactivate(hr_user, announcement_id)

    assert service.list_for(employee) == []
    with pytest.raises(NotFoundError):
        service.deactivate(hr_user, 99)


def test_create_validation_and_permissions(service, hr_user, employee):
    with pytest.raises(AuthorizationError):
        service.create(employee, title="Hi", content="there")
    with pytest.raises(ValidationError):
        service.create(hr_user, title="Hi", content="there", target_roles=["contractor"])
    with pytest.raises(ValidationError):
        service.create(hr_user, title=" ", content="there")


def test_visible_to_without_targets_means_everyone(fixed_now):
    a = Announcement(1, "t", "c", AnnouncementPriority.LOW, (), True, fixed_now)
    assert all(a.visible_to(role) for role in Role)
