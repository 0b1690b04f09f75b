from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Optional

import pytest

from src.hr_portal.hr_portal.core.enums import LeaveStatus
from src.hr_portal.hr_portal.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.hr_portal.hr_portal.leaves.model import LeaveBalance, LeaveRequest, LeaveType
from src.hr_portal.hr_portal.leaves.service import LeaveService


class InMemoryLeaves:
    def __init__(self):
        self.types = [LeaveType(1, "Sick Leave", 12), LeaveType(2, "Casual Leave", 12), LeaveType(4, "Unpaid Leave", 0, False)]
        self.balances: list[LeaveBalance] = []
        self.requests: dict[int, LeaveRequest] = {}

    def list_types(self):
        return list(self.types)

    def create_balance(self, *, profile_id, leave_type_id, year, total_days):
        self.balances.append(LeaveBalance(len(self.balances) + 1, profile_id, leave_type_id, year, total_days))
        return len(self.balances)

    def list_balances(self, *, profile_id, year):
        return [b for b in self.balances if b.profile_id == profile_id and b.year == year]

    def create_leave(self, *, profile_id, leave_type_id, start_date, end_date, total_days, reason):
        leave_id = len(self.requests) + 1
        self.requests[leave_id] = LeaveRequest(
            leave_id, profile_id, leave_type_id, start_date, end_date, total_days, reason,
            LeaveStatus.PENDING, datetime(2026, 3, 1, 8, 0),
        )
        return leave_id

    def get_leave(self, leave_id) -> Optional[LeaveRequest]:
        return self.requests.get(leave_id)

    def list_leaves(self, *, profile_id=None, status=None, limit=200):
        rows = [
            {"leave_id": r.leave_id, "profile_id": r.profile_id, "status": r.status.value}
            for r in self.requests.values()
            if (profile_id is None or r.profile_id == profile_id) and (status is None or r.status == status)
        ]
        return rows[:limit]

    def count_leaves(self, *, profile_id, status):
        return len(self.list_leaves(profile_id=profile_id, status=status))

    def approve_leave(self, *, leave_id, decided_by, decided_at):
        if not self._decide(leave_id, LeaveStatus.APPROVED, approved_by=decided_by, approved_at=decided_at):
            return False
        leave = self.requests[leave_id]
        self.balances = [
            replace(b, used_days=b.used_days + leave.total_days)
            if (b.profile_id, b.leave_type_id, b.year) == (leave.profile_id, leave.leave_type_id, leave.start_date.year)
            else b
            for b in self.balances
        ]
        return True

    def reject_leave(self, *, leave_id, decided_by, decided_at, rejection_reason=None):
        return self._decide(
            leave_id, LeaveStatus.REJECTED, approved_by=decided_by, approved_at=decided_at, rejection_reason=rejection_reason
        )

    def cancel_leave(self, *, leave_id):
        return self._decide(leave_id, LeaveStatus.CANCELLED)

    def _decide(self, leave_id, status, **changes):
        leave = self.requests.get(leave_id)
        if not leave or leave.status != LeaveStatus.PENDING:
            return False
        self.requests[leave_id] = replace(leave, status=status, **changes)
        return True


@pytest.fixture
def repo():
    return InMemoryLeaves()


@pytest.fixture
def service(repo, fixed_now):
    return LeaveService(repo, clock=lambda: fixed_now)


def test_apply_counts_inclusive_days(service, repo, employee):
    leave_id = service.apply(
        employee, leave_type_id=2, start_date=date(2026, 3, 9), end_date=date(2026, 3, 11), reason="  family trip "
    )

    leave = repo.requests[leave_id]
    assert leave.total_days == 3
    assert leave.reason == "family trip"
    assert leave.status == LeaveStatus.PENDING
    assert service.count_pending(employee) == 1


def test_apply_rejects_inverted_dates_and_unknown_types(service, employee):
    with pytest.raises(ValidationError):
        service.apply(employee, leave_type_id=2, start_date=date(2026, 3, 11), end_date=date(2026, 3, 9))
    with pytest.raises(ValidationError):
        service.apply(employee, leave_type_id=99, start_date=date(2026, 3, 9), end_date=date(2026, 3, 9))


def test_hr_approval_consumes_balance(service, repo, employee, hr_user):
    repo.create_balance(profile_id=employee.profile_id, leave_type_id=1, year=2026, total_days=12)
    leave_id = service.apply(employee, leave_type_id=1, start_date=date(2026, 3, 4), end_date=date(2026, 3, 5))

    service.approve(hr_user, leave_id)

    assert repo.requests[leave_id].status == LeaveStatus.APPROVED
    assert repo.requests[leave_id].approved_by == hr_user.profile_id
    [sick] = [b for b in service.balances(employee, year=2026) if b["leave_type_id"] == 1]
    assert (sick["used_days"], sick["remaining_days"], sick["leave_type"]) == (2, 10, "Sick Leave")


def test_decided_leave_cannot_be_decided_again(service, employee, hr_user):
    leave_id = service.apply(employee, leave_type_id=1, start_date=date(2026, 3, 4), end_date=date(2026, 3, 4))
    service.reject(hr_user, leave_id, reason="Release week")

    with pytest.raises(ValidationError):
        service.approve(hr_user, leave_id)


def test_employee_cannot_approve(service, employee, actor_factory):
    other = actor_factory(profile_id=8)
    leave_id = service.apply(other, leave_type_id=1, start_date=date(2026, 3, 4), end_date=date(2026, 3, 4))

    with pytest.raises(AuthorizationError):
        service.approve(employee, leave_id)


def test_staff_cannot_decide_own_request(service, hr_user):
    leave_id = service.apply(hr_user, leave_type_id=1, start_date=date(2026, 3, 4), end_date=date(2026, 3, 4))

    with pytest.raises(ValidationError):
        service.approve(hr_user, leave_id)


def test_cancel_own_pending_only(service, repo, employee, actor_factory, hr_user):
    leave_id = service.apply(employee, leave_type_id=2, start_date=date(2026, 3, 4), end_date=date(2026, 3, 4))

    with pytest.raises(AuthorizationError):
        service.cancel(actor_factory(profile_id=8), leave_id)

    service.cancel(employee, leave_id)
    assert repo.requests[leave_id].status == LeaveStatus.CANCELLED

    # Once it is no longer pending the owner loses the right to change it.
    with pytest.raises(AuthorizationError):
        service.cancel(employee, leave_id)
    with pytest.raises(NotFoundError):
        service.cancel(employee, 404)


def test_staff_cancel_of_processed_leave_is_rejected(service, repo, employee, hr_user, admin_user):
    leave_id = service.apply(employee, leave_type_id=1, start_date=date(2026, 3, 5), end_date=date(2026, 3, 5))
    service.approve(hr_user, leave_id)

    with pytest.raises(ValidationError):
        service.cancel(admin_user, leave_id)
    assert repo.requests[leave_id].status == LeaveStatus.APPROVED


def test_own_leave_listing_consults_the_policy(repo, fixed_now, employee):
    class DenyAll:
        def __init__(self):
            self.asked = []

        def require(self, actor, resource, action, *, owner_profile_id=None, **context):
            self.asked.append((resource, action.value, owner_profile_id))
            raise AuthorizationError("denied")

    policy = DenyAll()
    service = LeaveService(repo, policy=policy, clock=lambda: fixed_now)

    with pytest.raises(AuthorizationError):
        service.list_my_leaves(employee)
    with pytest.raises(AuthorizationError):
        service.count_pending(employee)
    assert policy.asked == [("leaves", "read", 7), ("leaves", "read", 7)]


def test_list_leaves_scoped_by_role(service, employee, actor_factory, hr_user):
    service.apply(employee, leave_type_id=1, start_date=date(2026, 3, 4), end_date=date(2026, 3, 4))
    service.apply(actor_factory(profile_id=8), leave_type_id=1, start_date=date(2026, 3, 4), end_date=date(2026, 3, 4))

    assert {r["profile_id"] for r in service.list_leaves(employee)} == {7}
    assert {r["profile_id"] for r in service.list_leaves(hr_user)} == {7, 8}


def test_employee_cannot_read_someone_elses_balances(service, employee):
    with pytest.raises(AuthorizationError):
        service.balances(employee, profile_id=8)
