from __future__ import annotations

from datetime import timedelta

from src.hr_portal.hr_portal.users.session import SessionRegistry


def test_open_get_close(employee, clock):
    registry = SessionRegistry(clock=clock)

    user_session = registry.open(employee)

    assert registry.get(user_session.token) is user_session
    assert user_session.opened_at == clock.now
    assert len(registry) == 1
    assert registry.close(user_session.token)
    assert registry.get(user_session.token) is None
    assert user_session.closed
    assert not registry.close(user_session.token)
    assert registry.get(None) is None


def test_open_hooks_and_closers_run_in_reverse(employee):
    order = []

    def hook(user_session):
        user_session.on_close(lambda: order.append("first"))
        user_session.on_close(lambda: order.append("second"))

    registry = SessionRegistry(on_open=[hook])
    user_session = registry.open(employee)
    user_session.close()
    user_session.close()

    assert order == ["second", "first"]


def test_failing_closer_does_not_block_others(employee):
    ran = []

    def broken():
        raise RuntimeError("teardown failed")

    registry = SessionRegistry()
    user_session = registry.open(employee)
    user_session.on_close(lambda: ran.append(True))
    user_session.on_close(broken)

    registry.close_all()

    assert ran == [True]
    assert len(registry) == 0


def test_tokens_are_unique(employee):
    registry = SessionRegistry()
    assert registry.open(employee).token != registry.open(employee).token


def test_idle_session_expires_on_lookup(employee, clock):
    registry = SessionRegistry(clock=clock, idle_timeout=timedelta(minutes=30))
    user_session = registry.open(employee)

    clock.now += timedelta(minutes=20)
    assert registry.get(user_session.token) is user_session
    registry.touch(user_session)

    clock.now += timedelta(minutes=25)
    assert registry.get(user_session.token) is user_session

    clock.now += timedelta(minutes=31)
    assert registry.get(user_session.token) is None
    assert user_session.closed
    assert len(registry) == 0


def test_opening_a_session_sweeps_idle_ones(employee, hr_user, clock):
    registry = SessionRegistry(clock=clock, idle_timeout=timedelta(minutes=30))
    abandoned = [registry.open(employee) for _ in range(3)]

    clock.now += timedelta(hours=1)
    fresh = registry.open(hr_user)

    assert all(s.closed for s in abandoned)
    assert not fresh.closed
    assert len(registry) == 1
    assert registry.expire_idle() == 0
