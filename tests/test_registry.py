"""Tests for the live study session registry."""

from datetime import datetime, timedelta, timezone

import pytest

from app.auth.context import UserContext
from app.core.exceptions import StudySessionNotFoundError
from app.study.controller import SessionPhase, StudySessionController
from app.study.registry import StudySessionRegistry


@pytest.fixture
def controller(context, fake_store, fake_generator):
    return StudySessionController(context, "set-1", fake_store, fake_generator)


def test_add_and_get(registry, controller, context):
    session_id = registry.add(controller)

    assert registry.get(session_id, context.user_id) is controller
    assert len(registry) == 1


def test_sessions_get_distinct_ids(registry, controller):
    assert registry.add(controller) != registry.add(controller)


def test_unknown_session(registry, context):
    with pytest.raises(StudySessionNotFoundError):
        registry.get("missing", context.user_id)


def test_other_owner_cannot_see_session(registry, controller, fake_store, fake_generator):
    session_id = registry.add(controller)
    other = UserContext(user_id="user-2", email="other@example.com")

    with pytest.raises(StudySessionNotFoundError):
        registry.get(session_id, other.user_id)
    with pytest.raises(StudySessionNotFoundError):
        registry.remove(session_id, other.user_id)
    assert len(registry) == 1


def test_remove(registry, controller, context):
    session_id = registry.add(controller)

    registry.remove(session_id, context.user_id)

    assert len(registry) == 0
    with pytest.raises(StudySessionNotFoundError):
        registry.get(session_id, context.user_id)


class FakeClock:
    def __init__(self) -> None:
        self.now = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def timed_registry(clock):
    return StudySessionRegistry(
        idle_timeout=timedelta(minutes=60),
        completed_timeout=timedelta(minutes=10),
        clock=clock,
    )


def test_idle_session_is_evicted(timed_registry, clock, controller, context):
    session_id = timed_registry.add(controller)

    clock.advance(minutes=61)

    with pytest.raises(StudySessionNotFoundError):
        timed_registry.get(session_id, context.user_id)
    assert len(timed_registry) == 0


def test_lookups_keep_a_session_alive(timed_registry, clock, controller, context):
    session_id = timed_registry.add(controller)

    for _ in range(3):
        clock.advance(minutes=45)
        assert timed_registry.get(session_id, context.user_id) is controller


def test_completed_session_is_evicted_sooner(timed_registry, clock, context, fake_store, fake_generator):
    active = StudySessionController(context, "set-1", fake_store, fake_generator)
    completed = StudySessionController(context, "set-2", fake_store, fake_generator)
    completed.phase = SessionPhase.COMPLETE
    active_id = timed_registry.add(active)
    timed_registry.add(completed)

    clock.advance(minutes=11)

    assert timed_registry.evict_expired() == 1
    assert timed_registry.get(active_id, context.user_id) is active


def test_remove_for_set(registry, context, fake_store, fake_generator):
    other_user = UserContext(user_id="user-2", email="other@example.com")
    for _ in range(3):
        registry.add(StudySessionController(context, "set-1", fake_store, fake_generator))
    kept = registry.add(StudySessionController(context, "set-2", fake_store, fake_generator))
    registry.add(StudySessionController(other_user, "set-1", fake_store, fake_generator))

    assert registry.remove_for_set("set-1", context.user_id) == 3

    assert len(registry) == 2
    assert registry.get(kept, context.user_id).set_id == "set-2"
