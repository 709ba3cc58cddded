from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest
from sqlalchemy.pool import StaticPool

from planner.infra.db import create_schema, make_engine, make_session_factory
from planner.infra.repository import EventRepository, TaskRepository

NOW = datetime(2026, 3, 20, 9, 30)


class FrozenClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, days: int) -> None:
        self.now = self.now + timedelta(days=days)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(NOW)


@pytest.fixture
def engine():
    engine = make_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    create_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def task_repo(session_factory, clock) -> TaskRepository:
    return TaskRepository(session_factory, clock)


@pytest.fixture
def event_repo(session_factory, clock) -> EventRepository:
    return EventRepository(session_factory, clock)


@pytest.fixture
def event(event_repo):
    return event_repo.create_event("Spring Fair", date(2026, 4, 18))
