# tests/conftest.py
"""
Shared fixtures: in-memory SQLite database, a controllable clock and a
TestClient wired to both through FastAPI dependency overrides.
"""

import os

# Settings are validated on import; point them at SQLite before any src import
os.environ["DATABASE_URL"] = "sqlite://"

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from src.Controller.deps import get_DB, get_lifecycle
from src.DB.database import create_all_tables, drop_all_tables
from src.Services.trip_lifecycle import TripLifecycle
from src.main import app


class FixedClock:
    """Returns the same instant until advanced."""

    def __init__(self, moment: datetime):
        self.moment = moment

    def __call__(self) -> datetime:
        return self.moment

    def advance(self, **delta) -> None:
        self.moment = self.moment + timedelta(**delta)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_all_tables(bind=engine)
    yield engine
    drop_all_tables(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    # 08:00 UTC is 15:00 in Asia/Ho_Chi_Minh, same calendar day
    return FixedClock(datetime(2024, 1, 15, 8, 0, tzinfo=timezone.utc))


@pytest.fixture
def lifecycle(clock):
    return TripLifecycle(clock=clock, strict_completion=False)


@pytest.fixture
def client(session_factory, lifecycle):
    def override_get_DB():
        DB = session_factory()
        try:
            yield DB
        finally:
            DB.close()

    app.dependency_overrides[get_DB] = override_get_DB
    app.dependency_overrides[get_lifecycle] = lambda: lifecycle

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
