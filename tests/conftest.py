"""Pytest configuration and shared fixtures."""

import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator

# Configure the application before any worktime_tracker module is imported
_config_dir = tempfile.mkdtemp(prefix="worktime-tests-")
os.environ.setdefault("WORKTIME_CONFIG_FILE", str(Path(_config_dir) / "config.json"))
os.environ.setdefault("WORKTIME_DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("WORKTIME_LOG_TO_FILE", "0")
os.environ.setdefault("WORKTIME_LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from worktime_tracker.core.clock import FixedClock
from worktime_tracker.events.publisher import RecordingEventPublisher
from worktime_tracker.repositories.memory_impl import MemoryTrackerRepository
from worktime_tracker.services.session_lifecycle import SessionLifecycle
from worktime_tracker.services.stats_engine import StatsEngine

# Monday
NOW = datetime(2024, 1, 8, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock() -> FixedClock:
    """Clock frozen at Monday 2024-01-08 09:00 UTC."""
    return FixedClock(NOW)


@pytest.fixture
def repository() -> MemoryTrackerRepository:
    return MemoryTrackerRepository()


@pytest.fixture
def publisher() -> RecordingEventPublisher:
    return RecordingEventPublisher()


@pytest.fixture
def lifecycle(repository, publisher, clock) -> SessionLifecycle:
    return SessionLifecycle(repository, publisher=publisher, clock=clock)


@pytest.fixture
def stats_engine(repository, clock) -> StatsEngine:
    return StatsEngine(repository, clock=clock)


@pytest.fixture
def sql_engine():
    """Fresh in-memory SQLite database with all tables created."""
    from worktime_tracker.db.database import create_database_engine, init_db

    engine = create_database_engine("sqlite:///:memory:")
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def test_db(sql_engine):
    """Session factory bound to the in-memory test database."""
    return sessionmaker(autocommit=False, autoflush=False, bind=sql_engine)


@pytest.fixture
def db_session(test_db):
    session = test_db()
    yield session
    session.close()


@pytest.fixture
def client(repository, publisher, clock) -> Generator[TestClient, None, None]:
    """Test client whose services run on the in-memory repository and fixed clock."""
    from worktime_tracker.main import app
    from worktime_tracker.api.dependencies import get_clock, get_event_publisher
    from worktime_tracker.repositories.dependencies import get_tracker_repository

    app.dependency_overrides[get_tracker_repository] = lambda: repository
    app.dependency_overrides[get_event_publisher] = lambda: publisher
    app.dependency_overrides[get_clock] = lambda: clock

    with TestClient(app) as test_client:
        yield test_client

    # Clear overrides to avoid affecting other tests
    app.dependency_overrides.clear()


@pytest.fixture
def sql_client(test_db, publisher, clock) -> Generator[TestClient, None, None]:
    """Test client backed by the SQLAlchemy repository on in-memory SQLite."""
    from worktime_tracker.main import app
    from worktime_tracker.api.dependencies import get_clock, get_event_publisher
    from worktime_tracker.db.database import get_db

    def override_get_db():
        db = test_db()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_event_publisher] = lambda: publisher
    app.dependency_overrides[get_clock] = lambda: clock

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
