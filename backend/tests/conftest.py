"""Shared test fixtures."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from carservice.database import UnitOfWork, build_engine, get_db, get_session_factory
from carservice.main import app
from carservice.models.tables import Base
from carservice.services import events

from .factories import add_bay, add_service, set_hours


class FakeRedis:
    """Records pushed events instead of talking to Redis."""

    def __init__(self):
        self.lists: dict[str, list[str]] = {}

    def rpush(self, key, *values):
        self.lists.setdefault(key, []).extend(values)
        return len(self.lists[key])


@pytest.fixture(autouse=True)
def fake_redis(monkeypatch) -> FakeRedis:
    fake = FakeRedis()
    monkeypatch.setattr(events, "redis_client", fake)
    monkeypatch.setattr(events.settings, "events_enabled", True)
    return fake


@pytest.fixture
def engine(tmp_path):
    # File-backed: the ledger lock needs real connections, not a shared in-memory one
    engine = build_engine(f"sqlite:///{tmp_path / 'carservice.db'}")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=engine,
    )


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def uow(session_factory) -> UnitOfWork:
    return UnitOfWork(session_factory)


@pytest.fixture
def client(session_factory):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def monday_shop(db):
    """Mon 08:00-18:00, one active bay, one 30-minute service."""
    set_hours(db, 1, "08:00:00", "18:00:00")
    bay = add_bay(db, "Bay 1")
    service = add_service(db, "Oil Change", 30, "49.99")
    return {"bay": bay, "service": service}
