"""
Pytest fixtures: in-memory SQLite shared through StaticPool, the app with
get_session overridden, and known API key / signing secret.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from offloading.core import db as db_module
from offloading.core.db import get_session
from offloading.core.settings import settings

API_KEY = "test-api-key"


@pytest.fixture
def engine(monkeypatch):
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    monkeypatch.setattr(db_module, "_engine", engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as s:
        yield s


@pytest.fixture(autouse=True)
def study_settings(monkeypatch):
    monkeypatch.setattr(settings, "API_KEY", API_KEY)
    monkeypatch.setattr(settings, "STUDY_SECRET", "test-secret")
    monkeypatch.setattr(settings, "FRONTEND_URL", "http://study.test")
    monkeypatch.setattr(settings, "HINT_MIN_ATTEMPTS", 3)
    monkeypatch.setattr(settings, "HINT_TIME_BEFORE_SECONDS", 120.0)
    monkeypatch.setattr(settings, "MAX_SCORED_CHARS", 500)
    monkeypatch.setattr(settings, "DEFAULT_LOCALE", "en")
    return settings


@pytest.fixture
def client(engine):
    from offloading.main import app

    def _session_override():
        with Session(engine) as s:
            yield s

    app.dependency_overrides[get_session] = _session_override
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def auth():
    return {"x-api-key": API_KEY}
