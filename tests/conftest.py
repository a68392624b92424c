"""Shared fixtures: isolated SQLite store per test, a controllable clock, API client."""

import os
import tempfile
from datetime import datetime, timedelta, timezone

# Setup environment for testing
os.environ["CAPSULE_DATA_DIR"] = tempfile.mkdtemp()
os.environ["CAPSULE_DB_PATH"] = os.path.join(os.environ["CAPSULE_DATA_DIR"], "test.db")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from sqlmodel import Session

from capsule.database import create_db_engine, get_session, init_db
from capsule.services.album_service import create_album
from capsule.utils.security import create_access_token

OWNER = "usr_owner"


class FrozenClock:
    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def database_locked(*args, **kwargs):
    """Stand-in for any session/connection call while SQLite is locked."""
    raise OperationalError("SELECT 1", {}, Exception("database is locked"))


@pytest.fixture
def engine(tmp_path):
    eng = create_db_engine(f"sqlite:///{tmp_path / 'capsule.db'}")
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as s:
        yield s


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def album(session, clock):
    return create_album(OWNER, "Summer Trip", session, clock=clock)


@pytest.fixture
def client(engine):
    from capsule.main import app

    def override_session():
        with Session(engine) as s:
            yield s

    app.dependency_overrides[get_session] = override_session
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def auth():
    def headers(user_id: str) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user_id)}"}
    return headers
