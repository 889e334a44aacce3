import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from folio.app import create_app
from folio.auth.session import MemorySessionStore, SessionManager
from folio.auth.users import register_user
from folio.config import Settings
from folio.infra.store import MemoryStore

SECRET = "test-secret-key"
ADMIN = {"username": "admin", "password": "admin123"}
PROJECT_PAYLOAD = {
    "title": "Orrery",
    "description": "A model of the solar system",
    "technologies": ["Three.js", "React"],
}


class FakeClock:
    """Controllable 'now' for session expiry tests."""

    def __init__(self) -> None:
        self.now = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture()
def repo_root() -> Path:
    return Path(__file__).resolve().parents[1]


@pytest.fixture()
def settings() -> Settings:
    return Settings(secret_key=SECRET)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store() -> MemoryStore:
    s = MemoryStore()
    register_user(s, ADMIN["username"], ADMIN["password"])
    return s


@pytest.fixture()
def sessions(clock) -> SessionManager:
    return SessionManager(MemorySessionStore(), SECRET, clock=clock)


@pytest.fixture()
def app(settings, store, sessions):
    return create_app(settings, store=store, sessions=sessions)


@pytest.fixture()
def client(app) -> TestClient:
    """Anonymous client (no session cookie)."""
    return TestClient(app)


@pytest.fixture()
def auth_client(app) -> TestClient:
    """Client holding a valid admin session cookie."""
    c = TestClient(app)
    r = c.post("/api/auth/login", json=ADMIN)
    assert r.status_code == 200, r.text
    return c
