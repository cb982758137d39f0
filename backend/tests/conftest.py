"""
Test fixtures. Uses a temporary SQLite file and a fixed JWT key.
"""
from __future__ import annotations

import os
import sys
import tempfile

# env must be set before msgboard is imported (settings and engine are built at import)
_test_db_file = tempfile.NamedTemporaryFile(delete=False, suffix=".db")
_test_db_path = _test_db_file.name
_test_db_file.close()
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_test_db_path}")
os.environ.setdefault("JWT_KEY", "test-jwt-key")
os.environ.setdefault("JWT_TIMEOUT_SECONDS", "3600")
os.environ.setdefault("JWT_REFRESH_MULTIPLIER", "10")

# backend on the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import text
from sqlalchemy.orm import Session

from msgboard.core.tokens import TokenConfig, TokenIssuer, TokenVerifier
from msgboard.db.database import SessionLocal
from msgboard.main import create_app


T0 = 1_700_000_000


class FakeClock:
    """Settable wall clock, seconds since epoch."""

    def __init__(self, now: float = T0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def token_config() -> TokenConfig:
    return TokenConfig(key=b"test-jwt-key", access_window=3600)


@pytest.fixture
def issuer(token_config: TokenConfig, clock: FakeClock) -> TokenIssuer:
    return TokenIssuer(token_config, clock=clock)


@pytest.fixture
def verifier(token_config: TokenConfig, clock: FakeClock) -> TokenVerifier:
    return TokenVerifier(token_config, clock=clock)


@pytest.fixture
def app(token_config: TokenConfig, clock: FakeClock):
    return create_app(token_config=token_config, clock=clock)


@pytest.fixture
def client(app):
    return TestClient(app, base_url="http://testserver")


@pytest.fixture
def db_session():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def _clean_tables_before(db_session: Session):
    """Empty tables before each test."""
    db_session.execute(text("DELETE FROM users"))
    db_session.commit()
    yield
    db_session.rollback()


def pytest_sessionfinish(session, exitstatus):
    """Remove the temporary DB file after the run."""
    try:
        if os.path.exists(_test_db_path):
            os.unlink(_test_db_path)
    except OSError:
        pass


@pytest.fixture
def registered(client: TestClient) -> dict:
    """Registered account: response data plus credentials."""
    r = client.post(
        "/user/register",
        json={"name": "alice", "email": "alice@example.com", "password": "s3cret-pass"},
    )
    assert r.status_code == 200
    return {**r.json()["data"], "email": "alice@example.com", "password": "s3cret-pass"}
