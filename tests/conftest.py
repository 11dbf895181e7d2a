"""Shared fixtures: isolated in-memory databases and fake live connections."""

import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Must be set before ``livetimers`` is imported: settings load once.
os.environ.setdefault("DATA_DIR", str(ROOT / "data"))
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("TICK_INTERVAL_SECONDS", "0")
os.environ.setdefault("PASSWORD_HASH_ROUNDS", "4")
os.environ.setdefault("LOG_JSON", "false")

from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from livetimers.core.security import hash_password  # noqa: E402
from livetimers.crud.users import create_user  # noqa: E402
from livetimers.db.gateway import StorageGateway  # noqa: E402
from livetimers.db.session import Base  # noqa: E402

# Ensure models are registered so metadata tables are created
from livetimers.models import login_session as login_session_model  # noqa: E402,F401
from livetimers.models import timer as timer_model  # noqa: E402,F401
from livetimers.models import user as user_model  # noqa: E402,F401


class FakeConnection:
    """In-memory stand-in for a WebSocket connection."""

    def __init__(self, connection_id: str = "conn-1") -> None:
        self.id = connection_id
        self.sent: list[dict] = []
        self.closed_with: tuple[int, str] | None = None
        self._open = True

    @property
    def is_open(self) -> bool:
        return self._open

    async def send_json(self, payload: dict) -> bool:
        if not self._open:
            return False
        self.sent.append(payload)
        return True

    async def close(self, code: int, reason: str) -> None:
        self.closed_with = (code, reason)
        self._open = False

    def drop(self) -> None:
        self._open = False

    def messages(self, kind: str) -> list[dict]:
        return [message for message in self.sent if message["type"] == kind]


@pytest.fixture()
def session_factory():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    try:
        yield factory
    finally:
        engine.dispose()


@pytest.fixture()
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def gateway(session_factory):
    return StorageGateway(session_factory)


@pytest.fixture()
def make_user(session_factory):
    def _make(username: str = "ada", password: str = "correct horse"):
        session = session_factory()
        try:
            user = create_user(session, username, hash_password(password))
            return user.id
        finally:
            session.close()

    return _make


@pytest.fixture()
def make_connection():
    counter = iter(range(1, 1000))

    def _make() -> FakeConnection:
        return FakeConnection(f"conn-{next(counter)}")

    return _make
