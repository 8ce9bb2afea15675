"""Pytest configuration and shared fixtures for PocketLedger tests.

Fixtures build an isolated SQLite-backed store and a ledger bound to a fixed
clock, so tests never touch the real data directory.
"""

from __future__ import annotations

import tempfile
from datetime import datetime
from pathlib import Path

import pytest
from sqlmodel import SQLModel, create_engine

from pocketledger import models  # noqa: F401  (registers tables)
from pocketledger.infra.database import create_session_factory
from pocketledger.infra.storage import SQLModelKeyValueStore
from pocketledger.services.ledger import Ledger

FIXED_NOW = datetime(2024, 3, 15, 10, 30)


class FakeClock:
    """Callable clock that tests can move forward."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class StubGate:
    """Authentication gate with a switchable state."""

    def __init__(self, authenticated: bool = True):
        self.is_authenticated = authenticated


class RecordingStore:
    """In-memory store that can be told to fail writes."""

    def __init__(self):
        self.data: dict[str, object] = {}
        self.fail_writes = False

    def get(self, key, default):
        return self.data.get(getattr(key, "value", key), default)

    def set(self, key, value) -> bool:
        if self.fail_writes:
            return False
        self.data[getattr(key, "value", key)] = value
        return True

    def remove(self, key) -> bool:
        self.data.pop(getattr(key, "value", key), None)
        return True

    def usage(self):
        raise NotImplementedError

    def clear_all(self) -> bool:
        self.data.clear()
        return True


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated temporary SQLite database for each test.

    Yields:
        Engine: SQLModel engine connected to the test database
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory matching the one used by the application."""

    return create_session_factory(db_engine)


@pytest.fixture
def store(session_factory) -> SQLModelKeyValueStore:
    return SQLModelKeyValueStore(session_factory, quota_bytes=10 * 1024 * 1024)


# =============================================================================
# Ledger Fixtures
# =============================================================================


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def gate() -> StubGate:
    return StubGate()


@pytest.fixture
def ledger(store, gate, clock) -> Ledger:
    """A loaded ledger with the default categories seeded."""

    instance = Ledger(store, gate, clock=clock)
    instance.load()
    return instance


@pytest.fixture
def memory_store() -> RecordingStore:
    return RecordingStore()


@pytest.fixture
def memory_ledger(memory_store, gate, clock) -> Ledger:
    """A loaded ledger backed by an in-memory store."""

    instance = Ledger(memory_store, gate, clock=clock)
    instance.load()
    return instance
