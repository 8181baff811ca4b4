"""Shared test fixtures and configuration.

Seeds environment variables before any chronomancer import, and provides
a temp-file TimerDB plus fakes for the power and notification ports.
"""

import os

# Patch env vars BEFORE any chronomancer imports
os.environ.setdefault("DATABASE_PATH", ":memory:")
os.environ.setdefault("APP_NAME", "Chronomancer")
os.environ.setdefault("INHIBIT_MODE", "block")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

import pytest
from unittest.mock import AsyncMock, MagicMock


class FakeLease:
    """Stand-in for an inhibitor lease; counts releases."""

    def __init__(self, name: str = "lease") -> None:
        self.name = name
        self.release_count = 0

    def release(self) -> None:
        self.release_count += 1

    @property
    def released(self) -> bool:
        return self.release_count > 0


@pytest.fixture
def tmp_db_path(tmp_path):
    """Return a temporary SQLite DB path."""
    return str(tmp_path / "test_timers.db")


@pytest.fixture
def timer_db(tmp_db_path):
    """Return a TimerDB instance backed by a temp file."""
    from chronomancer.data.db import TimerDB
    return TimerDB(db_path=tmp_db_path)


@pytest.fixture
def power():
    """A PowerPort fake whose inhibit() hands out a fresh FakeLease."""
    backend = MagicMock()
    backend.inhibit = AsyncMock(side_effect=lambda who, why, mode: FakeLease())
    backend.suspend = AsyncMock(return_value=None)
    backend.power_off = AsyncMock(return_value=None)
    backend.reboot = AsyncMock(return_value=None)
    backend.terminate_session = AsyncMock(return_value=None)
    backend.terminate_current_session = AsyncMock(return_value=None)
    return backend


@pytest.fixture
def notifier():
    """A NotificationPort fake."""
    fake = MagicMock()
    fake.show = AsyncMock(return_value=None)
    return fake
