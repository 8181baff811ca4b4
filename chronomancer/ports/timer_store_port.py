"""Timer store port: the persistence contract the scheduler depends on.

Implementations are synchronous; the core runs them off the event loop.
"""

from __future__ import annotations

from typing import Protocol

from chronomancer.data.models import Timer


class StoreError(Exception):
    """Raised when an insert, fetch or delete against the store fails."""


class TimerStorePort(Protocol):
    """Abstract timer repository used by core modules."""

    def insert(self, timer: Timer) -> Timer: ...

    def get_all_active(self, now: int) -> list[Timer]: ...

    def delete_by_id(self, timer_id: int) -> bool: ...
