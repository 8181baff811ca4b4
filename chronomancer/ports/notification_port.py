"""Notification port: abstract interface for desktop alerts.

Core modules depend on this protocol, never on a specific notification server.
"""

from __future__ import annotations

from typing import Protocol


class NotifyError(Exception):
    """Raised when a notification cannot be shown."""


class NotificationPort(Protocol):
    """Abstract notification interface used by core modules."""

    async def show(
        self,
        title: str,
        body: str,
        icon: str,
        category: str,
        resident: bool = False,
        timeout_ms: int = -1,
    ) -> None: ...
