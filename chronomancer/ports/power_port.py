"""Power port: inhibitor leases and the four power operations.

Core modules depend on this protocol, never on D-Bus directly.
"""

from __future__ import annotations

from typing import Protocol


class BackendError(Exception):
    """Raised when a power operation or inhibitor request fails."""


class InhibitorLease(Protocol):
    """Opaque handle that keeps the system awake while it is open."""

    def release(self) -> None: ...


class PowerPort(Protocol):
    """Abstract power management interface used by core modules."""

    async def inhibit(self, who: str, why: str, mode: str) -> InhibitorLease: ...

    async def suspend(self) -> None: ...

    async def power_off(self) -> None: ...

    async def reboot(self) -> None: ...

    async def terminate_session(self, session_id: str) -> None: ...

    async def terminate_current_session(self) -> None: ...
