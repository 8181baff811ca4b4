"""
Chronomancer: Power Executor.

Immediately performs one of the four irreversible power operations. Each
call is fire-and-forget: the D-Bus request runs in the background and a
failure is only logged. There is no retry and no user-facing error.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Awaitable, Callable

from chronomancer.core.background import BackgroundTasks, task_error
from chronomancer.data.models import TimerKind

if TYPE_CHECKING:
    from chronomancer.ports.power_port import PowerPort

logger = logging.getLogger(__name__)


class PowerExecutor:
    """Thin dispatch of suspend / logout / shutdown / reboot to the power port."""

    def __init__(self, backend: PowerPort, tasks: BackgroundTasks | None = None) -> None:
        self._backend = backend
        self._tasks = tasks if tasks is not None else BackgroundTasks()

    def suspend(self) -> asyncio.Task:
        return self._spawn("suspend", self._backend.suspend)

    def shutdown(self) -> asyncio.Task:
        return self._spawn("shutdown", self._backend.power_off)

    def logout(self) -> asyncio.Task:
        return self._spawn("logout", self._backend.terminate_current_session)

    def reboot(self) -> asyncio.Task:
        return self._spawn("reboot", self._backend.reboot)

    def execute(self, kind: TimerKind) -> asyncio.Task:
        """Dispatch by timer kind. USER_DEFINED is not a power operation."""
        if kind is TimerKind.SUSPEND:
            return self.suspend()
        if kind is TimerKind.LOGOUT:
            return self.logout()
        if kind is TimerKind.SHUTDOWN:
            return self.shutdown()
        if kind is TimerKind.REBOOT:
            return self.reboot()
        raise ValueError(f"Not a power operation: {kind!r}")

    def _spawn(self, operation: str, call: Callable[[], Awaitable[None]]) -> asyncio.Task:
        logger.info("Executing system %s", operation)

        async def _run() -> None:
            await call()

        def _done(task: asyncio.Task) -> None:
            exc = task_error(task)
            if exc is not None:
                logger.error("Failed to %s system: %s", operation, exc)

        return self._tasks.spawn(_run(), on_done=_done, name=f"power-{operation}")
