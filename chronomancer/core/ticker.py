"""Fixed-period tick source for the scheduler.

Deadlines advance by whole periods from the start time, so the loop does
not drift. A wake-up that comes late still delivers every tick, one per
deadline, in order.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from chronomancer.data.models import unix_now

logger = logging.getLogger(__name__)


class Ticker:
    """Calls `on_tick(clock())` once per `interval` seconds until stopped."""

    def __init__(
        self,
        interval: float,
        on_tick: Callable[[int], object],
        clock: Callable[[], int] = unix_now,
    ) -> None:
        if interval <= 0:
            raise ValueError("Tick interval must be > 0")
        self._interval = interval
        self._on_tick = on_tick
        self._clock = clock
        self._task: asyncio.Task | None = None
        self.ticks = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task:
        if self.running:
            return self._task
        self._task = asyncio.get_running_loop().create_task(self._run(), name="ticker")
        return self._task

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time()
        while True:
            deadline += self._interval
            delay = deadline - loop.time()
            if delay > 0:
                await asyncio.sleep(delay)
            else:
                await asyncio.sleep(0)
            self._fire()

    def _fire(self) -> None:
        self.ticks += 1
        try:
            self._on_tick(self._clock())
        except Exception:
            logger.exception("Tick handler failed")
