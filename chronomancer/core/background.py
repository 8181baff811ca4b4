"""Fire-and-forget task tracking for calls into external collaborators.

Handlers never await store, D-Bus or notification I/O inline. They spawn it
here; results come back on the event loop via done-callbacks, so every
state transition still runs on the single loop thread.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Coroutine

logger = logging.getLogger(__name__)


class BackgroundTasks:
    """Holds strong references to in-flight tasks until they finish."""

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task] = set()

    def spawn(
        self,
        coro: Coroutine[Any, Any, Any],
        on_done: Callable[[asyncio.Task], None] | None = None,
        name: str | None = None,
    ) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        if on_done is not None:
            task.add_done_callback(on_done)
        return task

    def __len__(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait until every spawned task, including ones spawned meanwhile, is done."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
            # Let done-callbacks run before re-checking.
            await asyncio.sleep(0)


def task_error(task: asyncio.Task) -> BaseException | None:
    """Return the task's exception, or None if it succeeded or was cancelled."""
    if task.cancelled():
        return None
    return task.exception()
