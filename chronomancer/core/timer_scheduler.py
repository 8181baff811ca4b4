"""
Chronomancer: Timer Scheduler.

Keeps the in-memory mirror of not-yet-expired timers and drives their expiry
side effects from the 1 Hz tick.

All state changes happen on the event loop thread: tick handling is
synchronous, and store I/O runs in worker threads whose results come back
through done-callbacks. The collection therefore needs no locking.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from chronomancer.core.background import BackgroundTasks, task_error
from chronomancer.data.models import Timer, TimerKind
from chronomancer.ports.timer_store_port import StoreError

if TYPE_CHECKING:
    from chronomancer.core.power_executor import PowerExecutor
    from chronomancer.ports.notification_port import NotificationPort
    from chronomancer.ports.timer_store_port import TimerStorePort

logger = logging.getLogger(__name__)

FINISHED_TITLE = "Timer Finished"
FINISHED_ICON = "alarm"
FINISHED_CATEGORY = "alarm"


@dataclass
class TickBudget:
    """How many expired timers one tick may retire.

    Each retirement issues one store deletion, so the budget also caps
    persistent writes per tick. With the default limit of 1, K timers that
    expire together are retired over K consecutive ticks.
    """

    limit: int = 1
    used: int = 0

    def take(self) -> bool:
        if self.used >= self.limit:
            return False
        self.used += 1
        return True

    @property
    def exhausted(self) -> bool:
        return self.used >= self.limit


class TimerScheduler:
    """Owns the active-timer collection; retires expired timers on tick."""

    def __init__(
        self,
        notifier: NotificationPort,
        executor: PowerExecutor,
        store: TimerStorePort | None = None,
        max_expiries_per_tick: int = 1,
        tasks: BackgroundTasks | None = None,
    ) -> None:
        if max_expiries_per_tick < 1:
            raise ValueError("max_expiries_per_tick must be >= 1")
        self._notifier = notifier
        self._executor = executor
        self._store = store
        self._max_per_tick = max_expiries_per_tick
        self._tasks = tasks if tasks is not None else BackgroundTasks()
        self._timers: list[Timer] = []

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def timers(self) -> tuple[Timer, ...]:
        """Snapshot of the collection, in iteration order."""
        return tuple(self._timers)

    @property
    def store(self) -> TimerStorePort | None:
        return self._store

    def __len__(self) -> int:
        return len(self._timers)

    def attach_store(self, store: TimerStorePort) -> None:
        self._store = store

    def seed(self, timers: list[Timer]) -> None:
        """Replace the collection, e.g. with the store's active timers at startup."""
        self._timers = list(timers)

    async def load_active(self, now: int) -> None:
        """Seed from the store's active timers. A StoreError leaves the collection as is."""
        if self._store is None:
            logger.warning("No timer store attached; nothing to load")
            return
        try:
            timers = await asyncio.to_thread(self._store.get_all_active, now)
        except StoreError as exc:
            logger.error("Failed to fetch active timers: %s", exc)
            return
        self.seed(timers)
        logger.info("Loaded %d active timer(s)", len(timers))

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def on_created(self, timer: Timer) -> asyncio.Task | None:
        """Persist a new timer; on success the saved copy joins the collection.

        Returns the insert task (its result is the saved Timer, or it raises
        StoreError), or None when no store is available yet.
        """
        if self._store is None:
            logger.error("Database not yet available; timer '%s' not created", timer.description)
            return None

        def _done(task: asyncio.Task) -> None:
            exc = task_error(task)
            if exc is not None:
                logger.error("Failed to create timer: %s", exc)
                return
            if task.cancelled():
                return
            saved: Timer = task.result()
            self._timers.append(saved)
            logger.info("Created timer #%d '%s'", saved.id, saved.description)

        return self._tasks.spawn(
            asyncio.to_thread(self._store.insert, timer),
            on_done=_done,
            name="timer-insert",
        )

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def on_tick(self, now: int) -> list[Timer]:
        """Retire expired timers, at most `max_expiries_per_tick` of them.

        Scans a snapshot in collection order and stops as soon as the budget
        is spent; later expired timers wait for the next tick. Returns the
        timers retired on this tick.
        """
        budget = TickBudget(self._max_per_tick)
        retired: list[Timer] = []

        for timer in list(self._timers):
            if timer.is_active(now):
                continue
            if not budget.take():
                break
            self._retire(timer)
            retired.append(timer)

        return retired

    def _retire(self, timer: Timer) -> None:
        timer_type = timer.timer_type
        logger.info("Timer #%d '%s' expired", timer.id, timer.description)

        if timer_type.kind is TimerKind.USER_DEFINED:
            self._notify_finished(timer_type.text)
        else:
            self._executor.execute(timer_type.kind)

        self._timers = [t for t in self._timers if t is not timer]

        if self._store is None:
            logger.warning("Timer store unavailable; timer #%d not deleted from storage", timer.id)
            return

        timer_id = timer.id

        def _done(task: asyncio.Task) -> None:
            exc = task_error(task)
            if exc is not None:
                logger.error("Failed to delete timer #%d: %s", timer_id, exc)

        self._tasks.spawn(
            asyncio.to_thread(self._store.delete_by_id, timer_id),
            on_done=_done,
            name=f"timer-delete-{timer_id}",
        )

    def _notify_finished(self, text: str) -> None:
        def _done(task: asyncio.Task) -> None:
            exc = task_error(task)
            if exc is not None:
                logger.error("Failed to send notification: %s", exc)

        self._tasks.spawn(
            self._notifier.show(
                FINISHED_TITLE, text, FINISHED_ICON, FINISHED_CATEGORY, resident=True,
            ),
            on_done=_done,
            name="timer-finished-notice",
        )
