"""
Chronomancer: Application wiring.

UI-agnostic service behind the panel applet. It opens the timer store,
seeds the scheduler, runs the 1 Hz ticker, and exposes the actions a panel
(or the command line) triggers: arm a power timer, arm a reminder, toggle
stay-awake, or run a power operation immediately.

Adapters are injectable; defaults are the logind backend, desktop
notifications and the SQLite store at settings.DATABASE_PATH.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Callable

from chronomancer.config import settings
from chronomancer.core.background import BackgroundTasks, task_error
from chronomancer.core.power_executor import PowerExecutor
from chronomancer.core.power_inhibitor import PowerInhibitor
from chronomancer.core.ticker import Ticker
from chronomancer.core.timer_scheduler import TimerScheduler
from chronomancer.data.models import POWER_KINDS, Timer, TimerKind, TimerType, unix_now
from chronomancer.ports.timer_store_port import StoreError
from chronomancer.utils.time import format_duration

if TYPE_CHECKING:
    from chronomancer.ports.notification_port import NotificationPort
    from chronomancer.ports.power_port import PowerPort
    from chronomancer.ports.timer_store_port import TimerStorePort

logger = logging.getLogger(__name__)

NOTICE_CATEGORY = "device"

# kind -> (title, body prefix, icon)
POWER_NOTICES: dict[TimerKind, tuple[str, str, str]] = {
    TimerKind.SUSPEND: ("Suspend Timer Set", "System will suspend in", "system-suspend-symbolic"),
    TimerKind.LOGOUT: ("Logout Timer Set", "System will logout in", "system-log-out-symbolic"),
    TimerKind.SHUTDOWN: ("Shutdown Timer Set", "System will shutdown in", "system-shutdown-symbolic"),
    TimerKind.REBOOT: ("Reboot Timer Set", "System will reboot in", "system-reboot-symbolic"),
}


def _default_store() -> TimerStorePort:
    from chronomancer.data.db import TimerDB

    return TimerDB()


class ChronomancerApp:
    """Owns the scheduler, inhibitor and executor, and drives them from the ticker."""

    def __init__(
        self,
        power: PowerPort | None = None,
        notifier: NotificationPort | None = None,
        store_factory: Callable[[], TimerStorePort] | None = None,
        clock: Callable[[], int] = unix_now,
        tick_interval: float | None = None,
        max_expiries_per_tick: int | None = None,
    ) -> None:
        # Wire default adapters if not provided
        if power is None:
            from chronomancer.adapters.logind_power import LogindPowerBackend
            power = LogindPowerBackend()

        if notifier is None:
            from chronomancer.adapters.desktop_notifier import DesktopNotifier
            notifier = DesktopNotifier(app_name=settings.APP_NAME)

        self._notifier = notifier
        self._store_factory = store_factory or _default_store
        self._clock = clock
        self.tasks = BackgroundTasks()

        self.executor = PowerExecutor(power, tasks=self.tasks)
        self.inhibitor = PowerInhibitor(
            power,
            who=settings.APP_NAME,
            why=settings.INHIBIT_REASON,
            mode=settings.INHIBIT_MODE,
            tasks=self.tasks,
        )
        self.scheduler = TimerScheduler(
            notifier,
            self.executor,
            max_expiries_per_tick=(
                settings.MAX_EXPIRIES_PER_TICK
                if max_expiries_per_tick is None else max_expiries_per_tick
            ),
            tasks=self.tasks,
        )
        self.ticker = Ticker(
            settings.TICK_INTERVAL_SECONDS if tick_interval is None else tick_interval,
            self.scheduler.on_tick,
            clock=clock,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Open the store, load active timers, and start ticking.

        A store that fails to open is logged; the app keeps running without
        persistence (timers can't be created, expiries aren't deleted).
        """
        try:
            store = await asyncio.to_thread(self._store_factory)
        except StoreError as exc:
            logger.error("Failed to initialize database: %s", exc)
        else:
            self.scheduler.attach_store(store)
            await self.scheduler.load_active(self._clock())

        self.ticker.start()
        logger.info("Chronomancer started with %d active timer(s)", len(self.scheduler))

    async def stop(self) -> None:
        """Stop ticking, drop the stay-awake lease, and let in-flight work finish."""
        await self.ticker.stop()
        self.inhibitor.release()
        await self.tasks.drain()
        logger.info("Chronomancer stopped")

    # ------------------------------------------------------------------
    # Panel actions
    # ------------------------------------------------------------------

    def set_power_timer(self, kind: TimerKind, seconds: int) -> asyncio.Task | None:
        """Arm a delayed suspend / logout / shutdown / reboot."""
        if kind not in POWER_KINDS:
            raise ValueError(f"Not a power action: {kind!r}")
        if seconds <= 0:
            raise ValueError(f"Timer duration must be positive, got {seconds}")

        if self.scheduler.store is None:
            logger.error("Database not yet available")
            return None

        title, prefix, icon = POWER_NOTICES[kind]
        self._notify(
            title,
            f"{prefix} {format_duration(seconds)}",
            icon,
            timeout_ms=settings.NOTIFICATION_TIMEOUT_MS,
        )

        timer = Timer.new(seconds, False, TimerType.power(kind), now=self._clock())
        return self.scheduler.on_created(timer)

    def add_reminder(self, description: str, seconds: int) -> asyncio.Task | None:
        """Arm a plain reminder; it shows a notification when it ends."""
        description = description.strip()
        if not description:
            raise ValueError("Reminder text must not be empty")
        if seconds <= 0:
            raise ValueError(f"Timer duration must be positive, got {seconds}")

        timer = Timer.new(
            seconds, False, TimerType.user_defined(description), now=self._clock(),
        )
        return self.scheduler.on_created(timer)

    def toggle_stay_awake(self) -> asyncio.Task | None:
        return self.inhibitor.toggle()

    def execute_now(self, kind: TimerKind) -> asyncio.Task:
        return self.executor.execute(kind)

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    @property
    def is_engaged(self) -> bool:
        """True while a lease is held or any timer is pending (panel icon highlight)."""
        return self.inhibitor.is_held or len(self.scheduler) > 0

    def active_timers(self) -> list[Timer]:
        return list(self.scheduler.timers)

    def _notify(self, title: str, body: str, icon: str, timeout_ms: int = -1) -> None:
        def _done(task: asyncio.Task) -> None:
            exc = task_error(task)
            if exc is not None:
                logger.error("Failed to send notification: %s", exc)

        self.tasks.spawn(
            self._notifier.show(title, body, icon, NOTICE_CATEGORY, timeout_ms=timeout_ms),
            on_done=_done,
            name="timer-set-notice",
        )
