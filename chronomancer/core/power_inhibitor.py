"""
Chronomancer: Stay-Awake Inhibitor.

Owns at most one logind "sleep" inhibitor lease and flips it on and off.

    IDLE --toggle--> ACQUIRING --success--> HELD --toggle--> IDLE
                     ACQUIRING --failure--> IDLE
                     ACQUIRING --toggle---> IDLE   (pending request withdrawn)

Acquisition is asynchronous and cannot be cancelled once issued. Each
request carries a generation ticket; a completion whose ticket is no longer
current is stale: it never becomes the held lease, and any handle it carries
is released on arrival.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import TYPE_CHECKING

from chronomancer.core.background import BackgroundTasks, task_error

if TYPE_CHECKING:
    from chronomancer.ports.power_port import InhibitorLease, PowerPort

logger = logging.getLogger(__name__)


class InhibitorState(Enum):
    IDLE = "idle"
    ACQUIRING = "acquiring"
    HELD = "held"


class PowerInhibitor:
    """Toggle for the single stay-awake lease."""

    def __init__(
        self,
        backend: PowerPort,
        who: str,
        why: str,
        mode: str = "block",
        tasks: BackgroundTasks | None = None,
    ) -> None:
        self._backend = backend
        self._who = who
        self._why = why
        self._mode = mode
        self._tasks = tasks if tasks is not None else BackgroundTasks()
        self._lease: InhibitorLease | None = None
        self._state = InhibitorState.IDLE
        self._generation = 0

    @property
    def state(self) -> InhibitorState:
        return self._state

    @property
    def is_held(self) -> bool:
        return self._state is InhibitorState.HELD

    @property
    def generation(self) -> int:
        return self._generation

    def toggle(self) -> asyncio.Task | None:
        """Release the held lease, withdraw a pending request, or request a new lease.

        Returns the acquisition task when one is issued, otherwise None.
        """
        if self._state is InhibitorState.HELD:
            self._release_held()
            return None

        if self._state is InhibitorState.ACQUIRING:
            self._generation += 1
            self._state = InhibitorState.IDLE
            logger.info("Stay-awake request withdrawn before it completed")
            return None

        self._generation += 1
        ticket = self._generation
        self._state = InhibitorState.ACQUIRING

        def _done(task: asyncio.Task) -> None:
            self._on_acquired(ticket, task)

        return self._tasks.spawn(
            self._backend.inhibit(self._who, self._why, self._mode),
            on_done=_done,
            name=f"inhibit-{ticket}",
        )

    def release(self) -> None:
        """Drop any held lease and forget any pending request. Used on shutdown."""
        if self._state is InhibitorState.HELD:
            self._release_held()
        elif self._state is InhibitorState.ACQUIRING:
            self._generation += 1
            self._state = InhibitorState.IDLE

    def _release_held(self) -> None:
        lease, self._lease = self._lease, None
        self._state = InhibitorState.IDLE
        if lease is not None:
            lease.release()
        logger.info("Stay-awake lease released")

    def _on_acquired(self, ticket: int, task: asyncio.Task) -> None:
        current = ticket == self._generation and self._state is InhibitorState.ACQUIRING

        if task.cancelled():
            if current:
                self._state = InhibitorState.IDLE
            return

        exc = task_error(task)
        if exc is not None:
            logger.error("Failed to acquire inhibit: %s", exc)
            if current:
                self._state = InhibitorState.IDLE
            return

        lease = task.result()
        if not current:
            logger.warning(
                "Discarding stale inhibitor lease (ticket %d, current %d)",
                ticket, self._generation,
            )
            lease.release()
            return

        self._lease = lease
        self._state = InhibitorState.HELD
        logger.info("Stay-awake lease acquired (%s mode)", self._mode)
