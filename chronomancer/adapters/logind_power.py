"""logind power adapter: implements PowerPort over the system D-Bus.

Talks to org.freedesktop.login1.Manager with dbus-fast. Every call opens its
own bus connection and closes it afterwards; an inhibitor lease is a plain
file descriptor that stays valid after the connection is gone.

These calls may prompt for authentication depending on PolicyKit rules.
"""

from __future__ import annotations

import logging
import os

from dbus_fast import AuthError, BusType, DBusError, InvalidAddressError, Message, MessageType
from dbus_fast.aio import MessageBus

from chronomancer.ports.power_port import BackendError

logger = logging.getLogger(__name__)

LOGIN1_SERVICE = "org.freedesktop.login1"
LOGIN1_PATH = "/org/freedesktop/login1"
LOGIN1_MANAGER = "org.freedesktop.login1.Manager"

INHIBIT_MODES = ("block", "delay")

_BUS_ERRORS = (OSError, DBusError, AuthError, InvalidAddressError)


class FdInhibitorLease:
    """An inhibitor lock held as an open fd. Closing the fd ends the lock."""

    def __init__(self, fd: int) -> None:
        self._fd: int | None = fd

    @property
    def fd(self) -> int | None:
        return self._fd

    @property
    def released(self) -> bool:
        return self._fd is None

    def release(self) -> None:
        fd, self._fd = self._fd, None
        if fd is None:
            return
        try:
            os.close(fd)
        except OSError as exc:
            logger.debug("Closing inhibitor fd %d failed: %s", fd, exc)


class LogindPowerBackend:
    """systemd-logind implementation of PowerPort."""

    async def _call(
        self,
        member: str,
        signature: str,
        body: list,
        negotiate_unix_fd: bool = False,
    ) -> Message:
        try:
            bus = await MessageBus(
                bus_type=BusType.SYSTEM, negotiate_unix_fd=negotiate_unix_fd,
            ).connect()
        except _BUS_ERRORS as exc:
            raise BackendError(f"Failed to connect to system bus: {exc}") from exc

        try:
            reply = await bus.call(
                Message(
                    destination=LOGIN1_SERVICE,
                    path=LOGIN1_PATH,
                    interface=LOGIN1_MANAGER,
                    member=member,
                    signature=signature,
                    body=body,
                )
            )
        except _BUS_ERRORS as exc:
            raise BackendError(f"D-Bus call to {member} failed: {exc}") from exc
        finally:
            bus.disconnect()

        if reply is None:
            raise BackendError(f"D-Bus call to {member} returned no reply")
        if reply.message_type == MessageType.ERROR:
            detail = reply.body[0] if reply.body else reply.error_name
            raise BackendError(f"D-Bus call to {member} failed: {detail}")
        return reply

    async def inhibit(self, who: str, why: str, mode: str) -> FdInhibitorLease:
        """Take a "sleep" inhibitor lock. Keep the lease open to keep the system awake."""
        if mode not in INHIBIT_MODES:
            raise BackendError(f"Unknown inhibit mode: {mode!r}")

        reply = await self._call(
            "Inhibit", "ssss", ["sleep", who, why, mode], negotiate_unix_fd=True,
        )
        try:
            fd = reply.unix_fds[reply.body[0]]
        except (IndexError, TypeError) as exc:
            raise BackendError("Inhibit reply carried no file descriptor") from exc
        logger.debug("Inhibitor fd %d acquired for %s (%s)", fd, who, mode)
        return FdInhibitorLease(fd)

    async def suspend(self) -> None:
        await self._call("Suspend", "b", [True])

    async def power_off(self) -> None:
        await self._call("PowerOff", "b", [True])

    async def reboot(self) -> None:
        await self._call("Reboot", "b", [True])

    async def terminate_session(self, session_id: str) -> None:
        await self._call("TerminateSession", "s", [session_id])

    async def terminate_current_session(self) -> None:
        """Log out the session named by XDG_SESSION_ID."""
        session_id = os.environ.get("XDG_SESSION_ID")
        if not session_id:
            raise BackendError("XDG_SESSION_ID environment variable not set")
        await self.terminate_session(session_id)
