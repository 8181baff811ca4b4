"""Desktop notification adapter: implements NotificationPort.

Sends org.freedesktop.Notifications.Notify on the session bus via dbus-fast.
"""

from __future__ import annotations

import logging

from dbus_fast import AuthError, BusType, DBusError, InvalidAddressError, Message, MessageType, Variant
from dbus_fast.aio import MessageBus

from chronomancer.ports.notification_port import NotifyError

logger = logging.getLogger(__name__)

NOTIFICATIONS_SERVICE = "org.freedesktop.Notifications"
NOTIFICATIONS_PATH = "/org/freedesktop/Notifications"
NOTIFICATIONS_INTERFACE = "org.freedesktop.Notifications"

_BUS_ERRORS = (OSError, DBusError, AuthError, InvalidAddressError)


def build_hints(category: str, resident: bool) -> dict[str, Variant]:
    hints = {"category": Variant("s", category)}
    if resident:
        hints["resident"] = Variant("b", True)
    return hints


class DesktopNotifier:
    """freedesktop.org implementation of NotificationPort."""

    def __init__(self, app_name: str = "Chronomancer") -> None:
        self._app_name = app_name

    async def show(
        self,
        title: str,
        body: str,
        icon: str,
        category: str,
        resident: bool = False,
        timeout_ms: int = -1,
    ) -> None:
        try:
            bus = await MessageBus(bus_type=BusType.SESSION).connect()
        except _BUS_ERRORS as exc:
            raise NotifyError(f"Failed to connect to session bus: {exc}") from exc

        try:
            reply = await bus.call(
                Message(
                    destination=NOTIFICATIONS_SERVICE,
                    path=NOTIFICATIONS_PATH,
                    interface=NOTIFICATIONS_INTERFACE,
                    member="Notify",
                    signature="susssasa{sv}i",
                    body=[
                        self._app_name, 0, icon, title, body, [],
                        build_hints(category, resident), timeout_ms,
                    ],
                )
            )
        except _BUS_ERRORS as exc:
            raise NotifyError(f"Notify call failed: {exc}") from exc
        finally:
            bus.disconnect()

        if reply is None or reply.message_type == MessageType.ERROR:
            detail = reply.body[0] if reply is not None and reply.body else "no reply"
            raise NotifyError(f"Notify call failed: {detail}")
        logger.debug("Notification shown: %s", title)
