"""Tests for chronomancer.adapters.desktop_notifier (mocked session bus)."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from dbus_fast import BusType, MessageType, Variant

from chronomancer.adapters.desktop_notifier import DesktopNotifier, build_hints
from chronomancer.ports.notification_port import NotifyError


def _bus_class(message_type=MessageType.METHOD_RETURN, body=None, connect_error=None):
    reply = MagicMock()
    reply.message_type = message_type
    reply.body = body if body is not None else [1]
    bus = MagicMock()
    bus.call = AsyncMock(return_value=reply)
    bus_cls = MagicMock()
    if connect_error is not None:
        bus_cls.return_value.connect = AsyncMock(side_effect=connect_error)
    else:
        bus_cls.return_value.connect = AsyncMock(return_value=bus)
    return bus_cls, bus


class TestBuildHints:
    def test_category_only(self):
        assert build_hints("device", resident=False) == {"category": Variant("s", "device")}

    def test_resident(self):
        hints = build_hints("alarm", resident=True)
        assert hints["category"] == Variant("s", "alarm")
        assert hints["resident"] == Variant("b", True)


class TestDesktopNotifier:
    @pytest.mark.asyncio
    async def test_show_sends_notify(self):
        bus_cls, bus = _bus_class()
        with patch("chronomancer.adapters.desktop_notifier.MessageBus", bus_cls):
            await DesktopNotifier(app_name="Chronomancer").show(
                "Timer Finished", "Tea", "alarm", "alarm", resident=True,
            )

        assert bus_cls.call_args.kwargs["bus_type"] == BusType.SESSION
        msg = bus.call.call_args.args[0]
        assert msg.destination == "org.freedesktop.Notifications"
        assert msg.member == "Notify"
        assert msg.signature == "susssasa{sv}i"
        app_name, replaces_id, icon, title, body, actions, hints, timeout = msg.body
        assert (app_name, replaces_id, icon, title, body, actions) == (
            "Chronomancer", 0, "alarm", "Timer Finished", "Tea", [],
        )
        assert hints["resident"] == Variant("b", True)
        assert timeout == -1
        bus.disconnect.assert_called_once()

    @pytest.mark.asyncio
    async def test_timeout_forwarded(self):
        bus_cls, bus = _bus_class()
        with patch("chronomancer.adapters.desktop_notifier.MessageBus", bus_cls):
            await DesktopNotifier().show(
                "Suspend Timer Set", "System will suspend in 5 minutes",
                "system-suspend-symbolic", "device", timeout_ms=5000,
            )
        assert bus.call.call_args.args[0].body[-1] == 5000

    @pytest.mark.asyncio
    async def test_error_reply_raises_notify_error(self):
        bus_cls, bus = _bus_class(
            message_type=MessageType.ERROR, body=["The name is not activatable"],
        )
        with patch("chronomancer.adapters.desktop_notifier.MessageBus", bus_cls):
            with pytest.raises(NotifyError, match="not activatable"):
                await DesktopNotifier().show("t", "b", "alarm", "alarm")

    @pytest.mark.asyncio
    async def test_connect_failure_raises_notify_error(self):
        bus_cls, bus = _bus_class(connect_error=OSError("no session bus"))
        with patch("chronomancer.adapters.desktop_notifier.MessageBus", bus_cls):
            with pytest.raises(NotifyError, match="session bus"):
                await DesktopNotifier().show("t", "b", "alarm", "alarm")
