"""
Chronomancer: Data Models.

A Timer is a deadline plus an intent. The intent is not stored as its own
column: it is encoded in `description`, which either holds one of the
reserved power-action strings or free reminder text. TimerType.parse()
recovers the intent and never fails; anything unrecognised is a reminder.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, replace
from enum import Enum


class TimerKind(Enum):
    SUSPEND = "suspend"
    LOGOUT = "logout"
    SHUTDOWN = "shutdown"
    REBOOT = "reboot"
    USER_DEFINED = "user_defined"


# Reserved description strings. A reminder with exactly this text is
# indistinguishable from the power action it names.
_RESERVED: dict[str, TimerKind] = {
    "System Suspend": TimerKind.SUSPEND,
    "System Logout": TimerKind.LOGOUT,
    "System Shutdown": TimerKind.SHUTDOWN,
    "System Reboot": TimerKind.REBOOT,
}
_RESERVED_BY_KIND: dict[TimerKind, str] = {kind: text for text, kind in _RESERVED.items()}

POWER_KINDS = (TimerKind.SUSPEND, TimerKind.LOGOUT, TimerKind.SHUTDOWN, TimerKind.REBOOT)


@dataclass(frozen=True)
class TimerType:
    """Classified intent of a timer.

    Power actions carry no text; USER_DEFINED carries the reminder text.
    """

    kind: TimerKind
    text: str = ""

    @classmethod
    def parse(cls, description: str) -> TimerType:
        """Classify a stored description. Total: unknown text is a reminder."""
        kind = _RESERVED.get(description)
        if kind is None:
            return cls(TimerKind.USER_DEFINED, description)
        return cls(kind)

    @classmethod
    def power(cls, kind: TimerKind) -> TimerType:
        if kind not in POWER_KINDS:
            raise ValueError(f"Not a power action: {kind!r}")
        return cls(kind)

    @classmethod
    def user_defined(cls, text: str) -> TimerType:
        return cls(TimerKind.USER_DEFINED, text)

    @property
    def is_power_action(self) -> bool:
        return self.kind is not TimerKind.USER_DEFINED

    def as_str(self) -> str:
        """The description text this type is stored as."""
        if self.kind is TimerKind.USER_DEFINED:
            return self.text
        return _RESERVED_BY_KIND[self.kind]


SUSPEND = TimerType(TimerKind.SUSPEND)
LOGOUT = TimerType(TimerKind.LOGOUT)
SHUTDOWN = TimerType(TimerKind.SHUTDOWN)
REBOOT = TimerType(TimerKind.REBOOT)


def unix_now() -> int:
    """Current time as whole Unix seconds."""
    return int(time.time())


@dataclass
class Timer:
    """A scheduled intent with a deadline (Unix seconds).

    id 0 means "not yet persisted"; the repository assigns the real one.
    """

    id: int
    description: str
    is_recurring: bool = False  # reserved, always False for now
    created_at: int = 0
    paused_at: int = 0          # reserved, unused
    ends_at: int = 0

    @classmethod
    def new(
        cls,
        duration_seconds: int,
        is_recurring: bool,
        timer_type: TimerType,
        now: int | None = None,
    ) -> Timer:
        """Build an unsaved timer ending `duration_seconds` from now."""
        if duration_seconds <= 0:
            raise ValueError(f"Timer duration must be positive, got {duration_seconds}")
        if now is None:
            now = unix_now()
        return cls(
            id=0,
            description=timer_type.as_str(),
            is_recurring=is_recurring,
            created_at=now,
            paused_at=0,
            ends_at=now + duration_seconds,
        )

    @property
    def timer_type(self) -> TimerType:
        return TimerType.parse(self.description)

    def is_active(self, now: int | None = None) -> bool:
        if now is None:
            now = unix_now()
        return now < self.ends_at

    def remaining_seconds(self, now: int | None = None) -> int:
        if now is None:
            now = unix_now()
        return max(0, self.ends_at - now)

    def with_id(self, timer_id: int) -> Timer:
        return replace(self, id=timer_id)
