"""Time unit helpers: unit multipliers, duration display and parsing.

All durations are whole seconds internally; units are for input and display.
"""

from __future__ import annotations

from enum import Enum

from chronomancer.utils.filters import filter_positive_integer


class TimeUnit(Enum):
    SECONDS = "s"
    MINUTES = "m"
    HOURS = "h"
    DAYS = "d"

    def to_seconds_multiplier(self) -> int:
        return _MULTIPLIERS[self]

    def __str__(self) -> str:
        return self.name.capitalize()


_MULTIPLIERS = {
    TimeUnit.SECONDS: 1,
    TimeUnit.MINUTES: 60,
    TimeUnit.HOURS: 3600,
    TimeUnit.DAYS: 86400,
}


def format_duration(seconds: int) -> str:
    """Format a duration as whole hours if >= 1 hour, else whole minutes.

    Rounds down: 5400 -> "1 hour", 30 -> "0 minutes".
    """
    minutes = seconds // 60
    hours = minutes // 60
    if hours > 0:
        return f"{hours} hour{'' if hours == 1 else 's'}"
    return f"{minutes} minute{'' if minutes == 1 else 's'}"


def parse_duration(text: str) -> int:
    """Parse "90", "90s", "15m", "2h" or "1d" into seconds.

    Raises ValueError for empty, zero, negative or malformed input.
    """
    raw = text.strip().lower()
    unit = TimeUnit.SECONDS
    if raw and raw[-1].isalpha():
        try:
            unit = TimeUnit(raw[-1])
        except ValueError:
            raise ValueError(f"Unknown time unit in {text!r}") from None
        raw = raw[:-1]

    value = filter_positive_integer(raw)
    if not value:
        raise ValueError(f"Duration must be a positive whole number: {text!r}")
    return int(value) * unit.to_seconds_multiplier()
