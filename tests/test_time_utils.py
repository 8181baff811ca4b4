"""Tests for chronomancer.utils: duration display, parsing and input filters."""

import pytest

from chronomancer.utils.filters import filter_positive_integer
from chronomancer.utils.time import TimeUnit, format_duration, parse_duration


class TestTimeUnit:
    @pytest.mark.parametrize(
        "unit, seconds",
        [
            (TimeUnit.SECONDS, 1),
            (TimeUnit.MINUTES, 60),
            (TimeUnit.HOURS, 3600),
            (TimeUnit.DAYS, 86400),
        ],
    )
    def test_multiplier(self, unit, seconds):
        assert unit.to_seconds_multiplier() == seconds

    def test_display_name(self):
        assert str(TimeUnit.MINUTES) == "Minutes"


class TestFormatDuration:
    @pytest.mark.parametrize(
        "seconds, expected",
        [
            (30, "0 minutes"),
            (60, "1 minute"),
            (300, "5 minutes"),
            (3599, "59 minutes"),
            (3600, "1 hour"),
            (5400, "1 hour"),
            (7200, "2 hours"),
            (86400, "24 hours"),
        ],
    )
    def test_rounds_down(self, seconds, expected):
        assert format_duration(seconds) == expected


class TestParseDuration:
    @pytest.mark.parametrize(
        "text, seconds",
        [("90", 90), ("90s", 90), ("15m", 900), ("2h", 7200), ("1d", 86400), (" 5M ", 300)],
    )
    def test_valid(self, text, seconds):
        assert parse_duration(text) == seconds

    @pytest.mark.parametrize("text", ["", "m", "0", "0m", "-5m", "1.5h", "ten"])
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            parse_duration(text)

    def test_unknown_unit(self):
        with pytest.raises(ValueError, match="Unknown time unit"):
            parse_duration("3w")


class TestFilterPositiveInteger:
    def test_empty_passes_through(self):
        assert filter_positive_integer("") == ""

    def test_leading_zeros_normalised(self):
        assert filter_positive_integer("007") == "7"

    @pytest.mark.parametrize("text", ["0", "000", "-3", "1.5", "abc", "١٢"])
    def test_rejected(self, text):
        assert filter_positive_integer(text) is None
