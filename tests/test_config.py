"""Tests for chronomancer.config: settings validation and defaults."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from chronomancer.config import APP_ID, Settings, _default_database_path


class TestSettings:
    def test_defaults(self, monkeypatch, tmp_path):
        monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))
        s = Settings()
        assert s.APP_NAME == "Chronomancer"
        assert s.TICK_INTERVAL_SECONDS == 1.0
        assert s.MAX_EXPIRIES_PER_TICK == 1
        assert s.INHIBIT_MODE == "block"
        assert s.NOTIFICATION_TIMEOUT_MS == 5000
        assert s.DATABASE_PATH == str(tmp_path / APP_ID / "chronomancer-v1.db")

    def test_explicit_database_path_kept(self):
        assert Settings(DATABASE_PATH="/tmp/x.db").DATABASE_PATH == "/tmp/x.db"

    def test_string_values_are_coerced(self):
        s = Settings(TICK_INTERVAL_SECONDS="0.5", MAX_EXPIRIES_PER_TICK="3")
        assert s.TICK_INTERVAL_SECONDS == 0.5
        assert s.MAX_EXPIRIES_PER_TICK == 3

    def test_mode_normalised(self):
        assert Settings(INHIBIT_MODE=" Delay ").INHIBIT_MODE == "delay"

    def test_log_level_upper_cased(self):
        assert Settings(LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"

    @pytest.mark.parametrize(
        "field, value",
        [
            ("TICK_INTERVAL_SECONDS", 0),
            ("TICK_INTERVAL_SECONDS", -1.0),
            ("MAX_EXPIRIES_PER_TICK", 0),
            ("INHIBIT_MODE", "forever"),
        ],
    )
    def test_invalid_values_rejected(self, field, value):
        with pytest.raises(ValidationError):
            Settings(**{field: value})


class TestDefaultDatabasePath:
    def test_falls_back_to_home(self, monkeypatch):
        monkeypatch.delenv("XDG_DATA_HOME", raising=False)
        expected = Path.home() / ".local" / "share" / APP_ID / "chronomancer-v1.db"
        assert _default_database_path() == str(expected)
