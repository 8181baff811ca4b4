"""
Chronomancer: Centralized configuration.

Loads all settings from .env / the process environment and validates them.
Every key is optional; the applet runs with defaults on a plain desktop.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

APP_ID = "com.github.kit-foxboy.chronomancer"
DB_VERSION = "1"

# Load .env from project root (one level up from chronomancer/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)


def _default_database_path() -> str:
    data_home = os.getenv("XDG_DATA_HOME") or str(Path.home() / ".local" / "share")
    return str(Path(data_home) / APP_ID / f"chronomancer-v{DB_VERSION}.db")


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    APP_NAME: str = "Chronomancer"

    # SQLite
    DATABASE_PATH: str = Field(default="", validate_default=True)

    # Scheduler
    TICK_INTERVAL_SECONDS: float = 1.0
    MAX_EXPIRIES_PER_TICK: int = 1

    # Stay-awake inhibitor: mode is "block" or "delay"
    INHIBIT_REASON: str = "User requested stay-awake mode"
    INHIBIT_MODE: str = "block"

    # "Timer set" notices expire after this many milliseconds
    NOTIFICATION_TIMEOUT_MS: int = 5000

    LOG_LEVEL: str = "INFO"

    @field_validator("DATABASE_PATH", mode="before")
    @classmethod
    def default_db_path(cls, v: str | None) -> str:
        if not v:
            return _default_database_path()
        return v

    @field_validator("TICK_INTERVAL_SECONDS")
    @classmethod
    def positive_interval(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("TICK_INTERVAL_SECONDS must be > 0")
        return v

    @field_validator("MAX_EXPIRIES_PER_TICK")
    @classmethod
    def positive_budget(cls, v: int) -> int:
        if v < 1:
            raise ValueError("MAX_EXPIRIES_PER_TICK must be >= 1")
        return v

    @field_validator("INHIBIT_MODE")
    @classmethod
    def known_mode(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in ("block", "delay"):
            raise ValueError(f"INHIBIT_MODE must be 'block' or 'delay', got {v!r}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def upper_level(cls, v: str) -> str:
        return v.strip().upper()


def _load_settings() -> Settings:
    """Load settings from environment."""
    return Settings(
        APP_NAME=os.getenv("APP_NAME", "Chronomancer"),
        DATABASE_PATH=os.getenv("DATABASE_PATH", ""),
        TICK_INTERVAL_SECONDS=os.getenv("TICK_INTERVAL_SECONDS", "1.0"),
        MAX_EXPIRIES_PER_TICK=os.getenv("MAX_EXPIRIES_PER_TICK", "1"),
        INHIBIT_REASON=os.getenv("INHIBIT_REASON", "User requested stay-awake mode"),
        INHIBIT_MODE=os.getenv("INHIBIT_MODE", "block"),
        NOTIFICATION_TIMEOUT_MS=os.getenv("NOTIFICATION_TIMEOUT_MS", "5000"),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
    )


# Singleton, imported by other modules as:
#   from chronomancer.config import settings
settings = _load_settings()
