"""
Chronomancer: Timer Database.

Timers persist in SQLite so armed power actions and reminders survive an
applet restart. Every sqlite3 failure surfaces as StoreError.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from chronomancer.data.models import Timer
from chronomancer.ports.timer_store_port import StoreError

logger = logging.getLogger(__name__)


class TimerDB:
    """SQLite-backed storage for timers."""

    def __init__(self, db_path: str | None = None) -> None:
        if db_path is None:
            from chronomancer.config import settings
            db_path = settings.DATABASE_PATH

        self._db_path = db_path
        try:
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
            self._init_db()
        except (OSError, sqlite3.Error) as exc:
            raise StoreError(f"Failed to open timer database at {db_path}: {exc}") from exc

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        """Create the timers table if it doesn't exist, and migrate schema."""
        with self._connect() as conn:
            existing_cols = {
                row[1] for row in conn.execute("PRAGMA table_info(timers)").fetchall()
            }
            if "duration_seconds" in existing_cols:
                self._migrate_duration_schema(conn, existing_cols)
            elif existing_cols and "description" not in existing_cols:
                conn.execute(
                    "ALTER TABLE timers ADD COLUMN description TEXT NOT NULL DEFAULT ''"
                )
                logger.info("Migrated timers table: added description column")

            conn.execute("""
                CREATE TABLE IF NOT EXISTS timers (
                    id           INTEGER PRIMARY KEY,
                    description  TEXT    NOT NULL DEFAULT '',
                    is_recurring BOOLEAN NOT NULL DEFAULT 0,
                    created_at   INTEGER NOT NULL,
                    paused_at    INTEGER NOT NULL DEFAULT 0,
                    ends_at      INTEGER NOT NULL DEFAULT 0
                )
            """)
            conn.execute("CREATE INDEX IF NOT EXISTS timers_ends_at_idx ON timers (ends_at)")
            conn.execute("CREATE INDEX IF NOT EXISTS timers_created_at ON timers (created_at)")
        logger.debug("Timers table initialized at %s", self._db_path)

    @staticmethod
    def _migrate_duration_schema(conn: sqlite3.Connection, existing_cols: set[str]) -> None:
        """Rewrite a legacy duration-based table into the ends_at layout."""
        description = "description" if "description" in existing_cols else "''"
        conn.execute("""
            CREATE TABLE timers_new (
                id           INTEGER PRIMARY KEY,
                description  TEXT    NOT NULL DEFAULT '',
                is_recurring BOOLEAN NOT NULL DEFAULT 0,
                created_at   INTEGER NOT NULL,
                paused_at    INTEGER NOT NULL DEFAULT 0,
                ends_at      INTEGER NOT NULL DEFAULT 0
            )
        """)
        conn.execute(f"""
            INSERT INTO timers_new (id, description, is_recurring, created_at, paused_at, ends_at)
            SELECT id, {description}, COALESCE(is_recurring, 0), created_at, 0,
                   COALESCE(created_at + duration_seconds, 0)
            FROM timers
        """)
        conn.execute("DROP TABLE timers")
        conn.execute("ALTER TABLE timers_new RENAME TO timers")
        logger.info("Migrated legacy duration-based timers table")

    @staticmethod
    def _row_to_timer(row: sqlite3.Row) -> Timer:
        try:
            return Timer(
                id=row["id"],
                description=row["description"],
                is_recurring=bool(row["is_recurring"]),
                created_at=row["created_at"],
                paused_at=row["paused_at"],
                ends_at=row["ends_at"],
            )
        except (IndexError, KeyError) as exc:
            raise StoreError(f"Unreadable timer row: {exc}") from exc

    def insert(self, timer: Timer) -> Timer:
        """Insert a timer and return it with its assigned id."""
        try:
            with self._connect() as conn:
                cursor = conn.execute(
                    """
                    INSERT INTO timers
                        (description, is_recurring, created_at, paused_at, ends_at)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (
                        timer.description, int(timer.is_recurring),
                        timer.created_at, timer.paused_at, timer.ends_at,
                    ),
                )
                timer_id = cursor.lastrowid
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to save timer: {exc}") from exc

        saved = timer.with_id(timer_id)
        logger.info("Timer saved: #%d '%s' ends at %d", timer_id, saved.description, saved.ends_at)
        return saved

    def get_all_active(self, now: int) -> list[Timer]:
        """Return timers that have not yet ended, soonest first."""
        try:
            with self._connect() as conn:
                rows = conn.execute(
                    "SELECT * FROM timers WHERE ends_at > ? ORDER BY ends_at, id",
                    (now,),
                ).fetchall()
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to fetch active timers: {exc}") from exc
        return [self._row_to_timer(r) for r in rows]

    def get_by_id(self, timer_id: int) -> Timer | None:
        """Fetch a single timer by ID."""
        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT * FROM timers WHERE id = ?", (timer_id,)
                ).fetchone()
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to fetch timer {timer_id}: {exc}") from exc
        if row is None:
            return None
        return self._row_to_timer(row)

    def list_all(self) -> list[Timer]:
        """List every stored timer, expired ones included."""
        try:
            with self._connect() as conn:
                rows = conn.execute("SELECT * FROM timers ORDER BY ends_at, id").fetchall()
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to list timers: {exc}") from exc
        return [self._row_to_timer(r) for r in rows]

    def delete_by_id(self, timer_id: int) -> bool:
        """Permanently delete a timer by ID."""
        try:
            with self._connect() as conn:
                cursor = conn.execute("DELETE FROM timers WHERE id = ?", (timer_id,))
        except sqlite3.Error as exc:
            raise StoreError(f"Failed to delete timer {timer_id}: {exc}") from exc
        deleted = cursor.rowcount > 0
        if deleted:
            logger.info("Timer #%d deleted", timer_id)
        return deleted
