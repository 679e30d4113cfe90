"""
Storage layer for the snapshot key-value store and usage logging.

Uses SQLite for persistence.
"""

import sqlite3
import json
import logging
from pathlib import Path
from typing import Any, Optional
from contextlib import contextmanager

from .errors import StoreError
from .models import PrefixStore

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent.parent / "data"
DB_NAME = "unblinkingbot.db"


def configure_storage(data_dir: Path | None) -> None:
    """Point storage at a different data directory."""
    global DATA_DIR
    if data_dir is not None:
        DATA_DIR = Path(data_dir)
        logger.info(f"Storage directory set to {DATA_DIR}")


def get_db_path() -> Path:
    """Get the database path, creating directory if needed."""
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    return DATA_DIR / DB_NAME


@contextmanager
def get_connection():
    """Context manager for database connections."""
    conn = sqlite3.connect(get_db_path())
    conn.row_factory = sqlite3.Row
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_database():
    """Initialize database with required tables."""
    with get_connection() as conn:
        cursor = conn.cursor()

        # Key-value table, values are JSON
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
        """)

        # Usage logs table
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS usage_logs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id TEXT,
                command TEXT NOT NULL,
                action TEXT NOT NULL,
                message_preview TEXT,
                metadata TEXT,
                timestamp TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_usage_logs_command
            ON usage_logs(command)
        """)

    logger.info(f"Database initialized at {get_db_path()}")


class SqlitePrefixStore(PrefixStore):
    """Key-value store with ordered prefix lookups."""

    def __init__(self):
        try:
            init_database()
        except sqlite3.Error as e:
            raise StoreError(f"Cannot open store: {e}") from e

    def get_by_prefix(self, prefix: str) -> dict[str, Any]:
        """Return all entries whose key starts with prefix, in key order."""
        try:
            with get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute("""
                    SELECT key, value FROM kv_store
                    WHERE substr(key, 1, ?) = ?
                    ORDER BY key
                """, (len(prefix), prefix))
                return {row["key"]: json.loads(row["value"]) for row in cursor.fetchall()}
        except (sqlite3.Error, json.JSONDecodeError) as e:
            raise StoreError(f"Prefix lookup for '{prefix}' failed: {e}") from e

    def get(self, key: str) -> Optional[Any]:
        """Get a single value, or None."""
        try:
            with get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute("SELECT value FROM kv_store WHERE key = ?", (key,))
                row = cursor.fetchone()
                return json.loads(row["value"]) if row else None
        except (sqlite3.Error, json.JSONDecodeError) as e:
            raise StoreError(f"Lookup for '{key}' failed: {e}") from e

    def put(self, key: str, value: Any) -> None:
        """Insert or replace a value."""
        try:
            with get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute("""
                    INSERT INTO kv_store (key, value) VALUES (?, ?)
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value
                """, (key, json.dumps(value)))
        except sqlite3.Error as e:
            raise StoreError(f"Write for '{key}' failed: {e}") from e

    def delete(self, key: str) -> bool:
        """Delete a key. Returns True if it existed."""
        try:
            with get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute("DELETE FROM kv_store WHERE key = ?", (key,))
                return cursor.rowcount > 0
        except sqlite3.Error as e:
            raise StoreError(f"Delete for '{key}' failed: {e}") from e


class UsageLogger:
    """Logs dispatched commands and errors for analytics."""

    def __init__(self):
        init_database()

    def log_command(
        self,
        user_id: Optional[str],
        command: str,
        message_preview: Optional[str] = None,
        metadata: Optional[dict] = None
    ) -> None:
        """Log a dispatched command."""
        self._log(user_id, command, "command", message_preview, metadata)

    def log_error(
        self,
        user_id: Optional[str],
        command: str,
        error: str
    ) -> None:
        """Log an error while handling a command."""
        self._log(user_id, command, "error", None, {"error": error})

    def _log(
        self,
        user_id: Optional[str],
        command: str,
        action: str,
        message_preview: Optional[str],
        metadata: Optional[dict]
    ) -> None:
        """Internal logging method."""
        # Truncate message preview
        if message_preview and len(message_preview) > 100:
            message_preview = message_preview[:100]

        metadata_json = json.dumps(metadata) if metadata else None

        with get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                INSERT INTO usage_logs
                (user_id, command, action, message_preview, metadata)
                VALUES (?, ?, ?, ?, ?)
            """, (user_id, command, action, message_preview, metadata_json))

    def get_command_stats(self) -> dict:
        """Get usage and error counts per command."""
        with get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute("""
                SELECT command, action, COUNT(*) as count FROM usage_logs
                GROUP BY command, action
            """)

            stats: dict[str, dict[str, int]] = {}
            for row in cursor.fetchall():
                entry = stats.setdefault(row["command"], {"command": 0, "error": 0})
                entry[row["action"]] = row["count"]

            return stats
