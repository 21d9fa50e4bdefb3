"""SQLite connection management for the feed cache."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from threading import Lock
from typing import Dict

SCHEMA_VERSION = 1

_FEED_CACHE_SCHEMA = """
CREATE TABLE IF NOT EXISTS feed_cache (
    url TEXT PRIMARY KEY,
    last_modified TEXT NOT NULL,
    body TEXT NOT NULL,
    stored_at TEXT
)
"""


class SQLiteManager:
    """Hand out one shared connection per cache database file.

    Connections are opened lazily, keyed by the resolved path, and carry the
    ``feed_cache`` schema stamped with ``PRAGMA user_version``.
    """

    def __init__(self) -> None:
        self._connections: Dict[Path, sqlite3.Connection] = {}
        self._lock = Lock()

    def __enter__(self) -> "SQLiteManager":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close_all()

    def connect(self, path: Path) -> sqlite3.Connection:
        key = Path(path).expanduser().resolve()
        with self._lock:
            conn = self._connections.get(key)
            if conn is None:
                key.parent.mkdir(parents=True, exist_ok=True)
                conn = sqlite3.connect(key, check_same_thread=False)
                conn.row_factory = sqlite3.Row
                self._migrate(conn)
                self._connections[key] = conn
            return conn

    @staticmethod
    def _migrate(conn: sqlite3.Connection) -> None:
        version = conn.execute("PRAGMA user_version").fetchone()[0]
        if version >= SCHEMA_VERSION:
            return
        conn.execute(_FEED_CACHE_SCHEMA)
        conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")
        conn.commit()

    def close(self, path: Path) -> None:
        key = Path(path).expanduser().resolve()
        with self._lock:
            conn = self._connections.pop(key, None)
        if conn is not None:
            conn.close()

    def close_all(self) -> None:
        with self._lock:
            connections = list(self._connections.values())
            self._connections.clear()
        for conn in connections:
            conn.close()


__all__ = ["SCHEMA_VERSION", "SQLiteManager"]
