"""Persistent body cache keyed by feed url, backing conditional GETs."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from threading import Lock
from typing import Iterable

from ..infra.storage import SQLiteManager


@dataclass(frozen=True, slots=True)
class CacheEntry:
    url: str
    last_modified: str
    body: str


class FeedCache:
    """Store the last body and ``Last-Modified`` value seen per url."""

    def __init__(self, manager: SQLiteManager, db_path: Path) -> None:
        self.manager = manager
        self.db_path = db_path
        self._lock = Lock()
        self._conn = self.manager.connect(db_path)

    def get(self, url: str) -> CacheEntry | None:
        with self._lock:
            row = self._conn.execute(
                "SELECT url, last_modified, body FROM feed_cache WHERE url = ?", (url,)
            ).fetchone()
        if row is None:
            return None
        return CacheEntry(url=row["url"], last_modified=row["last_modified"], body=row["body"])

    def set(self, url: str, last_modified: str, body: str) -> None:
        with self._lock:
            self._conn.execute(
                "INSERT OR REPLACE INTO feed_cache(url, last_modified, body, stored_at) "
                "VALUES (?, ?, ?, datetime('now'))",
                (url, last_modified, body),
            )
            self._conn.commit()

    def urls(self) -> set[str]:
        with self._lock:
            rows = self._conn.execute("SELECT url FROM feed_cache").fetchall()
        return {row["url"] for row in rows}

    def clean(self, keep: Iterable[str]) -> list[str]:
        """Drop entries whose url is not in ``keep`` and return the removed urls."""

        stale = sorted(self.urls() - set(keep))
        if not stale:
            return []
        with self._lock:
            self._conn.executemany("DELETE FROM feed_cache WHERE url = ?", [(url,) for url in stale])
            self._conn.commit()
        return stale


__all__ = ["CacheEntry", "FeedCache"]
