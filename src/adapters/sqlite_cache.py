"""SQLite classification cache adapter.

Implements the core ClassificationCachePort using a simple SQLite database.
If the database cannot be opened or queried the cache switches to degraded
mode for the rest of the process: lookups miss and stores are discarded.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import closing
from datetime import datetime, timezone
from typing import Optional

from core.categories import Category

LOGGER = logging.getLogger(__name__)


class SQLiteClassificationCache:
    """Thin SQLite wrapper that satisfies the ClassificationCachePort contract."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        self._lock = threading.Lock()
        self._available = True

    @property
    def available(self) -> bool:
        return self._available

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, timeout=10)
        conn.row_factory = sqlite3.Row
        return conn

    def _degrade(self, exc: Exception) -> None:
        if self._available:
            self._available = False
            LOGGER.warning("Classification cache unavailable (%s), continuing without it", exc)

    def init_db(self) -> None:
        """Create the table if it does not exist.

        Fields:
        - url: attachment key, stable for the lifetime of the message (PRIMARY KEY)
        - category: plain category name, e.g. "rare"
        - stored_at: timestamp of the last write
        """

        with self._lock:
            try:
                with closing(self._connect()) as conn, conn:
                    conn.execute(
                        """
                        CREATE TABLE IF NOT EXISTS classifications (
                            url TEXT PRIMARY KEY,
                            category TEXT NOT NULL,
                            stored_at TIMESTAMP NOT NULL
                        )
                        """
                    )
            except sqlite3.Error as exc:
                self._degrade(exc)

    def lookup(self, key: str) -> Optional[Category]:
        """Return the cached category for a key, if any."""

        if not self._available:
            return None
        with self._lock:
            try:
                with closing(self._connect()) as conn, conn:
                    row = conn.execute(
                        "SELECT category FROM classifications WHERE url = ?",
                        (key,),
                    ).fetchone()
            except sqlite3.Error as exc:
                self._degrade(exc)
                return None
        if row is None:
            return None
        category = Category.parse(row["category"])
        if category is None:
            LOGGER.warning("Ignoring unparseable cache value %r for %s", row["category"], key)
        return category

    def store(self, key: str, category: Category) -> bool:
        """Upsert a category; an identical value leaves the row untouched."""

        if not self._available:
            return False
        now = datetime.now(timezone.utc)
        with self._lock:
            try:
                with closing(self._connect()) as conn, conn:
                    conn.execute(
                        """
                        INSERT INTO classifications (url, category, stored_at)
                        VALUES (?, ?, ?)
                        ON CONFLICT(url) DO UPDATE SET
                            category = excluded.category,
                            stored_at = excluded.stored_at
                        WHERE classifications.category != excluded.category
                        """,
                        (key, category.value, now.isoformat()),
                    )
            except sqlite3.Error as exc:
                self._degrade(exc)
                return False
        return True

    def count(self) -> int:
        """Return the number of cached entries (0 when degraded)."""

        if not self._available:
            return 0
        with self._lock:
            try:
                with closing(self._connect()) as conn, conn:
                    row = conn.execute("SELECT COUNT(*) AS total FROM classifications").fetchone()
            except sqlite3.Error as exc:
                self._degrade(exc)
                return 0
        return int(row["total"])
