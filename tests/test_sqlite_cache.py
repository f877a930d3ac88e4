from __future__ import annotations

import logging
import sqlite3
import threading
from pathlib import Path

from adapters.sqlite_cache import SQLiteClassificationCache
from core.categories import Category


def _cache(tmp_path: Path) -> SQLiteClassificationCache:
    cache = SQLiteClassificationCache(str(tmp_path / "cache.db"))
    cache.init_db()
    return cache


def test_lookup_of_unknown_key_is_absent(tmp_path: Path) -> None:
    cache = _cache(tmp_path)
    assert cache.lookup("tg://message/1/1") is None
    assert cache.available


def test_store_then_lookup(tmp_path: Path) -> None:
    cache = _cache(tmp_path)
    assert cache.store("tg://message/1/1", Category.RARE)
    assert cache.lookup("tg://message/1/1") is Category.RARE


def test_entries_survive_a_new_instance(tmp_path: Path) -> None:
    _cache(tmp_path).store("k", Category.EPIC)
    assert _cache(tmp_path).lookup("k") is Category.EPIC


def test_store_is_idempotent_and_last_write_wins(tmp_path: Path) -> None:
    cache = _cache(tmp_path)
    cache.store("k", Category.COMMON)
    cache.store("k", Category.COMMON)
    assert cache.count() == 1

    cache.store("k", Category.LEGENDARY)
    assert cache.lookup("k") is Category.LEGENDARY
    assert cache.count() == 1


def test_unparseable_value_is_treated_as_absent(tmp_path: Path) -> None:
    cache = _cache(tmp_path)
    with sqlite3.connect(str(tmp_path / "cache.db")) as conn:
        conn.execute(
            "INSERT INTO classifications (url, category, stored_at) VALUES (?, ?, ?)",
            ("k", "mythic", "2024-01-01T00:00:00+00:00"),
        )
    assert cache.lookup("k") is None


def test_unreachable_store_degrades_with_one_warning(tmp_path: Path, caplog) -> None:
    cache = SQLiteClassificationCache(str(tmp_path / "missing" / "cache.db"))
    with caplog.at_level(logging.WARNING, logger="adapters.sqlite_cache"):
        cache.init_db()
        assert cache.lookup("k") is None
        assert cache.store("k", Category.RARE) is False
        assert cache.lookup("k") is None

    assert not cache.available
    warnings = [record for record in caplog.records if record.levelno == logging.WARNING]
    assert len(warnings) == 1


def test_concurrent_stores_do_not_lose_entries(tmp_path: Path) -> None:
    cache = _cache(tmp_path)
    categories = Category.ranked()

    def worker(offset: int) -> None:
        for index in range(20):
            cache.store(f"key-{offset}-{index}", categories[index % len(categories)])

    threads = [threading.Thread(target=worker, args=(offset,)) for offset in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert cache.count() == 80
    assert cache.lookup("key-3-7") is categories[7 % len(categories)]


class TrackingConnection(sqlite3.Connection):
    opened: list["TrackingConnection"] = []

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.closed = False
        TrackingConnection.opened.append(self)

    def close(self) -> None:
        self.closed = True
        super().close()


def test_every_operation_closes_its_connection(tmp_path: Path, monkeypatch) -> None:
    cache = SQLiteClassificationCache(str(tmp_path / "cache.db"))
    TrackingConnection.opened = []

    def connect() -> sqlite3.Connection:
        conn = sqlite3.connect(str(tmp_path / "cache.db"), factory=TrackingConnection)
        conn.row_factory = sqlite3.Row
        return conn

    monkeypatch.setattr(cache, "_connect", connect)

    cache.init_db()
    cache.store("tg://message/1/1", Category.EPIC)
    assert cache.lookup("tg://message/1/1") is Category.EPIC
    assert cache.count() == 1

    assert len(TrackingConnection.opened) == 4
    assert all(conn.closed for conn in TrackingConnection.opened)
