from __future__ import annotations

from twtfeed.engine.cache import CacheEntry, FeedCache
from twtfeed.infra.storage import SQLiteManager


def test_feed_cache_set_get_overwrite(tmp_path) -> None:
    cache = FeedCache(SQLiteManager(), tmp_path / "cache.db")
    assert cache.get("http://a/") is None

    cache.set("http://a/", "T1", "body one")
    assert cache.get("http://a/") == CacheEntry("http://a/", "T1", "body one")

    cache.set("http://a/", "T2", "body two")
    assert cache.get("http://a/") == CacheEntry("http://a/", "T2", "body two")


def test_feed_cache_persists_between_managers(tmp_path) -> None:
    path = tmp_path / "cache.db"
    first = SQLiteManager()
    FeedCache(first, path).set("http://a/", "T1", "body")
    first.close_all()
    assert FeedCache(SQLiteManager(), path).get("http://a/").body == "body"


def test_feed_cache_clean_drops_unfollowed(tmp_path) -> None:
    cache = FeedCache(SQLiteManager(), tmp_path / "cache.db")
    cache.set("http://a/", "T", "a")
    cache.set("http://b/", "T", "b")
    cache.set("http://c/", "T", "c")

    removed = cache.clean(["http://b/", "http://unknown/"])

    assert removed == ["http://a/", "http://c/"]
    assert cache.urls() == {"http://b/"}
    assert cache.clean(["http://b/"]) == []
