"""Test the match cache"""

import threading

import pytest

from playlist_converter.matching.cache import MatchCache
from playlist_converter.matching.models import CacheEntry


class TestMatchCache:
    """Test MatchCache behavior"""

    def test_get_and_put(self, spotify_candidate):
        cache = MatchCache(capacity=10)
        entry = CacheEntry(spotify_candidate, 0.9)
        cache.put("key", entry)
        assert cache.get("key") == entry
        assert "key" in cache
        assert len(cache) == 1

    def test_miss(self):
        assert MatchCache().get("missing") is None

    def test_caches_not_found(self):
        cache = MatchCache()
        cache.put("key", CacheEntry(None))
        entry = cache.get("key")
        assert entry is not None
        assert entry.candidate is None

    def test_fifo_eviction(self):
        cache = MatchCache(capacity=2)
        cache.put("a", CacheEntry(None))
        cache.put("b", CacheEntry(None))
        cache.put("c", CacheEntry(None))
        assert "a" not in cache
        assert "b" in cache and "c" in cache
        assert len(cache) == 2

    def test_replace_keeps_insertion_position(self, spotify_candidate):
        cache = MatchCache(capacity=2)
        cache.put("a", CacheEntry(None))
        cache.put("b", CacheEntry(None))
        cache.put("a", CacheEntry(spotify_candidate, 0.8))
        cache.put("c", CacheEntry(None))
        assert "a" not in cache
        assert "b" in cache

    def test_clear(self):
        cache = MatchCache()
        cache.put("a", CacheEntry(None))
        cache.clear()
        assert len(cache) == 0

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            MatchCache(capacity=0)

    def test_concurrent_access(self):
        """Smoke test: concurrent writers never exceed capacity"""
        cache = MatchCache(capacity=50)
        errors = []

        def writer(prefix):
            try:
                for i in range(200):
                    cache.put(f"{prefix}-{i}", CacheEntry(None, float(i)))
                    cache.get(f"{prefix}-{i // 2}")
            except Exception as e:  # pragma: no cover
                errors.append(e)

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert len(cache) == 50
