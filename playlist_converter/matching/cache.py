"""
Bounded in-memory cache of match outcomes.

The cache maps a normalized source key to the best candidate found for it
(or None when nothing was found) together with its score, so repeated
titles in one playlist, or in overlapping runs, cost no search calls.

Eviction:
    FIFO. Once the number of entries exceeds `capacity`, the entry that was
    inserted first is dropped. Re-inserting an existing key replaces its
    value without refreshing its position.

Thread Safety:
    All operations take an internal lock, so one cache can be shared by
    matchers running in different threads.
"""

import threading
from collections import OrderedDict

from playlist_converter.core.logger import get_logger
from playlist_converter.matching.models import CacheEntry


logger = get_logger(__name__)


DEFAULT_CACHE_SIZE = 1000


class MatchCache:
    """
    Thread-safe FIFO cache of CacheEntry objects.

    Attributes:
        capacity: Maximum number of entries kept.

    Example:
        cache = MatchCache(capacity=500)
        cache.put("to_spotify:shapeofyoued", CacheEntry(candidate, 0.93))
        entry = cache.get("to_spotify:shapeofyoued")
    """

    def __init__(self, capacity: int = DEFAULT_CACHE_SIZE) -> None:
        if capacity < 1:
            raise ValueError(f"Cache capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def get(self, key: str) -> CacheEntry | None:
        """Return the entry for `key`, or None on a miss."""
        with self._lock:
            return self._entries.get(key)

    def put(self, key: str, entry: CacheEntry) -> None:
        """
        Insert or replace an entry, evicting the oldest one if over capacity.
        """
        with self._lock:
            self._entries[key] = entry
            while len(self._entries) > self._capacity:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug(f"Cache full, evicted '{evicted}'")

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
