"""
Time-bounded cache for search responses.

Memoizes (session, query, options subset) -> SearchResponse for
``cache_timeout`` seconds. Entries scoped to a session can be dropped at
once when that session's messages change.
"""

import logging
import threading
import time
from typing import Any, Callable, Dict, Hashable, Optional, Tuple

from cachetools import TTLCache  # type: ignore[import-untyped]

logger = logging.getLogger(__name__)

CacheKey = Tuple[Hashable, ...]


def make_cache_key(session_id: str, query: str, limit: int, sort_by: str) -> CacheKey:
    """
    Build the cache key for a search.

    Only ``limit`` and ``sort_by`` take part; other options share entries.
    """
    return (session_id, query, limit, sort_by)


class ResultCache:
    """
    TTL cache for search results.

    An entry is served only while ``now - timestamp < ttl``; expired entries
    are evicted on access and by ``cleanup()``, which the background sweeper
    calls on an interval. The cache is bounded, evicting least recently used
    entries beyond ``max_entries``.

    Attributes:
        ttl: Entry lifetime in seconds
        max_entries: Maximum number of cached responses
        hits: Number of cache hits
        misses: Number of cache misses
        evictions: Number of entries evicted due to the size limit
    """

    def __init__(
        self,
        ttl: float = 300.0,
        max_entries: int = 10000,
        timer: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize result cache.

        Args:
            ttl: Entry lifetime in seconds (default: 5 minutes)
            max_entries: Maximum number of entries (default: 10000)
            timer: Clock used for entry expiry
        """
        self.ttl = ttl
        self.max_entries = max_entries
        self.cache: TTLCache = TTLCache(maxsize=max_entries, ttl=ttl, timer=timer)
        # Guards the map against the background sweeper thread
        self._lock = threading.RLock()

        # Statistics
        self.hits = 0
        self.misses = 0
        self.evictions = 0

        logger.info(f"Initialized ResultCache with ttl={ttl}s, max_entries={max_entries}")

    def __len__(self) -> int:
        with self._lock:
            self.cache.expire()
            return len(self.cache)

    def get(self, key: CacheKey) -> Optional[Any]:
        """
        Get a cached response.

        Returns:
            Cached data if present and not expired, None otherwise
        """
        with self._lock:
            data = self.cache.get(key)
            if data is None:
                # Drops the stale entry for this key along with any others
                self.cache.expire()

        if data is None:
            self.misses += 1
            logger.debug(f"Cache MISS: {key}")
            return None

        self.hits += 1
        logger.debug(f"Cache HIT: {key}")
        return data

    def set(self, key: CacheKey, data: Any) -> None:
        """Store a response, overwriting any existing entry."""
        with self._lock:
            if len(self.cache) >= self.max_entries and key not in self.cache:
                self.evictions += 1
            self.cache[key] = data

    def delete(self, key: CacheKey) -> None:
        with self._lock:
            self.cache.pop(key, None)

    def invalidate_session(self, session_id: str) -> int:
        """
        Drop every entry scoped to a session.

        Returns:
            Number of entries removed
        """
        with self._lock:
            keys = [key for key in list(self.cache.keys()) if key[0] == session_id]
            for key in keys:
                self.cache.pop(key, None)

        if keys:
            logger.debug(f"Invalidated {len(keys)} cached results for session {session_id}")
        return len(keys)

    def session_size(self, session_id: str) -> int:
        """Number of live entries scoped to a session."""
        with self._lock:
            self.cache.expire()
            return sum(1 for key in list(self.cache.keys()) if key[0] == session_id)

    def cleanup(self) -> int:
        """
        Evict every expired entry.

        Returns:
            Number of entries removed
        """
        with self._lock:
            before = self.cache.currsize
            self.cache.expire()
            removed = before - self.cache.currsize

        if removed:
            logger.debug(f"Cache cleanup removed {removed} expired entries")
        return removed

    def clear(self) -> None:
        """Clear all entries."""
        with self._lock:
            count = len(self.cache)
            self.cache.clear()
        logger.info(f"Cleared {count} cached results")

    def get_stats(self) -> Dict[str, int]:
        """
        Get cache statistics.

        Returns:
            Dictionary with cache statistics
        """
        total_requests = self.hits + self.misses
        hit_rate = (self.hits / total_requests * 100) if total_requests > 0 else 0

        return {
            "size": len(self),
            "max_entries": self.max_entries,
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "total_requests": total_requests,
            "hit_rate_percent": int(round(hit_rate)),
        }
