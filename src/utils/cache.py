"""
Statistics Result Cache with per-entry TTL
==========================================

A thread-safe in-memory cache for computed statistics.

Features:
- Keys are StatKind values (category + parameter)
- TTL stored per entry, so each category refreshes on its own schedule
- Category-wide eviction (every EMPLOYEE_STATS entry, every TIME_SERIES window, ...)
- Injectable clock for deterministic expiry in tests

Usage:
    from models.stat_kind import StatKind, StatCategory
    from utils.cache import get_query_cache

    cache = get_query_cache()
    kind = StatKind.time_series(30)

    stats = cache.get(kind)
    if stats is None:
        stats = compute_time_series(30)
        cache.put(kind, stats, ttl_seconds=300)

    # After a violation is created or deleted
    cache.evict_all(StatCategory.TIME_SERIES)

Locking:
    Every operation holds the lock for a single entry or a single category.
    Computation always happens outside the cache, so readers never wait on
    each other's queries.
"""

import time
from dataclasses import dataclass
from typing import Any, Callable, Optional
from threading import Lock

from models.stat_kind import StatKind, StatCategory


@dataclass(frozen=True)
class CacheEntry:
    """A cached value with the time it was stored and how long it stays valid."""
    value: Any
    inserted_at: float
    ttl_seconds: float

    def is_valid(self, now: float) -> bool:
        return now - self.inserted_at < self.ttl_seconds


class QueryCache:
    """
    Thread-safe in-memory cache with per-entry TTL.

    Attributes:
        _cache: Dictionary mapping StatKind to CacheEntry
        _lock: Threading lock for thread safety
        _default_ttl: TTL used by put() when none is given
        _clock: Callable returning the current time in seconds
    """

    def __init__(self, default_ttl_seconds: int = 300, clock: Callable[[], float] = time.time):
        """
        Initialize cache.

        Args:
            default_ttl_seconds: TTL used when put() is called without one (default 5 minutes)
            clock: Time source in seconds (time.time by default)
        """
        self._cache: dict[StatKind, CacheEntry] = {}
        self._lock = Lock()
        self._default_ttl = default_ttl_seconds
        self._clock = clock
        self._hits = 0
        self._misses = 0

    def get(self, kind: StatKind) -> Optional[Any]:
        """
        Get cached value if valid.

        An entry whose age has reached its TTL counts as absent and is dropped.

        Args:
            kind: Cache key

        Returns:
            Cached value if valid, None otherwise
        """
        with self._lock:
            entry = self._cache.get(kind)
            if entry is not None:
                if entry.is_valid(self._clock()):
                    self._hits += 1
                    return entry.value
                del self._cache[kind]
            self._misses += 1
        return None

    def put(self, kind: StatKind, value: Any, ttl_seconds: Optional[float] = None) -> None:
        """
        Store value in cache, replacing any entry for the same key.

        Expired entries are swept on every put, so keys that are never read
        again do not accumulate.

        Args:
            kind: Cache key
            value: Value to cache
            ttl_seconds: Lifetime of this entry (default TTL when None)
        """
        ttl = self._default_ttl if ttl_seconds is None else ttl_seconds
        with self._lock:
            now = self._clock()
            expired = [k for k, entry in self._cache.items() if not entry.is_valid(now)]
            for k in expired:
                del self._cache[k]
            self._cache[kind] = CacheEntry(value=value, inserted_at=now, ttl_seconds=ttl)

    def evict_all(self, category: StatCategory) -> int:
        """
        Remove every entry of a category, whatever its parameter.

        Args:
            category: Statistic category to clear

        Returns:
            Number of entries removed
        """
        with self._lock:
            doomed = [kind for kind in self._cache if kind.category == category]
            for kind in doomed:
                del self._cache[kind]
            return len(doomed)

    def invalidate(self, kind: Optional[StatKind] = None) -> None:
        """
        Clear cache entry or all entries.

        Args:
            kind: Specific key to invalidate, or None to clear all
        """
        with self._lock:
            if kind is not None:
                self._cache.pop(kind, None)
            else:
                self._cache.clear()

    def get_stats(self) -> dict[str, Any]:
        """
        Get cache statistics for monitoring.

        Returns:
            Dictionary with cache stats
        """
        with self._lock:
            now = self._clock()
            by_category: dict[str, int] = {}
            valid_entries = 0
            for kind, entry in self._cache.items():
                if entry.is_valid(now):
                    valid_entries += 1
                    by_category[kind.category.value] = by_category.get(kind.category.value, 0) + 1
            return {
                "total_entries": len(self._cache),
                "valid_entries": valid_entries,
                "entries_by_category": by_category,
                "hits": self._hits,
                "misses": self._misses,
                "default_ttl_seconds": self._default_ttl
            }


# Global cache instance (5 minutes = 300 seconds default TTL)
_query_cache: Optional[QueryCache] = None
_cache_lock = Lock()


def get_query_cache() -> QueryCache:
    """
    Get the global query cache singleton.

    Thread-safe lazy initialization ensures only one cache instance exists.

    Returns:
        Global QueryCache instance
    """
    global _query_cache
    if _query_cache is None:
        with _cache_lock:
            # Double-check locking pattern
            if _query_cache is None:
                _query_cache = QueryCache(default_ttl_seconds=300)
    return _query_cache


def reset_query_cache() -> None:
    """
    Reset the global cache (useful for testing).

    Creates a new cache instance, discarding all cached entries.
    """
    global _query_cache
    with _cache_lock:
        _query_cache = QueryCache(default_ttl_seconds=300)
