"""
Time-based cache for merged aircraft records.

Entries expire lazily: an entry older than the TTL is dropped the next time
it is read, with no background sweep. The cache is unbounded in size; the
set of transponder codes and registrations seen in practice is finite.

All access happens on the resolver's event loop, so no locking is needed.
"""

import logging
import time
from typing import Callable, Dict, Generic, Optional, TypeVar

from skytrack.resolver.records import CacheEntry

logger = logging.getLogger(__name__)

V = TypeVar('V')


class ResponseCache(Generic[V]):
    """
    Per-key TTL cache.

    Args:
        ttl_seconds: Lifetime of an entry.
        clock: Monotonic time source, injectable for tests.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}

        # Statistics
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> Optional[V]:
        """
        Get cached value by key.

        Returns None if not cached or expired.
        """
        entry = self._entries.get(key)
        if entry is not None:
            if entry.age(self._clock()) < self.ttl_seconds:
                self._hits += 1
                return entry.value
            # Expired
            del self._entries[key]

        self._misses += 1
        return None

    def set(self, key: str, value: V) -> CacheEntry:
        entry = CacheEntry(key=key, value=value, inserted_at=self._clock())
        self._entries[key] = entry
        return entry

    def invalidate(self, key: str) -> None:
        """Remove specific entry from cache."""
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: str) -> bool:
        entry = self._entries.get(key)
        return entry is not None and entry.age(self._clock()) < self.ttl_seconds

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def stats(self) -> dict:
        """Get cache statistics."""
        total = self._hits + self._misses
        return {
            'entries': len(self._entries),
            'hits': self._hits,
            'misses': self._misses,
            'hit_rate': self._hits / total if total > 0 else 0,
            'ttl_seconds': self.ttl_seconds,
        }
