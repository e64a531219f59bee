"""
Update Resolver - Bounded Cache
Key/value store with a fixed time-to-live and lazy eviction.
"""

import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Generic, Hashable, Optional, TypeVar
import logging

logger = logging.getLogger(__name__)

V = TypeVar("V")


@dataclass
class CacheEntry(Generic[V]):
    """A cached value and the monotonic time at which it stops being visible."""
    key: Hashable
    value: V
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class BoundedCache(Generic[V]):
    """
    Thread-safe TTL cache.

    Expired entries are never returned: they are dropped when looked up and
    swept whenever a new value is stored.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        """
        Initialize the cache.

        Args:
            ttl_seconds: Lifetime of every entry.
            clock: Monotonic time source, injectable for tests.
        """
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        self.ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[Hashable, CacheEntry[V]] = {}
        self._lock = threading.Lock()

    def set(self, key: Hashable, value: V) -> None:
        """Store value under key and evict anything that has expired."""
        with self._lock:
            now = self._clock()
            self._entries[key] = CacheEntry(key, value, now + self.ttl)
            self._sweep(now)

    def get(self, key: Hashable) -> Optional[V]:
        """Return the value for key, or None if missing or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(self._clock()):
                del self._entries[key]
                logger.debug(f"Cache entry expired: {key}")
                return None
            return entry.value

    def cleanup(self) -> int:
        """Remove all expired entries. Returns how many were removed."""
        with self._lock:
            return self._sweep(self._clock())

    def clear(self) -> None:
        """Remove every entry."""
        with self._lock:
            self._entries.clear()

    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, key: Any) -> bool:
        return self.get(key) is not None

    def _sweep(self, now: float) -> int:
        # Caller holds the lock
        expired = [k for k, e in self._entries.items() if e.is_expired(now)]
        for key in expired:
            del self._entries[key]
        return len(expired)
