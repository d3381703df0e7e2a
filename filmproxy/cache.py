"""In-memory cache with per-entry expiration.

Expired entries are treated as absent on read and purged lazily;
cleanup() reclaims the memory of entries nobody asks about.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """A cached value and the time it stops being valid."""

    value: Any
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class TTLCache:
    """Thread-safe TTL cache keyed by string.

    Usage:
        cache = TTLCache(default_ttl=600)
        cache.set("films:all", films)
        films = cache.get("films:all")
    """

    def __init__(
        self,
        default_ttl: float = 300.0,
        *,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize cache.

        Args:
            default_ttl: Lifetime in seconds for entries set without a ttl
            clock: Time source in seconds
        """
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """Store a value, replacing any existing entry.

        Args:
            key: Cache key
            value: Value to cache
            ttl: Lifetime in seconds (default: default_ttl). Zero or
                negative values expire the entry immediately.
        """
        lifetime = self.default_ttl if ttl is None else ttl
        with self._lock:
            self._entries[key] = CacheEntry(value=value, expires_at=self._clock() + lifetime)

    def get(self, key: str, default: Any = None) -> Any:
        """Get a cached value.

        Args:
            key: Cache key
            default: Returned when the key is missing or expired

        Returns:
            Cached value or default
        """
        with self._lock:
            entry = self._live_entry(key)
            if entry is None:
                return default
            return entry.value

    def has(self, key: str) -> bool:
        """Check whether a key holds an unexpired value."""
        with self._lock:
            return self._live_entry(key) is not None

    def delete(self, key: str) -> bool:
        """Remove a key regardless of expiry.

        Returns:
            True if an entry was removed
        """
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        """Remove all entries."""
        with self._lock:
            self._entries.clear()

    def size(self) -> int:
        """Number of stored entries, including expired ones not yet swept."""
        with self._lock:
            return len(self._entries)

    def keys(self) -> list[str]:
        """Snapshot of stored keys, including expired ones not yet swept."""
        with self._lock:
            return list(self._entries)

    def cleanup(self) -> int:
        """Delete every entry that has expired.

        Returns:
            Number of entries removed
        """
        with self._lock:
            now = self._clock()
            expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
            for key in expired:
                del self._entries[key]

        if expired:
            logger.debug(f"Swept {len(expired)} expired cache entries")
        return len(expired)

    def _live_entry(self, key: str) -> Optional[CacheEntry]:
        # Caller holds the lock
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            del self._entries[key]
            return None
        return entry

    def __contains__(self, key: str) -> bool:
        return self.has(key)

    def __len__(self) -> int:
        return self.size()
