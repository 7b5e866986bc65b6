"""Short-lived memo of computed series, keyed by (date, source mode).

Only successes are ever stored. Entries expire lazily: an expired entry is
dropped by the read that finds it.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from typing import Protocol, runtime_checkable

from dam_series.core.models import CacheEntry, CacheKey, SeriesResult

logger = logging.getLogger(__name__)


@runtime_checkable
class SeriesCache(Protocol):
    """Protocol for series cache backends."""

    def get(self, key: CacheKey) -> SeriesResult | None:
        """Return the live entry for ``key``, or None."""
        ...

    def put(self, key: CacheKey, value: SeriesResult, ttl: float) -> None:
        """Store ``value`` for ``ttl`` seconds, replacing any previous entry."""
        ...


class TTLSeriesCache:
    """In-process TTL cache guarded by a single lock.

    Parameters
    ----------
    clock : Callable[[], float]
        Monotonic seconds source. Tests inject a fake clock.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[CacheKey, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: CacheKey) -> SeriesResult | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() >= entry.expires_at:
                del self._entries[key]
                logger.debug("Cache entry expired for %s/%s", key[0], key[1])
                return None
            return entry.value

    def put(self, key: CacheKey, value: SeriesResult, ttl: float) -> None:
        with self._lock:
            self._entries[key] = CacheEntry(value=value, expires_at=self._clock() + ttl)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class NullSeriesCache:
    """Cache that never stores anything."""

    def get(self, key: CacheKey) -> SeriesResult | None:
        return None

    def put(self, key: CacheKey, value: SeriesResult, ttl: float) -> None:
        return None
