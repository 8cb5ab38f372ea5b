"""Process-local page cache.

A bounded, TTL-based key/value store private to one running instance.
Backed by cachetools' TLRUCache, which expires entries per item and
evicts the least recently used entry once ``maxsize`` is reached.

cachetools containers are not thread-safe, so every access goes through a
single lock. The lock is never held across an await.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from typing import Any, NamedTuple

from cachetools import TLRUCache


class _Entry(NamedTuple):
    value: Any
    ttl: float


def _time_to_use(_key: str, entry: _Entry, now: float) -> float:
    return now + entry.ttl


class LocalCache:
    """In-memory LRU cache with per-entry TTL."""

    def __init__(
        self,
        maxsize: int = 500,
        default_ttl: float = 30.0,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._maxsize = maxsize
        self._default_ttl = default_ttl
        self._lock = threading.Lock()
        self._cache: TLRUCache[str, _Entry] = TLRUCache(
            maxsize=maxsize,
            ttu=_time_to_use,
            timer=timer,
        )

    def get(self, key: str) -> Any | None:
        """Return the cached value, or None if absent or expired."""
        with self._lock:
            entry = self._cache.get(key)
        return entry.value if entry is not None else None

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        """Insert or overwrite a value, evicting one entry when full."""
        ttl = self._default_ttl if ttl is None else ttl
        if ttl <= 0:
            return
        with self._lock:
            self._cache[key] = _Entry(value, ttl)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._cache.pop(key, None) is not None

    def clear(self) -> None:
        """Remove every entry."""
        with self._lock:
            self._cache.clear()

    def __len__(self) -> int:
        with self._lock:
            self._cache.expire()
            return len(self._cache)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._cache

    @property
    def maxsize(self) -> int:
        return self._maxsize
