"""In-memory storage adapter."""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from collections.abc import Mapping
from typing import Any, NamedTuple


class _Item(NamedTuple):
    value: Any
    expires_at: float | None  # Unix timestamp ms


def _now() -> float:
    return time.time() * 1000


class MemoryAdapter:
    """Thread-safe in-memory storage adapter with TTLs and optional LRU eviction.

    ``max_items`` bounds the number of stored values. Counters written by
    ``increment`` are not counted and never evicted: dropping a tag counter
    would reset it to 0 and lose later invalidations.
    """

    def __init__(self, max_items: int | None = None) -> None:
        self._cache: OrderedDict[str, _Item] = OrderedDict()
        self._counters: set[str] = set()
        self._max_items = max_items
        self._lock = threading.Lock()
        self._named_locks: dict[str, threading.Lock] = {}

    def _expiry(self, ttl: int | None) -> float | None:
        return _now() + ttl if ttl is not None else None

    def _drop(self, key: str) -> bool:
        """Remove key. Caller holds the lock."""
        self._counters.discard(key)
        return self._cache.pop(key, None) is not None

    def _live(self, key: str) -> _Item | None:
        """Return the item for key, dropping it if expired. Caller holds the lock."""
        item = self._cache.get(key)
        if item is None:
            return None
        if item.expires_at is not None and _now() >= item.expires_at:
            self._drop(key)
            return None
        return item

    def _store(
        self, key: str, value: Any, ttl: int | None, *, counter: bool = False
    ) -> None:
        # A non-positive TTL means the value is already expired
        if ttl is not None and ttl <= 0:
            self._drop(key)
            return
        self._cache[key] = _Item(value, self._expiry(ttl))
        self._cache.move_to_end(key)
        if counter:
            self._counters.add(key)
        else:
            self._counters.discard(key)
        self._evict()

    def _evict(self) -> None:
        """Drop least recently used values over max_items, skipping counters."""
        if not self._max_items:
            return
        excess = len(self._cache) - len(self._counters) - self._max_items
        if excess <= 0:
            return
        victims: list[str] = []
        for key in self._cache:
            if len(victims) == excess:
                break
            if key not in self._counters:
                victims.append(key)
        for key in victims:
            del self._cache[key]

    def get(self, key: str) -> Any | None:
        """Get a value by key."""
        with self._lock:
            item = self._live(key)
            if item is None:
                return None
            self._cache.move_to_end(key)  # LRU touch
            return item.value

    def put(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store a value. A TTL of 0 or less removes the key."""
        with self._lock:
            self._store(key, value, ttl)

    def forever(self, key: str, value: Any) -> None:
        """Store a value without expiry."""
        self.put(key, value, None)

    def put_many(self, values: Mapping[str, Any], ttl: int | None = None) -> None:
        """Store several values."""
        with self._lock:
            for key, value in values.items():
                self._store(key, value, ttl)

    def forget(self, key: str) -> bool:
        """Delete a value."""
        with self._lock:
            return self._drop(key)

    def increment(self, key: str, ttl: int) -> int | None:
        """Increment a counter and refresh its TTL."""
        with self._lock:
            item = self._live(key)
            value = int(item.value) + 1 if item is not None else 1
            self._store(key, value, ttl, counter=True)
            return value

    def flush(self) -> bool:
        """Clear all values."""
        with self._lock:
            self._cache.clear()
            self._counters.clear()
        return True

    def disconnect(self) -> None:
        """Disconnect from the storage backend (no-op for memory)."""
        pass

    def acquire_lock(self, name: str, wait: int) -> threading.Lock | None:
        """Acquire a named lock, waiting at most ``wait`` ms."""
        with self._lock:
            lock = self._named_locks.setdefault(name, threading.Lock())
        if lock.acquire(timeout=wait / 1000):
            return lock
        return None

    def release_lock(self, handle: threading.Lock) -> None:
        """Release a named lock."""
        handle.release()
