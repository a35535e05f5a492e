"""Storage adapters for the cachedep library."""

from contextlib import suppress

from cachedep.adapters.base import LockingAdapter, StorageAdapter
from cachedep.adapters.memory import MemoryAdapter

# Optional adapters - only available when dependencies are installed
with suppress(ImportError):
    from cachedep.adapters.redis import RedisAdapter

__all__ = [
    "LockingAdapter",
    "MemoryAdapter",
    "RedisAdapter",
    "StorageAdapter",
]
