"""Redis storage adapter."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from redis.exceptions import LockError

from cachedep.entry import EntryWrapper

# Envelope key marking a serialized EntryWrapper
_ENTRY_MARKER = "__cachedep_entry__"


def _serialize(value: Any) -> str:
    """Serialize a value to JSON, wrapping entries in a marker envelope."""
    if isinstance(value, EntryWrapper):
        return json.dumps({_ENTRY_MARKER: value.to_dict()})
    return json.dumps(value)


def _deserialize(data: bytes | str) -> Any:
    """Deserialize JSON, rebuilding entries from their envelope."""
    if isinstance(data, bytes):
        data = data.decode("utf-8")
    obj = json.loads(data)
    if isinstance(obj, dict) and obj.keys() == {_ENTRY_MARKER}:
        return EntryWrapper.from_dict(obj[_ENTRY_MARKER])
    return obj


class RedisAdapter:
    """Sync Redis storage adapter.

    Values are stored as JSON under ``{prefix}:{key}``. Counters use INCR so
    tag invalidation is always atomic; advisory locks use redis-py's
    ``Lock``.
    """

    def __init__(
        self,
        client: Any,  # redis.Redis
        *,
        prefix: str = "cachedep",
        lock_timeout: float = 10.0,
    ) -> None:
        self._client = client
        self._prefix = prefix
        self._lock_timeout = lock_timeout

    def _key(self, key: str) -> str:
        """Generate full Redis key."""
        return f"{self._prefix}:{key}"

    def get(self, key: str) -> Any | None:
        """Get a value by key."""
        data = self._client.get(self._key(key))
        if data is None:
            return None
        return _deserialize(data)

    def put(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store a value with optional expiration. A TTL of 0 or less removes the key."""
        if ttl is not None and ttl <= 0:
            self._client.delete(self._key(key))
            return
        self._client.set(self._key(key), _serialize(value), px=ttl)

    def forever(self, key: str, value: Any) -> None:
        """Store a value without expiration."""
        self._client.set(self._key(key), _serialize(value))

    def put_many(self, values: Mapping[str, Any], ttl: int | None = None) -> None:
        """Store several values in one round trip."""
        if ttl is not None and ttl <= 0:
            if values:
                self._client.delete(*(self._key(key) for key in values))
            return
        pipe = self._client.pipeline()
        for key, value in values.items():
            pipe.set(self._key(key), _serialize(value), px=ttl)
        pipe.execute()

    def forget(self, key: str) -> bool:
        """Delete a value."""
        return bool(self._client.delete(self._key(key)))

    def increment(self, key: str, ttl: int) -> int | None:
        """Atomically increment a counter and refresh its TTL."""
        pipe = self._client.pipeline()
        pipe.incr(self._key(key))
        pipe.pexpire(self._key(key), ttl)
        version, _ = pipe.execute()
        return int(version)

    def flush(self) -> bool:
        """Delete every key under this adapter's prefix."""
        # Use SCAN to find and delete all prefixed keys
        cursor = 0
        pattern = f"{self._prefix}:*"
        while True:
            cursor, keys = self._client.scan(cursor, match=pattern, count=100)
            if keys:
                self._client.delete(*keys)
            if cursor == 0:
                break
        return True

    def disconnect(self) -> None:
        """Close the Redis connection."""
        self._client.close()

    def acquire_lock(self, name: str, wait: int) -> Any | None:
        """Acquire a Redis lock, waiting at most ``wait`` ms."""
        lock = self._client.lock(
            self._key(name),
            timeout=self._lock_timeout,
            blocking_timeout=wait / 1000,
        )
        if lock.acquire():
            return lock
        return None

    def release_lock(self, handle: Any) -> None:
        """Release a Redis lock."""
        try:
            handle.release()
        except LockError:
            # Lock expired before release; someone else may hold it now
            pass
