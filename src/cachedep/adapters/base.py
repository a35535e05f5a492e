"""Base adapter protocols for storage backends."""

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class StorageAdapter(Protocol):
    """Key-value backend the manager stores entries and tag counters in.

    Values are opaque to the adapter. TTLs are milliseconds; ``None`` means
    the value never expires.
    """

    def get(self, key: str) -> Any | None:
        """Get a value by key, or None if absent or expired."""
        ...

    def put(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store a value."""
        ...

    def forever(self, key: str, value: Any) -> None:
        """Store a value without expiry."""
        ...

    def put_many(self, values: Mapping[str, Any], ttl: int | None = None) -> None:
        """Store several values with the same TTL."""
        ...

    def forget(self, key: str) -> bool:
        """Delete a value. Returns whether it existed."""
        ...

    def increment(self, key: str, ttl: int) -> int | None:
        """Atomically add one to an integer counter and refresh its TTL.

        Missing counters start at 0. Returns the new value, or None when the
        backend cannot increment atomically.
        """
        ...

    def flush(self) -> bool:
        """Remove every value."""
        ...

    def disconnect(self) -> None:
        """Disconnect from the storage backend."""
        ...


@runtime_checkable
class LockingAdapter(Protocol):
    """Optional mixin for adapters that provide named advisory locks."""

    def acquire_lock(self, name: str, wait: int) -> Any | None:
        """Wait up to ``wait`` ms for the lock. Returns a handle or None."""
        ...

    def release_lock(self, handle: Any) -> None:
        """Release a handle returned by acquire_lock."""
        ...
