"""Dependency manager - the entry point for dependency-tracked caching.

The manager wraps a storage adapter and provides:
- tags(), db(): start a builder that writes values with dependencies
- get(), has(), pull(), many(): reads that drop stale entries
- invalidate_tags(), get_tag_version(): O(1) tag invalidation
- put(), remember(), forget(), flush(): plain cache operations
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from typing import Any, TypeVar, cast

from cachedep.adapters.base import StorageAdapter
from cachedep.builder import DependencyBuilder
from cachedep.config import DependencySettings
from cachedep.dependencies.tag import normalize_tags
from cachedep.duration import parse_ttl
from cachedep.entry import EntryWrapper
from cachedep.executors import QueryExecutor
from cachedep.types import MISSING, Duration
from cachedep.versions import TagVersionStore

R = TypeVar("R")

logger = logging.getLogger(__name__)


class DependencyManager:
    """Reads and writes cache entries guarded by dependencies.

    Values written through a builder are stored as ``EntryWrapper`` objects
    holding the baselines of their dependencies. Every read re-checks those
    dependencies; a stale entry is evicted and reported as a miss. Values
    written to the adapter by anything else are returned untouched.
    """

    def __init__(
        self,
        adapter: StorageAdapter,
        *,
        executor: QueryExecutor | None = None,
        settings: DependencySettings | None = None,
    ) -> None:
        self._adapter = adapter
        self._executor = executor
        self._settings = settings if settings is not None else DependencySettings()
        self._versions = TagVersionStore(adapter, self._settings)

    @property
    def adapter(self) -> StorageAdapter:
        return self._adapter

    @property
    def executor(self) -> QueryExecutor | None:
        return self._executor

    @property
    def settings(self) -> DependencySettings:
        return self._settings

    # -------------------------------------------------------------------------
    # Builders
    # -------------------------------------------------------------------------

    def tags(self, tags: str | Iterable[str]) -> DependencyBuilder:
        """Start a builder depending on one or more tags."""
        return DependencyBuilder(self).tags(tags)

    def db(
        self,
        query: str,
        params: Sequence[Any] = (),
        connection: str | None = None,
    ) -> DependencyBuilder:
        """Start a builder depending on a database query result."""
        return DependencyBuilder(self).db(query, params, connection)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get(self, key: str, default: Any = None) -> Any:
        """Get a fresh value, or ``default`` on a miss or a stale entry."""
        raw = self._adapter.get(key)
        if raw is None:
            return default
        if not isinstance(raw, EntryWrapper):
            return raw
        if raw.is_stale(self):
            logger.debug("Evicting stale entry %r", key)
            self._adapter.forget(key)
            return default
        return raw.value

    def has(self, key: str) -> bool:
        """Whether a fresh value exists at ``key``."""
        return self.get(key, MISSING) is not MISSING

    def pull(self, key: str, default: Any = None) -> Any:
        """Get a value and remove it."""
        value = self.get(key, default)
        self.forget(key)
        return value

    def many(self, keys: Iterable[str]) -> dict[str, Any]:
        """Get several values; misses map to None."""
        return {key: self.get(key) for key in keys}

    # -------------------------------------------------------------------------
    # Tags
    # -------------------------------------------------------------------------

    def invalidate_tags(self, tags: str | Iterable[str]) -> None:
        """Invalidate every entry depending on any of these tags.

        Only the tag counters change; entries are found stale on their next
        read. A tag whose fallback lock times out is logged and skipped.
        """
        self._versions.invalidate(sorted(normalize_tags(tags)))

    def get_tag_version(self, tag: str) -> int:
        """Current version counter for ``tag``."""
        return self._versions.get_version(tag)

    # -------------------------------------------------------------------------
    # Plain operations
    # -------------------------------------------------------------------------

    def put(self, key: str, value: Any, ttl: Duration | None = None) -> None:
        """Store a value without dependencies.

        The value is wrapped like a builder write, so a stored None is a hit.
        """
        self._adapter.put(key, EntryWrapper(value), parse_ttl(ttl))

    def remember(self, key: str, ttl: Duration | None, fn: Callable[[], R]) -> R:
        """Return the value at ``key``, or compute and store it without dependencies."""
        value = self.get(key, MISSING)
        if value is not MISSING:
            return cast(R, value)
        value = fn()
        self.put(key, value, ttl)
        return value

    def forget(self, key: str) -> bool:
        """Remove a value."""
        return self._adapter.forget(key)

    def flush(self) -> bool:
        """Remove every value, tag counters included."""
        return self._adapter.flush()

    def disconnect(self) -> None:
        """Disconnect from the storage backend."""
        self._adapter.disconnect()


def create_manager(
    *,
    adapter: StorageAdapter,
    executor: QueryExecutor | None = None,
    settings: DependencySettings | None = None,
    **overrides: Any,
) -> DependencyManager:
    """Create a dependency manager.

    Args:
        adapter: Storage adapter
        executor: Query executor for database dependencies
        settings: Base settings (default: read from the environment)
        **overrides: Individual settings, e.g. ``fail_open=True``

    Returns:
        DependencyManager instance
    """
    unknown = set(overrides) - set(DependencySettings.model_fields)
    if unknown:
        raise TypeError(f"Unknown settings: {', '.join(sorted(unknown))}")

    base = settings if settings is not None else DependencySettings()
    if overrides:
        base = DependencySettings(**{**base.model_dump(), **overrides})
    return DependencyManager(adapter, executor=executor, settings=base)


__all__ = ["DependencyManager", "create_manager"]
