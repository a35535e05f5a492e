"""Tag version counters.

Every tag has an integer version stored in the backend under
``{prefix}:tag:{name}``. Invalidating a tag adds one to it; entries
remember the versions they saw and go stale once a counter moves past them.
Invalidation never touches the entries themselves.

Counters expire after ``tag_version_ttl``. An expired counter reads as 0,
which dependencies treat as "never invalidated", so the TTL must outlive
every entry that depends on the tag.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from cachedep.adapters.base import LockingAdapter, StorageAdapter
from cachedep.config import DependencySettings
from cachedep.errors import LockAcquisitionTimeout

logger = logging.getLogger(__name__)


class TagVersionStore:
    """Reads and bumps tag version counters through a storage adapter."""

    def __init__(self, adapter: StorageAdapter, settings: DependencySettings) -> None:
        self._adapter = adapter
        self._settings = settings

    def version_key(self, tag: str) -> str:
        return f"{self._settings.prefix}:tag:{tag}"

    def lock_name(self, tag: str) -> str:
        return f"{self._settings.prefix}:lock:tag:{tag}"

    def get_version(self, tag: str) -> int:
        """Current version of ``tag``, 0 if it was never invalidated."""
        value = self._adapter.get(self.version_key(tag))
        if value is None:
            return 0
        try:
            return int(value)
        except (TypeError, ValueError):
            if self._settings.log_failures:
                logger.warning(
                    "Ignoring non-integer version for tag %r: %r", tag, value
                )
            return 0

    def invalidate(self, tags: Iterable[str]) -> None:
        """Bump the version of every tag.

        A tag whose fallback lock times out keeps its old version; the
        failure is logged and the remaining tags are still bumped.
        """
        for tag in tags:
            try:
                self._increment(tag)
            except LockAcquisitionTimeout:
                if self._settings.log_failures:
                    logger.warning(
                        "Dropped invalidation of tag %r: lock not acquired",
                        tag,
                        exc_info=True,
                    )

    def _increment(self, tag: str) -> int:
        key = self.version_key(tag)
        ttl = self._settings.tag_version_ttl
        version = self._adapter.increment(key, ttl)
        if version is not None:
            return version

        logger.debug("Adapter cannot increment atomically, falling back for %r", tag)
        if not isinstance(self._adapter, LockingAdapter):
            if self._settings.log_failures:
                logger.warning(
                    "Incrementing tag %r without a lock; concurrent invalidations "
                    "may be lost",
                    tag,
                )
            return self._read_modify_write(tag, key, ttl)

        name = self.lock_name(tag)
        wait = self._settings.lock_wait
        handle = self._adapter.acquire_lock(name, wait)
        if handle is None:
            raise LockAcquisitionTimeout(name, wait)
        try:
            return self._read_modify_write(tag, key, ttl)
        finally:
            self._adapter.release_lock(handle)

    def _read_modify_write(self, tag: str, key: str, ttl: int) -> int:
        version = self.get_version(tag) + 1
        self._adapter.put(key, version, ttl)
        return version


__all__ = ["TagVersionStore"]
