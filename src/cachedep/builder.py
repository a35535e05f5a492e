"""Fluent builder for writing values with dependencies."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import TYPE_CHECKING, Any, TypeVar, cast

from cachedep.dependencies import Dependency, QueryDependency, TagDependency
from cachedep.duration import parse_ttl
from cachedep.entry import EntryWrapper
from cachedep.errors import BaselineCaptureError
from cachedep.types import MISSING, Baseline, Duration

if TYPE_CHECKING:
    from cachedep.manager import DependencyManager

R = TypeVar("R")

logger = logging.getLogger(__name__)


class DependencyBuilder:
    """Collects dependencies, then writes values guarded by them.

    Usage:
        ```python
        manager.tags(["users", "roles"]).db(
            "SELECT MAX(updated_at) FROM role_user WHERE user_id = ?", [user_id]
        ).put(f"user.{user_id}.permissions", permissions, ttl="1h")
        ```

    Repeated ``tags()`` calls grow one tag dependency. Each ``db()`` call adds
    its own query dependency, and any one of them going stale invalidates the
    entry. Baselines are captured at commit time, once per written value.
    """

    def __init__(self, manager: DependencyManager) -> None:
        self._manager = manager
        self._dependencies: list[Dependency] = []
        self._connection: str | None = None

    @property
    def dependencies(self) -> tuple[Dependency, ...]:
        return tuple(self._dependencies)

    def tags(self, tags: str | Iterable[str]) -> DependencyBuilder:
        """Depend on one or more tags."""
        for i, dependency in enumerate(self._dependencies):
            if isinstance(dependency, TagDependency):
                self._dependencies[i] = dependency.with_tags(tags)
                return self
        self._dependencies.append(TagDependency.of(tags))
        return self

    def db(
        self,
        query: str,
        params: Sequence[Any] = (),
        connection: str | None = None,
    ) -> DependencyBuilder:
        """Depend on the scalar result of a database query."""
        self._dependencies.append(
            QueryDependency(query, tuple(params), connection or self._connection)
        )
        return self

    def connection(self, name: str) -> DependencyBuilder:
        """Run queries that did not name a connection on ``name``."""
        self._connection = name
        self._dependencies = [
            dependency.with_connection(name)
            if isinstance(dependency, QueryDependency) and dependency.connection is None
            else dependency
            for dependency in self._dependencies
        ]
        return self

    # -------------------------------------------------------------------------
    # Commit
    # -------------------------------------------------------------------------

    def put(self, key: str, value: Any, ttl: Duration | None = None) -> None:
        """Store a value guarded by the collected dependencies.

        Raises:
            BaselineCaptureError: if a baseline cannot be captured and
                ``allow_baseline_failure`` is off. Nothing is written.
        """
        wrapper = self._create_wrapper(value)
        self._manager.adapter.put(key, wrapper, parse_ttl(ttl))

    def forever(self, key: str, value: Any) -> None:
        """Store a value without expiry."""
        wrapper = self._create_wrapper(value)
        self._manager.adapter.forever(key, wrapper)

    def put_many(self, values: Mapping[str, Any], ttl: Duration | None = None) -> None:
        """Store several values. Every baseline is captured before anything is written."""
        wrapped = {key: self._create_wrapper(value) for key, value in values.items()}
        self._manager.adapter.put_many(wrapped, parse_ttl(ttl))

    def remember(self, key: str, ttl: Duration | None, fn: Callable[[], R]) -> R:
        """Return the fresh value at ``key``, or compute, store and return it."""
        value = self._manager.get(key, MISSING)
        if value is not MISSING:
            return cast(R, value)
        value = fn()
        self.put(key, value, ttl)
        return value

    def remember_forever(self, key: str, fn: Callable[[], R]) -> R:
        """Like ``remember`` but the stored value never expires."""
        return self.remember(key, None, fn)

    def _create_wrapper(self, value: Any) -> EntryWrapper:
        settings = self._manager.settings
        captured: list[tuple[Dependency, Baseline]] = []
        for dependency in self._dependencies:
            try:
                baseline = dependency.capture_baseline(self._manager)
            except Exception as e:
                error = BaselineCaptureError(
                    dependency,
                    f"Could not capture baseline for {dependency.kind!r}: {e}",
                )
                if not settings.allow_baseline_failure:
                    raise error from e
                if settings.log_failures:
                    logger.warning("%s; storing without it", error, exc_info=e)
                continue
            captured.append((dependency, baseline))
        return EntryWrapper(value, tuple(captured))


__all__ = ["DependencyBuilder"]
