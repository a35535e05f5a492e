"""Tag dependency backed by version counters."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar

from cachedep.dependencies.base import Dependency
from cachedep.errors import InvalidDependencyError
from cachedep.types import Baseline

if TYPE_CHECKING:
    from cachedep.manager import DependencyManager


def normalize_tags(tags: str | Iterable[str]) -> frozenset[str]:
    """Turn a tag or an iterable of tags into a validated set."""
    if isinstance(tags, str):
        tags = [tags]
    try:
        result = frozenset(tags)
    except TypeError as e:
        raise InvalidDependencyError(f"Invalid tags: {tags!r}") from e
    for tag in result:
        if not isinstance(tag, str) or not tag:
            raise InvalidDependencyError(f"Invalid tag: {tag!r}")
    return result


def _is_version_map(baseline: Baseline) -> bool:
    if not isinstance(baseline, Mapping):
        return False
    return all(
        isinstance(tag, str) and isinstance(v, int) and not isinstance(v, bool)
        for tag, v in baseline.items()
    )


@dataclass(frozen=True, slots=True)
class TagDependency(Dependency):
    """Goes stale when any of its tags is invalidated.

    Invalidating a tag bumps its version counter, so the check is one counter
    read per tag no matter how many entries share it.
    """

    kind: ClassVar[str] = "tag"

    tags: frozenset[str]

    def __post_init__(self) -> None:
        if not self.tags:
            raise InvalidDependencyError("A tag dependency needs at least one tag")

    @classmethod
    def of(cls, tags: str | Iterable[str]) -> TagDependency:
        return cls(normalize_tags(tags))

    def with_tags(self, tags: str | Iterable[str]) -> TagDependency:
        """Return a dependency covering these tags and the given ones."""
        return TagDependency(self.tags | normalize_tags(tags))

    def capture_baseline(self, manager: DependencyManager) -> dict[str, int]:
        return {tag: manager.get_tag_version(tag) for tag in sorted(self.tags)}

    def is_stale(self, manager: DependencyManager, baseline: Baseline) -> bool:
        # A missing or garbled baseline cannot prove anything changed
        if not _is_version_map(baseline):
            return False
        for tag in sorted(self.tags):
            # Strictly greater: a counter that expired back to 0 is not a change
            if manager.get_tag_version(tag) > baseline.get(tag, 0):
                return True
        return False

    def to_dict(self) -> dict[str, Any]:
        return {"tags": sorted(self.tags)}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TagDependency:
        tags = data.get("tags")
        if not isinstance(tags, list):
            raise InvalidDependencyError(f"Malformed tag dependency: {data!r}")
        return cls.of(tags)
