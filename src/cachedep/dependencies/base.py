"""Base class and kind registry for cache dependencies."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, ClassVar

from cachedep.errors import InvalidDependencyError
from cachedep.types import Baseline

if TYPE_CHECKING:
    from cachedep.config import DependencySettings
    from cachedep.manager import DependencyManager

_REGISTRY: dict[str, type[Dependency]] = {}


class Dependency(ABC):
    """A condition a cached value depends on.

    At write time a dependency captures a baseline of the state it watches.
    At read time it compares the current state against that baseline. Each
    concrete dependency declares a unique ``kind`` which tags its persisted
    form; defining the subclass is enough to make it loadable.
    """

    __slots__ = ()

    kind: ClassVar[str]

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        kind = cls.__dict__.get("kind")
        if kind is not None:
            _REGISTRY[kind] = cls

    @abstractmethod
    def capture_baseline(self, manager: DependencyManager) -> Baseline:
        """Snapshot the watched state. Must be JSON serializable."""

    @abstractmethod
    def is_stale(self, manager: DependencyManager, baseline: Baseline) -> bool:
        """Whether the watched state moved away from ``baseline``."""

    def fail_open(self, settings: DependencySettings) -> bool | None:
        """Type-specific fail-open flag, or None if this kind has none."""
        return None

    @abstractmethod
    def to_dict(self) -> dict[str, Any]:
        """Parameters needed to rebuild this dependency, without ``kind``."""

    @classmethod
    @abstractmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Dependency:
        """Rebuild a dependency from ``to_dict`` output."""


def dependency_kinds() -> dict[str, type[Dependency]]:
    """All registered dependency kinds."""
    return dict(_REGISTRY)


def dependency_from_dict(data: Mapping[str, Any]) -> Dependency:
    """Rebuild a dependency from its persisted form, dispatching on ``kind``."""
    kind = data.get("kind")
    cls = _REGISTRY.get(kind) if isinstance(kind, str) else None
    if cls is None:
        raise InvalidDependencyError(f"Unknown dependency kind: {kind!r}")
    return cls.from_dict(data)
