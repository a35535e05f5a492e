"""Entry wrapper stored in the backend in place of the cached value."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from cachedep.dependencies.base import Dependency, dependency_from_dict
from cachedep.errors import InvalidDependencyError, StalenessCheckError
from cachedep.types import Baseline

if TYPE_CHECKING:
    from cachedep.manager import DependencyManager

logger = logging.getLogger(__name__)


def resolve_fail_open(
    global_setting: bool | None,
    type_setting: bool | None,
    default: bool = False,
) -> bool:
    """Decide whether a failed check keeps the entry alive.

    An explicit global setting wins for every dependency type, then the
    type's own flag, then ``default`` (fail closed).
    """
    if global_setting is not None:
        return global_setting
    if type_setting is not None:
        return type_setting
    return default


@dataclass(frozen=True, slots=True)
class EntryWrapper:
    """A cached value plus the dependencies and baselines guarding it.

    Dependencies are kept in the order they were attached. An entry without
    dependencies is never stale by dependency logic; only the backend TTL
    expires it.
    """

    value: Any
    dependencies: tuple[tuple[Dependency, Baseline], ...] = ()

    def is_stale(self, manager: DependencyManager) -> bool:
        """Check every dependency against its baseline, stopping at the first stale one."""
        settings = manager.settings
        for dependency, baseline in self.dependencies:
            try:
                if self._check(manager, dependency, baseline):
                    return True
            except StalenessCheckError as e:
                fail_open = resolve_fail_open(
                    settings.fail_open, dependency.fail_open(settings)
                )
                if settings.log_failures:
                    logger.warning(
                        "%s; treating entry as %s",
                        e,
                        "fresh" if fail_open else "stale",
                        exc_info=e.__cause__,
                    )
                if not fail_open:
                    return True
        return False

    @staticmethod
    def _check(
        manager: DependencyManager, dependency: Dependency, baseline: Baseline
    ) -> bool:
        try:
            return dependency.is_stale(manager, baseline)
        except Exception as e:
            raise StalenessCheckError(
                dependency, f"Staleness check failed for {dependency.kind!r}: {e}"
            ) from e

    def to_dict(self) -> dict[str, Any]:
        """Serializable form: value plus one dict per dependency, tagged by kind."""
        return {
            "value": self.value,
            "dependencies": [
                {"kind": dependency.kind, **dependency.to_dict(), "baseline": baseline}
                for dependency, baseline in self.dependencies
            ],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> EntryWrapper:
        if "value" not in data or not isinstance(data.get("dependencies"), list):
            raise InvalidDependencyError(f"Malformed cache entry: {data!r}")
        return cls(
            value=data["value"],
            dependencies=tuple(
                (dependency_from_dict(item), item.get("baseline"))
                for item in data["dependencies"]
            ),
        )


__all__ = ["EntryWrapper", "resolve_fail_open"]
