"""Database dependency that compares a query result to its baseline."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar

from cachedep.dependencies.base import Dependency
from cachedep.errors import InvalidDependencyError, QueryExecutionError
from cachedep.types import Baseline

if TYPE_CHECKING:
    from cachedep.config import DependencySettings
    from cachedep.manager import DependencyManager


def _same_scalar(current: Any, baseline: Any) -> bool:
    """Strict comparison: equal value and same type, so 1 != 1.0 != "1"."""
    if current is None or baseline is None:
        return current is baseline
    return type(current) is type(baseline) and current == baseline


@dataclass(frozen=True, slots=True)
class QueryDependency(Dependency):
    """Goes stale when a scalar query result changes.

    The query should return one cheap, deterministic value that moves when
    the rows behind the cached value change, such as ``MAX(updated_at)`` or
    ``COUNT(*)``. Only the first column of the first row is compared; no rows
    reads as None.
    """

    kind: ClassVar[str] = "db"

    query: str
    params: tuple[Any, ...] = ()
    connection: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.query, str) or not self.query.strip():
            raise InvalidDependencyError("A database dependency needs a query")
        object.__setattr__(self, "params", tuple(self.params))

    def with_connection(self, connection: str) -> QueryDependency:
        return dataclasses.replace(self, connection=connection)

    def fetch(self, manager: DependencyManager) -> Any:
        """Run the query and return its first scalar.

        Raises:
            QueryExecutionError: on any failure, chained to the cause
        """
        executor = manager.executor
        if executor is None:
            raise QueryExecutionError("No query executor configured")
        connection = self.connection or manager.settings.db_connection
        try:
            rows = executor.execute(self.query, self.params, connection)
        except QueryExecutionError:
            raise
        except Exception as e:
            raise QueryExecutionError(f"Database dependency query failed: {e}") from e
        if not rows:
            return None
        return next(iter(rows[0].values()), None)

    def capture_baseline(self, manager: DependencyManager) -> Baseline:
        return self.fetch(manager)

    def is_stale(self, manager: DependencyManager, baseline: Baseline) -> bool:
        return not _same_scalar(self.fetch(manager), baseline)

    def fail_open(self, settings: DependencySettings) -> bool | None:
        return settings.db_fail_open

    def to_dict(self) -> dict[str, Any]:
        return {
            "query": self.query,
            "params": list(self.params),
            "connection": self.connection,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> QueryDependency:
        query = data.get("query")
        params = data.get("params", [])
        if not isinstance(query, str) or not isinstance(params, (list, tuple)):
            raise InvalidDependencyError(f"Malformed database dependency: {data!r}")
        return cls(query, tuple(params), data.get("connection"))
