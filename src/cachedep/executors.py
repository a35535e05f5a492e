"""Query executors used by database dependencies.

A dependency only needs a way to run one query and read rows back as
mappings. ``SQLiteExecutor`` does that on top of the standard library
``sqlite3`` module; other engines can be plugged in by implementing
``QueryExecutor``.
"""

from __future__ import annotations

import sqlite3
import threading
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from cachedep.errors import QueryExecutionError
from cachedep.types import Row

if TYPE_CHECKING:
    from cachedep.config import DependencySettings


@runtime_checkable
class QueryExecutor(Protocol):
    """Runs a query on a named connection and returns its rows."""

    def execute(
        self,
        query: str,
        params: Sequence[Any] = (),
        connection: str | None = None,
    ) -> list[Row]:
        """Execute ``query`` with bound ``params``.

        Raises:
            QueryExecutionError: if the connection is unknown or the query fails
        """
        ...


class SQLiteExecutor:
    """Executor for one or more SQLite databases.

    Usage:
        ```python
        executor = SQLiteExecutor({"main": "./app.db"}, default="main")
        executor.execute("SELECT COUNT(*) FROM users")
        ```

    Connections may be given as database paths, opened lazily, or as already
    open ``sqlite3.Connection`` objects (e.g. an in-memory database shared
    with the application).
    """

    def __init__(
        self,
        connections: Mapping[str, str | Path | sqlite3.Connection],
        *,
        default: str | None = None,
        timeout: float = 5.0,
    ) -> None:
        if not connections:
            raise ValueError("SQLiteExecutor needs at least one connection")
        if default is not None and default not in connections:
            raise ValueError(f"Unknown default connection: {default!r}")
        self._sources = dict(connections)
        self._default = default if default is not None else next(iter(connections))
        self._timeout = timeout
        self._opened: dict[str, sqlite3.Connection] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_settings(
        cls,
        connections: Mapping[str, str | Path | sqlite3.Connection],
        settings: DependencySettings,
    ) -> SQLiteExecutor:
        """Create an executor using ``db_connection`` and ``db_timeout``."""
        return cls(
            connections, default=settings.db_connection, timeout=settings.db_timeout
        )

    @property
    def default(self) -> str:
        return self._default

    def _connect(self, name: str) -> sqlite3.Connection:
        with self._lock:
            if name in self._opened:
                return self._opened[name]
            try:
                source = self._sources[name]
            except KeyError:
                raise QueryExecutionError(f"Unknown connection: {name!r}") from None
            if isinstance(source, sqlite3.Connection):
                conn = source
            else:
                conn = sqlite3.connect(
                    str(source), timeout=self._timeout, check_same_thread=False
                )
            self._opened[name] = conn
            return conn

    def execute(
        self,
        query: str,
        params: Sequence[Any] = (),
        connection: str | None = None,
    ) -> list[Row]:
        conn = self._connect(connection or self._default)
        try:
            cursor = conn.execute(query, tuple(params))
            columns = [col[0] for col in cursor.description or ()]
            return [dict(zip(columns, row, strict=True)) for row in cursor.fetchall()]
        except sqlite3.Error as e:
            raise QueryExecutionError(f"Query failed: {e}") from e

    def close(self) -> None:
        """Close connections this executor opened itself."""
        with self._lock:
            for name, conn in self._opened.items():
                if not isinstance(self._sources[name], sqlite3.Connection):
                    conn.close()
            self._opened.clear()


__all__ = ["QueryExecutor", "SQLiteExecutor"]
