"""Tests for query executors."""

import sqlite3
from pathlib import Path

import pytest

from cachedep import (
    DependencySettings,
    QueryExecutionError,
    QueryExecutor,
    SQLiteExecutor,
)


@pytest.fixture
def db_file(tmp_path: Path) -> Path:
    path = tmp_path / "app.db"
    conn = sqlite3.connect(path)
    conn.execute("CREATE TABLE posts (id INTEGER PRIMARY KEY, title TEXT)")
    conn.execute("INSERT INTO posts (title) VALUES ('hello')")
    conn.commit()
    conn.close()
    return path


class TestSQLiteExecutor:
    """Tests for SQLiteExecutor."""

    def test_satisfies_protocol(self, executor: SQLiteExecutor) -> None:
        assert isinstance(executor, QueryExecutor)

    def test_rows_are_mappings(self, executor: SQLiteExecutor) -> None:
        rows = executor.execute("SELECT id, 'x' AS label FROM t WHERE id = ?", [1])
        assert rows == [{"id": 1, "label": "x"}]

    def test_no_rows(self, executor: SQLiteExecutor) -> None:
        assert executor.execute("SELECT id FROM t WHERE id < 0") == []

    def test_opens_paths_lazily(self, db_file: Path) -> None:
        executor = SQLiteExecutor({"posts": db_file})
        assert executor.execute("SELECT COUNT(*) AS n FROM posts") == [{"n": 1}]
        executor.close()

    def test_named_connections(self, db: sqlite3.Connection, db_file: Path) -> None:
        executor = SQLiteExecutor({"main": db, "posts": str(db_file)}, default="main")
        assert executor.default == "main"
        assert executor.execute("SELECT COUNT(*) AS n FROM t") == [{"n": 3}]
        assert executor.execute("SELECT title FROM posts", connection="posts") == [
            {"title": "hello"}
        ]
        executor.close()

    def test_first_connection_is_default(self, db: sqlite3.Connection) -> None:
        assert SQLiteExecutor({"main": db, "other": ":memory:"}).default == "main"

    def test_unknown_connection(self, executor: SQLiteExecutor) -> None:
        with pytest.raises(QueryExecutionError, match="Unknown connection"):
            executor.execute("SELECT 1", connection="nope")

    def test_query_error(self, executor: SQLiteExecutor) -> None:
        with pytest.raises(QueryExecutionError) as info:
            executor.execute("SELECT * FROM missing_table")
        assert isinstance(info.value.__cause__, sqlite3.Error)

    def test_close_keeps_shared_connections_open(
        self, db: sqlite3.Connection, executor: SQLiteExecutor
    ) -> None:
        executor.execute("SELECT 1")
        executor.close()
        assert db.execute("SELECT COUNT(*) FROM t").fetchone() == (3,)

    def test_from_settings(self, db: sqlite3.Connection, db_file: Path) -> None:
        settings = DependencySettings(db_connection="posts", db_timeout=1.5)
        executor = SQLiteExecutor.from_settings(
            {"main": db, "posts": db_file}, settings
        )
        assert executor.default == "posts"
        assert executor.execute("SELECT COUNT(*) AS n FROM posts") == [{"n": 1}]
        executor.close()

    def test_invalid_configuration(self, db: sqlite3.Connection) -> None:
        with pytest.raises(ValueError):
            SQLiteExecutor({})
        with pytest.raises(ValueError, match="Unknown default"):
            SQLiteExecutor({"main": db}, default="other")
