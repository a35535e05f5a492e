"""Shared pytest fixtures."""

import sqlite3
from collections.abc import Iterator

import pytest

from cachedep import (
    DependencyManager,
    DependencySettings,
    MemoryAdapter,
    SQLiteExecutor,
)

_ENV_VARS = (
    "CACHE_DEPENDENCY_PREFIX",
    "CACHE_DEPENDENCY_TAG_VERSION_TTL",
    "CACHE_DEPENDENCY_LOCK_WAIT",
    "CACHE_DEPENDENCY_FAIL_OPEN",
    "CACHE_DEPENDENCY_DB_FAIL_OPEN",
    "CACHE_DEPENDENCY_DB_CONNECTION",
    "CACHE_DEPENDENCY_DB_TIMEOUT",
    "CACHE_DEPENDENCY_ALLOW_BASELINE_FAILURE",
    "CACHE_DEPENDENCY_LOG_FAILURES",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep settings independent of the host environment."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def adapter() -> MemoryAdapter:
    """Create a fresh MemoryAdapter for each test."""
    return MemoryAdapter()


@pytest.fixture
def db() -> Iterator[sqlite3.Connection]:
    """In-memory database with a small users table."""
    conn = sqlite3.connect(":memory:", check_same_thread=False)
    conn.execute(
        "CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT, updated_at TEXT)"
    )
    conn.execute("CREATE TABLE t (id INTEGER PRIMARY KEY)")
    for _ in range(3):
        conn.execute("INSERT INTO t DEFAULT VALUES")
    conn.commit()
    yield conn
    conn.close()


@pytest.fixture
def executor(db: sqlite3.Connection) -> SQLiteExecutor:
    """Executor over the in-memory database."""
    return SQLiteExecutor({"main": db})


@pytest.fixture
def settings() -> DependencySettings:
    return DependencySettings()


@pytest.fixture
def manager(
    adapter: MemoryAdapter,
    executor: SQLiteExecutor,
    settings: DependencySettings,
) -> DependencyManager:
    """Manager wired to the memory adapter and the in-memory database."""
    return DependencyManager(adapter, executor=executor, settings=settings)
