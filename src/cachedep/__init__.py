"""cachedep - Dependency-based cache invalidation for Python."""

from contextlib import suppress

# Adapters
from cachedep.adapters import LockingAdapter, MemoryAdapter, StorageAdapter

# Builder
from cachedep.builder import DependencyBuilder
from cachedep.config import DependencySettings

# Dependencies
from cachedep.dependencies import (
    Dependency,
    QueryDependency,
    TagDependency,
    dependency_from_dict,
)

# Duration parsing
from cachedep.duration import parse_duration
from cachedep.entry import EntryWrapper, resolve_fail_open

# Errors
from cachedep.errors import (
    BaselineCaptureError,
    CacheDependencyError,
    InvalidDependencyError,
    LockAcquisitionTimeout,
    QueryExecutionError,
    StalenessCheckError,
)

# Query executors
from cachedep.executors import QueryExecutor, SQLiteExecutor

# Manager API
from cachedep.manager import DependencyManager, create_manager
from cachedep.types import Duration
from cachedep.versions import TagVersionStore

# Optional adapter imports - only available when dependencies are installed
with suppress(ImportError):
    from cachedep.adapters import RedisAdapter

__version__ = "0.1.0"

__all__ = [
    "BaselineCaptureError",
    "CacheDependencyError",
    "Dependency",
    "DependencyBuilder",
    "DependencyManager",
    "DependencySettings",
    "Duration",
    "EntryWrapper",
    "InvalidDependencyError",
    "LockAcquisitionTimeout",
    "LockingAdapter",
    "MemoryAdapter",
    "QueryDependency",
    "QueryExecutionError",
    "QueryExecutor",
    "RedisAdapter",
    "SQLiteExecutor",
    "StalenessCheckError",
    "StorageAdapter",
    "TagDependency",
    "TagVersionStore",
    "create_manager",
    "dependency_from_dict",
    "parse_duration",
    "resolve_fail_open",
]
