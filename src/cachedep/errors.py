"""Exceptions raised by cachedep."""


class CacheDependencyError(Exception):
    """Base class for every cachedep error."""


class InvalidDependencyError(CacheDependencyError):
    """A dependency was built from invalid input or an unknown persisted kind."""


class QueryExecutionError(CacheDependencyError):
    """Running a dependency query failed."""


class BaselineCaptureError(CacheDependencyError):
    """A dependency could not capture its baseline at write time."""

    def __init__(self, dependency: object, message: str) -> None:
        super().__init__(message)
        self.dependency = dependency


class StalenessCheckError(CacheDependencyError):
    """A dependency could not be checked against its baseline at read time."""

    def __init__(self, dependency: object, message: str) -> None:
        super().__init__(message)
        self.dependency = dependency


class LockAcquisitionTimeout(CacheDependencyError):
    """The advisory lock guarding a fallback counter update was not acquired."""

    def __init__(self, name: str, wait_ms: int) -> None:
        super().__init__(f"Could not acquire lock {name!r} within {wait_ms}ms")
        self.name = name
        self.wait_ms = wait_ms


__all__ = [
    "BaselineCaptureError",
    "CacheDependencyError",
    "InvalidDependencyError",
    "LockAcquisitionTimeout",
    "QueryExecutionError",
    "StalenessCheckError",
]
