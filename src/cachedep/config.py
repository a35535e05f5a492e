"""Runtime configuration for cachedep.

Settings are read from ``CACHE_DEPENDENCY_*`` environment variables, falling
back to the defaults below. Pass a ``DependencySettings`` instance to the
manager to override them in code.
"""

from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cachedep.duration import parse_duration


class DependencySettings(BaseSettings):
    """Settings shared by the manager, builders and entry wrappers."""

    model_config = SettingsConfigDict(
        env_prefix="CACHE_DEPENDENCY_",
        case_sensitive=False,
        extra="ignore",
    )

    prefix: str = Field(
        default="cdep", min_length=1, description="Prefix for internal cache keys"
    )
    tag_version_ttl: int = Field(
        default=parse_duration("30d"),
        description=(
            "TTL in ms for tag version counters. Keep it longer than the "
            "longest entry TTL or an expired counter reads as 0 again."
        ),
    )
    lock_wait: int = Field(
        default=parse_duration("5s"),
        description="Max wait in ms for the lock used by fallback increments",
    )

    fail_open: bool | None = Field(
        default=None,
        description="Global fail-open override for every dependency type",
    )
    db_fail_open: bool = Field(
        default=False, description="Fail-open flag for database dependencies"
    )
    db_connection: str | None = Field(
        default=None, description="Default connection for database dependencies"
    )
    db_timeout: float = Field(
        default=5.0, gt=0, description="Query timeout in seconds for executors"
    )

    allow_baseline_failure: bool = Field(
        default=False,
        description="Drop dependencies whose baseline fails instead of raising",
    )
    log_failures: bool = Field(
        default=True, description="Log failed checks, dropped baselines and locks"
    )

    @field_validator("tag_version_ttl", "lock_wait", mode="before")
    @classmethod
    def _parse_duration(cls, value: Any) -> int:
        if isinstance(value, str) and value.strip().isdigit():
            return int(value)
        return parse_duration(value)


__all__ = ["DependencySettings"]
