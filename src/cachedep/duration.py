"""Duration parsing utilities."""

import re
from datetime import timedelta

from cachedep.types import Duration

_DURATION_PATTERN = re.compile(r"^(\d+)(ms|s|m|h|d)$")
_UNITS: dict[str, int] = {
    "ms": 1,
    "s": 1000,
    "m": 60_000,
    "h": 3_600_000,
    "d": 86_400_000,
}


def parse_duration(duration: Duration) -> int:
    """Parse a duration to milliseconds.

    Accepts "30s"-style strings, ``timedelta`` objects, or an int which is
    taken as milliseconds already.
    """
    if isinstance(duration, bool):
        raise ValueError(f"Invalid duration: {duration!r}")
    if isinstance(duration, int):
        if duration < 0:
            raise ValueError(f"Invalid duration: {duration!r}")
        return duration
    if isinstance(duration, timedelta):
        return int(duration.total_seconds() * 1000)

    match = _DURATION_PATTERN.match(duration.strip())
    if not match:
        raise ValueError(f"Invalid duration: {duration!r}")

    value, unit = match.groups()
    return int(value) * _UNITS[unit]


def parse_ttl(ttl: Duration | None) -> int | None:
    """Parse an optional TTL. ``None`` means the entry never expires."""
    if ttl is None:
        return None
    return parse_duration(ttl)
