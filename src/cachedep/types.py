"""Core types for the cachedep library."""

from collections.abc import Mapping
from datetime import timedelta
from typing import Any

# "30s", "5m", "2h", "1d", a timedelta, or milliseconds
Duration = str | int | timedelta

# Whatever a dependency captured at write time; must survive a JSON round trip
Baseline = Any

# One result row from a query executor
Row = Mapping[str, Any]

# Distinguishes "no fresh entry" from a cached None
MISSING: Any = object()
