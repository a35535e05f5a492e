"""Dependency kinds shipped with cachedep."""

from cachedep.dependencies.base import (
    Dependency,
    dependency_from_dict,
    dependency_kinds,
)
from cachedep.dependencies.query import QueryDependency
from cachedep.dependencies.tag import TagDependency, normalize_tags

__all__ = [
    "Dependency",
    "QueryDependency",
    "TagDependency",
    "dependency_from_dict",
    "dependency_kinds",
    "normalize_tags",
]
