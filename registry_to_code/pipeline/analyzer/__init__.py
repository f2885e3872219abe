"""
Analyzer module.

Contains dependency analysis, registry validation and known-set tracking.
"""

from __future__ import annotations

from .dependencies import (
    all_references,
    best_effort_topological_sort,
    container_formats,
    get_dependency_map,
    hard_references,
)
from .known_types import KnownTypes
from .validation import ordered_variants, validate_registry

__all__ = [
    "KnownTypes",
    "all_references",
    "best_effort_topological_sort",
    "container_formats",
    "get_dependency_map",
    "hard_references",
    "ordered_variants",
    "validate_registry",
]
