"""Import dependency graph and impact analysis."""

from primpact.graph.impact import build_impact_graph
from primpact.graph.imports import (
    DependencyCache,
    ReverseDependencyMap,
    build_reverse_dependency_map,
    extract_import_paths,
    find_consumers,
    find_importers,
    is_relative_import,
    resolve_import,
)

__all__ = [
    "DependencyCache",
    "ReverseDependencyMap",
    "build_impact_graph",
    "build_reverse_dependency_map",
    "extract_import_paths",
    "find_consumers",
    "find_importers",
    "is_relative_import",
    "resolve_import",
]
