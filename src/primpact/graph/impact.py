"""Blast radius of a change set through reverse import dependencies."""

from __future__ import annotations

from pathlib import Path

from primpact.config import ScanConfig
from primpact.graph.imports import ReverseDependencyMap, build_reverse_dependency_map
from primpact.models import ChangedFile, FileCategory, ImpactEdge, ImpactGraph


async def build_impact_graph(
    root: str | Path,
    changed_files: list[ChangedFile],
    max_depth: int = 3,
    reverse_deps: ReverseDependencyMap | None = None,
    config: ScanConfig | None = None,
) -> ImpactGraph:
    """Find files that transitively import the changed source files.

    Breadth-first over the reverse dependency map for at most ``max_depth``
    hops. A file is expanded only the first time it is reached, but every
    traversed edge is recorded, including edges into already-visited files.
    When ``reverse_deps`` is given the repository scan is skipped.
    """
    if reverse_deps is None:
        reverse_deps = await build_reverse_dependency_map(root, config)

    directly_changed = [f.path for f in changed_files if f.category == FileCategory.SOURCE]
    directly_changed_set = set(directly_changed)

    visited = set(directly_changed)
    reached_order: list[str] = []
    edges: list[ImpactEdge] = []
    frontier = list(directly_changed)

    depth = 0
    while depth < max_depth and frontier:
        next_frontier = []
        for file_path in frontier:
            for dependent in reverse_deps.dependents(file_path):
                edges.append(ImpactEdge(from_=dependent, to=file_path))
                if dependent not in visited:
                    visited.add(dependent)
                    reached_order.append(dependent)
                    next_frontier.append(dependent)
        frontier = next_frontier
        depth += 1

    indirectly_affected = [f for f in reached_order if f not in directly_changed_set]

    return ImpactGraph(
        directly_changed=directly_changed,
        indirectly_affected=indirectly_affected,
        edges=edges,
    )
