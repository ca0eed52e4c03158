"""Machine-readable renderings: JSON and Graphviz DOT."""

from __future__ import annotations

import json
from collections.abc import Sequence

from pydantic import BaseModel

from primpact.models import ImpactGraph


def format_json(data: BaseModel | Sequence[BaseModel]) -> str:
    """Pretty-printed JSON with camelCase keys, for one record or a list of them."""
    if isinstance(data, BaseModel):
        return data.model_dump_json(by_alias=True, indent=2)
    return json.dumps(
        [item.model_dump(mode="json", by_alias=True) for item in data],
        indent=2,
    )


def _quote(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def format_dot(graph: ImpactGraph) -> str:
    """Graphviz digraph: changed files in red, affected files in yellow."""
    lines = [
        "digraph impact {",
        "  rankdir=LR;",
        "  node [shape=box, style=filled];",
        "",
    ]
    for path in graph.directly_changed:
        lines.append(f'  {_quote(path)} [fillcolor="#ff6b6b", fontcolor="white"];')
    for path in graph.indirectly_affected:
        lines.append(f'  {_quote(path)} [fillcolor="#ffd93d"];')
    lines.append("")
    for edge in graph.edges:
        lines.append(f"  {_quote(edge.from_)} -> {_quote(edge.to)} [label={_quote(edge.type)}];")
    lines.append("}")
    return "\n".join(lines)
