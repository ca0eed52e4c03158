"""Markdown rendering of analysis results.

Produces GitHub-flavored markdown suitable for a PR comment or a file:
  - risk score with the factor table
  - changed files
  - breaking changes
  - test coverage gaps
  - stale documentation references
  - impact graph edges
"""

from __future__ import annotations

from primpact.models import BreakingChange, BreakingChangeType, PRAnalysis

_TYPE_LABELS = {
    BreakingChangeType.REMOVED_EXPORT: "removed export",
    BreakingChangeType.CHANGED_SIGNATURE: "changed signature",
    BreakingChangeType.CHANGED_TYPE: "changed type",
    BreakingChangeType.RENAMED_EXPORT: "renamed export",
}


def format_score(score: float) -> str:
    """``60`` for whole numbers, one decimal otherwise."""
    if float(score).is_integer():
        return str(int(score))
    return f"{score:.1f}"


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def format_markdown(analysis: PRAnalysis) -> str:
    """Render a full analysis as a markdown report."""
    sections: list[str] = []

    # Header
    sections.append("# PR Impact Analysis")
    sections.append("")
    sections.append(f"**Repository:** {analysis.repo_path}")
    sections.append(f"**Comparing:** `{analysis.base_branch}` ← `{analysis.head_branch}`")

    # Risk
    risk = analysis.risk_score
    sections.append("")
    sections.append(f"## Risk Score: {risk.score}/100 ({risk.level.value})")
    sections.append("")
    if risk.factors:
        sections.append("| Factor | Score | Weight |")
        sections.append("|--------|------:|-------:|")
        for factor in risk.factors:
            sections.append(
                f"| {factor.name} | {format_score(factor.score)} | {factor.weight} |"
            )
    else:
        sections.append("No risk factors identified.")

    sections.append("")
    sections.append("## Summary")
    sections.append("")
    sections.append(analysis.summary)

    # Changed files
    sections.append("")
    sections.append(f"## Changed Files ({len(analysis.changed_files)})")
    sections.append("")
    if analysis.changed_files:
        sections.append("| File | Status | +/- | Category |")
        sections.append("|------|--------|-----|----------|")
        for f in analysis.changed_files:
            sections.append(
                f"| {f.path} | {f.status.value} | +{f.additions}/-{f.deletions} "
                f"| {f.category.value} |"
            )
    else:
        sections.append("No files changed.")

    # Breaking changes
    sections.append("")
    sections.append(f"## Breaking Changes ({len(analysis.breaking_changes)})")
    sections.append("")
    if analysis.breaking_changes:
        sections.append("| Symbol | Type | Severity | File |")
        sections.append("|--------|------|----------|------|")
        for bc in analysis.breaking_changes:
            sections.append(
                f"| {bc.symbol_name} | {_TYPE_LABELS[bc.type]} | {bc.severity.value} "
                f"| {bc.file_path} |"
            )
    else:
        sections.append("No breaking changes detected.")

    # Test coverage
    coverage = analysis.test_coverage
    sections.append("")
    sections.append("## Test Coverage")
    sections.append("")
    sections.append(f"- **Changed source files:** {coverage.changed_source_files}")
    sections.append(f"- **Files with test changes:** {coverage.source_files_with_test_changes}")
    sections.append(f"- **Coverage ratio:** {coverage.coverage_ratio:.0%}")
    if coverage.gaps:
        sections.append("")
        sections.append("### Gaps")
        sections.append("")
        for gap in coverage.gaps:
            status = (
                "test file exists but was not changed"
                if gap.test_file_exists
                else "no test file found"
            )
            sections.append(f"- **{gap.source_file}**: {status}")
            for test_file in gap.expected_test_files:
                sections.append(f"  - {test_file}")

    # Documentation
    sections.append("")
    sections.append("## Documentation Staleness")
    sections.append("")
    refs = analysis.doc_staleness.stale_references
    if refs:
        for ref in refs:
            sections.append(
                f"- **{ref.doc_file}** (line {ref.line}): `{ref.reference}`, {ref.reason}"
            )
    else:
        sections.append("No stale references found.")

    # Impact
    graph = analysis.impact_graph
    sections.append("")
    sections.append("## Impact Graph")
    sections.append("")
    sections.append(f"- **Directly changed:** {_plural(len(graph.directly_changed), 'file')}")
    sections.append(
        f"- **Indirectly affected:** {_plural(len(graph.indirectly_affected), 'file')}"
    )
    if graph.edges:
        sections.append("")
        sections.append("### Dependency Edges")
        sections.append("")
        for edge in graph.edges:
            sections.append(f"- {edge.from_} → {edge.to} (`{edge.type}`)")

    sections.append("")
    return "\n".join(sections)


def format_breaking_markdown(changes: list[BreakingChange]) -> str:
    """Render breaking changes as a table with their consumers."""
    lines = ["# Breaking Changes", ""]
    noun = "breaking change" if len(changes) == 1 else "breaking changes"
    lines.append(f"Found **{len(changes)}** {noun}.")
    lines.append("")
    lines.append("| File | Symbol | Type | Severity | Consumers |")
    lines.append("|------|--------|------|----------|-----------|")
    for bc in changes:
        consumers = ", ".join(bc.consumers) if bc.consumers else "none"
        lines.append(
            f"| {bc.file_path} | {bc.symbol_name} | {bc.type.value} "
            f"| {bc.severity.value} | {consumers} |"
        )
    return "\n".join(lines)
