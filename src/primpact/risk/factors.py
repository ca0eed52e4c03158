"""The six weighted risk factors.

Each evaluator maps one analysis result to a score in [0, 100] with a fixed
weight; the weights sum to 1.0.
"""

from __future__ import annotations

import re

from primpact.models import (
    BreakingChange,
    ChangedFile,
    DocStalenessReport,
    FileCategory,
    ImpactGraph,
    RiskFactor,
    Severity,
    TestCoverageReport,
)

BREAKING_WEIGHT = 0.30
UNTESTED_WEIGHT = 0.25
DIFF_SIZE_WEIGHT = 0.15
DOC_STALENESS_WEIGHT = 0.10
CONFIG_WEIGHT = 0.10
IMPACT_WEIGHT = 0.10

MAX_IMPACT_DETAILS = 20

CI_BUILD_CONFIG_PATTERNS = [
    re.compile(r"^\.github/"),
    re.compile(r"Dockerfile", re.IGNORECASE),
    re.compile(r"docker-compose", re.IGNORECASE),
    re.compile(r"webpack\.config"),
    re.compile(r"vite\.config"),
    re.compile(r"rollup\.config"),
    re.compile(r"esbuild\.config"),
    re.compile(r"turbo\.json$"),
    re.compile(r"\.gitlab-ci"),
    re.compile(r"Jenkinsfile", re.IGNORECASE),
    re.compile(r"\.circleci/"),
]


def evaluate_breaking_changes(breaking_changes: list[BreakingChange]) -> RiskFactor:
    """100 with any high-severity change, 60 with any medium, 30 otherwise."""
    if not breaking_changes:
        return RiskFactor(
            name="Breaking changes",
            score=0,
            weight=BREAKING_WEIGHT,
            description="No breaking API changes detected.",
        )

    severities = {bc.severity for bc in breaking_changes}
    if Severity.HIGH in severities:
        score = 100
    elif Severity.MEDIUM in severities:
        score = 60
    else:
        score = 30

    return RiskFactor(
        name="Breaking changes",
        score=score,
        weight=BREAKING_WEIGHT,
        description=f"{len(breaking_changes)} breaking change(s) detected.",
        details=[
            f'{bc.type.value} of "{bc.symbol_name}" in {bc.file_path} ({bc.severity.value})'
            for bc in breaking_changes
        ],
    )


def evaluate_untested_changes(coverage: TestCoverageReport) -> RiskFactor:
    """Share of changed source files without test changes, as a percentage."""
    if coverage.changed_source_files == 0:
        score = 0.0
        description = "No source files changed."
    else:
        score = (1 - coverage.coverage_ratio) * 100
        description = (
            f"{coverage.source_files_with_test_changes}/{coverage.changed_source_files} "
            "changed source files have corresponding test changes."
        )

    details = [
        f"{gap.source_file}: "
        + ("test exists but not updated" if gap.test_file_exists else "no test file found")
        for gap in coverage.gaps
    ]

    return RiskFactor(
        name="Untested changes",
        score=score,
        weight=UNTESTED_WEIGHT,
        description=description,
        details=details or None,
    )


def diff_size_score(total_lines: int) -> int:
    if total_lines >= 1000:
        return 100
    if total_lines >= 500:
        return 80
    if total_lines >= 100:
        return 50
    return 0


def evaluate_diff_size(changed_files: list[ChangedFile]) -> RiskFactor:
    total_lines = sum(f.additions + f.deletions for f in changed_files)
    return RiskFactor(
        name="Diff size",
        score=diff_size_score(total_lines),
        weight=DIFF_SIZE_WEIGHT,
        description=(
            f"{total_lines} total lines changed across {len(changed_files)} file(s)."
        ),
    )


def evaluate_doc_staleness(staleness: DocStalenessReport) -> RiskFactor:
    """20 points per stale reference, capped at 100."""
    refs = staleness.stale_references
    if not refs:
        description = "No stale documentation references found."
    else:
        description = f"{len(refs)} stale documentation reference(s) found."

    return RiskFactor(
        name="Stale documentation",
        score=min(len(refs) * 20, 100),
        weight=DOC_STALENESS_WEIGHT,
        description=description,
        details=[
            f'{ref.doc_file}:{ref.line} - "{ref.reference}" ({ref.reason})' for ref in refs
        ] or None,
    )


def is_ci_build_config(path: str) -> bool:
    return any(p.search(path) for p in CI_BUILD_CONFIG_PATTERNS)


def evaluate_config_changes(changed_files: list[ChangedFile]) -> RiskFactor:
    """100 when CI/build configuration changed, 50 for any other config file."""
    config_files = [f for f in changed_files if f.category == FileCategory.CONFIG]
    if not config_files:
        return RiskFactor(
            name="Config file changes",
            score=0,
            weight=CONFIG_WEIGHT,
            description="No configuration files changed.",
        )

    if any(is_ci_build_config(f.path) for f in config_files):
        score = 100
        description = f"CI/build configuration changed ({len(config_files)} config file(s))."
    else:
        score = 50
        description = f"{len(config_files)} configuration file(s) changed."

    return RiskFactor(
        name="Config file changes",
        score=score,
        weight=CONFIG_WEIGHT,
        description=description,
        details=[f.path for f in config_files],
    )


def evaluate_impact_breadth(impact: ImpactGraph) -> RiskFactor:
    """10 points per indirectly affected file, capped at 100."""
    count = len(impact.indirectly_affected)
    if count == 0:
        description = "No indirectly affected files detected."
    else:
        description = f"{count} file(s) indirectly affected through import dependencies."

    return RiskFactor(
        name="Impact breadth",
        score=min(count * 10, 100),
        weight=IMPACT_WEIGHT,
        description=description,
        details=impact.indirectly_affected[:MAX_IMPACT_DETAILS] or None,
    )
