"""End-to-end analysis of the changes between two refs."""

from __future__ import annotations

import asyncio
import logging

from primpact.breaking.detector import detect_breaking_changes
from primpact.config import AnalysisOptions, ProjectConfig, load_config
from primpact.coverage.checker import check_test_coverage
from primpact.docs.staleness import check_doc_staleness
from primpact.diff.parser import parse_diff
from primpact.graph.impact import build_impact_graph
from primpact.graph.imports import DependencyCache
from primpact.models import (
    BreakingChange,
    ChangedFile,
    DocStalenessReport,
    PRAnalysis,
    RiskAssessment,
    TestCoverageReport,
)
from primpact.risk.model import calculate_risk
from primpact.vcs import GitRepo

logger = logging.getLogger("primpact.analyzer")

DEFAULT_BASE_CANDIDATES = ("main", "master")
DEFAULT_HEAD = "HEAD"


async def resolve_default_base_branch(repo: GitRepo) -> str:
    """``main`` or ``master``, whichever exists locally; ``main`` if neither."""
    branches = set(await repo.branches())
    for candidate in DEFAULT_BASE_CANDIDATES:
        if candidate in branches:
            return candidate
    return DEFAULT_BASE_CANDIDATES[0]


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def generate_summary(
    changed_files: list[ChangedFile],
    breaking_changes: list[BreakingChange],
    test_coverage: TestCoverageReport,
    risk: RiskAssessment,
) -> str:
    additions = sum(f.additions for f in changed_files)
    deletions = sum(f.deletions for f in changed_files)

    parts = [
        f"This PR changes {_plural(len(changed_files), 'file')} "
        f"(+{additions}/-{deletions}) with a {risk.level.value} risk score of {risk.score}/100."
    ]
    if breaking_changes:
        parts.append(
            f"Found {_plural(len(breaking_changes), 'breaking change')} affecting exported APIs."
        )
    gaps = len(test_coverage.gaps)
    if gaps:
        verb = "lacks" if gaps == 1 else "lack"
        parts.append(
            f"{_plural(gaps, 'source file')} {verb} corresponding test changes."
        )
    return " ".join(parts)


async def analyze_pr(
    options: AnalysisOptions,
    config: ProjectConfig | None = None,
    cache: DependencyCache | None = None,
) -> PRAnalysis:
    """Run every analysis over ``base..head`` and assemble the result.

    The repository and both refs are validated before anything else runs;
    GitError subclasses propagate to the caller. Breaking-change detection,
    test coverage, doc staleness and the impact graph run concurrently and
    share one reverse-dependency scan. Any of the first three can be skipped,
    in which case a neutral empty result takes its place.
    """
    repo = GitRepo(options.repo_path)
    await repo.check_is_repo()

    base = options.base_branch or await resolve_default_base_branch(repo)
    head = options.head_branch or DEFAULT_HEAD
    await repo.rev_parse(base)
    await repo.rev_parse(head)

    if config is None:
        config = load_config(repo.root)
    if cache is None:
        cache = DependencyCache(config.scan)

    logger.info("Analyzing %s..%s in %s", base, head, repo.root)
    changed_files = await parse_diff(repo, base, head)

    async def breaking() -> list[BreakingChange]:
        if options.skip_breaking:
            return []
        reverse_deps = await cache.get(repo.root)
        return await detect_breaking_changes(repo, base, head, changed_files, reverse_deps)

    async def coverage() -> TestCoverageReport:
        if options.skip_coverage:
            return TestCoverageReport(
                changed_source_files=0,
                source_files_with_test_changes=0,
                coverage_ratio=0.0,
                gaps=[],
            )
        return await check_test_coverage(repo.root, changed_files)

    async def docs() -> DocStalenessReport:
        if options.skip_docs:
            return DocStalenessReport(stale_references=[], checked_files=[])
        return await check_doc_staleness(repo, changed_files, base, head, config.scan)

    async def impact():
        reverse_deps = await cache.get(repo.root)
        return await build_impact_graph(
            repo.root,
            changed_files,
            max_depth=config.impact.max_depth,
            reverse_deps=reverse_deps,
        )

    breaking_changes, test_coverage, doc_staleness, impact_graph = await asyncio.gather(
        breaking(), coverage(), docs(), impact()
    )

    risk = calculate_risk(
        changed_files, breaking_changes, test_coverage, doc_staleness, impact_graph
    )
    logger.info("Risk score %d (%s)", risk.score, risk.level.value)

    return PRAnalysis(
        repo_path=options.repo_path,
        base_branch=base,
        head_branch=head,
        changed_files=changed_files,
        breaking_changes=breaking_changes,
        test_coverage=test_coverage,
        doc_staleness=doc_staleness,
        impact_graph=impact_graph,
        risk_score=risk,
        summary=generate_summary(changed_files, breaking_changes, test_coverage, risk),
    )
