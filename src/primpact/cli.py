"""Command-line interface for primpact."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import click

from primpact import __version__
from primpact.exceptions import PrImpactError
from primpact.ui.console import Console

console = Console()
status = Console(stderr=True)

SEVERITY_ORDER = {"low": 0, "medium": 1, "high": 2}


def _run(coro, description: str):
    """Run a coroutine behind a spinner; fatal errors exit with status 2."""
    try:
        with status.progress() as progress:
            progress.add_task(description, total=None)
            return asyncio.run(coro)
    except PrImpactError as e:
        console.error(str(e))
        sys.exit(2)


def _repo_root(repo: str) -> Path:
    root = Path(repo).resolve()
    if not root.exists():
        console.error(f"Path does not exist: {repo}")
        sys.exit(2)
    return root


@click.group()
@click.version_option(version=__version__, prog_name="primpact")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def main(verbose: bool):
    """primpact - pull request impact analysis for git repositories."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(name)s %(levelname)s %(message)s",
        )


@main.command()
@click.argument("base", required=False)
@click.argument("head", required=False)
@click.option(
    "--format", "output_format",
    type=click.Choice(["md", "json"]),
    default="md",
    help="Output format.",
)
@click.option("--output", "-o", default=None, help="Write the report to a file instead of stdout.")
@click.option("--repo", default=".", help="Repository path.")
@click.option("--no-breaking", is_flag=True, help="Skip breaking change analysis.")
@click.option("--no-coverage", is_flag=True, help="Skip test coverage analysis.")
@click.option("--no-docs", is_flag=True, help="Skip doc staleness check.")
def analyze(
    base: str | None,
    head: str | None,
    output_format: str,
    output: str | None,
    repo: str,
    no_breaking: bool,
    no_coverage: bool,
    no_docs: bool,
):
    """Run the full impact analysis of HEAD (or HEAD arg) against BASE.

    BASE defaults to main or master, whichever exists.
    """
    from primpact.analyzer import analyze_pr
    from primpact.config import AnalysisOptions
    from primpact.report import format_json, format_markdown

    options = AnalysisOptions(
        repo_path=str(_repo_root(repo)),
        base_branch=base,
        head_branch=head,
        skip_breaking=no_breaking,
        skip_coverage=no_coverage,
        skip_docs=no_docs,
    )
    analysis = _run(analyze_pr(options), "Analyzing PR impact...")

    report = format_json(analysis) if output_format == "json" else format_markdown(analysis)
    if output:
        Path(output).write_text(report + "\n", encoding="utf-8")
        console.success(f"Report written to {output}")
    else:
        click.echo(report)


@main.command()
@click.argument("base", required=False)
@click.argument("head", required=False)
@click.option(
    "--severity",
    type=click.Choice(list(SEVERITY_ORDER)),
    default="low",
    help="Minimum severity to report.",
)
@click.option(
    "--format", "output_format",
    type=click.Choice(["md", "json", "text"]),
    default="md",
    help="Output format.",
)
@click.option("--repo", default=".", help="Repository path.")
def breaking(base: str | None, head: str | None, severity: str, output_format: str, repo: str):
    """Detect breaking API changes. Exits 1 if any are found at SEVERITY or above."""
    from primpact.report import format_breaking_markdown, format_json

    root = _repo_root(repo)
    changes = _run(_detect_breaking(root, base, head), "Detecting breaking changes...")

    threshold = SEVERITY_ORDER[severity]
    filtered = [c for c in changes if SEVERITY_ORDER[c.severity.value] >= threshold]

    if not filtered:
        console.success(f"No breaking changes detected at severity >= {severity}")
        return

    if output_format == "json":
        click.echo(format_json(filtered))
    elif output_format == "md":
        click.echo(format_breaking_markdown(filtered))
    else:
        console.show_breaking(filtered)
    sys.exit(1)


async def _detect_breaking(root: Path, base: str | None, head: str | None):
    from primpact.analyzer import DEFAULT_HEAD, resolve_default_base_branch
    from primpact.breaking import detect_breaking_changes
    from primpact.config import load_config
    from primpact.diff import parse_diff
    from primpact.graph import DependencyCache
    from primpact.vcs import GitRepo

    git = GitRepo(root)
    await git.check_is_repo()
    base = base or await resolve_default_base_branch(git)
    head = head or DEFAULT_HEAD
    await git.rev_parse(base)
    await git.rev_parse(head)

    config = load_config(root)
    changed_files = await parse_diff(git, base, head)
    reverse_deps = await DependencyCache(config.scan).get(root)
    return await detect_breaking_changes(git, base, head, changed_files, reverse_deps)


@main.command()
@click.argument("file", required=False)
@click.option("--depth", type=click.IntRange(min=0), default=None, help="Max dependency depth.")
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json", "dot"]),
    default="text",
    help="Output format.",
)
@click.option("--repo", default=".", help="Repository path.")
def impact(file: str | None, depth: int | None, output_format: str, repo: str):
    """Show which files are affected, through imports, by the current changes.

    With FILE, trace the impact of that single file instead of the diff
    between the default branch and HEAD.
    """
    from primpact.report import format_dot, format_json

    root = _repo_root(repo)
    graph = _run(_build_impact(root, file, depth), "Building impact graph...")

    if output_format == "json":
        click.echo(format_json(graph))
    elif output_format == "dot":
        click.echo(format_dot(graph))
    else:
        console.show_impact(graph)


async def _build_impact(root: Path, file: str | None, depth: int | None):
    from primpact.analyzer import DEFAULT_HEAD, resolve_default_base_branch
    from primpact.config import load_config
    from primpact.diff import detect_language, parse_diff
    from primpact.graph import build_impact_graph
    from primpact.models import ChangedFile, FileCategory, FileStatus
    from primpact.vcs import GitRepo

    config = load_config(root)
    if depth is None:
        depth = config.impact.max_depth

    if file:
        path = Path(file).as_posix()
        changed_files = [ChangedFile(
            path=path,
            status=FileStatus.MODIFIED,
            language=detect_language(path),
            category=FileCategory.SOURCE,
        )]
    else:
        git = GitRepo(root)
        await git.check_is_repo()
        base = await resolve_default_base_branch(git)
        await git.rev_parse(base)
        changed_files = await parse_diff(git, base, DEFAULT_HEAD)

    return await build_impact_graph(root, changed_files, max_depth=depth, config=config.scan)


@main.command()
@click.argument("base", required=False)
@click.argument("head", required=False)
@click.option("--threshold", type=float, default=None, help="Exit 1 if the score is at or above this.")
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format.",
)
@click.option("--repo", default=".", help="Repository path.")
def risk(base: str | None, head: str | None, threshold: float | None, output_format: str, repo: str):
    """Calculate the weighted risk score of the changes."""
    from primpact.analyzer import analyze_pr
    from primpact.config import AnalysisOptions
    from primpact.report import format_json

    options = AnalysisOptions(repo_path=str(_repo_root(repo)), base_branch=base, head_branch=head)
    analysis = _run(analyze_pr(options), "Calculating risk score...")
    assessment = analysis.risk_score

    if output_format == "json":
        click.echo(format_json(assessment))
    else:
        console.show_risk(assessment)

    if threshold is not None and assessment.score >= threshold:
        console.warning(
            f"Risk score {assessment.score} meets or exceeds threshold {threshold:g}"
        )
        sys.exit(1)


if __name__ == "__main__":
    main()
