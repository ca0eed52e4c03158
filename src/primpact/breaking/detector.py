"""Detect breaking API changes between two refs."""

from __future__ import annotations

import logging

from primpact.breaking.exports import diff_exports, parse_exports
from primpact.breaking.signatures import diff_signatures
from primpact.diff.categorizer import file_extension
from primpact.graph.imports import ReverseDependencyMap
from primpact.models import (
    SEVERITY_BY_TYPE,
    BreakingChange,
    BreakingChangeType,
    ChangedFile,
    ExportedSymbol,
    FileStatus,
)
from primpact.vcs import GitRepo

logger = logging.getLogger("primpact.breaking")

ANALYZABLE_EXTENSIONS = {".ts", ".tsx", ".js", ".jsx"}


def describe_symbol(sym: ExportedSymbol) -> str:
    """Human-readable one-liner, e.g. ``default function foo (a: string): void``."""
    parts = []
    if sym.is_default:
        parts.append("default")
    parts.append(sym.kind.value)
    parts.append(sym.name)
    if sym.signature:
        parts.append(sym.signature)
    return " ".join(parts)


def _change(
    file_path: str,
    change_type: BreakingChangeType,
    before: ExportedSymbol,
    after: ExportedSymbol | None,
    consumers: list[str],
) -> BreakingChange:
    return BreakingChange(
        file_path=file_path,
        type=change_type,
        symbol_name=before.name,
        before=describe_symbol(before),
        after=describe_symbol(after) if after is not None else None,
        severity=SEVERITY_BY_TYPE[change_type],
        consumers=consumers,
    )


def _is_candidate(f: ChangedFile) -> bool:
    return (
        file_extension(f.path) in ANALYZABLE_EXTENSIONS
        and f.status in (FileStatus.MODIFIED, FileStatus.DELETED)
    )


async def detect_breaking_changes(
    repo: GitRepo,
    base: str,
    head: str,
    changed_files: list[ChangedFile],
    reverse_deps: ReverseDependencyMap | None = None,
) -> list[BreakingChange]:
    """Classify removed and altered exports of modified or deleted files.

    Files that cannot be read or compared are skipped. When ``reverse_deps``
    is supplied, each change lists the files importing the changed file.
    """
    changes: list[BreakingChange] = []

    for file in filter(_is_candidate, changed_files):
        try:
            file_changes = await _analyze_file(repo, base, head, file, reverse_deps)
        except Exception as e:
            logger.debug("Skipping %s: %s", file.path, e)
            continue
        changes.extend(file_changes)

    return changes


async def _analyze_file(
    repo: GitRepo,
    base: str,
    head: str,
    file: ChangedFile,
    reverse_deps: ReverseDependencyMap | None,
) -> list[BreakingChange]:
    base_content = await repo.show_or_none(base, file.path)
    if base_content is None:
        return []

    consumers = reverse_deps.dependents(file.path) if reverse_deps is not None else []

    if file.status == FileStatus.DELETED:
        return [
            _change(file.path, BreakingChangeType.REMOVED_EXPORT, sym, None, consumers)
            for sym in parse_exports(base_content, file.path).symbols
        ]

    head_content = await repo.show_or_none(head, file.path)
    if head_content is None:
        return []

    diff = diff_exports(file.path, base_content, head_content)
    if diff.is_empty:
        return []

    changes = [
        _change(file.path, BreakingChangeType.REMOVED_EXPORT, sym, None, consumers)
        for sym in diff.removed
    ]
    for before, after in diff.modified:
        if before.kind != after.kind:
            change_type = BreakingChangeType.CHANGED_TYPE
        else:
            sig_diff = diff_signatures(before.signature, after.signature)
            if not sig_diff.changed:
                continue
            logger.debug("%s:%s %s", file.path, before.name, sig_diff.description)
            change_type = BreakingChangeType.CHANGED_SIGNATURE
        changes.append(_change(file.path, change_type, before, after, consumers))
    return changes
