"""Find documentation lines that mention deleted files, renamed files or
removed exports."""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass

from primpact.config import ScanConfig
from primpact.exceptions import GitError
from primpact.files import collect_files, read_text
from primpact.models import (
    ChangedFile,
    DocStalenessReport,
    FileCategory,
    FileStatus,
    StaleReference,
)
from primpact.vcs import GitRepo

logger = logging.getLogger("primpact.docs")

DOC_PATTERNS = ["*.md", "*.mdx"]

GENERIC_STEMS = {
    "index", "main", "app", "mod", "lib",
    "utils", "helpers", "types", "constants", "config",
}

EXPORT_NAME_RE = re.compile(
    r"export\s+(?:default\s+)?(?:async\s+)?"
    r"(?:function\s*\*?\s*|class\s+|const\s+|let\s+|var\s+|type\s+|interface\s+|enum\s+)"
    r"([A-Za-z_$][A-Za-z0-9_$]*)"
)


@dataclass
class RemovedSymbol:
    name: str
    source_file: str
    pattern: re.Pattern[str]


def extract_export_names(content: str) -> list[str]:
    """Exported declaration names in order of first appearance."""
    return list(dict.fromkeys(m.group(1) for m in EXPORT_NAME_RE.finditer(content)))


def filename_stem(path: str) -> str:
    """Filename up to its first dot: ``src/parser.test.ts`` -> ``parser``."""
    name = path.replace("\\", "/").rsplit("/", 1)[-1]
    return name.split(".", 1)[0]


def _symbol(name: str, source_file: str) -> RemovedSymbol:
    return RemovedSymbol(name, source_file, re.compile(rf"\b{re.escape(name)}\b"))


async def _show(repo: GitRepo, ref: str, path: str) -> str | None:
    try:
        return await repo.show_or_none(ref, path)
    except GitError as e:
        logger.debug("Could not read %s at %s: %s", path, ref, e)
        return None


async def collect_removed_symbols(
    repo: GitRepo,
    changed_files: list[ChangedFile],
    base: str,
    head: str,
) -> list[RemovedSymbol]:
    """Names that disappear with this change set.

    A deleted source file contributes its (non-generic) filename stem and every
    export of its base version; a modified one contributes the exports present
    at ``base`` but gone at ``head``.
    """
    removed: list[RemovedSymbol] = []
    for file in changed_files:
        if file.category != FileCategory.SOURCE:
            continue

        if file.status == FileStatus.DELETED:
            stem = filename_stem(file.path)
            if stem and stem.lower() not in GENERIC_STEMS:
                removed.append(_symbol(stem, file.path))
            base_content = await _show(repo, base, file.path)
            if base_content:
                removed.extend(_symbol(n, file.path) for n in extract_export_names(base_content))

        elif file.status == FileStatus.MODIFIED:
            base_content = await _show(repo, base, file.path)
            if not base_content:
                continue
            head_content = await _show(repo, head, file.path)
            head_names = set(extract_export_names(head_content or ""))
            removed.extend(
                _symbol(n, file.path)
                for n in extract_export_names(base_content)
                if n not in head_names
            )

    return removed


async def _read_doc(repo: GitRepo, rel_path: str, head: str) -> str | None:
    try:
        return await asyncio.to_thread(read_text, repo.root, rel_path)
    except (OSError, UnicodeDecodeError):
        # Not in the working tree, e.g. when another branch is checked out
        return await _show(repo, head, rel_path)


async def check_doc_staleness(
    repo: GitRepo,
    changed_files: list[ChangedFile],
    base: str,
    head: str,
    config: ScanConfig | None = None,
) -> DocStalenessReport:
    """Scan every Markdown file for references made stale by the change set.

    Each line is checked for deleted paths, then old paths of renames, then
    removed symbols (whole-word). Unreadable documents are skipped.
    """
    doc_files = await asyncio.to_thread(collect_files, repo.root, DOC_PATTERNS, config)
    if not doc_files:
        return DocStalenessReport(stale_references=[], checked_files=[])

    deleted = [f.path for f in changed_files if f.status == FileStatus.DELETED]
    renamed = [
        (f.old_path, f.path)
        for f in changed_files
        if f.status == FileStatus.RENAMED and f.old_path
    ]
    removed_symbols = await collect_removed_symbols(repo, changed_files, base, head)

    if not (deleted or renamed or removed_symbols):
        return DocStalenessReport(stale_references=[], checked_files=doc_files)

    stale = []
    for doc_file in doc_files:
        content = await _read_doc(repo, doc_file, head)
        if content is None:
            continue

        for lineno, line in enumerate(content.split("\n"), start=1):
            for path in deleted:
                if path in line:
                    stale.append(StaleReference(
                        doc_file=doc_file,
                        line=lineno,
                        reference=path,
                        reason="referenced file was deleted",
                    ))
            for old_path, new_path in renamed:
                if old_path in line:
                    stale.append(StaleReference(
                        doc_file=doc_file,
                        line=lineno,
                        reference=old_path,
                        reason=f"referenced file was renamed to {new_path}",
                    ))
            for sym in removed_symbols:
                if sym.pattern.search(line):
                    stale.append(StaleReference(
                        doc_file=doc_file,
                        line=lineno,
                        reference=sym.name,
                        reason=f"referenced symbol was removed from {sym.source_file}",
                    ))

    logger.debug("%d stale reference(s) in %d doc file(s)", len(stale), len(doc_files))
    return DocStalenessReport(stale_references=stale, checked_files=doc_files)
