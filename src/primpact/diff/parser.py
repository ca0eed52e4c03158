"""Turn a git diff summary into categorized ChangedFile records."""

from __future__ import annotations

import logging
import re

from primpact.diff.categorizer import categorize, file_extension
from primpact.models import ChangedFile, FileStatus
from primpact.vcs import GitRepo, unquote_path

logger = logging.getLogger("primpact.diff")

EXTENSION_LANGUAGE_MAP: dict[str, str] = {
    ".ts": "typescript",
    ".tsx": "typescript",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".py": "python",
    ".go": "go",
    ".rs": "rust",
    ".java": "java",
    ".c": "c",
    ".cpp": "cpp",
    ".h": "c",
    ".hpp": "cpp",
    ".rb": "ruby",
    ".php": "php",
    ".swift": "swift",
    ".kt": "kotlin",
    ".scala": "scala",
    ".cs": "csharp",
    ".vue": "vue",
    ".svelte": "svelte",
    ".md": "markdown",
    ".mdx": "markdown",
    ".json": "json",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".toml": "toml",
    ".xml": "xml",
    ".html": "html",
    ".css": "css",
    ".scss": "scss",
    ".less": "less",
    ".sql": "sql",
    ".sh": "shell",
    ".bash": "shell",
    ".zsh": "shell",
    ".dockerfile": "dockerfile",
    ".graphql": "graphql",
    ".gql": "graphql",
    ".proto": "protobuf",
    ".txt": "text",
    ".rst": "restructuredtext",
}

SPECIAL_FILENAMES = {
    "dockerfile": "dockerfile",
    "makefile": "makefile",
}

_BRACE_RENAME_RE = re.compile(r"^(.*?)\{(.*?) => (.*?)\}(.*)$")
_SIMPLE_RENAME_RE = re.compile(r"^(.+?) => (.+?)$")


def detect_language(file_path: str) -> str:
    """Detect the language tag of a file from its name or extension."""
    filename = file_path.replace("\\", "/").rsplit("/", 1)[-1].lower()
    if filename in SPECIAL_FILENAMES:
        return SPECIAL_FILENAMES[filename]
    return EXTENSION_LANGUAGE_MAP.get(file_extension(filename), "unknown")


def resolve_file_path(raw: str) -> tuple[str, str | None]:
    """Split a diff path into (new_path, old_path).

    Handles ``dir/{old.ts => new.ts}``, ``{old => new}/file.ts`` and
    ``old.ts => new.ts``, whose sides git quotes separately when needed.
    ``old_path`` is None when there is no rename.
    """
    match = _BRACE_RENAME_RE.match(raw)
    if match:
        prefix, old_part, new_part, suffix = match.groups()
        old_path = re.sub(r"/{2,}", "/", f"{prefix}{old_part}{suffix}")
        new_path = re.sub(r"/{2,}", "/", f"{prefix}{new_part}{suffix}")
        return new_path, old_path

    match = _SIMPLE_RENAME_RE.match(raw)
    if match:
        return unquote_path(match.group(2)), unquote_path(match.group(1))

    return raw, None


def _determine_status(
    raw: str,
    created: set[str],
    deleted: set[str],
    renamed: set[str],
    copied: set[str],
) -> FileStatus:
    if raw in created:
        return FileStatus.ADDED
    if raw in deleted:
        return FileStatus.DELETED
    if raw in renamed:
        return FileStatus.RENAMED
    if raw in copied:
        return FileStatus.COPIED
    return FileStatus.MODIFIED


async def parse_diff(repo: GitRepo, base: str, head: str) -> list[ChangedFile]:
    """List the files changed between ``base`` and ``head``."""
    summary = await repo.diff_summary(base, head)

    created = set(summary.created)
    deleted = set(summary.deleted)
    renamed = set(summary.renamed)
    copied = set(summary.copied)

    changed_files = []
    for entry in summary.files:
        new_path, old_path = resolve_file_path(entry.file)
        status = _determine_status(entry.file, created, deleted, renamed, copied)

        # A rename arrow that the summary didn't flag is still a rename
        if status == FileStatus.MODIFIED and old_path:
            status = FileStatus.RENAMED

        changed_files.append(ChangedFile(
            path=new_path,
            old_path=old_path,
            status=status,
            additions=entry.insertions,
            deletions=entry.deletions,
            language=detect_language(new_path),
            category=categorize(new_path),
        ))

    logger.debug("%d file(s) changed between %s and %s", len(changed_files), base, head)
    return changed_files
