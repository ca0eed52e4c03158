"""Working-tree file discovery and reading."""

from __future__ import annotations

import fnmatch
import os
from pathlib import Path

from primpact.config import ScanConfig


def collect_files(
    root: str | Path,
    patterns: list[str],
    config: ScanConfig | None = None,
) -> list[str]:
    """Collect repo-relative POSIX paths whose filename matches any pattern.

    Directories and files matching ``config.exclude_patterns`` are skipped.
    """
    root = Path(root).resolve()
    if config is None:
        config = ScanConfig()
    exclude = config.exclude_patterns

    files = []
    for dirpath, dirnames, filenames in os.walk(root):
        rel_dir = os.path.relpath(dirpath, root)

        # Filter out excluded directories
        dirnames[:] = [
            d
            for d in dirnames
            if not _should_exclude(os.path.join(rel_dir, d) if rel_dir != "." else d, exclude)
        ]

        for filename in filenames:
            if not any(fnmatch.fnmatch(filename, p) for p in patterns):
                continue
            rel_path = os.path.join(rel_dir, filename) if rel_dir != "." else filename
            if _should_exclude(rel_path, exclude):
                continue
            files.append(Path(rel_path).as_posix())

    return sorted(files)


def read_text(root: str | Path, rel_path: str) -> str:
    """Read a working-tree file as UTF-8 text.

    Raises OSError if the file is unreadable, UnicodeDecodeError if it isn't text.
    """
    return (Path(root) / rel_path).read_text(encoding="utf-8")


def _should_exclude(path: str, patterns: list[str]) -> bool:
    """Check if a path matches any exclusion pattern."""
    path_parts = Path(path).parts
    for pattern in patterns:
        if fnmatch.fnmatch(path, pattern):
            return True
        for part in path_parts:
            if fnmatch.fnmatch(part, pattern):
                return True
    return False
