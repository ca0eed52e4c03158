"""Read-only access to a git repository through the ``git`` executable."""

from __future__ import annotations

import asyncio
import logging
import re
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

from primpact.exceptions import (
    FileNotFoundAtRefError,
    GitError,
    RefError,
    RepositoryError,
)

logger = logging.getLogger("primpact.vcs")

_MISSING_PATH_RE = re.compile(
    r"does not exist in|exists on disk, but not in|path '.*' does not exist"
)
_SUMMARY_RE = re.compile(r"^\s*(create|delete|rename|copy) (?:mode \d+ )?(.+?)(?: \(\d+%\))?$")
_QUOTED_PATH_RE = re.compile(r'^"((?:[^"\\]|\\.)*)"$')
_ESCAPE_RE = re.compile(rb"\\([0-7]{3}|.)", re.DOTALL)
_C_ESCAPES = {
    b"a": b"\a",
    b"b": b"\b",
    b"t": b"\t",
    b"n": b"\n",
    b"v": b"\v",
    b"f": b"\f",
    b"r": b"\r",
}


@dataclass
class DiffStatEntry:
    """One line of a per-file diff summary."""

    file: str  # raw path, may use "old => new" notation
    insertions: int = 0
    deletions: int = 0
    binary: bool = False


@dataclass
class DiffSummary:
    """Per-file diff summary between two refs."""

    files: list[DiffStatEntry] = field(default_factory=list)
    created: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    renamed: list[str] = field(default_factory=list)
    copied: list[str] = field(default_factory=list)


@dataclass
class GrepMatch:
    file: str
    line: int
    match: str


def _unescape(match: re.Match[bytes]) -> bytes:
    esc = match.group(1)
    if len(esc) == 3:
        return bytes([int(esc, 8)])
    return _C_ESCAPES.get(esc, esc)


def unquote_path(path: str) -> str:
    """Undo git's C-style quoting of a path such as ``"src/we\\"ird.ts"``.

    ``core.quotepath=off`` keeps non-ASCII names verbatim, but paths with
    quotes, backslashes or control characters are still quoted. Octal
    escapes are raw bytes of the UTF-8 name. Unquoted input is returned as is.
    """
    match = _QUOTED_PATH_RE.match(path)
    if not match:
        return path
    raw = _ESCAPE_RE.sub(_unescape, match.group(1).encode("utf-8"))
    return raw.decode("utf-8", errors="replace")


def parse_diff_summary(output: str) -> DiffSummary:
    """Parse ``git diff --numstat --summary`` output."""
    summary = DiffSummary()
    for line in output.splitlines():
        if not line.strip():
            continue

        parts = line.split("\t", 2)
        if len(parts) == 3:
            added, deleted, path = parts
            binary = added == "-" or deleted == "-"
            summary.files.append(DiffStatEntry(
                file=unquote_path(path),
                insertions=0 if binary else int(added),
                deletions=0 if binary else int(deleted),
                binary=binary,
            ))
            continue

        match = _SUMMARY_RE.match(line)
        if not match:
            continue  # e.g. " mode change 100644 => 100755 path"
        action, path = match.groups()
        path = unquote_path(path)
        if action == "create":
            summary.created.append(path)
        elif action == "delete":
            summary.deleted.append(path)
        elif action == "rename":
            summary.renamed.append(path)
        else:
            summary.copied.append(path)

    return summary


class GitRepo:
    """Thin async facade over the git CLI for a single repository.

    Blocking ``git`` invocations run in a worker thread so that independent
    analyses can share one event loop. Nothing here writes to the repository.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def _run(self, *args: str) -> subprocess.CompletedProcess[str]:
        try:
            return subprocess.run(
                ["git", "-c", "core.quotepath=off", *args],
                cwd=self.root,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except (FileNotFoundError, NotADirectoryError, PermissionError) as e:
            raise GitError(f"Could not run git in {self.root}: {e}") from e

    def _git(self, *args: str) -> str:
        result = self._run(*args)
        if result.returncode != 0:
            raise GitError(
                f"git {' '.join(args)} failed: {result.stderr.strip()}"
            )
        return result.stdout

    async def _call(self, func, *args):
        return await asyncio.to_thread(func, *args)

    async def is_repo(self) -> bool:
        """Check whether the root is inside a git work tree."""
        if not self.root.is_dir():
            return False
        try:
            result = await self._call(self._run, "rev-parse", "--is-inside-work-tree")
        except GitError:
            return False
        return result.returncode == 0 and result.stdout.strip() == "true"

    async def check_is_repo(self) -> None:
        """Raise RepositoryError unless the root is a git work tree."""
        if not await self.is_repo():
            raise RepositoryError(str(self.root))

    async def rev_parse(self, ref: str) -> str:
        """Resolve a ref to a commit hash, raising RefError if it doesn't resolve."""
        result = await self._call(
            self._run, "rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"
        )
        if result.returncode != 0:
            raise RefError(ref, result.stderr.strip())
        return result.stdout.strip()

    async def branches(self) -> list[str]:
        """List local branch names."""
        output = await self._call(
            self._git, "for-each-ref", "--format=%(refname:short)", "refs/heads/"
        )
        return [line.strip() for line in output.splitlines() if line.strip()]

    async def diff_summary(self, base: str, head: str) -> DiffSummary:
        """Per-file insertion/deletion counts plus created/deleted/renamed lists."""
        output = await self._call(
            self._git, "diff", "--numstat", "--summary", "-M", "-C", f"{base}..{head}"
        )
        return parse_diff_summary(output)

    async def show(self, ref: str, path: str) -> str:
        """Return the content of ``path`` at ``ref``.

        Raises FileNotFoundAtRefError when the path does not exist at that ref.
        """
        result = await self._call(self._run, "show", f"{ref}:{path}")
        if result.returncode == 0:
            return result.stdout
        if _MISSING_PATH_RE.search(result.stderr):
            raise FileNotFoundAtRefError(ref, path)
        raise GitError(f"git show {ref}:{path} failed: {result.stderr.strip()}")

    async def show_or_none(self, ref: str, path: str) -> str | None:
        """Like show(), but returns None when the file is absent at ``ref``."""
        try:
            return await self.show(ref, path)
        except FileNotFoundAtRefError:
            logger.debug("%s not present at %s", path, ref)
            return None

    async def grep(self, pattern: str, glob: str | None = None) -> list[GrepMatch]:
        """Search tracked files with ``git grep``.

        No matches yields an empty list; any other failure raises GitError.
        """
        args = ["grep", "-n", "-e", pattern]
        if glob:
            args.extend(["--", glob])
        result = await self._call(self._run, *args)

        # git grep exits 1 when nothing matched
        if result.returncode == 1 and not result.stderr.strip():
            return []
        if result.returncode != 0:
            raise GitError(f"git grep failed: {result.stderr.strip()}")

        matches = []
        for line in result.stdout.splitlines():
            file_path, sep, rest = line.partition(":")
            line_no, sep2, text = rest.partition(":")
            if not sep or not sep2 or not line_no.isdigit():
                continue
            matches.append(GrepMatch(file=file_path, line=int(line_no), match=text))
        return matches
