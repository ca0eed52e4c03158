"""Shared test fixtures for primpact."""

from __future__ import annotations

import shutil
import subprocess
import textwrap
from pathlib import Path
from typing import Mapping

import pytest

from primpact.models import ChangedFile, FileStatus
from primpact.diff.categorizer import categorize
from primpact.diff.parser import detect_language


class GitRepoBuilder:
    """Writes files into a throwaway git repository and commits them."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)
        self.git("init", "-q")
        self.git("symbolic-ref", "HEAD", "refs/heads/main")
        self.git("config", "user.email", "dev@example.com")
        self.git("config", "user.name", "Dev")
        self.git("config", "commit.gpgsign", "false")

    def git(self, *args: str) -> str:
        result = subprocess.run(
            ["git", *args],
            cwd=self.root,
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout

    def write(self, files: Mapping[str, str]) -> None:
        """Write ``path -> contents`` entries into the working tree."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")

    def delete(self, *paths: str) -> None:
        for relative in paths:
            (self.root / relative).unlink()

    def move(self, old: str, new: str) -> None:
        (self.root / new).parent.mkdir(parents=True, exist_ok=True)
        self.git("mv", old, new)

    def commit(self, message: str = "change") -> str:
        self.git("add", "-A")
        self.git("commit", "-q", "-m", message)
        return self.git("rev-parse", "HEAD").strip()

    def checkout(self, branch: str, create: bool = False) -> None:
        if create:
            self.git("checkout", "-q", "-b", branch)
        else:
            self.git("checkout", "-q", branch)


@pytest.fixture
def git_repo(tmp_path: Path) -> GitRepoBuilder:
    """An empty git repository whose initial branch is ``main``."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")
    return GitRepoBuilder(tmp_path / "repo")


@pytest.fixture
def make_changed():
    """Factory for ChangedFile records categorized the way the diff parser would."""

    def _make(path: str, status: FileStatus = FileStatus.MODIFIED, **kwargs) -> ChangedFile:
        return ChangedFile(
            path=path,
            status=status,
            language=detect_language(path),
            category=categorize(path),
            **kwargs,
        )

    return _make
