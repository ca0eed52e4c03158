"""Tests for breaking change detection against real git history."""

from __future__ import annotations

import logging

import pytest

from primpact.breaking import detector
from primpact.breaking.detector import describe_symbol, detect_breaking_changes
from primpact.breaking.signatures import SignatureDiff
from primpact.graph.imports import build_reverse_dependency_map
from primpact.models import BreakingChangeType, ExportedSymbol, FileStatus, Severity, SymbolKind
from primpact.vcs import GitRepo


class TestDescribeSymbol:
    def test_named_with_signature(self):
        sym = ExportedSymbol(name="foo", kind=SymbolKind.FUNCTION, signature="(a: string): void")
        assert describe_symbol(sym) == "function foo (a: string): void"

    def test_default_without_signature(self):
        sym = ExportedSymbol(name="App", kind=SymbolKind.CLASS, is_default=True)
        assert describe_symbol(sym) == "default class App"


class TestDetectBreakingChanges:
    @pytest.mark.asyncio
    async def test_deleted_file_removes_every_export(self, git_repo, make_changed):
        git_repo.write({"src/lib.ts": "export function foo(a: string): void {}\n"})
        git_repo.commit("base")
        git_repo.checkout("feature", create=True)
        git_repo.delete("src/lib.ts")
        git_repo.commit("delete")

        changes = await detect_breaking_changes(
            GitRepo(git_repo.root), "main", "feature",
            [make_changed("src/lib.ts", FileStatus.DELETED)],
        )

        assert len(changes) == 1
        change = changes[0]
        assert change.type == BreakingChangeType.REMOVED_EXPORT
        assert change.symbol_name == "foo"
        assert change.severity == Severity.HIGH
        assert change.after is None
        assert change.before == "function foo (a: string): void"

    @pytest.mark.asyncio
    async def test_modified_file(self, git_repo, make_changed):
        git_repo.write({
            "src/lib.ts": (
                "export function foo(a: string): void {}\n"
                "export const BAR = 1;\n"
                "export const handler = 2;\n"
            ),
        })
        git_repo.commit("base")
        git_repo.checkout("feature", create=True)
        git_repo.write({
            "src/lib.ts": (
                "export function foo(a: string, b: number): void {}\n"
                "export function handler() {}\n"
                "export const added = 3;\n"
            ),
        })
        git_repo.commit("modify")

        changes = await detect_breaking_changes(
            GitRepo(git_repo.root), "main", "feature", [make_changed("src/lib.ts")],
        )

        summary = [(c.symbol_name, c.type, c.severity) for c in changes]
        assert summary == [
            ("BAR", BreakingChangeType.REMOVED_EXPORT, Severity.HIGH),
            ("foo", BreakingChangeType.CHANGED_SIGNATURE, Severity.MEDIUM),
            ("handler", BreakingChangeType.CHANGED_TYPE, Severity.MEDIUM),
        ]
        foo = changes[1]
        assert foo.before == "function foo (a: string): void"
        assert foo.after == "function foo (a: string, b: number): void"
        assert all(c.consumers == [] for c in changes)

    @pytest.mark.asyncio
    async def test_consumers_from_reverse_dependencies(self, git_repo, make_changed):
        git_repo.write({
            "src/lib.ts": "export function foo() {}\nexport function bar() {}\n",
            "src/app.ts": "import { foo } from './lib';\nfoo();\n",
            "src/other.ts": "export const unrelated = 1;\n",
        })
        git_repo.commit("base")
        git_repo.checkout("feature", create=True)
        git_repo.write({"src/lib.ts": "export function foo() {}\n"})
        git_repo.commit("remove bar")

        reverse = await build_reverse_dependency_map(git_repo.root)
        changes = await detect_breaking_changes(
            GitRepo(git_repo.root), "main", "feature",
            [make_changed("src/lib.ts")], reverse,
        )

        assert [c.symbol_name for c in changes] == ["bar"]
        assert changes[0].consumers == ["src/app.ts"]

    @pytest.mark.asyncio
    async def test_ignores_added_and_non_script_files(self, git_repo, make_changed):
        git_repo.write({"src/keep.py": "def keep():\n    pass\n"})
        git_repo.commit("base")
        git_repo.checkout("feature", create=True)
        git_repo.write({"src/new.ts": "export const x = 1;\n"})
        git_repo.delete("src/keep.py")
        git_repo.commit("change")

        changes = await detect_breaking_changes(
            GitRepo(git_repo.root), "main", "feature",
            [
                make_changed("src/new.ts", FileStatus.ADDED),
                make_changed("src/keep.py", FileStatus.DELETED),
            ],
        )
        assert changes == []

    @pytest.mark.asyncio
    async def test_unreadable_files_are_skipped(self, git_repo, make_changed):
        git_repo.write({"src/lib.ts": "export const a = 1;\n"})
        git_repo.commit("base")

        changes = await detect_breaking_changes(
            GitRepo(git_repo.root), "no-such-ref", "HEAD",
            [make_changed("src/lib.ts"), make_changed("src/missing.ts")],
        )
        assert changes == []

    @pytest.mark.asyncio
    async def test_whitespace_only_change_is_not_breaking(self, git_repo, make_changed):
        git_repo.write({"src/lib.ts": "export function foo(a: string): void {}\n"})
        git_repo.commit("base")
        git_repo.checkout("feature", create=True)
        git_repo.write({"src/lib.ts": "export function foo(a:   string):  void {}\n"})
        git_repo.commit("reformat")

        changes = await detect_breaking_changes(
            GitRepo(git_repo.root), "main", "feature", [make_changed("src/lib.ts")],
        )
        assert changes == []

    @pytest.mark.asyncio
    async def test_signature_details_are_logged(self, git_repo, make_changed, caplog):
        git_repo.write({"src/lib.ts": "export function foo(a: string): void {}\n"})
        git_repo.commit("base")
        git_repo.checkout("feature", create=True)
        git_repo.write({"src/lib.ts": "export function foo(a: string, b: number): void {}\n"})
        git_repo.commit("add parameter")

        caplog.set_level(logging.DEBUG, logger="primpact.breaking")
        changes = await detect_breaking_changes(
            GitRepo(git_repo.root), "main", "feature", [make_changed("src/lib.ts")],
        )

        assert [c.type for c in changes] == [BreakingChangeType.CHANGED_SIGNATURE]
        assert "src/lib.ts:foo parameter count changed from 1 to 2" in caplog.text

    @pytest.mark.asyncio
    async def test_unchanged_signature_is_not_reported(self, git_repo, make_changed, monkeypatch):
        git_repo.write({"src/lib.ts": "export function foo(a: string): void {}\n"})
        git_repo.commit("base")
        git_repo.checkout("feature", create=True)
        git_repo.write({"src/lib.ts": "export function foo(a: string): number {}\n"})
        git_repo.commit("change return")

        monkeypatch.setattr(
            detector, "diff_signatures", lambda before, after: SignatureDiff(changed=False)
        )
        changes = await detect_breaking_changes(
            GitRepo(git_repo.root), "main", "feature", [make_changed("src/lib.ts")],
        )
        assert changes == []
