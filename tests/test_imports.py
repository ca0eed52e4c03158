"""Tests for import extraction, resolution and the reverse dependency map."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from primpact.config import ScanConfig
from primpact.graph.imports import (
    DependencyCache,
    ReverseDependencyMap,
    build_reverse_dependency_map,
    extract_import_paths,
    find_consumers,
    find_importers,
    is_relative_import,
    resolve_import,
)

SOURCE = """\
import { a } from './a';
import b from "../b";
import './side-effect';
export { c } from './c';
export * from './d';
import {
  e1,
  e2,
} from './multi';
const e = await import('./e');
const f = require('./f');
import React from 'react';
"""


def _write(root: Path, files: dict[str, str]) -> None:
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)


@pytest.fixture
def project(tmp_path: Path) -> Path:
    _write(tmp_path, {
        "src/lib.ts": "export const x = 1;\n",
        "src/app.ts": "import { x } from './lib';\n",
        "src/ui/view.tsx": "import { x } from '../lib';\nimport { h } from './helpers';\n",
        "src/ui/helpers/index.ts": "export const h = 1;\n",
        "src/cjs.js": "const lib = require('./lib.ts');\n",
        "src/external.ts": "import fs from 'fs';\n",
        "node_modules/pkg/index.js": "require('../../src/lib');\n",
    })
    return tmp_path


class TestExtractImportPaths:
    def test_all_forms(self):
        assert extract_import_paths(SOURCE) == [
            "./a", "../b", "./side-effect", "./c", "./d", "./multi", "react", "./e", "./f",
        ]

    def test_relative(self):
        assert is_relative_import("./a")
        assert is_relative_import("../a")
        assert not is_relative_import("react")
        assert not is_relative_import("/abs/path")


class TestResolveImport:
    FILES = frozenset({"src/lib.ts", "src/ui/index.tsx", "src/data.json", "src/util.js"})

    def test_extension_appended(self):
        assert resolve_import("./lib", "src/app.ts", self.FILES) == "src/lib.ts"

    def test_exact_match(self):
        assert resolve_import("./data.json", "src/app.ts", self.FILES) == "src/data.json"

    def test_index_file(self):
        assert resolve_import("./ui", "src/app.ts", self.FILES) == "src/ui/index.tsx"

    def test_parent_directory(self):
        assert resolve_import("../util", "src/ui/view.ts", self.FILES) == "src/util.js"

    def test_unresolvable(self):
        assert resolve_import("./missing", "src/app.ts", self.FILES) is None

    def test_escaping_root_is_clamped(self):
        assert resolve_import("../../../src/lib", "a/b.ts", self.FILES) == "src/lib.ts"


class TestReverseDependencyMap:
    def test_dependents_in_insertion_order(self):
        reverse = ReverseDependencyMap(["a.ts", "b.ts", "c.ts"])
        reverse.add_import("c.ts", "a.ts")
        reverse.add_import("b.ts", "a.ts")
        assert reverse.dependents("a.ts") == ["c.ts", "b.ts"]
        assert reverse.dependents("b.ts") == []
        assert reverse.dependents("unknown.ts") == []
        assert "a.ts" in reverse
        assert "b.ts" not in reverse
        assert len(reverse) == 1

    @pytest.mark.asyncio
    async def test_build(self, project: Path):
        reverse = await build_reverse_dependency_map(project)

        assert reverse.files == frozenset({
            "src/lib.ts", "src/app.ts", "src/ui/view.tsx",
            "src/ui/helpers/index.ts", "src/cjs.js", "src/external.ts",
        })
        assert set(reverse.dependents("src/lib.ts")) == {"src/app.ts", "src/ui/view.tsx", "src/cjs.js"}
        assert reverse.dependents("src/ui/helpers/index.ts") == ["src/ui/view.tsx"]

    @pytest.mark.asyncio
    async def test_small_batches(self, project: Path):
        reverse = await build_reverse_dependency_map(project, ScanConfig(batch_size=1))
        assert len(reverse.dependents("src/lib.ts")) == 3

    @pytest.mark.asyncio
    async def test_unreadable_file_is_skipped(self, project: Path):
        (project / "src/binary.ts").write_bytes(b"\xff\xfe\x00import './lib';")
        reverse = await build_reverse_dependency_map(project)
        assert "src/binary.ts" not in reverse.dependents("src/lib.ts")

    @pytest.mark.asyncio
    async def test_find_consumers(self, project: Path):
        reverse = await build_reverse_dependency_map(project)
        consumers = find_consumers(["src/ui/helpers/index.ts", "src/app.ts"], reverse)
        assert consumers == {"src/ui/helpers/index.ts": ["src/ui/view.tsx"], "src/app.ts": []}


class TestDependencyCache:
    @pytest.mark.asyncio
    async def test_get_is_cached(self, project: Path):
        cache = DependencyCache()
        first = await cache.get(project)
        second = await cache.get(str(project))
        assert first is second
        assert project in cache

    @pytest.mark.asyncio
    async def test_concurrent_gets_share_one_scan(self, project: Path):
        cache = DependencyCache()
        first, second = await asyncio.gather(cache.get(project), cache.get(project))
        assert first is second

    @pytest.mark.asyncio
    async def test_invalidate(self, project: Path):
        cache = DependencyCache()
        first = await cache.get(project)
        _write(project, {"src/new.ts": "import { x } from './lib';\n"})
        cache.invalidate(project)
        assert project not in cache

        second = await cache.get(project)
        assert second is not first
        assert "src/new.ts" in second.dependents("src/lib.ts")

    @pytest.mark.asyncio
    async def test_invalidate_all(self, project: Path, tmp_path_factory):
        other = tmp_path_factory.mktemp("other")
        cache = DependencyCache()
        await cache.get(project)
        await cache.get(other)
        cache.invalidate()
        assert project not in cache
        assert other not in cache

    @pytest.mark.asyncio
    async def test_separate_repositories(self, project: Path, tmp_path_factory):
        other = tmp_path_factory.mktemp("other")
        _write(other, {"a.ts": "export const a = 1;\n", "b.ts": "import './a';\n"})
        cache = DependencyCache()
        assert await cache.get(other) is not await cache.get(project)
        assert (await cache.get(other)).dependents("a.ts") == ["b.ts"]


class TestFindImporters:
    @pytest.mark.asyncio
    async def test_with_and_without_extension(self, project: Path):
        cache = DependencyCache()
        with_ext = await find_importers(cache, project, "src/lib.ts")
        without_ext = await find_importers(cache, project, "src/lib")
        assert set(with_ext) == set(without_ext) == {"src/app.ts", "src/ui/view.tsx", "src/cjs.js"}

    @pytest.mark.asyncio
    async def test_directory_index(self, project: Path):
        importers = await find_importers(DependencyCache(), project, "src/ui/helpers")
        assert importers == ["src/ui/view.tsx"]

    @pytest.mark.asyncio
    async def test_unknown_module(self, project: Path):
        assert await find_importers(DependencyCache(), project, "src/nope") == []
