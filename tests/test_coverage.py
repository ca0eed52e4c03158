"""Tests for test-file mapping and coverage checking."""

from __future__ import annotations

from pathlib import Path

import pytest

from primpact.coverage import candidate_test_paths, check_test_coverage, map_test_files
from primpact.coverage.test_mapper import strip_source_root
from primpact.models import FileStatus


def _touch(root: Path, *paths: str) -> None:
    for rel in paths:
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("// test\n")


class TestStripSourceRoot:
    def test_src(self):
        assert strip_source_root("src/utils/parser.ts") == "utils/parser.ts"

    def test_last_src_wins(self):
        assert strip_source_root("packages/foo/src/a.ts") == "a.ts"

    def test_lib(self):
        assert strip_source_root("lib/core/index.ts") == "core/index.ts"

    def test_src_preferred_over_lib(self):
        assert strip_source_root("src/lib/x.ts") == "lib/x.ts"

    def test_partial_segment_is_not_stripped(self):
        assert strip_source_root("mysrc/a.ts") == "mysrc/a.ts"

    def test_no_source_root(self):
        assert strip_source_root("utils/parser.ts") == "utils/parser.ts"


class TestCandidateTestPaths:
    def test_conventions(self):
        candidates = candidate_test_paths("src/utils/parser.ts")
        assert candidates[0] == "src/utils/parser.test.ts"
        for expected in [
            "src/utils/parser.spec.ts",
            "src/utils/__tests__/parser.ts",
            "src/utils/__tests__/parser.test.ts",
            "test/utils/parser.ts",
            "tests/utils/parser.test.ts",
            "tests/utils/parser.spec.jsx",
            "src/utils/parser.test.js",
        ]:
            assert expected in candidates

    def test_unique(self):
        candidates = candidate_test_paths("parser.ts")
        assert len(candidates) == len(set(candidates))
        assert "parser.test.ts" in candidates
        assert "test/parser.ts" in candidates

    def test_map_test_files_keeps_existing(self, tmp_path: Path):
        _touch(tmp_path, "src/utils/parser.test.ts", "tests/utils/parser.spec.js")
        found = map_test_files(tmp_path, "src/utils/parser.ts")
        assert found == ["src/utils/parser.test.ts", "tests/utils/parser.spec.js"]

    def test_map_test_files_none(self, tmp_path: Path):
        assert map_test_files(tmp_path, "src/a.ts") == []


class TestCheckTestCoverage:
    @pytest.mark.asyncio
    async def test_gaps_and_ratio(self, tmp_path: Path, make_changed):
        _touch(tmp_path, "src/a.ts", "src/a.test.ts", "src/b.ts", "src/__tests__/b.test.ts", "src/c.ts")
        report = await check_test_coverage(tmp_path, [
            make_changed("src/a.ts"),
            make_changed("src/a.test.ts"),
            make_changed("src/b.ts"),
            make_changed("src/c.ts", FileStatus.ADDED),
        ])

        assert report.changed_source_files == 3
        assert report.source_files_with_test_changes == 1
        assert report.coverage_ratio == pytest.approx(1 / 3)

        gaps = {g.source_file: g for g in report.gaps}
        assert set(gaps) == {"src/b.ts", "src/c.ts"}
        assert gaps["src/b.ts"].test_file_exists
        assert gaps["src/b.ts"].expected_test_files == ["src/__tests__/b.test.ts"]
        assert not gaps["src/c.ts"].test_file_exists
        assert gaps["src/c.ts"].expected_test_files == []
        assert not any(g.test_file_changed for g in report.gaps)

    @pytest.mark.asyncio
    async def test_two_of_three_covered(self, tmp_path: Path, make_changed):
        _touch(tmp_path, "src/a.test.ts", "src/b.test.ts")
        report = await check_test_coverage(tmp_path, [
            make_changed("src/a.ts"),
            make_changed("src/b.ts"),
            make_changed("src/c.ts"),
            make_changed("src/a.test.ts"),
            make_changed("src/b.test.ts"),
        ])
        assert round(report.coverage_ratio, 3) == 0.667
        assert [g.source_file for g in report.gaps] == ["src/c.ts"]

    @pytest.mark.asyncio
    async def test_no_source_files(self, tmp_path: Path, make_changed):
        report = await check_test_coverage(tmp_path, [make_changed("README.md")])
        assert report.changed_source_files == 0
        assert report.coverage_ratio == 1.0
        assert report.gaps == []
