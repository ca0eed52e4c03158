"""Check whether changed source files come with changed tests."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from primpact.coverage.test_mapper import map_test_files
from primpact.models import ChangedFile, FileCategory, TestCoverageGap, TestCoverageReport

logger = logging.getLogger("primpact.coverage")


async def check_test_coverage(
    root: str | Path,
    changed_files: list[ChangedFile],
) -> TestCoverageReport:
    """Report which changed source files have none of their tests changed.

    A source file counts as covered when any of its existing conventional
    test files is among the changed test files.
    """
    source_files = [f for f in changed_files if f.category == FileCategory.SOURCE]
    changed_tests = {f.path for f in changed_files if f.category == FileCategory.TEST}

    if not source_files:
        return TestCoverageReport(
            changed_source_files=0,
            source_files_with_test_changes=0,
            coverage_ratio=1.0,
            gaps=[],
        )

    gaps = []
    covered = 0
    for source in source_files:
        expected = await asyncio.to_thread(map_test_files, root, source.path)
        if any(t in changed_tests for t in expected):
            covered += 1
            continue
        gaps.append(TestCoverageGap(
            source_file=source.path,
            expected_test_files=expected,
            test_file_exists=bool(expected),
            test_file_changed=False,
        ))

    logger.debug("%d/%d changed source files have test changes", covered, len(source_files))
    return TestCoverageReport(
        changed_source_files=len(source_files),
        source_files_with_test_changes=covered,
        coverage_ratio=covered / len(source_files),
        gaps=gaps,
    )
