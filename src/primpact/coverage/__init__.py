"""Test coverage of a change set."""

from primpact.coverage.checker import check_test_coverage
from primpact.coverage.test_mapper import candidate_test_paths, map_test_files

__all__ = ["candidate_test_paths", "check_test_coverage", "map_test_files"]
