"""Diff parsing and file categorization."""

from primpact.diff.categorizer import categorize
from primpact.diff.parser import detect_language, parse_diff, resolve_file_path

__all__ = ["categorize", "detect_language", "parse_diff", "resolve_file_path"]
