"""Breaking API change detection."""

from primpact.breaking.detector import detect_breaking_changes
from primpact.breaking.exports import ExportDiff, diff_exports, parse_exports
from primpact.breaking.signatures import SignatureDiff, diff_signatures

__all__ = [
    "ExportDiff",
    "SignatureDiff",
    "detect_breaking_changes",
    "diff_exports",
    "diff_signatures",
    "parse_exports",
]
