"""Aggregate risk factors into a single score and level."""

from __future__ import annotations

import math

from primpact.models import (
    BreakingChange,
    ChangedFile,
    DocStalenessReport,
    ImpactGraph,
    RiskAssessment,
    RiskLevel,
    TestCoverageReport,
)
from primpact.risk.factors import (
    evaluate_breaking_changes,
    evaluate_config_changes,
    evaluate_diff_size,
    evaluate_doc_staleness,
    evaluate_impact_breadth,
    evaluate_untested_changes,
)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, .5 going up (``round`` rounds to even)."""
    return math.floor(value + 0.5)


def score_to_level(score: int) -> RiskLevel:
    """0-25 low, 26-50 medium, 51-75 high, 76+ critical."""
    if score <= 25:
        return RiskLevel.LOW
    if score <= 50:
        return RiskLevel.MEDIUM
    if score <= 75:
        return RiskLevel.HIGH
    return RiskLevel.CRITICAL


def calculate_risk(
    changed_files: list[ChangedFile],
    breaking_changes: list[BreakingChange],
    test_coverage: TestCoverageReport,
    doc_staleness: DocStalenessReport,
    impact_graph: ImpactGraph,
) -> RiskAssessment:
    """Weighted mean of the six factor scores, rounded half-up."""
    factors = [
        evaluate_breaking_changes(breaking_changes),
        evaluate_untested_changes(test_coverage),
        evaluate_diff_size(changed_files),
        evaluate_doc_staleness(doc_staleness),
        evaluate_config_changes(changed_files),
        evaluate_impact_breadth(impact_graph),
    ]

    weighted_sum = math.fsum(f.score * f.weight for f in factors)
    total_weight = math.fsum(f.weight for f in factors)
    score = round_half_up(weighted_sum / total_weight)

    return RiskAssessment(score=score, level=score_to_level(score), factors=factors)
