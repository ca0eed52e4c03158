"""Risk scoring."""

from primpact.risk.model import calculate_risk, round_half_up, score_to_level

__all__ = ["calculate_risk", "round_half_up", "score_to_level"]
