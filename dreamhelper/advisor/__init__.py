"""
Advisor module - Lotus recommendations.

Provides:
- UserWeights: What the player values
- StateEvaluator: Values vision states
- LotusScorer: Marginal value of a lotus (deterministic or Monte Carlo)
- LotusRanker: Orders lotuses, optionally with one ply of lookahead
- explain(): Reasons behind a recommendation
- detect_synergies() / assess_nightmare_risk(): Collection diagnostics
"""

from .weights import UserWeights, apply_goal_weights, DEFAULT_QUALITY_MULTIPLIERS, DEFAULT_TYPE_WEIGHTS
from .evaluator import StateEvaluator, calculate_state_value
from .scorer import LotusScorer, score_lotus_choice, score_lotus_monte_carlo, DEFAULT_TRIALS
from .ranker import (
    LotusRanker,
    RankedChoice,
    rank_lotus_choices,
    rank_lotus_choices_with_lookahead,
    DEFAULT_TOP_N,
    LOOKAHEAD_DISCOUNT,
)
from .explainer import explain, Reason, ReasonTag
from .synergy import detect_synergies, Synergy, SynergyStrength
from .risk import assess_nightmare_risk, RiskAssessment, RiskLevel

__all__ = [
    "UserWeights",
    "apply_goal_weights",
    "DEFAULT_QUALITY_MULTIPLIERS",
    "DEFAULT_TYPE_WEIGHTS",
    "StateEvaluator",
    "calculate_state_value",
    "LotusScorer",
    "score_lotus_choice",
    "score_lotus_monte_carlo",
    "DEFAULT_TRIALS",
    "LotusRanker",
    "RankedChoice",
    "rank_lotus_choices",
    "rank_lotus_choices_with_lookahead",
    "DEFAULT_TOP_N",
    "LOOKAHEAD_DISCOUNT",
    "explain",
    "Reason",
    "ReasonTag",
    "detect_synergies",
    "Synergy",
    "SynergyStrength",
    "assess_nightmare_risk",
    "RiskAssessment",
    "RiskLevel",
]
