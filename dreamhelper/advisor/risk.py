"""
Nightmare Risk - How much of the vision a nightmare can cost.

Entering a nightmare can take roughly a sixth of the bubbles. The
assessment assumes the worst case count (rounded up) and that the
least valuable bubbles go first.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING
import math

from .evaluator import StateEvaluator
from .weights import UserWeights

if TYPE_CHECKING:
    from ..engine_core.state import VisionState


LOSS_FRACTION_DIVISOR = 6


class RiskLevel(Enum):
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass
class RiskAssessment:
    bubbles_at_risk: int
    value_at_risk: float
    risk_level: RiskLevel


def assess_nightmare_risk(state: VisionState, weights: UserWeights) -> RiskAssessment:
    """Estimate bubbles and value at risk when entering a nightmare."""
    if state.is_empty:
        return RiskAssessment(bubbles_at_risk=0, value_at_risk=0.0, risk_level=RiskLevel.NONE)

    bubbles_at_risk = math.ceil(state.count / LOSS_FRACTION_DIVISOR)

    evaluator = StateEvaluator(weights)
    values = sorted(evaluator.bubble_value(b) for b in state.bubbles)
    value_at_risk = sum(values[:bubbles_at_risk])

    if bubbles_at_risk <= 1:
        level = RiskLevel.LOW
    elif bubbles_at_risk <= 2:
        level = RiskLevel.MEDIUM
    elif bubbles_at_risk <= 3:
        level = RiskLevel.HIGH
    else:
        level = RiskLevel.CRITICAL

    return RiskAssessment(
        bubbles_at_risk=bubbles_at_risk,
        value_at_risk=value_at_risk,
        risk_level=level,
    )
