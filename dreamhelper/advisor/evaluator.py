"""
State Evaluator - Scores vision states for lotus recommendations.

The value of a state is the sum over its bubbles of
    quality_multiplier[quality] * type_weight[type]

Nothing else contributes: bubble order, capacity and the fundamental
are ignored here. The fundamental reaches the value only through the
bubbles it adds or upgrades (see advisor.scorer).
"""

from __future__ import annotations
from typing import TYPE_CHECKING

from .weights import UserWeights

if TYPE_CHECKING:
    from ..engine_core.state import Bubble, VisionState


class StateEvaluator:
    """
    Evaluates vision states using user weights.

    Used by the scorer for before/after comparison:
    1. Evaluate the current state
    2. Simulate the lotus (and the fundamental)
    3. Evaluate the resulting state
    4. The difference is the lotus's score
    """

    def __init__(self, weights: UserWeights | None = None):
        self.weights = weights or UserWeights()

    def bubble_value(self, bubble: Bubble) -> float:
        """Value of a single bubble."""
        return (
            self.weights.quality_multipliers[bubble.quality]
            * self.weights.type_weights[bubble.bubble_type]
        )

    def evaluate(self, state: VisionState) -> float:
        """Total value of a state."""
        return sum(self.bubble_value(b) for b in state.bubbles)


def calculate_state_value(state: VisionState, weights: UserWeights) -> float:
    """
    Convenience function for one-off valuation.

    Usage:
        value = calculate_state_value(state, UserWeights())
    """
    return StateEvaluator(weights).evaluate(state)
