"""
User Weights - What the player values.

Weights can be adjusted at any time; scoring reads them fresh on
every call. Goal weighting derives a new weights object and never
touches the one it was given.
"""

from __future__ import annotations
from dataclasses import dataclass, field

from ..lotus_schema.taxonomy import Quality, BubbleType


DEFAULT_QUALITY_MULTIPLIERS: dict[Quality, float] = {
    Quality.WHITE: 1,
    Quality.BLUE: 2,
    Quality.PURPLE: 4,
    Quality.ORANGE: 8,
    Quality.RED: 16,
    Quality.RAINBOW: 32,
}

DEFAULT_TYPE_WEIGHTS: dict[BubbleType, float] = {
    BubbleType.GEAR: 1.0,
    BubbleType.BLACKSAIL: 1.0,
    BubbleType.CUBE: 1.0,
    BubbleType.COMMODITY: 1.0,
    BubbleType.NETHERREALM: 1.0,
    BubbleType.FLUORESCENT: 1.0,
    BubbleType.WHIM: 1.2,  # Counts as any type
}

GOAL_WEIGHT_BOOST = 3.0


@dataclass
class UserWeights:
    """
    Weights for the value function.

    Higher values = more importance. Missing entries fall back to
    the defaults, so partial tables are fine.
    """
    quality_multipliers: dict[Quality, float] = field(
        default_factory=lambda: dict(DEFAULT_QUALITY_MULTIPLIERS)
    )
    type_weights: dict[BubbleType, float] = field(
        default_factory=lambda: dict(DEFAULT_TYPE_WEIGHTS)
    )

    # Carried for the UI; scoring does not read it
    risk_tolerance: float = 0.5

    def __post_init__(self):
        self.quality_multipliers = {**DEFAULT_QUALITY_MULTIPLIERS, **self.quality_multipliers}
        self.type_weights = {**DEFAULT_TYPE_WEIGHTS, **self.type_weights}

    def with_type_weight(self, bubble_type: BubbleType, weight: float) -> UserWeights:
        """Return new weights with one type weight replaced."""
        type_weights = dict(self.type_weights)
        type_weights[bubble_type] = weight
        return UserWeights(
            quality_multipliers=dict(self.quality_multipliers),
            type_weights=type_weights,
            risk_tolerance=self.risk_tolerance,
        )


def apply_goal_weights(
    weights: UserWeights,
    goal_type: BubbleType | None,
    boost: float = GOAL_WEIGHT_BOOST,
) -> UserWeights:
    """
    Bias weights toward a goal type.

    Returns `weights` itself when there is no goal, otherwise a new
    object with the goal type's weight multiplied by `boost`.
    """
    if goal_type is None:
        return weights
    return weights.with_type_weight(goal_type, weights.type_weights[goal_type] * boost)
