"""
Bubble taxonomy - the closed sets of bubble types and qualities.

Qualities are ordered from lowest to highest. All tier arithmetic
goes through Quality.upgraded(), which clamps at Rainbow.
"""

from __future__ import annotations
from enum import Enum


class Quality(Enum):
    """Bubble quality tiers, lowest first."""
    WHITE = "White"
    BLUE = "Blue"
    PURPLE = "Purple"
    ORANGE = "Orange"
    RED = "Red"
    RAINBOW = "Rainbow"

    @property
    def rank(self) -> int:
        """Zero-based tier index (White=0, Rainbow=5)."""
        return QUALITY_ORDER.index(self)

    @classmethod
    def lowest(cls) -> Quality:
        return QUALITY_ORDER[0]

    @classmethod
    def highest(cls) -> Quality:
        return QUALITY_ORDER[-1]

    def upgraded(self, tiers: int = 1) -> Quality:
        """Return the quality `tiers` steps up, capped at Rainbow."""
        index = min(self.rank + max(0, tiers), len(QUALITY_ORDER) - 1)
        return QUALITY_ORDER[index]


QUALITY_ORDER: list[Quality] = list(Quality)

# Orange and above
HIGH_QUALITIES: frozenset[Quality] = frozenset(QUALITY_ORDER[-3:])


class BubbleType(Enum):
    """Bubble categories."""
    GEAR = "Gear"
    BLACKSAIL = "Blacksail"
    CUBE = "Cube"
    COMMODITY = "Commodity"
    NETHERREALM = "Netherrealm"
    FLUORESCENT = "Fluorescent"
    WHIM = "Whim"


BUBBLE_TYPES: list[BubbleType] = list(BubbleType)

# Used whenever an effect does not pin down a type
DEFAULT_BUBBLE_TYPE = BubbleType.WHIM
