"""
Synergy Detection - Notable patterns in the current vision.

Synergies describe the collection as it stands (clusters, quality
stacks, type combos) so the player can see what to build toward.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from ..lotus_schema.taxonomy import BUBBLE_TYPES, BubbleType, Quality

if TYPE_CHECKING:
    from ..engine_core.state import VisionState


class SynergyStrength(Enum):
    WEAK = "weak"
    MODERATE = "moderate"
    STRONG = "strong"
    POWERFUL = "powerful"


@dataclass(frozen=True)
class Synergy:
    synergy_id: str
    title: str
    description: str
    strength: SynergyStrength


def detect_synergies(state: VisionState) -> list[Synergy]:
    """Detect all synergies present in `state`."""
    synergies: list[Synergy] = []
    types = state.type_counts()
    qualities = state.quality_counts()

    # Type clusters
    for bubble_type in BUBBLE_TYPES:
        count = types[bubble_type]
        name = bubble_type.value
        if count >= 6:
            synergies.append(Synergy(
                f"{name}-critical-mass",
                f"{name} Dominance",
                f"{count} {name} bubbles! Lotuses that add Rainbow {name} bubbles "
                f"become extremely valuable (gain 1 per 6)",
                SynergyStrength.POWERFUL,
            ))
        elif count >= 4:
            synergies.append(Synergy(
                f"{name}-strong",
                f"{name} Focus",
                f"{count} {name} bubbles benefit from type-specific lotuses that replicate or upgrade",
                SynergyStrength.STRONG,
            ))
        elif count >= 3:
            synergies.append(Synergy(
                f"{name}-moderate",
                f"{name} Cluster",
                f"{count} {name} bubbles - enough to gain bonus bubbles from nightmare lotuses",
                SynergyStrength.MODERATE,
            ))

    # Quality stacks
    high_quality = qualities[Quality.RAINBOW] + qualities[Quality.RED] + qualities[Quality.ORANGE]
    if high_quality >= 5:
        synergies.append(Synergy(
            "high-quality-focus",
            "Premium Collection",
            f"{high_quality} high-quality bubbles (Orange+)! Protect these from nightmare",
            SynergyStrength.POWERFUL,
        ))
    elif high_quality >= 3:
        synergies.append(Synergy(
            "quality-stack",
            "Quality Stack",
            f"{high_quality} Orange+ bubbles benefit from 'highest quality' lotuses",
            SynergyStrength.STRONG,
        ))

    if qualities[Quality.RAINBOW] >= 2:
        synergies.append(Synergy(
            "rainbow-power",
            "Rainbow Power",
            f"{qualities[Quality.RAINBOW]} Rainbow bubbles! Maximum value - prioritize protection",
            SynergyStrength.POWERFUL,
        ))

    diverse_types = sum(1 for t in BUBBLE_TYPES if types[t] > 0)
    if diverse_types >= 5 and state.count >= 7:
        synergies.append(Synergy(
            "diverse-portfolio",
            "Diverse Portfolio",
            f"{diverse_types} different bubble types! Whim bubbles become more valuable",
            SynergyStrength.MODERATE,
        ))

    if types[BubbleType.GEAR] >= 2 and types[BubbleType.BLACKSAIL] >= 2:
        synergies.append(Synergy(
            "gear-blacksail-combo",
            "Gear & Blacksail Combo",
            "Balanced offensive setup - great synergy for late game",
            SynergyStrength.STRONG,
        ))

    if types[BubbleType.CUBE] >= 3:
        synergies.append(Synergy(
            "cube-collector",
            "Cube Collector",
            f"{types[BubbleType.CUBE]} Cubes = more inventory space. Cube-specific lotuses are valuable",
            SynergyStrength.MODERATE,
        ))

    if types[BubbleType.WHIM] >= 2:
        synergies.append(Synergy(
            "whim-flexibility",
            "Whim Flexibility",
            f"{types[BubbleType.WHIM]} Whim bubbles provide type flexibility for all lotus effects",
            SynergyStrength.MODERATE,
        ))

    low_quality = qualities[Quality.WHITE] + qualities[Quality.BLUE]
    if low_quality >= 4:
        synergies.append(Synergy(
            "upgrade-potential",
            "Upgrade Potential",
            f"{low_quality} low-quality bubbles - prioritize upgrade lotuses for massive gains",
            SynergyStrength.MODERATE,
        ))

    return synergies
