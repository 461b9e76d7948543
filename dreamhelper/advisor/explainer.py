"""
Explainer - Human-readable reasons for a recommendation.

Reasons are derived only from comparing type and grade counts of the
before and after states.
They are presentation metadata and never affect ranking.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from ..lotus_schema.taxonomy import BUBBLE_TYPES, BubbleType, HIGH_QUALITIES, Quality

if TYPE_CHECKING:
    from ..engine_core.state import VisionState
    from ..lotus_schema.effect_dsl import LotusDefinition


CLUSTER_SIZE = 3
BULK_THRESHOLD = 3


class ReasonTag(Enum):
    SYNERGY_FORMED = "synergy_formed"
    SYNERGY_REINFORCED = "synergy_reinforced"
    BULK_UPGRADE = "bulk_upgrade"
    GOAL_PROGRESS = "goal_progress"
    HIGH_VALUE_ADD = "high_value_add"
    BULK_GAIN = "bulk_gain"


@dataclass(frozen=True)
class Reason:
    tag: ReasonTag
    message: str


def explain(
    before: VisionState,
    lotus: LotusDefinition,
    after: VisionState,
    goal_type: BubbleType | None = None,
) -> list[Reason]:
    """
    Explain why `lotus` moves `before` to a better `after`.

    Only type and grade counts are compared, so bubble ids play no
    part and states handed back by a client explain the same way.
    """
    reasons: list[Reason] = []

    before_types = before.type_counts()
    after_types = after.type_counts()
    for bubble_type in BUBBLE_TYPES:
        old, new = before_types[bubble_type], after_types[bubble_type]
        if old < CLUSTER_SIZE <= new:
            reasons.append(Reason(
                ReasonTag.SYNERGY_FORMED,
                f"Forms a {bubble_type.value} cluster ({new} bubbles)",
            ))
        elif old >= CLUSTER_SIZE and new > old:
            reasons.append(Reason(
                ReasonTag.SYNERGY_REINFORCED,
                f"Strengthens your {bubble_type.value} cluster ({old} -> {new})",
            ))

    upgraded = _grade_changes(before, after)
    if upgraded >= BULK_THRESHOLD:
        reasons.append(Reason(ReasonTag.BULK_UPGRADE, f"Upgrades {upgraded} bubbles at once"))

    if goal_type is not None:
        goal_added = after_types[goal_type] - before_types[goal_type]
        if goal_added > 0:
            reasons.append(Reason(
                ReasonTag.GOAL_PROGRESS,
                f"Adds {goal_added} {goal_type.value} bubble(s) toward your goal",
            ))

    high_before = sum(1 for b in before.bubbles if b.quality in HIGH_QUALITIES)
    high_after = sum(1 for b in after.bubbles if b.quality in HIGH_QUALITIES)
    high_gain = high_after - high_before
    if high_gain >= 2:
        reasons.append(Reason(ReasonTag.HIGH_VALUE_ADD, f"Gains {high_gain} Orange+ bubbles"))
    elif high_gain == 1:
        reasons.append(Reason(ReasonTag.HIGH_VALUE_ADD, "Gains an Orange+ bubble"))

    net_gain = after.count - before.count
    if net_gain >= BULK_THRESHOLD:
        reasons.append(Reason(ReasonTag.BULK_GAIN, f"Adds {net_gain} bubbles"))

    return reasons


def _grade_changes(before: VisionState, after: VisionState) -> int:
    """
    Bubbles that changed grade, from the grades alone.

    With the count unchanged, both grade lists are sorted and compared
    slot by slot. When bubbles were added or removed, each regraded
    bubble shows up twice in the per-grade differences and each added
    or removed one once.
    """
    if before.count == after.count:
        old = sorted(b.quality.rank for b in before.bubbles)
        new = sorted(b.quality.rank for b in after.bubbles)
        return sum(1 for o, n in zip(old, new) if o != n)

    before_grades = before.quality_counts()
    after_grades = after.quality_counts()
    moved = sum(abs(after_grades[q] - before_grades[q]) for q in Quality)
    return max(0, (moved - abs(after.count - before.count)) // 2)
