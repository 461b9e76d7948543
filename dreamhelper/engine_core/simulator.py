"""
Simulator - Applies a lotus effect to a vision state.

The simulator is the single point of bubble mutation for lotus picks.

Design principles:
- Pure function: (state, lotus) -> new_state, input never mutated
- Result never aliases the input's bubble list or bubbles
- Counts are clamped, never rejected (no exceptions for domain input)
- One handler per EffectType; fundamentals and complex effects
  mutate nothing and only record the fundamental
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable
import logging

from ..lotus_schema.effect_dsl import (
    EffectType,
    LotusDefinition,
    AddEffect,
    RemoveEffect,
    UpgradeEffect,
    ReplicateEffect,
    ChangeTypeEffect,
    QualityFilter,
    RANDOM_TYPE,
    resolve_count,
)
from ..lotus_schema.taxonomy import Quality, BubbleType, DEFAULT_BUBBLE_TYPE
from .commit import try_set_fundamental
from .state import Bubble, BubbleIdFactory, IdFactory, VisionState, reserve_ids

logger = logging.getLogger(__name__)


def resolve_quality(quality: Quality | QualityFilter | None, state: VisionState) -> Quality:
    """
    Pick the quality for an added bubble.

    "X or better" filters resolve to exactly X; "highest" copies the
    best quality owned (White for an empty vision).
    """
    if quality is None:
        return Quality.WHITE
    if isinstance(quality, Quality):
        return quality
    if quality == QualityFilter.HIGHEST:
        return state.highest_quality()
    if quality == QualityFilter.PURPLE_OR_BETTER:
        return Quality.PURPLE
    if quality == QualityFilter.BLUE_OR_BETTER:
        return Quality.BLUE
    return Quality.WHITE


def resolve_bubble_type(bubble_type: BubbleType | str | None) -> BubbleType:
    """Explicit type, or the default type for unspecified/random."""
    if bubble_type is None or bubble_type == RANDOM_TYPE:
        return DEFAULT_BUBBLE_TYPE
    if isinstance(bubble_type, BubbleType):
        return bubble_type
    return DEFAULT_BUBBLE_TYPE


@dataclass
class Simulator:
    """
    Simulates lotus effects.

    Stateless apart from the id factory that names new bubbles.
    """
    id_factory: IdFactory = field(default_factory=BubbleIdFactory)

    def simulate(self, state: VisionState, lotus: LotusDefinition) -> VisionState:
        """
        Apply `lotus` to a copy of `state` and return the copy.

        New bubbles never reuse an id already present in `state`.
        """
        new_state = state.clone()
        reserve_ids(self.id_factory, (b.bubble_id for b in new_state.bubbles))
        handler = self._get_handler(lotus.effect.effect_type)
        if handler is None:
            logger.debug("No handler for effect type %s, treating as no-op", lotus.effect.effect_type)
            return self._handle_passive(new_state, lotus)
        return handler(new_state, lotus)

    def _get_handler(
        self, effect_type: EffectType
    ) -> Callable[[VisionState, LotusDefinition], VisionState] | None:
        """Get the handler function for an effect type."""
        handlers = {
            EffectType.ADD: self._handle_add,
            EffectType.REMOVE: self._handle_remove,
            EffectType.UPGRADE: self._handle_upgrade,
            EffectType.REPLICATE: self._handle_replicate,
            EffectType.CHANGE_TYPE: self._handle_change_type,
            EffectType.MULTIPLY_ON_ENTER: self._handle_passive,
            EffectType.CHANCE_UPGRADE_ON_ENTER: self._handle_passive,
            EffectType.BONUS_ON_QUALITY_CHANGE: self._handle_passive,
            EffectType.BONUS_ON_TYPE_CHANGE: self._handle_passive,
            EffectType.BONUS_ON_ADD_REMOVE: self._handle_passive,
            EffectType.COMPLEX: self._handle_passive,
        }
        return handlers.get(effect_type)

    # Handlers below receive a private clone and may mutate it.

    def _handle_add(self, state: VisionState, lotus: LotusDefinition) -> VisionState:
        effect: AddEffect = lotus.effect
        to_add = min(resolve_count(effect.count), state.free_slots)
        if to_add <= 0:
            return state  # Vision full

        quality = resolve_quality(effect.quality, state)
        bubble_type = resolve_bubble_type(effect.bubble_type)
        for _ in range(to_add):
            state.bubbles.append(
                Bubble(bubble_id=self.id_factory(), bubble_type=bubble_type, quality=quality)
            )
        return state

    def _handle_remove(self, state: VisionState, lotus: LotusDefinition) -> VisionState:
        # Positional: always from the front, whatever `target` says
        effect: RemoveEffect = lotus.effect
        count = min(resolve_count(effect.count), state.count)
        if count <= 0:
            return state
        state.bubbles = state.bubbles[count:]
        return state

    def _handle_upgrade(self, state: VisionState, lotus: LotusDefinition) -> VisionState:
        effect: UpgradeEffect = lotus.effect
        count = min(resolve_count(effect.count), state.count)
        for bubble in state.bubbles[:count]:
            bubble.quality = bubble.quality.upgraded(effect.tiers)
        return state

    def _handle_replicate(self, state: VisionState, lotus: LotusDefinition) -> VisionState:
        effect: ReplicateEffect = lotus.effect
        count = min(resolve_count(effect.count), state.count, state.free_slots)
        if count <= 0:
            return state
        originals = state.bubbles[:count]
        for original in originals:
            state.bubbles.append(original.copy(bubble_id=self.id_factory()))
        return state

    def _handle_change_type(self, state: VisionState, lotus: LotusDefinition) -> VisionState:
        effect: ChangeTypeEffect = lotus.effect
        count = min(resolve_count(effect.count), state.count)
        for bubble in state.bubbles[:count]:
            bubble.bubble_type = effect.new_type
            if effect.upgrade_after:
                bubble.quality = bubble.quality.upgraded(1)
        return state

    def _handle_passive(self, state: VisionState, lotus: LotusDefinition) -> VisionState:
        """Fundamental and complex effects: no bubble changes."""
        if not lotus.is_fundamental:
            return state

        result = try_set_fundamental(state, lotus)
        if not result.success:
            logger.debug("Ignoring fundamental '%s': %s", lotus.id, result.error)
            return state
        return result.new_state


def simulate_lotus_effect(
    state: VisionState,
    lotus: LotusDefinition,
    id_factory: IdFactory | None = None,
) -> VisionState:
    """
    Convenience function to simulate a lotus.

    Usage:
        new_state = simulate_lotus_effect(state, lotus)
    """
    simulator = Simulator(id_factory=id_factory) if id_factory else Simulator()
    return simulator.simulate(state, lotus)


def handled_effect_types() -> set[EffectType]:
    """Effect types with a simulator handler."""
    simulator = Simulator()
    return {t for t in EffectType if simulator._get_handler(t) is not None}
