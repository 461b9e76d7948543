"""
Fundamental Applier - Re-applies the run's fundamental lotus.

A fundamental fires every time the vision enters a nightmare. This
module applies it once, on top of an already simulated state.

Supported:
- multiply-on-enter: bonus bubbles proportional to a type count
- chance-upgrade-on-enter: probabilistic one-tier upgrade

Reactive fundamentals (quality change, type change, add/remove) and
complex fundamentals are not evaluated and leave the state untouched.

Randomness is drawn from an injected random.Random so callers can seed it.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable
import logging
import math
import random

from ..lotus_schema.effect_dsl import (
    EffectType,
    MultiplyOnEnterEffect,
    ChanceUpgradeOnEnterEffect,
)
from ..lotus_schema.taxonomy import DEFAULT_BUBBLE_TYPE
from .state import Bubble, BubbleIdFactory, IdFactory, VisionState, reserve_ids

logger = logging.getLogger(__name__)


@dataclass
class FundamentalApplier:
    """
    Applies the attached fundamental to a state.

    Two modes for chance-based fundamentals:
    - stochastic: one shared roll decides for every target bubble
    - deterministic: an independent roll per target bubble
    The modes are different random processes. Monte Carlo
    scoring averages over the stochastic one.
    """
    rng: random.Random = field(default_factory=random.Random)
    id_factory: IdFactory = field(default_factory=lambda: BubbleIdFactory(prefix="fundamental-bonus"))

    def apply(self, state: VisionState, stochastic: bool = False) -> VisionState:
        """
        Return a copy of `state` with its fundamental applied once.

        Returns an unmodified copy when no fundamental is attached.
        """
        new_state = state.clone()
        if new_state.fundamental is None:
            return new_state

        reserve_ids(self.id_factory, (b.bubble_id for b in new_state.bubbles))
        effect = new_state.fundamental.effect
        handler = self._get_handler(effect.effect_type)
        if handler is None:
            logger.debug("Fundamental '%s' is not evaluated", new_state.fundamental.id)
            return new_state
        return handler(new_state, effect, stochastic)

    def _get_handler(
        self, effect_type: EffectType
    ) -> Callable[[VisionState, object, bool], VisionState] | None:
        handlers = {
            EffectType.MULTIPLY_ON_ENTER: self._apply_multiply,
            EffectType.CHANCE_UPGRADE_ON_ENTER: self._apply_chance_upgrade,
        }
        return handlers.get(effect_type)

    def _apply_multiply(
        self,
        state: VisionState,
        effect: MultiplyOnEnterEffect,
        stochastic: bool,
    ) -> VisionState:
        """
        Gain floor(matching * multiplier) bonus bubbles.

        Capacity is not enforced here, unlike lotus adds.
        """
        if effect.bubble_type is not None:
            matching = sum(1 for b in state.bubbles if b.bubble_type == effect.bubble_type)
        else:
            matching = state.count

        bonus = math.floor(matching * effect.multiplier)
        bubble_type = effect.bubble_type or DEFAULT_BUBBLE_TYPE
        for _ in range(bonus):
            state.bubbles.append(
                Bubble(bubble_id=self.id_factory(), bubble_type=bubble_type, quality=effect.quality)
            )
        return state

    def _apply_chance_upgrade(
        self,
        state: VisionState,
        effect: ChanceUpgradeOnEnterEffect,
        stochastic: bool,
    ) -> VisionState:
        targets = [
            b for b in state.bubbles
            if effect.bubble_type is None or b.bubble_type == effect.bubble_type
        ]

        if stochastic:
            if self.rng.random() < effect.chance:
                for bubble in targets:
                    bubble.quality = bubble.quality.upgraded(1)
            return state

        for bubble in targets:
            if self.rng.random() < effect.chance:
                bubble.quality = bubble.quality.upgraded(1)
        return state


def apply_fundamental(
    state: VisionState,
    stochastic: bool = False,
    rng: random.Random | None = None,
    id_factory: IdFactory | None = None,
) -> VisionState:
    """
    Convenience function to apply a state's fundamental once.

    Usage:
        entered = apply_fundamental(state, stochastic=True, rng=random.Random(7))
    """
    applier = FundamentalApplier(rng=rng or random.Random())
    if id_factory is not None:
        applier.id_factory = id_factory
    return applier.apply(state, stochastic=stochastic)
