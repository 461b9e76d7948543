"""
Lotus Scorer - Marginal value of picking a lotus.

    score = value(after) - value(before)
    after = apply_fundamental(simulate(state, lotus))

Two modes:
- score(): one pass, fundamental applied in deterministic mode
- score_monte_carlo(): `trials` passes with the fundamental applied in
  stochastic mode, after-values averaged, before subtracted once

Simulation itself is deterministic, so all Monte Carlo variance comes
from the fundamental.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import random

from ..engine_core.fundamental import FundamentalApplier
from ..engine_core.simulator import Simulator
from ..engine_core.state import BubbleIdFactory, IdFactory, VisionState
from ..lotus_schema.effect_dsl import LotusDefinition
from .evaluator import StateEvaluator
from .weights import UserWeights


DEFAULT_TRIALS = 100


@dataclass
class LotusScorer:
    """
    Scores lotus choices against a state.

    Holds the random source and id factory shared by the simulator
    and the fundamental applier; seed `rng` for reproducible scores.
    """
    rng: random.Random = field(default_factory=random.Random)
    id_factory: IdFactory = field(default_factory=BubbleIdFactory)

    def __post_init__(self):
        self.simulator = Simulator(id_factory=self.id_factory)
        self.applier = FundamentalApplier(rng=self.rng, id_factory=self.id_factory)

    def simulate_outcome(
        self,
        state: VisionState,
        lotus: LotusDefinition,
        stochastic: bool = False,
    ) -> VisionState:
        """State after picking `lotus` and then entering a nightmare."""
        simulated = self.simulator.simulate(state, lotus)
        return self.applier.apply(simulated, stochastic=stochastic)

    def score(self, state: VisionState, lotus: LotusDefinition, weights: UserWeights) -> float:
        """Deterministic-mode score."""
        evaluator = StateEvaluator(weights)
        before = evaluator.evaluate(state)
        after = evaluator.evaluate(self.simulate_outcome(state, lotus, stochastic=False))
        return after - before

    def score_monte_carlo(
        self,
        state: VisionState,
        lotus: LotusDefinition,
        weights: UserWeights,
        trials: int = DEFAULT_TRIALS,
    ) -> float:
        """
        Average score over independent stochastic trials.

        Every trial re-simulates from the same input state. At least
        one trial always runs.
        """
        trials = max(1, trials)
        evaluator = StateEvaluator(weights)
        before = evaluator.evaluate(state)

        total_after = 0.0
        for _ in range(trials):
            outcome = self.simulate_outcome(state, lotus, stochastic=True)
            total_after += evaluator.evaluate(outcome)

        return total_after / trials - before

    def score_with_mode(
        self,
        state: VisionState,
        lotus: LotusDefinition,
        weights: UserWeights,
        stochastic: bool = False,
        trials: int = DEFAULT_TRIALS,
    ) -> float:
        if stochastic:
            return self.score_monte_carlo(state, lotus, weights, trials=trials)
        return self.score(state, lotus, weights)


def score_lotus_choice(
    state: VisionState,
    lotus: LotusDefinition,
    weights: UserWeights,
    rng: random.Random | None = None,
) -> float:
    """
    Convenience function for a one-off deterministic score.

    Usage:
        gain = score_lotus_choice(state, lotus, UserWeights())
    """
    return LotusScorer(rng=rng or random.Random()).score(state, lotus, weights)


def score_lotus_monte_carlo(
    state: VisionState,
    lotus: LotusDefinition,
    weights: UserWeights,
    trials: int = DEFAULT_TRIALS,
    rng: random.Random | None = None,
) -> float:
    """Convenience function for a one-off Monte Carlo score."""
    scorer = LotusScorer(rng=rng or random.Random())
    return scorer.score_monte_carlo(state, lotus, weights, trials=trials)
