"""
Lotus Ranker - Orders lotus choices by score.

A ranking takes the current state and the lotuses on offer and
returns the best ones first. Implementations:
- rank(): immediate score only
- rank_with_lookahead(): immediate score plus a discounted estimate
  of what the best follow-up picks would be worth

Lookahead searches exactly one extra ply. `depth` only gates whether
that ply runs (depth > 1); it does not recurse further.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging
import random

from ..engine_core.state import VisionState
from ..lotus_schema.effect_dsl import LotusDefinition
from ..lotus_schema.taxonomy import BubbleType
from .scorer import LotusScorer, DEFAULT_TRIALS
from .weights import UserWeights, apply_goal_weights

logger = logging.getLogger(__name__)


DEFAULT_TOP_N = 3
LOOKAHEAD_DISCOUNT = 0.7
LOOKAHEAD_BRANCH = 3  # Follow-up picks averaged into the future value


@dataclass
class RankedChoice:
    """
    A scored lotus.

    `simulated_state` is the lotus simulation alone, without the
    fundamental applied. `lookahead_score` is only set by
    rank_with_lookahead().
    """
    lotus: LotusDefinition
    score: float
    simulated_state: VisionState
    lookahead_score: float | None = None


@dataclass
class LotusRanker:
    """
    Ranks lotus choices.

    Usage:
        ranker = LotusRanker(scorer=LotusScorer(rng=random.Random(42)))
        best = ranker.rank(state, lotuses, weights)[0]
    """
    scorer: LotusScorer = field(default_factory=LotusScorer)
    trials: int = DEFAULT_TRIALS

    def rank(
        self,
        state: VisionState,
        lotuses: list[LotusDefinition],
        weights: UserWeights,
        top_n: int = DEFAULT_TOP_N,
        stochastic: bool = False,
        goal_type: BubbleType | None = None,
    ) -> list[RankedChoice]:
        """
        Score every lotus and return the best `top_n`, highest first.

        Ties keep input order.
        """
        weights = apply_goal_weights(weights, goal_type)
        ranked = self._score_all(state, lotuses, weights, stochastic)
        logger.debug(
            "Ranked %d lotuses (stochastic=%s), best=%s",
            len(ranked), stochastic, ranked[0].lotus.id if ranked else None,
        )
        return ranked[:max(0, top_n)]

    def rank_with_lookahead(
        self,
        state: VisionState,
        lotuses: list[LotusDefinition],
        weights: UserWeights,
        top_n: int = DEFAULT_TOP_N,
        depth: int = 2,
        stochastic: bool = False,
        goal_type: BubbleType | None = None,
    ) -> list[RankedChoice]:
        """
        Rank by immediate score plus discounted future value.

        For each candidate, the same lotus set is ranked again from the
        candidate's outcome (fundamental applied), always in
        deterministic mode. The mean of the best LOOKAHEAD_BRANCH
        follow-up scores, times LOOKAHEAD_DISCOUNT, is the future value.
        With depth <= 1 the future value is 0.
        """
        weights = apply_goal_weights(weights, goal_type)
        candidates = self._score_all(state, lotuses, weights, stochastic)

        for choice in candidates:
            future_value = 0.0
            if depth > 1:
                future_value = self._future_value(state, choice.lotus, lotuses, weights, stochastic)
            choice.lookahead_score = choice.score + future_value

        candidates.sort(key=lambda c: c.lookahead_score, reverse=True)
        return candidates[:max(0, top_n)]

    def _future_value(
        self,
        state: VisionState,
        lotus: LotusDefinition,
        lotuses: list[LotusDefinition],
        weights: UserWeights,
        stochastic: bool,
    ) -> float:
        next_state = self.scorer.simulate_outcome(state, lotus, stochastic=stochastic)
        follow_ups = self._score_all(next_state, lotuses, weights, stochastic=False)
        best = follow_ups[:LOOKAHEAD_BRANCH]
        if not best:
            return 0.0
        return sum(c.score for c in best) / len(best) * LOOKAHEAD_DISCOUNT

    def _score_all(
        self,
        state: VisionState,
        lotuses: list[LotusDefinition],
        weights: UserWeights,
        stochastic: bool,
    ) -> list[RankedChoice]:
        """Score every lotus, sorted descending (stable)."""
        scored = [
            RankedChoice(
                lotus=lotus,
                score=self.scorer.score_with_mode(
                    state, lotus, weights, stochastic=stochastic, trials=self.trials
                ),
                simulated_state=self.scorer.simulator.simulate(state, lotus),
            )
            for lotus in lotuses
        ]
        scored.sort(key=lambda c: c.score, reverse=True)
        return scored


def rank_lotus_choices(
    state: VisionState,
    lotuses: list[LotusDefinition],
    weights: UserWeights,
    top_n: int = DEFAULT_TOP_N,
    stochastic: bool = False,
    rng: random.Random | None = None,
) -> list[RankedChoice]:
    """Convenience function for a one-off ranking."""
    ranker = LotusRanker(scorer=LotusScorer(rng=rng or random.Random()))
    return ranker.rank(state, lotuses, weights, top_n=top_n, stochastic=stochastic)


def rank_lotus_choices_with_lookahead(
    state: VisionState,
    lotuses: list[LotusDefinition],
    weights: UserWeights,
    top_n: int = DEFAULT_TOP_N,
    depth: int = 2,
    stochastic: bool = False,
    rng: random.Random | None = None,
) -> list[RankedChoice]:
    """Convenience function for a one-off lookahead ranking."""
    ranker = LotusRanker(scorer=LotusScorer(rng=rng or random.Random()))
    return ranker.rank_with_lookahead(
        state, lotuses, weights, top_n=top_n, depth=depth, stochastic=stochastic
    )
