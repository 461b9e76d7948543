"""
Tests for the value function and the lotus scorer.
"""

import random

import pytest

from ..advisor.evaluator import StateEvaluator, calculate_state_value
from ..advisor.scorer import LotusScorer, score_lotus_choice, score_lotus_monte_carlo
from ..advisor.weights import UserWeights
from ..lotus_schema.effect_dsl import ChanceUpgradeOnEnterEffect, add, upgrade
from ..lotus_schema.taxonomy import BubbleType, Quality
from .conftest import make_lotus, make_state


class TestValueFunction:
    """Tests for StateEvaluator."""

    def test_empty_is_zero(self, empty_state, weights):
        assert calculate_state_value(empty_state, weights) == 0

    def test_sum_of_products(self, weights):
        state = make_state((BubbleType.GEAR, Quality.PURPLE), (BubbleType.WHIM, Quality.RED))
        assert calculate_state_value(state, weights) == pytest.approx(4 * 1.0 + 16 * 1.2)

    def test_adding_increases_value(self, mixed_state, weights):
        evaluator = StateEvaluator(weights)
        bigger = make_state(*[(b.bubble_type, b.quality) for b in mixed_state.bubbles], (BubbleType.CUBE, Quality.WHITE))
        assert evaluator.evaluate(bigger) > evaluator.evaluate(mixed_state)

    def test_order_and_fundamental_ignored(self, weights, gear_multiply_lotus):
        a = make_state((BubbleType.GEAR, Quality.RED), (BubbleType.CUBE, Quality.WHITE))
        b = make_state((BubbleType.CUBE, Quality.WHITE), (BubbleType.GEAR, Quality.RED), fundamental=gear_multiply_lotus)
        assert calculate_state_value(a, weights) == calculate_state_value(b, weights)

    def test_partial_weights_fall_back(self):
        """Missing table entries use the defaults."""
        custom = UserWeights(quality_multipliers={Quality.WHITE: 10}, type_weights={})
        state = make_state((BubbleType.GEAR, Quality.WHITE), (BubbleType.GEAR, Quality.BLUE))
        assert calculate_state_value(state, custom) == pytest.approx(12)


class TestDeterministicScore:

    def test_noop_scores_zero(self, mixed_state, weights, noop_lotus):
        """A complex, non-fundamental lotus scores exactly 0."""
        assert score_lotus_choice(mixed_state, noop_lotus, weights) == 0

    def test_basic_add_score(self, empty_state, weights, add_one_lotus):
        """One White Whim bubble is worth 1 * 1.2."""
        assert score_lotus_choice(empty_state, add_one_lotus, weights) == pytest.approx(1.2)

    def test_full_vision_add_scores_zero(self, full_state, weights):
        assert score_lotus_choice(full_state, make_lotus(add(2)), weights) == 0

    def test_fundamental_counts_on_pick(self, weights, gear_multiply_lotus):
        """Picking a fundamental is scored with it applied once."""
        state = make_state(*[(BubbleType.GEAR, Quality.WHITE)] * 6)
        score = score_lotus_choice(state, gear_multiply_lotus, weights)
        assert score == pytest.approx(2 * 16)

    def test_existing_fundamental_applies_to_every_pick(self, weights, gear_multiply_lotus):
        """The attached fundamental contributes to before-vs-after of any lotus."""
        state = make_state(*[(BubbleType.GEAR, Quality.WHITE)] * 5, fundamental=gear_multiply_lotus)
        gear_add = make_lotus(add(1, None, BubbleType.GEAR))
        # 6 Gears after the add -> 2 Red Gears, plus the White Gear itself
        assert score_lotus_choice(state, gear_add, weights) == pytest.approx(1 + 2 * 16)

    def test_second_fundamental_scores_zero(self, mixed_state, weights, gear_multiply_lotus, certain_upgrade_lotus):
        """Once a fundamental is held, another one adds nothing of its own."""
        state = mixed_state.with_fundamental(certain_upgrade_lotus)
        scorer = LotusScorer(rng=random.Random(3))
        noop_score = scorer.score(state, make_lotus(upgrade(0)), weights)
        assert scorer.score(state, gear_multiply_lotus, weights) == pytest.approx(noop_score)


class TestMonteCarlo:

    def test_certain_upgrade_matches_deterministic(self, mixed_state, weights, certain_upgrade_lotus):
        scorer = LotusScorer(rng=random.Random(5))
        deterministic = scorer.score(mixed_state, certain_upgrade_lotus, weights)
        assert scorer.score_monte_carlo(mixed_state, certain_upgrade_lotus, weights, trials=10) == pytest.approx(deterministic)

    def test_average_is_near_expectation(self, weights):
        """With chance 0.5 the mean lands near half of the full upgrade gain."""
        lotus = make_lotus(ChanceUpgradeOnEnterEffect(chance=0.5), is_fundamental=True)
        state = make_state(*[(BubbleType.GEAR, Quality.WHITE)] * 10)
        score = score_lotus_monte_carlo(state, lotus, weights, trials=2000, rng=random.Random(11))
        assert score == pytest.approx(5.0, abs=1.0)

    def test_seeded_scores_repeat(self, weights):
        lotus = make_lotus(ChanceUpgradeOnEnterEffect(chance=0.3), is_fundamental=True)
        state = make_state(*[(BubbleType.CUBE, Quality.BLUE)] * 4)
        first = score_lotus_monte_carlo(state, lotus, weights, trials=50, rng=random.Random(21))
        second = score_lotus_monte_carlo(state, lotus, weights, trials=50, rng=random.Random(21))
        assert first == second

    def test_zero_trials_runs_once(self, empty_state, weights, add_one_lotus):
        scorer = LotusScorer(rng=random.Random(1))
        assert scorer.score_monte_carlo(empty_state, add_one_lotus, weights, trials=0) == pytest.approx(1.2)

    def test_input_state_untouched(self, mixed_state, weights, certain_upgrade_lotus):
        before = [(b.bubble_id, b.quality) for b in mixed_state.bubbles]
        LotusScorer(rng=random.Random(2)).score_monte_carlo(mixed_state, certain_upgrade_lotus, weights, trials=5)
        assert [(b.bubble_id, b.quality) for b in mixed_state.bubbles] == before
