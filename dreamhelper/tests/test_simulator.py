"""
Tests for the simulator (lotus effects on vision states).

Tests:
- Purity and structural independence
- Each effect handler
- Capacity and tier clamping
- Fundamental attachment
"""

import pytest

from ..engine_core.simulator import Simulator, handled_effect_types, resolve_quality
from ..engine_core.state import Bubble, BubbleIdFactory, VisionState
from ..lotus_schema.effect_dsl import (
    EffectType,
    QualityFilter,
    RemoveEffect,
    RemoveTarget,
    add,
    change_type,
    replicate,
    upgrade,
)
from ..lotus_schema.taxonomy import BubbleType, Quality
from .conftest import make_lotus, make_state


@pytest.fixture
def simulator(id_factory):
    return Simulator(id_factory=id_factory)


def snapshot(state: VisionState):
    return [(b.bubble_id, b.bubble_type, b.quality, b.locked) for b in state.bubbles]


class TestPurity:
    """The input state is never touched."""

    @pytest.mark.parametrize("effect", [
        add(2),
        RemoveEffect(count=2),
        upgrade(3, tiers=2),
        replicate(2),
        change_type(2, BubbleType.CUBE, upgrade_after=True),
    ])
    def test_input_not_mutated(self, simulator, mixed_state, effect):
        """Simulating leaves the input bubbles unchanged."""
        before = snapshot(mixed_state)
        simulator.simulate(mixed_state, make_lotus(effect))
        assert snapshot(mixed_state) == before

    def test_result_is_independent(self, simulator, mixed_state, noop_lotus):
        """Even a no-op returns new bubble objects in a new list."""
        result = simulator.simulate(mixed_state, noop_lotus)
        assert result is not mixed_state
        assert result.bubbles is not mixed_state.bubbles
        for old, new in zip(mixed_state.bubbles, result.bubbles):
            assert old is not new
            assert old == new


class TestAdd:
    """Tests for add effects."""

    def test_basic_add(self, simulator, empty_state, add_one_lotus):
        """One White Whim bubble lands in an empty vision."""
        result = simulator.simulate(empty_state, add_one_lotus)
        assert result.count == 1
        bubble = result.bubbles[0]
        assert bubble.bubble_type == BubbleType.WHIM
        assert bubble.quality == Quality.WHITE
        assert bubble.bubble_id == "new-1"

    def test_capacity_clamp_noop(self, simulator, full_state):
        """A full vision ignores adds."""
        result = simulator.simulate(full_state, make_lotus(add(2)))
        assert result.count == 10

    def test_partial_clamp(self, simulator):
        """Adds stop at capacity."""
        state = make_state(*[(BubbleType.GEAR, Quality.WHITE)] * 9)
        result = simulator.simulate(state, make_lotus(add(3)))
        assert result.count == 10

    def test_range_uses_floored_mean(self, simulator, empty_state):
        """(1, 3) adds 2; (1, 2) adds 1."""
        assert simulator.simulate(empty_state, make_lotus(add((1, 3)))).count == 2
        assert simulator.simulate(empty_state, make_lotus(add((1, 2)))).count == 1

    def test_or_better_uses_floor(self, simulator, empty_state):
        """'Purple or better' adds exactly Purple."""
        result = simulator.simulate(empty_state, make_lotus(add(1, QualityFilter.PURPLE_OR_BETTER)))
        assert result.bubbles[0].quality == Quality.PURPLE

    def test_highest_copies_best_owned(self, simulator, mixed_state):
        """'Highest' matches the best quality in the vision."""
        result = simulator.simulate(mixed_state, make_lotus(add(1, QualityFilter.HIGHEST, BubbleType.GEAR)))
        added = result.bubbles[-1]
        assert added.quality == Quality.ORANGE
        assert added.bubble_type == BubbleType.GEAR

    def test_highest_on_empty_is_white(self, empty_state):
        assert resolve_quality(QualityFilter.HIGHEST, empty_state) == Quality.WHITE

    def test_random_type_uses_default(self, simulator, empty_state):
        result = simulator.simulate(empty_state, make_lotus(add(1, Quality.RED, "random")))
        assert result.bubbles[0].bubble_type == BubbleType.WHIM
        assert result.bubbles[0].quality == Quality.RED

    def test_ids_are_unique(self, simulator, empty_state):
        """Rapid adds never reuse an id."""
        result = simulator.simulate(empty_state, make_lotus(add(5)))
        ids = [b.bubble_id for b in result.bubbles]
        assert len(set(ids)) == 5


class TestRemove:
    """Tests for remove effects."""

    def test_removes_from_front(self, simulator, mixed_state):
        """Removal is positional, even when the target says lowest."""
        lotus = make_lotus(RemoveEffect(count=2, target=RemoveTarget.LOWEST))
        result = simulator.simulate(mixed_state, lotus)
        assert [b.bubble_id for b in result.bubbles] == ["b3", "b4", "b5"]

    def test_remove_clamps_to_length(self, simulator, mixed_state):
        result = simulator.simulate(mixed_state, make_lotus(RemoveEffect(count=50)))
        assert result.is_empty

    def test_remove_on_empty_is_noop(self, simulator, empty_state):
        result = simulator.simulate(empty_state, make_lotus(RemoveEffect(count=1)))
        assert result.is_empty


class TestUpgrade:
    """Tests for upgrade effects."""

    def test_upgrades_first_bubbles(self, simulator, mixed_state):
        result = simulator.simulate(mixed_state, make_lotus(upgrade(2, tiers=1)))
        assert [b.quality for b in result.bubbles[:3]] == [Quality.BLUE, Quality.PURPLE, Quality.PURPLE]

    def test_upgrade_clamps_at_rainbow(self, simulator):
        """A Rainbow bubble stays Rainbow."""
        state = make_state((BubbleType.GEAR, Quality.RAINBOW))
        result = simulator.simulate(state, make_lotus(upgrade(1, tiers=5)))
        assert result.bubbles[0].quality == Quality.RAINBOW

    def test_huge_tier_count(self, simulator):
        """tiers=100 on White yields Rainbow."""
        state = make_state((BubbleType.GEAR, Quality.WHITE))
        result = simulator.simulate(state, make_lotus(upgrade(1, tiers=100)))
        assert result.bubbles[0].quality == Quality.RAINBOW

    def test_upgrade_never_decreases(self, simulator, mixed_state):
        result = simulator.simulate(mixed_state, make_lotus(upgrade(10, tiers=2)))
        for old, new in zip(mixed_state.bubbles, result.bubbles):
            assert new.quality.rank >= old.quality.rank


class TestReplicate:
    """Tests for replicate effects."""

    def test_duplicates_front_bubbles(self, simulator, mixed_state):
        result = simulator.simulate(mixed_state, make_lotus(replicate(2)))
        assert result.count == 7
        copies = result.bubbles[5:]
        assert [(b.bubble_type, b.quality) for b in copies] == [
            (BubbleType.GEAR, Quality.WHITE),
            (BubbleType.GEAR, Quality.BLUE),
        ]
        assert all(b.bubble_id.startswith("new-") for b in copies)

    def test_replicate_respects_capacity(self, simulator):
        state = make_state(*[(BubbleType.CUBE, Quality.BLUE)] * 8)
        result = simulator.simulate(state, make_lotus(replicate(5)))
        assert result.count == 10

    def test_replicate_on_full_is_noop(self, simulator, full_state):
        assert simulator.simulate(full_state, make_lotus(replicate(1))).count == 10


class TestChangeType:
    """Tests for change-type effects."""

    def test_retypes_front_bubbles(self, simulator, mixed_state):
        result = simulator.simulate(mixed_state, make_lotus(change_type(2, BubbleType.NETHERREALM)))
        assert [b.bubble_type for b in result.bubbles[:3]] == [
            BubbleType.NETHERREALM, BubbleType.NETHERREALM, BubbleType.CUBE,
        ]
        assert result.bubbles[0].quality == Quality.WHITE

    def test_upgrade_after(self, simulator, mixed_state):
        result = simulator.simulate(mixed_state, make_lotus(change_type(1, BubbleType.CUBE, upgrade_after=True)))
        assert result.bubbles[0].bubble_type == BubbleType.CUBE
        assert result.bubbles[0].quality == Quality.BLUE


class TestCapacityInvariant:
    """Adds and replicates never exceed capacity."""

    @pytest.mark.parametrize("size", [0, 3, 9, 10])
    @pytest.mark.parametrize("effect", [add(4), add((3, 5)), replicate(4), replicate((1, 3))])
    def test_never_exceeds_capacity(self, simulator, size, effect):
        state = make_state(*[(BubbleType.GEAR, Quality.WHITE)] * size)
        assert simulator.simulate(state, make_lotus(effect)).count <= state.capacity


class TestPassiveEffects:
    """Fundamentals and complex effects."""

    def test_every_effect_type_has_handler(self):
        """No effect type can be added without a simulator handler."""
        assert handled_effect_types() == set(EffectType)

    def test_complex_is_noop(self, simulator, mixed_state, noop_lotus):
        result = simulator.simulate(mixed_state, noop_lotus)
        assert snapshot(result) == snapshot(mixed_state)
        assert result.fundamental is None

    def test_fundamental_is_attached(self, simulator, mixed_state, gear_multiply_lotus):
        result = simulator.simulate(mixed_state, gear_multiply_lotus)
        assert result.fundamental is gear_multiply_lotus
        assert result.count == mixed_state.count

    def test_first_fundamental_wins(self, simulator, mixed_state, gear_multiply_lotus, certain_upgrade_lotus):
        """A second fundamental leaves the first attached."""
        first = simulator.simulate(mixed_state, gear_multiply_lotus)
        second = simulator.simulate(first, certain_upgrade_lotus)
        assert second.fundamental is gear_multiply_lotus

    def test_locked_flag_survives(self, simulator):
        state = make_state((BubbleType.GEAR, Quality.WHITE))
        state.bubbles[0].locked = True
        result = simulator.simulate(state, make_lotus(upgrade(1)))
        assert result.bubbles[0].locked


class TestBubbleIds:
    """Minted ids never repeat an id already in the vision."""

    def test_factory_skips_reserved(self):
        factory = BubbleIdFactory(prefix="sim")
        factory.reserve(["sim-1", "sim-3"])
        assert [factory(), factory()] == ["sim-2", "sim-4"]

    def test_add_skips_held_ids(self, simulator):
        """A state carrying ids from an earlier run gets fresh ones."""
        state = VisionState(bubbles=[
            Bubble("new-1", BubbleType.GEAR, Quality.WHITE),
            Bubble("new-2", BubbleType.GEAR, Quality.WHITE),
        ])
        result = simulator.simulate(state, make_lotus(add(2)))
        ids = [b.bubble_id for b in result.bubbles]
        assert len(set(ids)) == 4

    def test_replicate_skips_held_ids(self, simulator):
        state = VisionState(bubbles=[Bubble("new-1", BubbleType.CUBE, Quality.BLUE)])
        result = simulator.simulate(state, make_lotus(replicate(1)))
        assert [b.bubble_id for b in result.bubbles] == ["new-1", "new-2"]
