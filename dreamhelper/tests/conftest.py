"""
Pytest fixtures for Dream Helper tests.
"""

import random

import pytest

from ..advisor.weights import UserWeights
from ..engine_core.state import Bubble, BubbleIdFactory, VisionState
from ..lotus_schema.effect_dsl import (
    ChanceUpgradeOnEnterEffect,
    LotusDefinition,
    MultiplyOnEnterEffect,
    add,
    complex_effect,
)
from ..lotus_schema.taxonomy import BubbleType, Quality


def make_state(*bubbles, capacity=10, fundamental=None) -> VisionState:
    """Build a state from (type, quality) pairs with ids b1, b2, ..."""
    return VisionState(
        bubbles=[
            Bubble(bubble_id=f"b{i}", bubble_type=bubble_type, quality=quality)
            for i, (bubble_type, quality) in enumerate(bubbles, start=1)
        ],
        capacity=capacity,
        fundamental=fundamental,
    )


def make_lotus(effect, lotus_id="test-lotus", is_fundamental=False) -> LotusDefinition:
    return LotusDefinition(
        id=lotus_id,
        name=lotus_id,
        description=lotus_id,
        effect=effect,
        is_fundamental=is_fundamental,
    )


@pytest.fixture
def id_factory() -> BubbleIdFactory:
    return BubbleIdFactory(prefix="new")


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source."""
    return random.Random(1234)


@pytest.fixture
def weights() -> UserWeights:
    return UserWeights()


@pytest.fixture
def empty_state() -> VisionState:
    return VisionState()


@pytest.fixture
def mixed_state() -> VisionState:
    """Five bubbles of mixed type and quality."""
    return make_state(
        (BubbleType.GEAR, Quality.WHITE),
        (BubbleType.GEAR, Quality.BLUE),
        (BubbleType.CUBE, Quality.PURPLE),
        (BubbleType.WHIM, Quality.ORANGE),
        (BubbleType.BLACKSAIL, Quality.WHITE),
    )


@pytest.fixture
def full_state() -> VisionState:
    """Vision at capacity."""
    return make_state(*[(BubbleType.GEAR, Quality.WHITE)] * 10)


@pytest.fixture
def noop_lotus() -> LotusDefinition:
    return make_lotus(complex_effect("Does something the engine cannot model"), "noop")


@pytest.fixture
def add_one_lotus() -> LotusDefinition:
    return make_lotus(add(1), "add-one")


@pytest.fixture
def gear_multiply_lotus() -> LotusDefinition:
    """Fundamental: one Red Gear per 3 Gears."""
    return make_lotus(
        MultiplyOnEnterEffect(multiplier=1 / 3, bubble_type=BubbleType.GEAR, quality=Quality.RED),
        "gear-multiply",
        is_fundamental=True,
    )


@pytest.fixture
def certain_upgrade_lotus() -> LotusDefinition:
    """Fundamental: chance 1.0 to upgrade every bubble."""
    return make_lotus(ChanceUpgradeOnEnterEffect(chance=1.0), "certain-upgrade", is_fundamental=True)
