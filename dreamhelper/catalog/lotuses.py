"""
Lotus Catalog - The built-in lotus definitions.

Entries are generated from the same families the game uses:
- Basic adds, upgrades and replicates (any type)
- Per-type variants: adds, replicates, type changes, remove combos
  and nightmare fundamentals
- Remove + benefit combos
- Special fundamentals, high-risk lotuses and locking mechanics

Effects the engine cannot model (locking, delayed or conditional
effects, multi-step combos) are ComplexEffects carrying their
description, so they stay selectable but score 0.
"""

from __future__ import annotations
import re

from ..lotus_schema.effect_dsl import (
    BonusOnAddRemoveEffect,
    BonusOnQualityChangeEffect,
    BonusOnTypeChangeEffect,
    ChanceUpgradeOnEnterEffect,
    Effect,
    LotusDefinition,
    MultiplyOnEnterEffect,
    QualityFilter,
    add,
    change_type,
    complex_effect,
    replicate,
    upgrade,
)
from ..lotus_schema.taxonomy import BUBBLE_TYPES, BubbleType, Quality


MINOR = "Minor difficulty increase"
MODERATE = "Moderate difficulty increase"
SIGNIFICANT = "Significant difficulty increase"
MAJOR = "Major difficulty increase"
EXTREME = "Extreme difficulty increase"

NAME_LENGTH = 50
MIN_QUERY_LENGTH = 2
DEFAULT_SEARCH_LIMIT = 10

_SAME_AS_HIGHEST = "the same quality as the highest-quality bubble you own (including Rainbow)"


def lotus_id(description: str) -> str:
    """URL-friendly id derived from a description."""
    return re.sub(r"[^a-z0-9]+", "-", description.lower()).strip("-")


def _lotus(
    description: str,
    effect: Effect,
    omen: str,
    is_fundamental: bool | None = None,
) -> LotusDefinition:
    if is_fundamental is None:
        is_fundamental = "upon entering" in description.lower()
    return LotusDefinition(
        id=lotus_id(description),
        name=description[:NAME_LENGTH].rstrip(),
        description=description,
        effect=effect,
        nightmare_omen=omen,
        is_fundamental=is_fundamental,
    )


def _complex(description: str, omen: str, is_fundamental: bool | None = None) -> LotusDefinition:
    return _lotus(description, complex_effect(description), omen, is_fundamental)


# ============================================================================
# Families
# ============================================================================

def _basic_lotuses() -> list[LotusDefinition]:
    return [
        _lotus("Adds 1 bubble", add(1), MINOR),
        _lotus("Adds 2 bubbles", add(2), MINOR),
        _lotus("Adds 1-3 bubbles", add((1, 3)), MINOR),
        _lotus("Adds 1 bubble that is Blue or better", add(1, QualityFilter.BLUE_OR_BETTER), MINOR),
        _lotus("Adds 2 bubbles that are Blue or better", add(2, QualityFilter.BLUE_OR_BETTER), MODERATE),
        _lotus("Adds 1-3 bubbles that are Blue or better", add((1, 3), QualityFilter.BLUE_OR_BETTER), MODERATE),
        _lotus("Adds 1 bubble that is Purple or better", add(1, QualityFilter.PURPLE_OR_BETTER), MODERATE),
        _lotus("Adds 2 bubbles that are Purple or better", add(2, QualityFilter.PURPLE_OR_BETTER), MODERATE),
        _lotus("Adds 1-3 bubbles that are Purple or better", add((1, 3), QualityFilter.PURPLE_OR_BETTER), SIGNIFICANT),
        _lotus(f"Adds 1 bubble that is {_SAME_AS_HIGHEST}", add(1, QualityFilter.HIGHEST), SIGNIFICANT),
        _lotus(f"Adds 2 bubbles that are {_SAME_AS_HIGHEST}", add(2, QualityFilter.HIGHEST), MAJOR),
        _lotus(f"Adds 1-3 bubbles that are {_SAME_AS_HIGHEST}", add((1, 3), QualityFilter.HIGHEST), MAJOR),
        # Upgrades
        _lotus("Upgrades the quality of 1 bubble by 1 tier", upgrade(1, tiers=1), MINOR),
        _lotus("Upgrades the quality of 1 bubble by 2 tiers", upgrade(1, tiers=2), MODERATE),
        _lotus("Upgrades the quality of 1 bubble by 3 tiers", upgrade(1, tiers=3), SIGNIFICANT),
        _complex(f"Upgrades the quality of 1 bubble to {_SAME_AS_HIGHEST}", MAJOR),
        _complex(f"Upgrades the quality of 2 bubbles to {_SAME_AS_HIGHEST}", MAJOR),
        # Replicates
        _lotus("Randomly selects 1 bubble to replicate", replicate(1), MODERATE),
        _lotus("Randomly selects 2 bubbles to replicate", replicate(2), SIGNIFICANT),
        _lotus("Randomly selects 1-3 bubbles to replicate", replicate((1, 3)), SIGNIFICANT),
    ]


def _type_lotuses(bubble_type: BubbleType) -> list[LotusDefinition]:
    t = bubble_type.value
    blue = QualityFilter.BLUE_OR_BETTER
    purple = QualityFilter.PURPLE_OR_BETTER
    highest = QualityFilter.HIGHEST
    return [
        # Adds
        _lotus(f"Adds 1 {t} Bubble", add(1, None, bubble_type), MINOR),
        _lotus(f"Adds 2 {t} Bubbles", add(2, None, bubble_type), MINOR),
        _lotus(f"Adds 1-3 {t} Bubbles", add((1, 3), None, bubble_type), MINOR),
        _lotus(f"Adds 1 {t} Bubble that is Blue or better", add(1, blue, bubble_type), MINOR),
        _lotus(f"Adds 2 {t} Bubbles that are Blue or better", add(2, blue, bubble_type), MODERATE),
        _lotus(f"Adds 1-3 {t} Bubbles that are Blue or better", add((1, 3), blue, bubble_type), MODERATE),
        _lotus(f"Adds 1 {t} Bubble that is Purple or better", add(1, purple, bubble_type), MODERATE),
        _lotus(f"Adds 2 {t} Bubbles that are Purple or better", add(2, purple, bubble_type), MODERATE),
        _lotus(f"Adds 1-3 {t} Bubbles that are Purple or better", add((1, 3), purple, bubble_type), SIGNIFICANT),
        _lotus(f"Adds 1 {t} Bubble that is {_SAME_AS_HIGHEST}", add(1, highest, bubble_type), SIGNIFICANT),
        _lotus(f"Adds 2 {t} Bubbles that are {_SAME_AS_HIGHEST}", add(2, highest, bubble_type), MAJOR),
        _lotus(f"Adds 1-3 {t} Bubbles that are {_SAME_AS_HIGHEST}", add((1, 3), highest, bubble_type), MAJOR),
        # Replicates
        _lotus(f"Randomly selects 1 {t} Bubble to replicate", replicate(1, bubble_type), MODERATE),
        _lotus(f"Randomly selects 2 {t} Bubbles to replicate", replicate(2, bubble_type), SIGNIFICANT),
        _lotus(f"Randomly selects 1-3 {t} Bubbles to replicate", replicate((1, 3), bubble_type), SIGNIFICANT),
        # Type changes
        _lotus(f"Changes the type of 1 bubble to {t}", change_type(1, bubble_type), MINOR),
        _lotus(f"Changes the type of 2 bubbles to {t}", change_type(2, bubble_type), MINOR),
        _lotus(f"Changes the type of 3 bubbles to {t}", change_type(3, bubble_type), MODERATE),
        _lotus(f"Changes the type of 3-5 bubbles to {t}", change_type((3, 5), bubble_type), MODERATE),
        _lotus(
            f"Changes the type of 1 bubble to {t}, and then upgrades its quality by 1 tier",
            change_type(1, bubble_type, upgrade_after=True), MODERATE,
        ),
        _lotus(
            f"Changes the type of 2 bubbles to {t} and upgrades their quality by 1 tier",
            change_type(2, bubble_type, upgrade_after=True), SIGNIFICANT,
        ),
        _lotus(
            f"Changes the type of 2-3 bubbles to {t} and upgrades their quality by 1 tier",
            change_type((2, 3), bubble_type, upgrade_after=True), SIGNIFICANT,
        ),
        # Remove + add
        _complex(f"Removes 1 bubble and then adds 1 {t} Bubble that is Purple or better", MODERATE),
        _complex(f"Removes 1 bubble and then adds 2 {t} Bubbles that are Blue or better", MODERATE),
        _complex(f"Removes 1 bubble and then adds 1-3 {t} Bubbles that are Blue or better", SIGNIFICANT),
        _complex(
            f"Removes 1 bubble, changes the type of 1 bubble to {t}, and then upgrades its quality by 1 tier",
            SIGNIFICANT,
        ),
        _complex(f"Removes 1 bubble and changes the type of 2 bubbles to {t}", MODERATE),
        _complex(f"Removes 1 bubble and changes the type of 1-3 bubbles to {t}", SIGNIFICANT),
        # Nightmare fundamentals
        _lotus(
            f"Upon entering a Nightmare, for every 3 {t} Bubbles you have, "
            f"you additionally gain 1 Red {t} Bubble",
            MultiplyOnEnterEffect(multiplier=1 / 3, bubble_type=bubble_type, quality=Quality.RED),
            MAJOR,
        ),
        _lotus(
            f"Upon entering a Nightmare, for every 6 {t} Bubbles you have, "
            f"you additionally gain 1 Rainbow {t} Bubble",
            MultiplyOnEnterEffect(multiplier=1 / 6, bubble_type=bubble_type, quality=Quality.RAINBOW),
            EXTREME,
        ),
        _complex(
            f"Upon entering a Nightmare, for every 3 Purple or lower {t} Bubbles you have, "
            f"converts them into 1 Orange or better (including Rainbow) Whim Bubble",
            MAJOR,
        ),
        _lotus(
            f"Upon entering a Nightmare, there is a 45% chance that the quality of all your "
            f"{t} Bubbles will be upgraded by 1 tier, up to Rainbow",
            ChanceUpgradeOnEnterEffect(chance=0.45, bubble_type=bubble_type),
            MAJOR,
        ),
    ]


def _combo_lotuses() -> list[LotusDefinition]:
    return [
        _complex("Removes 1 bubble and then upgrades the quality of 1 bubble by 4 tiers", SIGNIFICANT),
        _complex("Removes 1 bubble and then upgrades the quality of 2 bubbles by 2 tiers", SIGNIFICANT),
        _complex("Removes 1 bubble and then adds 1 bubble that is Purple or better", MODERATE),
        _complex("Removes 1 bubble and then adds 2 bubbles that are Blue or better", MODERATE),
        _complex("Removes 1 bubble and then adds 1-3 bubbles that are Blue or better", SIGNIFICANT),
        _complex("Removes 1 bubble, then randomly upgrades the quality of 1-3 bubbles by 1 tier", MODERATE),
    ]


def _special_fundamentals() -> list[LotusDefinition]:
    return [
        _complex(
            "Upon entering a Nightmare, for every 3 different types of bubbles you have, "
            "you additionally gain 1 Red bubble of a random type",
            MAJOR,
        ),
        _complex(
            "Upon entering a Nightmare, for every 3 different types of bubbles you have, "
            "you additionally gain 1 Red Whim Bubble",
            MAJOR,
        ),
        _complex(
            "Upon entering a Nightmare, fills up the initial empty slots of the Vision "
            "with White bubbles of random types",
            MINOR,
        ),
        _complex(
            "Upon entering a Nightmare, fills up the initial empty slots of the Vision "
            "with Purple bubbles of a random type",
            SIGNIFICANT,
        ),
        _complex(
            "Upon entering a Nightmare, fills up the initial empty slots of the Vision "
            "with Orange bubbles of a random type",
            MAJOR,
        ),
        _complex(
            "Upon entering a Nightmare, there is a 100% chance to upgrade the quality of each "
            "bubble by 2 tiers. For every unfilled initial empty slot, the chance is reduced by 10%",
            EXTREME,
        ),
        _lotus(
            "Whenever the quality of a bubble changes, additionally upgrades the quality "
            "of 1 bubble by 1 tier",
            BonusOnQualityChangeEffect(), SIGNIFICANT, is_fundamental=True,
        ),
        _lotus(
            "Whenever adding or removing a bubble, additionally upgrades the quality "
            "of 1 bubble by 1 tier",
            BonusOnAddRemoveEffect(), SIGNIFICANT, is_fundamental=True,
        ),
        _lotus(
            "Whenever the type of a bubble changes, additionally upgrades the quality "
            "of 1 bubble by 1 tier",
            BonusOnTypeChangeEffect(), SIGNIFICANT, is_fundamental=True,
        ),
    ]


def _high_risk_lotuses() -> list[LotusDefinition]:
    return [
        _complex(
            "Adds 4 Rainbow bubbles. In each Dream Omen selection after this, 1 bubble "
            "will be removed (from lowest quality to highest quality)",
            EXTREME,
        ),
        _complex(
            "Adds 1 bubble, but no more bubbles can be added later. Upon entering a "
            "Nightmare, each bubble is additionally replicated 1 time",
            MAJOR,
        ),
        _complex(
            "Removes bubbles until leaving only 1 random bubble of each type, "
            "then changes their quality to Orange",
            EXTREME,
        ),
        _complex(
            "Removes bubbles until only 1 random bubble is left, then changes its quality "
            "to Red and replicates 1 copy of it",
            EXTREME,
        ),
        _complex(
            "Randomly changes the type of all bubbles, and then randomly changes the quality "
            "of all bubbles, reducing their quality by at most 1 tier or upgrading their "
            "quality by at most 2 tiers",
            MAJOR,
        ),
        _complex(
            "Randomly changes the quality of 1 bubble, reducing their quality by at most "
            "1 tier or upgrading their quality by at most 2 tiers",
            MINOR,
        ),
        _complex(
            "The quality of bubbles can't be changed anymore. Upon entering a Nightmare, "
            "you additionally obtain a number of Whim Bubbles equal to the number of "
            "bubbles you already have",
            EXTREME,
        ),
        _complex(
            "Upon entering a Nightmare, you additionally gain all the bubbles that have "
            "been removed in the Sweet Dreams of this round",
            MAJOR,
        ),
        _complex(
            "Removes half your bubbles (rounding down) and replicates your remaining "
            "bubbles, with the chance to upgrade their quality by 1 tier",
            MAJOR,
        ),
    ]


def _locking_lotuses() -> list[LotusDefinition]:
    return [
        _complex(
            "Adds 1 White bubble and locks it. During each omen selection, its quality "
            "is upgraded by 1 tier, up to Rainbow",
            MODERATE,
        ),
        _complex(
            "Adds 1 Rainbow bubble and locks it. During each omen selection, its quality "
            "is reduced by 1 tier",
            MINOR,
        ),
        _complex("Locks the highest-quality bubble", MINOR),
        _complex("Locks the 1-3 highest-quality bubbles", MODERATE),
        _complex("Adds 1 Rainbow Bubble that will be removed during the next omen selection", MINOR),
        _complex(
            "Removes the highest quality bubble and replicates 2 copies of it in the "
            "next omen selection",
            MODERATE,
        ),
    ]


# ============================================================================
# Catalog
# ============================================================================

def build_catalog() -> list[LotusDefinition]:
    """Build the full catalog in its canonical order."""
    lotuses = _basic_lotuses()
    for bubble_type in BUBBLE_TYPES:
        lotuses.extend(_type_lotuses(bubble_type))
    lotuses.extend(_combo_lotuses())
    lotuses.extend(_special_fundamentals())
    lotuses.extend(_high_risk_lotuses())
    lotuses.extend(_locking_lotuses())
    return lotuses


LOTUSES: list[LotusDefinition] = build_catalog()

_LOTUSES_BY_ID: dict[str, LotusDefinition] = {lotus.id: lotus for lotus in LOTUSES}


def get_lotus(lotus_id: str) -> LotusDefinition | None:
    """Look up a built-in lotus by ID."""
    return _LOTUSES_BY_ID.get(lotus_id)


def search_lotuses(
    query: str,
    lotuses: list[LotusDefinition] | None = None,
    limit: int = DEFAULT_SEARCH_LIMIT,
) -> list[LotusDefinition]:
    """
    Find lotuses whose description contains `query` (case-insensitive).

    Queries shorter than two characters match nothing.
    """
    query = query.strip().lower()
    if len(query) < MIN_QUERY_LENGTH:
        return []
    pool = LOTUSES if lotuses is None else lotuses
    return [lotus for lotus in pool if query in lotus.description.lower()][:limit]
