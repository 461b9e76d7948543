"""
Effect DSL - Tagged-union description of lotus effects.

Every lotus carries exactly one effect. Effects are:
- Closed: one dataclass per EffectType member, nothing else
- Declarative: they describe a transformation, the engine performs it
- Serializable: effect_to_dict()/effect_from_dict() round-trip the
  plain-data shape the UI stores and exports

Key design decisions:
- Counts may be a fixed int or an inclusive (low, high) range
- Fundamental variants only act "upon entering a nightmare"
- Anything too irregular to model is a ComplexEffect (free text)
- Unknown tags decode to ComplexEffect instead of failing
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Union

from .taxonomy import BubbleType, Quality


class EffectType(Enum):
    """Effect tags. Values are the serialized `type` strings."""
    ADD = "add"
    REMOVE = "remove"
    UPGRADE = "upgrade"
    REPLICATE = "replicate"
    CHANGE_TYPE = "changeType"

    # Fundamentals - re-applied upon entering a nightmare
    MULTIPLY_ON_ENTER = "fundamental_multiplyOnEnterNightmare"
    CHANCE_UPGRADE_ON_ENTER = "fundamental_chanceUpgradeOnEnterNightmare"

    # Reactive fundamentals - declared, never simulated
    BONUS_ON_QUALITY_CHANGE = "fundamental_bonusOnQualityChange"
    BONUS_ON_TYPE_CHANGE = "fundamental_bonusOnTypeChange"
    BONUS_ON_ADD_REMOVE = "fundamental_bonusOnAddRemove"

    COMPLEX = "complex"


class QualityFilter(Enum):
    """Relative quality selectors for added bubbles."""
    HIGHEST = "highest"  # Same as the best bubble owned
    PURPLE_OR_BETTER = "purple_or_better"
    BLUE_OR_BETTER = "blue_or_better"


class RemoveTarget(Enum):
    RANDOM = "random"
    LOWEST = "lowest"
    HIGHEST = "highest"


class UpgradeTarget(Enum):
    RANDOM = "random"
    ALL = "all"


RANDOM_TYPE = "random"

Count = Union[int, tuple[int, int]]


def resolve_count(count: Count) -> int:
    """
    Collapse a count spec to a single integer.

    Ranges use the floored mean, e.g. (1, 3) -> 2, (3, 5) -> 4.
    """
    if isinstance(count, tuple):
        low, high = count
        return (low + high) // 2
    return count


# ============================================================================
# Effect variants
# ============================================================================

@dataclass(frozen=True)
class AddEffect:
    """Add new bubbles, limited by free vision slots."""
    effect_type: ClassVar[EffectType] = EffectType.ADD
    count: Count = 1
    quality: Quality | QualityFilter | None = None
    bubble_type: BubbleType | str | None = None  # BubbleType or RANDOM_TYPE


@dataclass(frozen=True)
class RemoveEffect:
    """
    Remove bubbles from the front of the vision.

    `target` is descriptive only; removal is positional.
    """
    effect_type: ClassVar[EffectType] = EffectType.REMOVE
    count: Count = 1
    target: RemoveTarget | None = None


@dataclass(frozen=True)
class UpgradeEffect:
    """Upgrade the first `count` bubbles by `tiers` tiers."""
    effect_type: ClassVar[EffectType] = EffectType.UPGRADE
    count: Count = 1
    tiers: int = 1
    target: UpgradeTarget | None = None


@dataclass(frozen=True)
class ReplicateEffect:
    """Duplicate the first `count` bubbles."""
    effect_type: ClassVar[EffectType] = EffectType.REPLICATE
    count: Count = 1
    target: BubbleType | str | None = None


@dataclass(frozen=True)
class ChangeTypeEffect:
    """Retype the first `count` bubbles, optionally upgrading them by one tier."""
    effect_type: ClassVar[EffectType] = EffectType.CHANGE_TYPE
    count: Count = 1
    new_type: BubbleType = BubbleType.GEAR
    upgrade_after: bool = False


@dataclass(frozen=True)
class MultiplyOnEnterEffect:
    """
    Upon entering a nightmare, gain floor(matching * multiplier) bubbles.

    Bonus bubbles get `quality` (default Rainbow) and the filtered type,
    or the default type when unfiltered.
    """
    effect_type: ClassVar[EffectType] = EffectType.MULTIPLY_ON_ENTER
    multiplier: float = 1 / 3
    bubble_type: BubbleType | None = None
    quality: Quality = Quality.RAINBOW


@dataclass(frozen=True)
class ChanceUpgradeOnEnterEffect:
    """Upon entering a nightmare, maybe upgrade matching bubbles by one tier."""
    effect_type: ClassVar[EffectType] = EffectType.CHANCE_UPGRADE_ON_ENTER
    chance: float = 0.45
    bubble_type: BubbleType | None = None


@dataclass(frozen=True)
class BonusOnQualityChangeEffect:
    effect_type: ClassVar[EffectType] = EffectType.BONUS_ON_QUALITY_CHANGE


@dataclass(frozen=True)
class BonusOnTypeChangeEffect:
    effect_type: ClassVar[EffectType] = EffectType.BONUS_ON_TYPE_CHANGE


@dataclass(frozen=True)
class BonusOnAddRemoveEffect:
    effect_type: ClassVar[EffectType] = EffectType.BONUS_ON_ADD_REMOVE


@dataclass(frozen=True)
class ComplexEffect:
    """Free-text fallback for effects the engine does not model."""
    effect_type: ClassVar[EffectType] = EffectType.COMPLEX
    custom_logic: str = ""


Effect = Union[
    AddEffect,
    RemoveEffect,
    UpgradeEffect,
    ReplicateEffect,
    ChangeTypeEffect,
    MultiplyOnEnterEffect,
    ChanceUpgradeOnEnterEffect,
    BonusOnQualityChangeEffect,
    BonusOnTypeChangeEffect,
    BonusOnAddRemoveEffect,
    ComplexEffect,
]

EFFECT_CLASSES: dict[EffectType, type] = {
    cls.effect_type: cls
    for cls in (
        AddEffect,
        RemoveEffect,
        UpgradeEffect,
        ReplicateEffect,
        ChangeTypeEffect,
        MultiplyOnEnterEffect,
        ChanceUpgradeOnEnterEffect,
        BonusOnQualityChangeEffect,
        BonusOnTypeChangeEffect,
        BonusOnAddRemoveEffect,
        ComplexEffect,
    )
}

FUNDAMENTAL_EFFECT_TYPES: frozenset[EffectType] = frozenset({
    EffectType.MULTIPLY_ON_ENTER,
    EffectType.CHANCE_UPGRADE_ON_ENTER,
    EffectType.BONUS_ON_QUALITY_CHANGE,
    EffectType.BONUS_ON_TYPE_CHANGE,
    EffectType.BONUS_ON_ADD_REMOVE,
})


@dataclass(frozen=True)
class LotusDefinition:
    """
    A catalog entry offered to the player as a choice.

    `is_fundamental` marks lotuses whose effect persists for the
    whole run once chosen.
    """
    id: str
    name: str
    description: str
    effect: Effect
    nightmare_omen: str | None = None
    is_fundamental: bool = False


# ============================================================================
# Factory functions for common lotus patterns
# ============================================================================

def add(
    count: Count = 1,
    quality: Quality | QualityFilter | None = None,
    bubble_type: BubbleType | str | None = None,
) -> AddEffect:
    """Create an add effect."""
    return AddEffect(count=count, quality=quality, bubble_type=bubble_type)


def upgrade(count: Count = 1, tiers: int = 1, target: UpgradeTarget | None = None) -> UpgradeEffect:
    """Create an upgrade effect."""
    return UpgradeEffect(count=count, tiers=tiers, target=target)


def replicate(count: Count = 1, target: BubbleType | str | None = None) -> ReplicateEffect:
    """Create a replicate effect."""
    return ReplicateEffect(count=count, target=target)


def change_type(count: Count, new_type: BubbleType, upgrade_after: bool = False) -> ChangeTypeEffect:
    """Create a change-type effect."""
    return ChangeTypeEffect(count=count, new_type=new_type, upgrade_after=upgrade_after)


def complex_effect(custom_logic: str) -> ComplexEffect:
    return ComplexEffect(custom_logic=custom_logic)


# ============================================================================
# Plain-data codec
# ============================================================================

def _count_to_data(count: Count) -> int | list[int]:
    return list(count) if isinstance(count, tuple) else count


def _count_from_data(value: Any) -> Count:
    if isinstance(value, (list, tuple)):
        return (int(value[0]), int(value[1]))
    return int(value) if value is not None else 1


def _enum_or_none(enum_cls: type[Enum], value: Any) -> Any:
    if value is None:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        return None


def _type_or_random(value: Any) -> BubbleType | str | None:
    if value == RANDOM_TYPE:
        return RANDOM_TYPE
    return _enum_or_none(BubbleType, value)


def _value(member: Any) -> Any:
    return member.value if isinstance(member, Enum) else member


def effect_to_dict(effect: Effect) -> dict[str, Any]:
    """Serialize an effect to its tagged plain-data form."""
    data: dict[str, Any] = {"type": effect.effect_type.value}

    if isinstance(effect, AddEffect):
        data["count"] = _count_to_data(effect.count)
        if effect.quality is not None:
            data["quality"] = _value(effect.quality)
        if effect.bubble_type is not None:
            data["bubbleType"] = _value(effect.bubble_type)
    elif isinstance(effect, RemoveEffect):
        data["count"] = _count_to_data(effect.count)
        if effect.target is not None:
            data["target"] = effect.target.value
    elif isinstance(effect, UpgradeEffect):
        data["count"] = _count_to_data(effect.count)
        data["tiers"] = effect.tiers
        if effect.target is not None:
            data["target"] = effect.target.value
    elif isinstance(effect, ReplicateEffect):
        data["count"] = _count_to_data(effect.count)
        if effect.target is not None:
            data["target"] = _value(effect.target)
    elif isinstance(effect, ChangeTypeEffect):
        data["count"] = _count_to_data(effect.count)
        data["newType"] = effect.new_type.value
        if effect.upgrade_after:
            data["upgradeAfter"] = True
    elif isinstance(effect, MultiplyOnEnterEffect):
        data["multiplier"] = effect.multiplier
        data["quality"] = effect.quality.value
        if effect.bubble_type is not None:
            data["bubbleType"] = effect.bubble_type.value
    elif isinstance(effect, ChanceUpgradeOnEnterEffect):
        data["chance"] = effect.chance
        if effect.bubble_type is not None:
            data["bubbleType"] = effect.bubble_type.value
    elif isinstance(effect, ComplexEffect):
        data["customLogic"] = effect.custom_logic

    return data


def effect_from_dict(data: dict[str, Any]) -> Effect:
    """
    Decode a tagged effect dict.

    Unknown or missing tags become a ComplexEffect carrying the raw tag,
    so a malformed catalog entry simulates as a no-op.
    """
    tag = data.get("type")
    try:
        effect_type = EffectType(tag)
    except ValueError:
        return ComplexEffect(custom_logic=str(tag))

    if effect_type == EffectType.ADD:
        quality = _enum_or_none(Quality, data.get("quality")) or _enum_or_none(
            QualityFilter, data.get("quality")
        )
        return AddEffect(
            count=_count_from_data(data.get("count", 1)),
            quality=quality,
            bubble_type=_type_or_random(data.get("bubbleType")),
        )
    if effect_type == EffectType.REMOVE:
        return RemoveEffect(
            count=_count_from_data(data.get("count", 1)),
            target=_enum_or_none(RemoveTarget, data.get("target")),
        )
    if effect_type == EffectType.UPGRADE:
        return UpgradeEffect(
            count=_count_from_data(data.get("count", 1)),
            tiers=int(data.get("tiers", 1)),
            target=_enum_or_none(UpgradeTarget, data.get("target")),
        )
    if effect_type == EffectType.REPLICATE:
        return ReplicateEffect(
            count=_count_from_data(data.get("count", 1)),
            target=_type_or_random(data.get("target")),
        )
    if effect_type == EffectType.CHANGE_TYPE:
        return ChangeTypeEffect(
            count=_count_from_data(data.get("count", 1)),
            new_type=_enum_or_none(BubbleType, data.get("newType")) or BubbleType.GEAR,
            upgrade_after=bool(data.get("upgradeAfter", False)),
        )
    if effect_type == EffectType.MULTIPLY_ON_ENTER:
        multiplier = data.get("multiplier")
        return MultiplyOnEnterEffect(
            multiplier=1 / 3 if multiplier is None else float(multiplier),
            bubble_type=_enum_or_none(BubbleType, data.get("bubbleType")),
            quality=_enum_or_none(Quality, data.get("quality")) or Quality.RAINBOW,
        )
    if effect_type == EffectType.CHANCE_UPGRADE_ON_ENTER:
        chance = data.get("chance")
        return ChanceUpgradeOnEnterEffect(
            chance=0.45 if chance is None else float(chance),
            bubble_type=_enum_or_none(BubbleType, data.get("bubbleType")),
        )
    if effect_type == EffectType.COMPLEX:
        return ComplexEffect(custom_logic=str(data.get("customLogic", "")))

    return EFFECT_CLASSES[effect_type]()


def lotus_to_dict(lotus: LotusDefinition) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": lotus.id,
        "name": lotus.name,
        "description": lotus.description,
        "effect": effect_to_dict(lotus.effect),
        "isFundamental": lotus.is_fundamental,
    }
    if lotus.nightmare_omen is not None:
        data["nightmareOmen"] = lotus.nightmare_omen
    return data


def lotus_from_dict(data: dict[str, Any]) -> LotusDefinition:
    return LotusDefinition(
        id=str(data["id"]),
        name=str(data.get("name", data["id"])),
        description=str(data.get("description", "")),
        effect=effect_from_dict(data.get("effect") or {}),
        nightmare_omen=data.get("nightmareOmen"),
        is_fundamental=bool(data.get("isFundamental", False)),
    )
