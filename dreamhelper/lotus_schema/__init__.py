"""Lotus schema - bubble taxonomy and the effect DSL."""

from .taxonomy import Quality, BubbleType, QUALITY_ORDER, BUBBLE_TYPES, DEFAULT_BUBBLE_TYPE
from .effect_dsl import (
    Effect,
    EffectType,
    LotusDefinition,
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
    QualityFilter,
    RANDOM_TYPE,
    resolve_count,
    effect_from_dict,
    effect_to_dict,
    lotus_from_dict,
    lotus_to_dict,
)
from .validation import validate_catalog, CatalogValidationError, ValidationResult

__all__ = [
    "Quality",
    "BubbleType",
    "QUALITY_ORDER",
    "BUBBLE_TYPES",
    "DEFAULT_BUBBLE_TYPE",
    "Effect",
    "EffectType",
    "LotusDefinition",
    "AddEffect",
    "RemoveEffect",
    "UpgradeEffect",
    "ReplicateEffect",
    "ChangeTypeEffect",
    "MultiplyOnEnterEffect",
    "ChanceUpgradeOnEnterEffect",
    "BonusOnQualityChangeEffect",
    "BonusOnTypeChangeEffect",
    "BonusOnAddRemoveEffect",
    "ComplexEffect",
    "QualityFilter",
    "RANDOM_TYPE",
    "resolve_count",
    "effect_from_dict",
    "effect_to_dict",
    "lotus_from_dict",
    "lotus_to_dict",
    "validate_catalog",
    "CatalogValidationError",
    "ValidationResult",
]
