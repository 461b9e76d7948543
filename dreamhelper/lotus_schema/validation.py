"""
Catalog Validation - Sanity checks for lotus catalogs.

Validates that:
1. Lotus IDs are present and unique
2. Counts, tiers and multipliers are non-negative
3. Chances are probabilities
4. Fundamental flags agree with fundamental effect types
"""

from __future__ import annotations
from dataclasses import dataclass

from .effect_dsl import (
    Count,
    LotusDefinition,
    AddEffect,
    RemoveEffect,
    UpgradeEffect,
    ReplicateEffect,
    ChangeTypeEffect,
    MultiplyOnEnterEffect,
    ChanceUpgradeOnEnterEffect,
    FUNDAMENTAL_EFFECT_TYPES,
)


class CatalogValidationError(Exception):
    """Raised when a catalog fails validation."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Catalog validation failed with {len(errors)} error(s)")


@dataclass
class ValidationResult:
    """Result of validation, with errors and warnings."""
    valid: bool
    errors: list[str]
    warnings: list[str]


def validate_catalog(lotuses: list[LotusDefinition]) -> ValidationResult:
    """Validate a complete lotus catalog."""
    errors: list[str] = []
    warnings: list[str] = []

    seen_ids: set[str] = set()
    for lotus in lotuses:
        if not lotus.id:
            errors.append("Lotus has empty id")
        elif lotus.id in seen_ids:
            errors.append(f"Duplicate lotus id '{lotus.id}'")
        seen_ids.add(lotus.id)

        if not lotus.name:
            warnings.append(f"Lotus '{lotus.id}' has empty name")

        errors.extend(f"Lotus '{lotus.id}': {e}" for e in _validate_effect(lotus))

        if lotus.effect.effect_type in FUNDAMENTAL_EFFECT_TYPES and not lotus.is_fundamental:
            warnings.append(
                f"Lotus '{lotus.id}' has a fundamental effect but is not flagged fundamental"
            )

    if not lotuses:
        warnings.append("Catalog is empty")

    return ValidationResult(valid=len(errors) == 0, errors=errors, warnings=warnings)


def _validate_count(count: Count) -> list[str]:
    if isinstance(count, tuple):
        low, high = count
        if low < 0 or high < 0:
            return [f"count range {count} is negative"]
        if low > high:
            return [f"count range {count} is empty"]
        return []
    if count < 0:
        return [f"count {count} is negative"]
    return []


def _validate_effect(lotus: LotusDefinition) -> list[str]:
    """Validate a single lotus effect."""
    effect = lotus.effect
    errors = []

    if isinstance(effect, (AddEffect, RemoveEffect, UpgradeEffect, ReplicateEffect, ChangeTypeEffect)):
        errors.extend(_validate_count(effect.count))

    if isinstance(effect, UpgradeEffect) and effect.tiers < 0:
        errors.append(f"tiers {effect.tiers} is negative")

    if isinstance(effect, MultiplyOnEnterEffect) and effect.multiplier < 0:
        errors.append(f"multiplier {effect.multiplier} is negative")

    if isinstance(effect, ChanceUpgradeOnEnterEffect) and not 0.0 <= effect.chance <= 1.0:
        errors.append(f"chance {effect.chance} is outside [0, 1]")

    return errors
