"""
Catalog Loader - Load lotus catalogs from JSON files.

A catalog file is a JSON list of lotus objects in the plain-data
shape produced by lotus_to_dict(). Files are validated on load.
"""

from __future__ import annotations
from pathlib import Path
import json
import logging

from ..lotus_schema.effect_dsl import LotusDefinition, lotus_from_dict, lotus_to_dict
from ..lotus_schema.validation import CatalogValidationError, validate_catalog

logger = logging.getLogger(__name__)


def load_catalog(path: str | Path) -> list[LotusDefinition]:
    """
    Load and validate a catalog file.

    Raises:
        CatalogValidationError: if the file is not a list of lotuses
            or the catalog fails validation
    """
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, list):
        raise CatalogValidationError([f"{path}: expected a JSON list of lotuses"])

    lotuses = []
    errors = []
    for index, entry in enumerate(data):
        try:
            lotuses.append(lotus_from_dict(entry))
        except (KeyError, TypeError, ValueError) as e:
            errors.append(f"Entry {index}: {e}")
    if errors:
        raise CatalogValidationError(errors)

    result = validate_catalog(lotuses)
    for warning in result.warnings:
        logger.warning("%s: %s", path, warning)
    if not result.valid:
        raise CatalogValidationError(result.errors)

    logger.info("Loaded %d lotuses from %s", len(lotuses), path)
    return lotuses


def dump_catalog(lotuses: list[LotusDefinition], path: str | Path) -> None:
    """Write a catalog file that load_catalog() reads back."""
    with open(path, "w", encoding="utf-8") as f:
        json.dump([lotus_to_dict(lotus) for lotus in lotuses], f, indent=2)
