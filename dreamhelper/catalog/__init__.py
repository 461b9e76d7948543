"""Catalog module - built-in lotuses, search and JSON loading."""

from .lotuses import LOTUSES, build_catalog, get_lotus, search_lotuses, lotus_id
from .loader import load_catalog, dump_catalog

__all__ = [
    "LOTUSES",
    "build_catalog",
    "get_lotus",
    "search_lotuses",
    "lotus_id",
    "load_catalog",
    "dump_catalog",
]
