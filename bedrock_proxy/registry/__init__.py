"""Model registry and catalog loading."""

from .model_registry import ModelRegistry
from .catalog_loader import (
    default_catalog_path,
    load_catalog,
    load_registry,
    parse_catalog,
    parse_entry,
)
from .legacy import is_legacy_entry, normalize_legacy_entry

__all__ = [
    "ModelRegistry",
    "default_catalog_path",
    "load_catalog",
    "load_registry",
    "parse_catalog",
    "parse_entry",
    "is_legacy_entry",
    "normalize_legacy_entry",
]
