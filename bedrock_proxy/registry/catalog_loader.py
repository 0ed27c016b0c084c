"""Catalog loader for building the model registry from YAML or JSON.

The catalog is a single document listing model descriptors:

.. code-block:: yaml

    provider: bedrock
    models:
      - name: Llama-3-8b
        backend_id: meta.llama3-8b-instruct-v1:0
        uses_structured_messages: false
        token_limit_param_name: max_gen_len
        max_supported_response_tokens: 2048
        stream_chunk_path: generation
        prompt_template:
          begin_of_sequence_marker: "<|begin_of_text|>"
          ...

A bare top-level list of entries is accepted as well. Each entry may use the
canonical snake_case shape above or the legacy flat shape (``modelName``,
``modelId``, ``messages_api``, ...); legacy entries are normalized before
validation. Other top-level keys (``provider``, ``templates`` used as YAML
anchors, ...) are ignored.

Files ending in ``.json`` are parsed as JSON; everything else as YAML.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Union

try:  # Import-time guard; keeps dependency explicit and localized.
    import yaml
except Exception as exc:  # pragma: no cover - import-time guard
    raise RuntimeError(
        "PyYAML is required to load the bedrock_proxy model catalog. "
        "Install the 'pyyaml' package."
    ) from exc

from pydantic import ValidationError

from ..base.logging import get_logger, log_event
from ..base.models import ModelDescriptor
from .legacy import is_legacy_entry, normalize_legacy_entry
from .model_registry import ModelRegistry
from .schema import ModelEntrySchema

_logger = get_logger("bedrock_proxy.registry")

DEFAULT_CATALOG_FILE = "bedrock_models.yaml"


def default_catalog_path() -> Path:
    """Return the packaged catalog (``bedrock_proxy/registry/catalog/bedrock_models.yaml``).

    Computed relative to this file so the working directory does not matter.
    """
    return Path(__file__).resolve().parent / "catalog" / DEFAULT_CATALOG_FILE


def _read_document(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        return json.loads(text)
    return yaml.safe_load(text)


def _entries_from_document(doc: Any, source: str) -> List[Any]:
    """Return the raw entry list of a catalog document.

    Raises:
        ValueError: If the document is neither a list nor a mapping with a
            ``models`` list.
    """
    if isinstance(doc, list):
        return doc
    if isinstance(doc, dict) and isinstance(doc.get("models"), list):
        return doc["models"]
    raise ValueError(f"Catalog {source} must be a list of models or a mapping with a 'models' list.")


def parse_entry(entry: Any, *, position: int = 0) -> ModelDescriptor:
    """Validate one serialized entry and return its descriptor.

    Raises:
        ValueError: Naming the entry (by name when available, otherwise by
            position) when it is malformed.
    """
    if not isinstance(entry, Mapping):
        raise ValueError(f"catalog entry #{position} must be a mapping, got {type(entry).__name__}")
    data = normalize_legacy_entry(entry) if is_legacy_entry(entry) else dict(entry)
    try:
        schema = ModelEntrySchema.model_validate(data)
    except ValidationError as exc:
        label = data.get("name") or f"#{position}"
        raise ValueError(f"invalid catalog entry {label!r}: {exc}") from exc
    return schema.to_descriptor()


def parse_catalog(entries: Iterable[Any]) -> List[ModelDescriptor]:
    """Validate every entry, preserving order."""
    return [parse_entry(entry, position=i) for i, entry in enumerate(entries)]


def load_catalog(path: Optional[Union[str, Path]] = None) -> List[ModelDescriptor]:
    """Read a catalog file (default: the packaged catalog) into descriptors."""
    catalog_path = Path(path) if path is not None else default_catalog_path()
    doc = _read_document(catalog_path)
    descriptors = parse_catalog(_entries_from_document(doc, str(catalog_path)))
    log_event(_logger, "catalog.load", path=str(catalog_path), models=len(descriptors))
    return descriptors


def load_registry(path: Optional[Union[str, Path]] = None) -> ModelRegistry:
    """Build a :class:`ModelRegistry` from a catalog file.

    Raises:
        ValueError: On malformed entries or duplicate model names.
    """
    return ModelRegistry(load_catalog(path))


__all__ = [
    "DEFAULT_CATALOG_FILE",
    "default_catalog_path",
    "parse_entry",
    "parse_catalog",
    "load_catalog",
    "load_registry",
]
