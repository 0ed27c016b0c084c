"""Normalization of the legacy flat catalog shape.

Older model tables describe each model as one flat mapping with camelCase
identity keys and per-role marker keys::

    modelName, modelId, messages_api, system_as_separate_field,
    bos_text, eom_text, display_role_names,
    role_<role>_prefix, role_<role>_suffix,
    role_<role>_message_prefix, role_<role>_message_suffix,
    max_tokens_param_name, max_supported_response_tokens,
    response_chunk_element, response_nonchunk_element,
    special_request_schema

``normalize_legacy_entry`` rewrites such an entry into the canonical shape
validated by :class:`ModelEntrySchema`. Unknown keys are dropped.
"""
from __future__ import annotations

from typing import Any, Dict, Mapping

LEGACY_MARKER_KEYS = ("modelName", "modelId", "messages_api")

_ROLES = ("system", "user", "assistant")


def is_legacy_entry(entry: Mapping[str, Any]) -> bool:
    """Return ``True`` when ``entry`` uses the legacy flat key names."""
    return any(key in entry for key in LEGACY_MARKER_KEYS)


def _role_markers(entry: Mapping[str, Any], role: str) -> Dict[str, Any]:
    return {
        "message_prefix": entry.get(f"role_{role}_message_prefix", ""),
        "message_suffix": entry.get(f"role_{role}_message_suffix", ""),
        "role_prefix": entry.get(f"role_{role}_prefix", ""),
        "role_suffix": entry.get(f"role_{role}_suffix", ""),
    }


def normalize_legacy_entry(entry: Mapping[str, Any]) -> Dict[str, Any]:
    """Translate one legacy flat entry to the canonical mapping."""
    structured = entry.get("messages_api")
    out: Dict[str, Any] = {
        "name": entry.get("modelName"),
        "backend_id": entry.get("modelId"),
        "uses_structured_messages": structured,
        "token_limit_param_name": entry.get("max_tokens_param_name"),
        "max_supported_response_tokens": entry.get("max_supported_response_tokens"),
        "stream_chunk_path": entry.get("response_chunk_element"),
    }
    if entry.get("response_nonchunk_element") is not None:
        out["full_response_path"] = entry["response_nonchunk_element"]
    if entry.get("special_request_schema"):
        out["special_request_fields"] = dict(entry["special_request_schema"])
    if structured is False:
        out["prompt_template"] = {
            "begin_of_sequence_marker": entry.get("bos_text", ""),
            "end_of_message_marker": entry.get("eom_text", ""),
            "display_role_names": entry.get("display_role_names", True),
            **{role: _role_markers(entry, role) for role in _ROLES},
        }
    elif "system_as_separate_field" in entry:
        out["system_as_separate_field"] = entry["system_as_separate_field"]
    return out


__all__ = ["is_legacy_entry", "normalize_legacy_entry", "LEGACY_MARKER_KEYS"]
