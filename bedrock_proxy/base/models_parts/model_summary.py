"""
ModelSummary DTO for discovery listings.

Exposes only the fields relevant to clients choosing a model. Backend
identifiers and constant request fields are internal and are left out.
"""
from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict

from .model_descriptor import ModelDescriptor


@dataclass(frozen=True)
class ModelSummary:
    """Discovery view of one registry entry."""

    name: str
    uses_structured_messages: bool
    system_as_separate_field: bool
    display_role_names: bool
    max_supported_response_tokens: int
    supports_streaming: bool = True

    @classmethod
    def from_descriptor(cls, descriptor: ModelDescriptor) -> "ModelSummary":
        return cls(
            name=descriptor.name,
            uses_structured_messages=descriptor.uses_structured_messages,
            system_as_separate_field=descriptor.system_as_separate_field,
            display_role_names=descriptor.display_role_names,
            max_supported_response_tokens=descriptor.max_supported_response_tokens,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable dictionary representation of the entry."""
        return asdict(self)


__all__ = ["ModelSummary"]
