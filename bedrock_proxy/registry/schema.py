"""
Pydantic schema for catalog entries.

Purpose
-------
Validate one serialized model entry (canonical snake_case shape) and convert
it into an immutable :class:`ModelDescriptor`. Validation fails closed: a
catalog with a malformed entry never produces a partially usable registry.

Rules
-----
- ``prompt_template`` is required when ``uses_structured_messages`` is false
  and forbidden otherwise.
- ``system_as_separate_field`` only applies to structured models.
- Path texts must parse (``content[0].text`` style).
- ``full_response_path`` defaults to ``stream_chunk_path`` when omitted.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr, field_validator, model_validator

from ..base.models import ModelDescriptor, PromptTemplate, RoleMarkers
from ..base.paths import Path as ResponsePath


class RoleMarkersSchema(BaseModel):
    """Markers for one role; every marker defaults to the empty string."""

    model_config = ConfigDict(extra="forbid")

    message_prefix: StrictStr = ""
    message_suffix: StrictStr = ""
    role_prefix: StrictStr = ""
    role_suffix: StrictStr = ""

    def to_markers(self) -> RoleMarkers:
        return RoleMarkers(
            message_prefix=self.message_prefix,
            message_suffix=self.message_suffix,
            role_prefix=self.role_prefix,
            role_suffix=self.role_suffix,
        )


class PromptTemplateSchema(BaseModel):
    """Flattened-prompt encoding rules."""

    model_config = ConfigDict(extra="forbid")

    begin_of_sequence_marker: StrictStr = ""
    system: RoleMarkersSchema = Field(default_factory=RoleMarkersSchema)
    user: RoleMarkersSchema = Field(default_factory=RoleMarkersSchema)
    assistant: RoleMarkersSchema = Field(default_factory=RoleMarkersSchema)
    end_of_message_marker: StrictStr = ""
    display_role_names: StrictBool = True

    def to_template(self) -> PromptTemplate:
        return PromptTemplate(
            begin_of_sequence_marker=self.begin_of_sequence_marker,
            system=self.system.to_markers(),
            user=self.user.to_markers(),
            assistant=self.assistant.to_markers(),
            end_of_message_marker=self.end_of_message_marker,
            display_role_names=self.display_role_names,
        )


class ModelEntrySchema(BaseModel):
    """One canonical catalog entry."""

    model_config = ConfigDict(extra="forbid")

    name: StrictStr = Field(..., min_length=1)
    backend_id: StrictStr = Field(..., min_length=1)
    uses_structured_messages: StrictBool
    system_as_separate_field: StrictBool = False
    token_limit_param_name: StrictStr = Field(..., min_length=1)
    max_supported_response_tokens: int = Field(..., gt=0)
    stream_chunk_path: StrictStr
    full_response_path: Optional[StrictStr] = None
    prompt_template: Optional[PromptTemplateSchema] = None
    special_request_fields: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("stream_chunk_path", "full_response_path")
    @classmethod
    def _path_must_parse(cls, value: Optional[str]) -> Optional[str]:
        if value is not None:
            ResponsePath.parse(value)
        return value

    @model_validator(mode="after")
    def _check_convention(self) -> "ModelEntrySchema":
        if self.uses_structured_messages:
            if self.prompt_template is not None:
                raise ValueError("prompt_template is only valid for flattened-prompt models")
        else:
            if self.prompt_template is None:
                raise ValueError("flattened-prompt models require a prompt_template")
            if self.system_as_separate_field:
                raise ValueError("system_as_separate_field is only valid for structured models")
        return self

    def to_descriptor(self) -> ModelDescriptor:
        """Build the immutable descriptor for this entry."""
        stream_path = ResponsePath.parse(self.stream_chunk_path)
        full_path = ResponsePath.parse(self.full_response_path) if self.full_response_path else stream_path
        return ModelDescriptor(
            name=self.name,
            backend_id=self.backend_id,
            uses_structured_messages=self.uses_structured_messages,
            token_limit_param_name=self.token_limit_param_name,
            max_supported_response_tokens=self.max_supported_response_tokens,
            stream_chunk_path=stream_path,
            full_response_path=full_path,
            system_as_separate_field=self.system_as_separate_field,
            prompt_template=self.prompt_template.to_template() if self.prompt_template else None,
            special_request_fields=dict(self.special_request_fields),
        )


__all__ = ["RoleMarkersSchema", "PromptTemplateSchema", "ModelEntrySchema"]
