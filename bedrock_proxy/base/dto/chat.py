"""
Pydantic DTOs and validators for inbound chat requests.

Purpose
-------
Validate caller-supplied messages and generation parameters before they reach
the request builder, so malformed input fails closed with a
``pydantic.ValidationError`` instead of producing a broken backend request.

External dependencies: Pydantic only. Callers convert ``ValidationError`` to
``ProxyError(code=VALIDATION)`` at the builder boundary.
"""

from __future__ import annotations

from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr


Role = Literal["system", "user", "assistant"]


class MessageDTO(BaseModel):
    """A single chat turn.

    Rules:
        - ``role`` must be one of ``system``, ``user``, ``assistant``.
        - ``content`` must be a string; multi-part content is not supported by
          the flattened or structured encoders and is rejected.
    """

    model_config = ConfigDict(extra="ignore", from_attributes=True)

    role: Role
    content: StrictStr


class GenerationParamsDTO(BaseModel):
    """Generation controls with bounds checks.

    Parameters:
        max_tokens: Must be positive. Clamping to the model limit happens
            later, in the builder.
        temperature: Within [0.0, 2.0].
        top_p: Within [0.0, 1.0].
        stream: Streaming flag.
    """

    model_config = ConfigDict(extra="ignore", from_attributes=True)

    max_tokens: int = Field(default=800, gt=0)
    temperature: float = Field(default=0.4, ge=0.0, le=2.0)
    top_p: float = Field(default=0.9, ge=0.0, le=1.0)
    stream: StrictBool = False


class ChatRequestDTO(BaseModel):
    """Ordered, non-empty message sequence plus generation parameters."""

    messages: List[MessageDTO] = Field(..., min_length=1)
    params: GenerationParamsDTO = Field(default_factory=GenerationParamsDTO)


__all__ = [
    "Role",
    "MessageDTO",
    "GenerationParamsDTO",
    "ChatRequestDTO",
]
