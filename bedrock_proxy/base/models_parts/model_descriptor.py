"""
Model descriptor and prompt template records.

A `ModelDescriptor` is the static per-model configuration that drives request
building and response decoding. Descriptors are created once when the catalog
is loaded and are read-only for the life of the process, so any number of
in-flight requests may share them without locking.

Two calling conventions are distinguished by ``uses_structured_messages``:

- structured: chat turns are sent as a native list of role/content pairs;
- flattened prompt: turns are encoded into one string using the
  :class:`PromptTemplate` markers.

``prompt_template`` is present exactly when the convention is the flattened
prompt.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional

from ..paths import Path
from .message import Role


@dataclass(frozen=True)
class RoleMarkers:
    """Per-role markers wrapped around a flattened message.

    ``role_prefix``/``role_suffix`` surround the literal role name (only
    emitted when the template displays role names); ``message_prefix``/
    ``message_suffix`` surround the message content.
    """

    message_prefix: str = ""
    message_suffix: str = ""
    role_prefix: str = ""
    role_suffix: str = ""


@dataclass(frozen=True)
class PromptTemplate:
    """Encoding rules for the flattened-prompt convention."""

    begin_of_sequence_marker: str
    system: RoleMarkers
    user: RoleMarkers
    assistant: RoleMarkers
    end_of_message_marker: str = ""
    display_role_names: bool = True

    def markers_for(self, role: Role) -> RoleMarkers:
        """Return the markers configured for ``role``."""
        return getattr(self, role)


@dataclass(frozen=True)
class ModelDescriptor:
    """Immutable per-model encoding rules.

    Attributes:
        name: Public model name callers select (registry key).
        backend_id: Opaque backend identifier passed to the transport.
        uses_structured_messages: Calling convention selector.
        token_limit_param_name: Body key for the response-length limit.
        max_supported_response_tokens: Upper bound the backend accepts.
        stream_chunk_path: Selector yielding a text increment from a stream event.
        full_response_path: Selector yielding the full text from a single response.
        system_as_separate_field: Structured mode only; lift the first system
            message into a top-level ``system`` key.
        prompt_template: Flattened mode only.
        special_request_fields: Constant body fields merged verbatim.
    """

    name: str
    backend_id: str
    uses_structured_messages: bool
    token_limit_param_name: str
    max_supported_response_tokens: int
    stream_chunk_path: Path
    full_response_path: Path
    system_as_separate_field: bool = False
    prompt_template: Optional[PromptTemplate] = None
    # Excluded from the hash: mappingproxy is unhashable; still compared by value.
    special_request_fields: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}), hash=False)

    def __post_init__(self) -> None:
        if not isinstance(self.special_request_fields, MappingProxyType):
            object.__setattr__(
                self, "special_request_fields", MappingProxyType(dict(self.special_request_fields))
            )

    @property
    def display_role_names(self) -> bool:
        """Whether flattened prompts carry role labels (``False`` for structured models)."""
        return bool(self.prompt_template and self.prompt_template.display_role_names)


__all__ = ["RoleMarkers", "PromptTemplate", "ModelDescriptor"]
