"""
Domain models public surface.

Re-exports the one-class-per-file implementations under
``bedrock_proxy.base.models_parts``.
"""

from .models_parts.message import ChatMessage, Role, ROLES
from .models_parts.generation_params import GenerationParams
from .models_parts.model_descriptor import ModelDescriptor, PromptTemplate, RoleMarkers
from .models_parts.built_request import BuiltRequest
from .models_parts.model_summary import ModelSummary

__all__ = [
    "ChatMessage",
    "Role",
    "ROLES",
    "GenerationParams",
    "ModelDescriptor",
    "PromptTemplate",
    "RoleMarkers",
    "BuiltRequest",
    "ModelSummary",
]
