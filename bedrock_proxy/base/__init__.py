"""
Engine base package.

Exports the provider-agnostic building blocks used by the registry, the
request builder and the service layer:

- Errors: ``ProxyError`` / ``ExtractError`` and the ``ErrorCode`` taxonomy
- Models: messages, generation params, descriptors, built requests
- Paths: response path parsing and extraction
- Streaming: stream decoding and single-shot aggregation
- Cancellation: cooperative cancellation token
"""

from .errors import ErrorCode, ExtractError, ProxyError, classify_transport_error
from .models import (
    BuiltRequest,
    ChatMessage,
    GenerationParams,
    ModelDescriptor,
    ModelSummary,
    PromptTemplate,
    Role,
    RoleMarkers,
)
from .paths import Path, extract, resolve
from .interfaces import Transport
from .cancellation import CancellationToken, CancelledError
from .streaming import ChatStreamEvent, StreamDecoder, StreamMetrics, decode_full, decode_stream, iter_full

__all__ = [
    # Errors
    "ErrorCode",
    "ProxyError",
    "ExtractError",
    "classify_transport_error",
    # Models
    "Role",
    "ChatMessage",
    "GenerationParams",
    "ModelDescriptor",
    "PromptTemplate",
    "RoleMarkers",
    "BuiltRequest",
    "ModelSummary",
    # Paths
    "Path",
    "extract",
    "resolve",
    # Interfaces
    "Transport",
    # Cancellation
    "CancellationToken",
    "CancelledError",
    # Streaming
    "ChatStreamEvent",
    "StreamDecoder",
    "StreamMetrics",
    "decode_stream",
    "decode_full",
    "iter_full",
]
