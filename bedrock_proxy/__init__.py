"""bedrock_proxy: model abstraction and streaming normalization.

Turns normalized chat messages into vendor-correct Bedrock request bodies and
decodes vendor-specific streaming or single-shot responses into plain text
increments, for structured-message and flattened-prompt models alike.

Typical use::

    from bedrock_proxy import create_engine

    engine = create_engine()
    request = engine.build_request(messages, "Llama-3-8b", {"stream": True})
    for text in engine.decode_stream(transport.invoke_stream(request), "Llama-3-8b"):
        ...
"""

from .base import (
    BuiltRequest,
    CancellationToken,
    ChatMessage,
    ChatStreamEvent,
    ErrorCode,
    ExtractError,
    GenerationParams,
    ModelDescriptor,
    ModelSummary,
    Path,
    PromptTemplate,
    ProxyError,
    RoleMarkers,
    Transport,
    decode_full,
    decode_stream,
    extract,
)
from .builder import build_request
from .registry import ModelRegistry, load_registry
from .service import ModelEngine, create_engine

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "ModelEngine",
    "create_engine",
    "ModelRegistry",
    "load_registry",
    "build_request",
    "decode_stream",
    "decode_full",
    "extract",
    "Path",
    "ErrorCode",
    "ProxyError",
    "ExtractError",
    "ChatMessage",
    "GenerationParams",
    "ModelDescriptor",
    "PromptTemplate",
    "RoleMarkers",
    "BuiltRequest",
    "ModelSummary",
    "ChatStreamEvent",
    "CancellationToken",
    "Transport",
]
