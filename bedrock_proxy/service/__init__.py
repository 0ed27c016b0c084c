"""Engine facade and HTTP-layer helpers."""

from .engine import ModelEngine, create_engine
from .openai_compat import (
    chunk_envelope,
    completion_envelope,
    error_envelope,
    http_status_for,
    sse_lines,
)

__all__ = [
    "ModelEngine",
    "create_engine",
    "chunk_envelope",
    "completion_envelope",
    "error_envelope",
    "http_status_for",
    "sse_lines",
]
