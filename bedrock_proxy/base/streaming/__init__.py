"""Streaming and response decoding.

Public surface for turning raw backend events (streaming) or a raw backend
response (single shot) into normalized text.
"""

from .streaming import ChatStreamEvent, accumulate_text
from .payload import decode_payload
from .streaming_metrics import StreamMetrics
from .streaming_finalize import finalize_stream
from .decoder import COMPLETION_TOKEN_PATHS, StreamDecoder, decode_stream, register_stream_cleanup
from .aggregator import decode_full, iter_full

__all__ = [
    "ChatStreamEvent",
    "accumulate_text",
    "decode_payload",
    "StreamMetrics",
    "finalize_stream",
    "COMPLETION_TOKEN_PATHS",
    "StreamDecoder",
    "decode_stream",
    "register_stream_cleanup",
    "decode_full",
    "iter_full",
]
