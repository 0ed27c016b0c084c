"""OpenAI-compatible response envelopes.

Framework-free helpers an HTTP layer can use to present engine output in the
OpenAI chat-completion wire format:

- ``chunk_envelope`` builds one ``chat.completion.chunk`` object;
- ``completion_envelope`` builds a ``chat.completion`` object with usage
  counted in characters (the backend's token counts are not exposed on the
  single-shot path);
- ``sse_lines`` renders decoded stream events as server-sent-event frames,
  ending with ``data: [DONE]``;
- ``error_envelope`` maps a failure to an HTTP status and error body.
"""
from __future__ import annotations

import json
import time
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Tuple

from ..base.errors import ErrorCode, ProxyError, classify_transport_error
from ..base.streaming import ChatStreamEvent

DONE_FRAME = "data: [DONE]\n\n"

STATUS_BY_CODE: Dict[ErrorCode, int] = {
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.VALIDATION: 400,
    ErrorCode.AUTH: 401,
    ErrorCode.RATE_LIMIT: 429,
    ErrorCode.UNAVAILABLE: 503,
    ErrorCode.TIMEOUT: 504,
}


def http_status_for(code: ErrorCode) -> int:
    """HTTP status for ``code``; anything unmapped is a 500."""
    return STATUS_BY_CODE.get(code, 500)


def new_completion_id(now: Optional[float] = None) -> str:
    """Return a ``chatcmpl-<milliseconds>`` identifier."""
    return f"chatcmpl-{int((time.time() if now is None else now) * 1000)}"


def chunk_envelope(
    delta: Optional[str],
    model: str,
    *,
    completion_id: Optional[str] = None,
    created: Optional[int] = None,
    finish_reason: Optional[str] = None,
) -> Dict[str, Any]:
    """Build a ``chat.completion.chunk`` object carrying ``delta``.

    A ``None`` delta yields an empty ``delta`` object, as used by the closing
    chunk that carries ``finish_reason``.
    """
    now = time.time()
    body: Dict[str, Any] = {} if delta is None else {"role": "assistant", "content": delta}
    return {
        "id": completion_id or new_completion_id(now),
        "object": "chat.completion.chunk",
        "created": created if created is not None else int(now),
        "model": model,
        "choices": [{"index": 0, "delta": body, "finish_reason": finish_reason}],
    }


def _content_of(message: Any) -> str:
    if isinstance(message, Mapping):
        content = message.get("content", "")
    else:
        content = getattr(message, "content", "")
    return content if isinstance(content, str) else ""


def completion_envelope(
    text: str,
    model: str,
    messages: Iterable[Any] = (),
    *,
    completion_id: Optional[str] = None,
    created: Optional[int] = None,
) -> Dict[str, Any]:
    """Build a ``chat.completion`` object for a single-shot reply.

    ``usage`` counts characters: prompt is the summed length of message
    contents, completion is the reply length.
    """
    now = time.time()
    prompt_chars = sum(len(_content_of(m)) for m in messages)
    return {
        "id": completion_id or new_completion_id(now),
        "object": "chat.completion",
        "created": created if created is not None else int(now),
        "model": model,
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": text},
                "finish_reason": "stop",
            }
        ],
        "usage": {
            "prompt_tokens": prompt_chars,
            "completion_tokens": len(text),
            "total_tokens": prompt_chars + len(text),
        },
    }


def _error_body(message: str, code: ErrorCode) -> Tuple[int, Dict[str, Any]]:
    status = http_status_for(code)
    return status, {"error": {"message": message, "type": code.value, "code": status}}


def error_envelope(error: BaseException) -> Tuple[int, Dict[str, Any]]:
    """Return ``(http_status, body)`` for ``error``.

    Non-``ProxyError`` exceptions are classified first, so transport
    failures surface with a meaningful status.
    """
    if not isinstance(error, ProxyError):
        if not isinstance(error, Exception):
            return _error_body(str(error) or type(error).__name__, ErrorCode.INTERNAL)
        error = classify_transport_error(error)
    return _error_body(error.message, error.code)


def sse_frame(payload: Mapping[str, Any]) -> str:
    """Render one ``data: {...}`` server-sent-event frame."""
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n"


def _code_from_event(event: ChatStreamEvent) -> ErrorCode:
    try:
        return ErrorCode(event.error_code)
    except ValueError:
        return ErrorCode.UNKNOWN


def sse_lines(events: Iterable[ChatStreamEvent], model: str) -> Iterator[str]:
    """Render decoded stream events as SSE frames.

    Every delta becomes a chunk frame sharing one completion id. A clean end
    adds a closing chunk with ``finish_reason="stop"``; a failed stream adds an
    error frame instead. The sequence always ends with ``data: [DONE]``.
    """
    now = time.time()
    completion_id = new_completion_id(now)
    created = int(now)
    for event in events:
        if event.finish:
            if event.is_error():
                _, body = _error_body(event.error or "stream failed", _code_from_event(event))
                yield sse_frame(body)
            else:
                yield sse_frame(
                    chunk_envelope(None, model, completion_id=completion_id, created=created, finish_reason="stop")
                )
            break
        if event.delta:
            yield sse_frame(chunk_envelope(event.delta, model, completion_id=completion_id, created=created))
    yield DONE_FRAME


__all__ = [
    "DONE_FRAME",
    "STATUS_BY_CODE",
    "http_status_for",
    "new_completion_id",
    "chunk_envelope",
    "completion_envelope",
    "error_envelope",
    "sse_frame",
    "sse_lines",
]
