"""Non-streaming aggregation.

A single-shot backend response is decoded and the model's
``full_response_path`` applied once. Unlike streaming, an extraction failure
here is fatal: the caller asked for a reply and there is no later event that
could carry it.
"""
from __future__ import annotations

import logging
from typing import Any, Iterator, Optional

from ..errors import ExtractError
from ..logging import LogContext, get_logger, normalized_log_event
from ..models import ModelDescriptor
from ..paths import extract
from .payload import decode_payload


def decode_full(
    descriptor: ModelDescriptor,
    raw_response: Any,
    *,
    logger: Optional[logging.Logger] = None,
) -> str:
    """Return the complete reply text carried by ``raw_response``.

    Raises:
        ExtractError: When the payload is not decodable or the path does not
            resolve to a string. ``model`` is set on the error.
    """
    logger = logger or get_logger("bedrock_proxy.response")
    ctx = LogContext(model=descriptor.name, backend_id=descriptor.backend_id)
    try:
        text = extract(descriptor.full_response_path, decode_payload(raw_response))
    except ExtractError as exc:
        exc.model = descriptor.name
        normalized_log_event(
            logger,
            "response.decode",
            ctx,
            phase="decode",
            structured=descriptor.uses_structured_messages,
            level=logging.ERROR,
            emitted=False,
            error_code=exc.code.value,
            path=exc.path,
            error=exc.message,
        )
        raise
    normalized_log_event(
        logger,
        "response.decode",
        ctx,
        phase="decode",
        structured=descriptor.uses_structured_messages,
        emitted=bool(text),
        chars=len(text),
    )
    return text


def iter_full(
    descriptor: ModelDescriptor,
    raw_response: Any,
    *,
    logger: Optional[logging.Logger] = None,
) -> Iterator[str]:
    """Present a single-shot response as a one-element stream.

    Decoding happens eagerly so errors surface at call time, not on first
    iteration.
    """
    return iter((decode_full(descriptor, raw_response, logger=logger),))


__all__ = ["decode_full", "iter_full"]
