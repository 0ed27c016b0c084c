"""Raw backend payload decoding.

Backends and transports hand the engine payloads in several shapes. All of
them are normalized to a semi-structured Python value (dicts, lists, scalars)
before a response path is applied:

- mappings and lists pass through unchanged;
- ``bytes``/``bytearray``/``str`` are parsed as UTF-8 JSON;
- the Bedrock event envelope ``{"chunk": {"bytes": ...}}`` is unwrapped;
- objects with ``read()`` (streaming HTTP bodies) are read, then parsed.
"""
from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from ..errors import ErrorCode, ExtractError


def decode_payload(raw: Any) -> Any:
    """Return the semi-structured value carried by ``raw``.

    Raises:
        ExtractError: ``TYPE_MISMATCH`` when text or bytes are not valid JSON.
    """
    if isinstance(raw, Mapping):
        chunk = raw.get("chunk")
        if isinstance(chunk, Mapping) and "bytes" in chunk:
            return decode_payload(chunk["bytes"])
        return raw
    read = getattr(raw, "read", None)
    if callable(read) and not isinstance(raw, (str, bytes, bytearray)):
        return decode_payload(read())
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = bytes(raw).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ExtractError(
                code=ErrorCode.TYPE_MISMATCH, message=f"payload is not UTF-8: {exc}", path="<payload>"
            ) from exc
    if isinstance(raw, str):
        try:
            return json.loads(raw)
        except ValueError as exc:
            raise ExtractError(
                code=ErrorCode.TYPE_MISMATCH, message=f"payload is not JSON: {exc}", path="<payload>"
            ) from exc
    return raw


__all__ = ["decode_payload"]
