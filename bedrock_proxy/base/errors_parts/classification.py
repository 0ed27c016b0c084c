"""
Transport error classification.

Maps exceptions raised by the external transport into :class:`ProxyError`
values with a normalized :class:`ErrorCode`. Only enough classification is
done for a caller to decide between retry and fail; nothing here retries.

Precedence:
    1. ProxyError passthrough.
    2. Cancellation and timeout exception types.
    3. AWS-style error code (``exc.response["Error"]["Code"]`` or the
       exception class name, e.g. ``ThrottlingException``).
    4. HTTP status mapping.
    5. Message substring heuristics.
    6. ``UNKNOWN`` fallback.
"""
from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional

from ..cancellation_parts.cancelled_error import CancelledError
from .error_code import ErrorCode, RETRYABLE_CODES
from .proxy_error import ProxyError


_AWS_ERROR_MAP: Dict[str, ErrorCode] = {
    "ThrottlingException": ErrorCode.RATE_LIMIT,
    "TooManyRequestsException": ErrorCode.RATE_LIMIT,
    "ServiceQuotaExceededException": ErrorCode.RATE_LIMIT,
    "AccessDeniedException": ErrorCode.AUTH,
    "UnrecognizedClientException": ErrorCode.AUTH,
    "ExpiredTokenException": ErrorCode.AUTH,
    "InvalidSignatureException": ErrorCode.AUTH,
    "ValidationException": ErrorCode.MALFORMED,
    "SerializationException": ErrorCode.MALFORMED,
    "ResourceNotFoundException": ErrorCode.MALFORMED,
    "ServiceUnavailableException": ErrorCode.UNAVAILABLE,
    "InternalServerException": ErrorCode.UNAVAILABLE,
    "ModelNotReadyException": ErrorCode.UNAVAILABLE,
    "ModelErrorException": ErrorCode.UNAVAILABLE,
    "ModelStreamErrorException": ErrorCode.UNAVAILABLE,
    "ModelTimeoutException": ErrorCode.TIMEOUT,
}


_HTTP_STATUS_MAP: Dict[int, ErrorCode] = {
    400: ErrorCode.MALFORMED,
    401: ErrorCode.AUTH,
    403: ErrorCode.AUTH,
    404: ErrorCode.MALFORMED,
    408: ErrorCode.TIMEOUT,
    422: ErrorCode.MALFORMED,
    424: ErrorCode.UNAVAILABLE,
    429: ErrorCode.RATE_LIMIT,
    500: ErrorCode.UNAVAILABLE,
    502: ErrorCode.UNAVAILABLE,
    503: ErrorCode.UNAVAILABLE,
    504: ErrorCode.TIMEOUT,
}


def _response_mapping(exc: Exception) -> Optional[Dict[str, Any]]:
    resp = getattr(exc, "response", None)
    return resp if isinstance(resp, dict) else None


def _extract_aws_code(exc: Exception) -> Optional[str]:
    """Return the AWS error code of a botocore-style exception, if any.

    Checks ``exc.response["Error"]["Code"]`` first, then falls back to the
    exception class name (SDK-modeled exceptions are named after the code).
    """
    resp = _response_mapping(exc)
    if resp is not None:
        err = resp.get("Error")
        if isinstance(err, dict) and isinstance(err.get("Code"), str):
            return err["Code"]
    name = type(exc).__name__
    return name if name in _AWS_ERROR_MAP else None


def _extract_status(exc: Exception) -> Optional[int]:
    """Attempt to extract an HTTP status code from a transport exception.

    Supported shapes (checked in order):
    - ``exc.status_code`` / ``exc.status``
    - ``exc.response.status_code``
    - ``exc.response["ResponseMetadata"]["HTTPStatusCode"]``
    Returns ``None`` if no valid status can be found.
    """
    for attr in ("status_code", "status"):
        val = getattr(exc, attr, None)
        if isinstance(val, int) and 100 <= val < 600:
            return val
    resp = getattr(exc, "response", None)
    if resp is not None and not isinstance(resp, dict):
        sc = getattr(resp, "status_code", None)
        if isinstance(sc, int) and 100 <= sc < 600:
            return sc
    mapping = _response_mapping(exc)
    if mapping is not None:
        meta = mapping.get("ResponseMetadata")
        sc = meta.get("HTTPStatusCode") if isinstance(meta, dict) else None
        if isinstance(sc, int) and 100 <= sc < 600:
            return sc
    return None


def _heuristic_from_message(msg: str) -> Optional[ErrorCode]:  # pragma: no cover - simple mapping
    """Substring heuristic mapping for exceptions without structured metadata."""
    PATTERN_GROUPS = (
        (ErrorCode.RATE_LIMIT, ("throttl",)),
        (ErrorCode.RATE_LIMIT, ("too many requests",)),
        (ErrorCode.RATE_LIMIT, ("rate limit",)),
        (ErrorCode.TIMEOUT, ("timeout",)),
        (ErrorCode.TIMEOUT, ("timed out",)),
        (ErrorCode.AUTH, ("unauthorized",)),
        (ErrorCode.AUTH, ("access denied",)),
        (ErrorCode.AUTH, ("security token",)),
        (ErrorCode.UNAVAILABLE, ("unavailable",)),
        (ErrorCode.UNAVAILABLE, ("connection reset",)),
        (ErrorCode.MALFORMED, ("malformed",)),
        (ErrorCode.MALFORMED, ("validation",)),
        (ErrorCode.MALFORMED, ("invalid",)),
    )
    for code, patterns in PATTERN_GROUPS:
        if any(p in msg for p in patterns):
            return code
    return None


def classify_exception(exc: Exception) -> ErrorCode:
    """Classify an exception into a normalized :class:`ErrorCode`."""
    if isinstance(exc, ProxyError):
        return exc.code
    if isinstance(exc, CancelledError):
        return ErrorCode.CANCELLED
    if isinstance(exc, (TimeoutError, asyncio.TimeoutError)):
        return ErrorCode.TIMEOUT
    aws_code = _extract_aws_code(exc)
    if aws_code is not None and aws_code in _AWS_ERROR_MAP:
        return _AWS_ERROR_MAP[aws_code]
    status = _extract_status(exc)
    if status is not None and status in _HTTP_STATUS_MAP:
        return _HTTP_STATUS_MAP[status]
    code = _heuristic_from_message(str(exc).lower())
    return code if code is not None else ErrorCode.UNKNOWN


def classify_transport_error(exc: Exception, *, model: Optional[str] = None) -> ProxyError:
    """Wrap a transport exception into a :class:`ProxyError`.

    ``ProxyError`` instances pass through unchanged (the model is filled in
    when missing). The original exception is preserved on ``raw``.
    """
    if isinstance(exc, ProxyError):
        if exc.model is None and model is not None:
            exc.model = model
        return exc
    code = classify_exception(exc)
    return ProxyError(
        code=code,
        message=str(exc)[:260] or type(exc).__name__,
        model=model,
        retryable=code in RETRYABLE_CODES,
        raw=exc,
    )


def classify_error_frame(frame: Any, *, model: Optional[str] = None) -> Optional[ProxyError]:
    """Return a :class:`ProxyError` when ``frame`` is an in-band exception event.

    Bedrock event streams report mid-stream failures as single-key frames such
    as ``{"throttlingException": {"message": "..."}}``. Ordinary content and
    metadata frames return ``None``.
    """
    if not isinstance(frame, dict):
        return None
    for key, body in frame.items():
        if not (isinstance(key, str) and key.endswith("Exception")):
            continue
        aws_code = key[:1].upper() + key[1:]
        code = _AWS_ERROR_MAP.get(aws_code, ErrorCode.UNKNOWN)
        message = body.get("message") if isinstance(body, dict) else None
        return ProxyError(
            code=code,
            message=str(message or aws_code)[:260],
            model=model,
            retryable=code in RETRYABLE_CODES,
        )
    return None


__all__ = [
    "classify_exception",
    "classify_transport_error",
    "classify_error_frame",
    "_extract_status",
    "_extract_aws_code",
    "_HTTP_STATUS_MAP",
]
