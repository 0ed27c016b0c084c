"""
Normalized error codes (taxonomy).

Defines the `ErrorCode` enumeration used by the registry, request builder,
path extractor, and stream decoders. Values are lowercase snake_case and are
considered a stable public contract for logging and HTTP status mapping.
"""
from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Enumerated normalized error codes representing failure categories."""

    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    PATH_NOT_FOUND = "path_not_found"
    INDEX_OUT_OF_RANGE = "index_out_of_range"
    TYPE_MISMATCH = "type_mismatch"
    RATE_LIMIT = "rate_limit"
    AUTH = "auth"
    UNAVAILABLE = "unavailable"
    MALFORMED = "malformed"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
    INTERNAL = "internal"
    UNKNOWN = "unknown"


EXTRACT_ERROR_CODES = frozenset(
    {ErrorCode.PATH_NOT_FOUND, ErrorCode.INDEX_OUT_OF_RANGE, ErrorCode.TYPE_MISMATCH}
)

RETRYABLE_CODES = frozenset({ErrorCode.RATE_LIMIT, ErrorCode.UNAVAILABLE, ErrorCode.TIMEOUT})


__all__ = ["ErrorCode", "EXTRACT_ERROR_CODES", "RETRYABLE_CODES"]
