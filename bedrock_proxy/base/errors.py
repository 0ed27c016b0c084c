"""Unified error taxonomy public surface.

This module re-exports the one-class-per-file implementations under
``bedrock_proxy.base.errors_parts`` to maintain a stable import path.
"""

from .errors_parts.error_code import ErrorCode, EXTRACT_ERROR_CODES, RETRYABLE_CODES
from .errors_parts.proxy_error import ProxyError
from .errors_parts.extract_error import ExtractError
from .errors_parts.classification import classify_error_frame, classify_exception, classify_transport_error

__all__ = [
    "ErrorCode",
    "EXTRACT_ERROR_CODES",
    "RETRYABLE_CODES",
    "ProxyError",
    "ExtractError",
    "classify_exception",
    "classify_error_frame",
    "classify_transport_error",
]
