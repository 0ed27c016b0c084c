"""Errors parts package public surface.

Re-exports individual error taxonomy components for optional direct imports.
Prefer importing from `bedrock_proxy.base.errors` for the stable surface.
"""

from .error_code import ErrorCode
from .proxy_error import ProxyError
from .extract_error import ExtractError
from .classification import classify_error_frame, classify_exception, classify_transport_error

__all__ = ["ErrorCode", "ProxyError", "ExtractError", "classify_exception", "classify_transport_error", "classify_error_frame"]
