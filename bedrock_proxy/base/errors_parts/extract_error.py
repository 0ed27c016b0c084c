"""
Response path extraction error.

Raised by :func:`bedrock_proxy.base.paths.extract` when a response value does
not have the shape a configured path expects. Recoverable per event while
streaming, fatal for single-shot responses.
"""
from __future__ import annotations

from dataclasses import dataclass

from .proxy_error import ProxyError


@dataclass
class ExtractError(ProxyError):
    """A :class:`ProxyError` carrying the path that failed to resolve.

    ``code`` is one of ``PATH_NOT_FOUND``, ``INDEX_OUT_OF_RANGE`` or
    ``TYPE_MISMATCH``.
    """

    path: str = ""


__all__ = ["ExtractError"]
