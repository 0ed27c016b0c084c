"""
Structured proxy error exception type.

Wraps registry, validation, decode and transport failures with a normalized
`ErrorCode` so the HTTP layer can map them to a protocol-appropriate status.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .error_code import ErrorCode


@dataclass
class ProxyError(Exception):
    """Represents a structured failure with a normalized error code.

    Attributes:
        code: Normalized :class:`ErrorCode` classification for the failure.
        message: Human-readable error message suitable for logging.
        model: Optional model name associated with the failure.
        retryable: Hint for upstream retry logic (not authoritative).
        raw: Optional original exception for diagnostics.
    """

    code: ErrorCode
    message: str
    model: Optional[str] = None
    retryable: bool = False
    raw: Optional[Exception] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        """Return a compact string combining model, code, and message."""
        return f"{self.model or '-'} {self.code.value}: {self.message}"


__all__ = ["ProxyError"]
