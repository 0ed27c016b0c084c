"""Cancellation error type.

Defines the public ``CancelledError`` used to signal cooperative cancellation
of a stream decode. Kept isolated so the error taxonomy can import it without
pulling in the token implementation.
"""

from __future__ import annotations


class CancelledError(RuntimeError):
    """Raised when a decode is cancelled cooperatively.

    Distinguishes a downstream disconnect or deadline from backend failures so
    it maps to ``ErrorCode.CANCELLED`` rather than a transport error.
    """

__all__ = ["CancelledError"]
