"""Streaming primitives.

Keeps the stream event type separate from the decoder so the HTTP helpers and
tests can depend on it without importing decoding logic.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List


@dataclass
class ChatStreamEvent:
    """Represents one item of a decoded stream.

    Fields:
      model: registry model name
      delta: text increment (``None`` on the terminal event)
      finish: True on the final event
      error: optional error message (finish implicitly True when error)
      error_code: normalized ``ErrorCode`` value when ``error`` is set
      raw: decoded backend payload (optional for debugging)
    """

    model: str
    delta: str | None
    finish: bool = False
    error: str | None = None
    error_code: str | None = None
    raw: Any | None = None

    def is_error(self) -> bool:
        return self.error is not None


def accumulate_text(events: Iterable[ChatStreamEvent]) -> str:
    """Concatenate the deltas of ``events`` in order, ignoring terminal events."""
    parts: List[str] = [e.delta for e in events if e.delta]
    return "".join(parts)


__all__ = ["ChatStreamEvent", "accumulate_text"]
