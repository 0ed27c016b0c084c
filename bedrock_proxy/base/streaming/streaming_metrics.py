"""Streaming metrics data structures."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class StreamMetrics:
    """Collected metrics for a single stream decode.

    ``emitted`` counts delivered chunks; ``skipped`` counts events that did not
    match the chunk path (metadata frames). ``completion_tokens`` is the largest
    output-token count the backend reported, when it reported one.
    """

    emitted: int = 0
    skipped: int = 0
    time_to_first_token_ms: Optional[float] = None
    total_duration_ms: Optional[float] = None
    completion_tokens: Optional[int] = None

    def observe_completion_tokens(self, value: Any) -> None:
        """Record a backend-reported output token count (keeps the maximum)."""
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            return
        if self.completion_tokens is None or value > self.completion_tokens:
            self.completion_tokens = value

    def tokens(self) -> Dict[str, Optional[int]]:
        return {"completion": self.completion_tokens}


__all__ = ["StreamMetrics"]
