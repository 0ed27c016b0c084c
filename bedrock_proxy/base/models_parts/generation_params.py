"""
Generation parameters for one chat completion.

Defaults mirror the OpenAI-style handler this engine sits behind: 800 tokens,
temperature 0.4, top_p 0.9, non-streaming.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class GenerationParams:
    """Sampling and length controls requested by the caller.

    Attributes:
        max_tokens: Requested response length; clamped per model at build time.
        temperature: Sampling temperature.
        top_p: Nucleus sampling mass.
        stream: Whether the caller wants incremental chunks.
    """

    max_tokens: int = 800
    temperature: float = 0.4
    top_p: float = 0.9
    stream: bool = False


__all__ = ["GenerationParams"]
