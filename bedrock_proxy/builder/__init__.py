"""Request building for structured and flattened-prompt models."""

from .request_builder import build_request, clamp_max_tokens, flatten_prompt, validate_input

__all__ = ["build_request", "clamp_max_tokens", "flatten_prompt", "validate_input"]
