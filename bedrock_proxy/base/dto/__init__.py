"""Validation DTOs for inbound chat payloads."""

from .chat import ChatRequestDTO, GenerationParamsDTO, MessageDTO, Role

__all__ = ["ChatRequestDTO", "GenerationParamsDTO", "MessageDTO", "Role"]
