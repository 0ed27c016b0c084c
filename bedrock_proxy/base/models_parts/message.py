"""
Chat message DTO.

Defines the frozen `ChatMessage` dataclass and the `Role` literal. Messages
are caller-supplied, ordered, and owned by a single request.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Literal, Tuple


Role = Literal["system", "user", "assistant"]

ROLES: Tuple[str, ...] = ("system", "user", "assistant")


@dataclass(frozen=True)
class ChatMessage:
    """A normalized chat turn.

    Attributes:
        role: ``"system"``, ``"user"`` or ``"assistant"``.
        content: Plain text content of the turn.
    """

    role: Role
    content: str

    def to_dict(self) -> Dict[str, Any]:
        """Return the ``{"role", "content"}`` mapping sent to structured backends."""
        return {"role": self.role, "content": self.content}


__all__ = ["ChatMessage", "Role", "ROLES"]
