"""
Built backend request.

The output of the request builder: everything the external transport needs to
invoke one model, and nothing transport-specific.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Tuple


@dataclass
class BuiltRequest:
    """A vendor-shaped request body plus routing metadata.

    Attributes:
        model_name: Registry name the caller selected.
        backend_id: Backend identifier to invoke.
        body: JSON-serializable request body.
        stream: Whether the caller asked for a streaming response.
        stop_sequences: End-of-message markers for flattened-prompt models,
            carried as generation metadata rather than prompt text.
    """

    model_name: str
    backend_id: str
    body: Dict[str, Any]
    stream: bool = False
    stop_sequences: Tuple[str, ...] = field(default_factory=tuple)

    def to_json(self) -> bytes:
        """Serialize ``body`` to UTF-8 JSON bytes for the transport."""
        return json.dumps(self.body, ensure_ascii=False).encode("utf-8")


__all__ = ["BuiltRequest"]
