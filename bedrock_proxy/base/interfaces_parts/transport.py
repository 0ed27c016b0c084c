"""Transport Protocol (single-class module).

The network call to the inference backend is owned by the caller. This
protocol fixes the shape the engine expects from it.
"""

from __future__ import annotations

from typing import Any, Iterable, Protocol, runtime_checkable

from ..models import BuiltRequest


@runtime_checkable
class Transport(Protocol):
    """Executes a :class:`BuiltRequest` against the backend.

    Failures should surface as exceptions; the engine classifies them with
    ``classify_transport_error`` (throttling, auth, unavailable, malformed)
    and never retries. A streaming iterable that exposes ``close()`` is closed
    when the consumer stops early or a decode is cancelled.
    """

    def invoke(self, request: BuiltRequest) -> Any:
        """Return one raw backend response (mapping, JSON bytes/str, or a readable body)."""
        ...

    def invoke_stream(self, request: BuiltRequest) -> Iterable[Any]:
        """Return a lazy iterable of raw backend stream events."""
        ...
