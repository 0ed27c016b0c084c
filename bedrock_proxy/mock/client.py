"""Scripted in-memory transport backed by JSON fixtures for offline testing.

Purpose
-------
Implement the :class:`~bedrock_proxy.base.interfaces.Transport` protocol
without any network traffic so tests can exercise request building, stream
decoding and the OpenAI envelope helpers end to end.

Behavior
--------
- Every call records the :class:`BuiltRequest` it received on ``calls``.
- ``invoke`` returns the scripted response; ``invoke_stream`` returns a
  :class:`ScriptedStream` over the scripted events.
- With ``envelope=True`` (default) payloads are wrapped the way the Bedrock
  runtime SDK delivers them: stream events as ``{"chunk": {"bytes": b"..."}}``
  and single responses as a readable body.
- ``error`` is raised by ``invoke`` and at the start of ``invoke_stream``;
  ``stream_error`` is raised mid-stream after ``error_after`` events.

External dependencies
---------------------
Standard library only. Fixtures are loaded via ``importlib.resources``.
"""

from __future__ import annotations

import io
import logging
import json
from importlib import resources
from typing import Any, Dict, Iterator, List, Optional, Sequence

from ..base.logging import LogContext, get_logger, log_event
from ..base.models import BuiltRequest

_FIXTURE_RESOURCE = "bedrock_responses.json"


def load_fixture_catalog(resource: str = _FIXTURE_RESOURCE) -> Dict[str, Any]:
    """Load the JSON fixture catalog bundled with the mock transport.

    Parameters
    ----------
    resource: str, default ``bedrock_responses.json``
        Name of the resource file located under ``bedrock_proxy.mock.fixtures``.

    Returns
    -------
    Dict[str, Any]
        Parsed catalog with per-family ``stream`` events and ``response``.
    """
    package = "bedrock_proxy.mock.fixtures"
    data = resources.files(package).joinpath(resource).read_text(encoding="utf-8")
    return json.loads(data)


def _wrap_event(event: Any) -> Any:
    if isinstance(event, (dict, list)):
        return {"chunk": {"bytes": json.dumps(event).encode("utf-8")}}
    return event


class ScriptedStream:
    """Iterable event source that records whether it was closed."""

    def __init__(
        self,
        events: Sequence[Any],
        *,
        error: Optional[BaseException] = None,
        error_after: Optional[int] = None,
    ) -> None:
        self._events = list(events)
        self._error = error
        self._error_after = len(self._events) if error_after is None else error_after
        self.closed = False
        self.pulled = 0

    def __iter__(self) -> Iterator[Any]:
        for index, event in enumerate(self._events):
            if self._error is not None and index >= self._error_after:
                break
            if self.closed:
                return
            self.pulled += 1
            yield event
        if self._error is not None:
            raise self._error

    def close(self) -> None:
        self.closed = True


class MockTransport:
    """Transport that replays scripted events and responses."""

    def __init__(
        self,
        *,
        events: Optional[Sequence[Any]] = None,
        response: Any = None,
        error: Optional[BaseException] = None,
        stream_error: Optional[BaseException] = None,
        error_after: Optional[int] = None,
        envelope: bool = True,
    ) -> None:
        self.events: List[Any] = list(events or [])
        self.response = response
        self.error = error
        self.stream_error = stream_error
        self.error_after = error_after
        self.envelope = envelope
        self.calls: List[BuiltRequest] = []
        self.streams: List[ScriptedStream] = []
        self._logger = get_logger("bedrock_proxy.mock")

    @classmethod
    def from_fixture(cls, family: str, **kwargs: Any) -> "MockTransport":
        """Build a transport scripted with the ``family`` fixture (claude, llama, mistral)."""
        block = load_fixture_catalog()["families"][family]
        return cls(events=block.get("stream", []), response=block.get("response"), **kwargs)

    def invoke(self, request: BuiltRequest) -> Any:
        self._record(request, "invoke")
        if self.error is not None:
            raise self.error
        if self.envelope and isinstance(self.response, (dict, list)):
            return io.BytesIO(json.dumps(self.response).encode("utf-8"))
        return self.response

    def invoke_stream(self, request: BuiltRequest) -> ScriptedStream:
        self._record(request, "invoke_stream")
        if self.error is not None:
            raise self.error
        events = [_wrap_event(e) for e in self.events] if self.envelope else list(self.events)
        stream = ScriptedStream(events, error=self.stream_error, error_after=self.error_after)
        self.streams.append(stream)
        return stream

    def _record(self, request: BuiltRequest, operation: str) -> None:
        self.calls.append(request)
        log_event(
            self._logger,
            "transport.mock.call",
            LogContext(model=request.model_name, backend_id=request.backend_id),
            level=logging.DEBUG,
            operation=operation,
        )


__all__ = ["MockTransport", "ScriptedStream", "load_fixture_catalog"]
