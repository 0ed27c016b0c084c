"""Streaming decoder: raw backend events to normalized text increments.

Lifecycle of one decode::

    Open -> (Emitting)* -> Closed

``Closed`` is reached on end of stream, on a transport or in-band backend
error, on cancellation, or when the optional deadline elapses. Every path ends
with exactly one terminal :class:`ChatStreamEvent` (``finish=True``); failures
carry ``error`` and ``error_code`` on that event. Chunks already yielded are
never retracted.

Per raw event the decoder:

1. decodes the payload to a semi-structured value (``decode_payload``);
2. raises on in-band exception frames (``throttlingException`` and friends);
3. records any output-token count the backend reports;
4. applies the model's ``stream_chunk_path``. A match yields a chunk; an
   ``ExtractError`` marks the event as metadata and it is skipped.

Empty increments are dropped; concatenating yielded deltas is unaffected.
Cancellation and the deadline are checked around every pull, so an event
that arrives after either is never emitted. Both also close the source from
another thread, which releases a pull blocked on the transport.
The decoder is a pull-based generator and never buffers the reply.
"""
from __future__ import annotations

import logging
import threading
import time
from contextlib import ExitStack, suppress
from typing import Any, Iterable, Iterator, Optional, Tuple

from ..cancellation import CancellationToken, CancelledError
from ..errors import ErrorCode, ExtractError, ProxyError, classify_error_frame, classify_transport_error
from ..logging import LogContext, get_logger, log_event, normalized_log_event
from ..models import ModelDescriptor
from ..paths import Path, extract, resolve
from .payload import decode_payload
from .streaming import ChatStreamEvent
from .streaming_finalize import finalize_stream
from .streaming_metrics import StreamMetrics


# Where known backends report output token counts on stream events.
COMPLETION_TOKEN_PATHS: Tuple[Path, ...] = (
    Path.parse("amazon-bedrock-invocationMetrics.outputTokenCount"),
    Path.parse("usage.output_tokens"),
    Path.parse("generation_token_count"),
)


def _close_quietly(stream: Any) -> None:
    close_fn = getattr(stream, "close", None)
    if callable(close_fn):
        with suppress(Exception):
            close_fn()


def register_stream_cleanup(stream: Any, stack: ExitStack) -> None:
    """Register a best-effort ``close()`` of the transport stream."""
    if callable(getattr(stream, "close", None)):
        stack.callback(_close_quietly, stream)


class StreamDecoder:
    """Decodes one backend event stream for one model."""

    def __init__(
        self,
        descriptor: ModelDescriptor,
        events: Iterable[Any],
        *,
        cancellation_token: Optional[CancellationToken] = None,
        timeout_seconds: Optional[float] = None,
        logger: Optional[logging.Logger] = None,
        ctx: Optional[LogContext] = None,
    ) -> None:
        self.descriptor = descriptor
        self._events = events
        self._token = cancellation_token
        self._timeout_seconds = timeout_seconds
        self._logger = logger or get_logger("bedrock_proxy.stream")
        self.ctx = ctx or LogContext(model=descriptor.name, backend_id=descriptor.backend_id)
        self.metrics = StreamMetrics()
        self.error: Optional[ProxyError] = None
        self._expired: Optional[CancellationToken] = None

    def run(self) -> Iterator[ChatStreamEvent]:
        """Yield delta events followed by exactly one terminal event."""
        t0 = time.perf_counter()
        deadline = t0 + self._timeout_seconds if self._timeout_seconds is not None else None
        with ExitStack() as stack:
            register_stream_cleanup(self._events, stack)
            if self._token is not None:
                # Unblocks a pull stuck on the network when cancel comes from another thread.
                stack.callback(self._token.add_callback(lambda: _close_quietly(self._events)))
            if self._timeout_seconds is not None:
                self._arm_deadline(stack)
            try:
                source = iter(self._events)
                if source is not self._events:
                    register_stream_cleanup(source, stack)
                while True:
                    self._check_interrupts(deadline)
                    try:
                        raw = next(source)
                    except StopIteration:
                        # A source closed by the deadline or a cancel may just end.
                        self._check_interrupts(deadline)
                        break
                    self._check_interrupts(deadline)
                    delta, value = self._translate(raw)
                    if not delta:
                        continue
                    if self.metrics.emitted == 0:
                        self.metrics.time_to_first_token_ms = (time.perf_counter() - t0) * 1000.0
                    self.metrics.emitted += 1
                    yield ChatStreamEvent(model=self.descriptor.name, delta=delta, raw=value)
            except CancelledError as exc:
                yield self._terminal(t0, self._cancelled(exc))
                return
            except Exception as exc:
                # Closing the source from another thread surfaces as a transport error.
                error = self._interruption(deadline) or classify_transport_error(exc, model=self.descriptor.name)
                yield self._terminal(t0, error)
                return
            yield self._terminal(t0, None)

    def _arm_deadline(self, stack: ExitStack) -> None:
        """Close the source from a timer thread once the deadline passes."""
        expired = CancellationToken()
        self._expired = expired
        stack.callback(expired.add_callback(lambda: _close_quietly(self._events)))
        timer = threading.Timer(max(self._timeout_seconds or 0.0, 0.0), expired.cancel, kwargs={"reason": "timeout"})
        timer.daemon = True
        timer.start()
        stack.callback(timer.cancel)

    def _cancelled(self, exc: CancelledError) -> ProxyError:
        message = exc.args[0] if exc.args else "decode cancelled"
        return ProxyError(code=ErrorCode.CANCELLED, message=message, model=self.descriptor.name)

    def _interruption(self, deadline: Optional[float]) -> Optional[ProxyError]:
        """Return the CANCELLED/TIMEOUT error when the decode was interrupted."""
        try:
            self._check_interrupts(deadline)
        except CancelledError as exc:
            return self._cancelled(exc)
        except TimeoutError as exc:
            return classify_transport_error(exc, model=self.descriptor.name)
        return None

    def _check_interrupts(self, deadline: Optional[float]) -> None:
        if self._token is not None:
            self._token.raise_if_cancelled()
        expired = self._expired is not None and self._expired.cancelled
        if expired or (deadline is not None and time.perf_counter() >= deadline):
            raise TimeoutError(f"stream exceeded {self._timeout_seconds}s")

    def _translate(self, raw: Any) -> Tuple[Optional[str], Any]:
        """Return ``(delta, decoded_value)``; ``delta`` is ``None`` for metadata events."""
        try:
            value = decode_payload(raw)
        except ExtractError as exc:
            self._skip(exc)
            return None, None
        frame_error = classify_error_frame(value, model=self.descriptor.name)
        if frame_error is not None:
            raise frame_error
        self._observe_tokens(value)
        try:
            return extract(self.descriptor.stream_chunk_path, value), value
        except ExtractError as exc:
            self._skip(exc)
            return None, value

    def _observe_tokens(self, value: Any) -> None:
        for path in COMPLETION_TOKEN_PATHS:
            with suppress(ExtractError):
                self.metrics.observe_completion_tokens(resolve(path, value))

    def _skip(self, exc: ExtractError) -> None:
        self.metrics.skipped += 1
        log_event(
            self._logger,
            "stream.decode.skip",
            self.ctx,
            level=logging.DEBUG,
            reason=exc.code.value,
            detail=exc.message,
        )

    def _terminal(self, t0: float, error: Optional[ProxyError]) -> ChatStreamEvent:
        self.metrics.total_duration_ms = (time.perf_counter() - t0) * 1000.0
        self.error = error
        if error is None and self.metrics.emitted == 0 and (self.metrics.completion_tokens or 0) > 0:
            normalized_log_event(
                self._logger,
                "stream.decode.empty",
                self.ctx,
                phase="finalize",
                structured=self.descriptor.uses_structured_messages,
                level=logging.WARNING,
                emitted=False,
                tokens=self.metrics.tokens(),
                skipped_count=self.metrics.skipped,
                chunk_path=str(self.descriptor.stream_chunk_path),
            )
        return finalize_stream(
            logger=self._logger,
            ctx=self.ctx,
            model=self.descriptor.name,
            metrics=self.metrics,
            error=error,
            structured=self.descriptor.uses_structured_messages,
        )


def decode_stream(
    descriptor: ModelDescriptor,
    events: Iterable[Any],
    *,
    cancellation_token: Optional[CancellationToken] = None,
    timeout_seconds: Optional[float] = None,
    logger: Optional[logging.Logger] = None,
) -> Iterator[str]:
    """Yield text increments for ``events``; raise the terminal error, if any.

    The exception is raised only after every chunk decoded before the failure
    has been yielded.
    """
    decoder = StreamDecoder(
        descriptor,
        events,
        cancellation_token=cancellation_token,
        timeout_seconds=timeout_seconds,
        logger=logger,
    )
    events_iter = decoder.run()
    try:
        for event in events_iter:
            if event.finish:
                break
            if event.delta:
                yield event.delta
    finally:
        events_iter.close()
    if decoder.error is not None:
        raise decoder.error


__all__ = ["StreamDecoder", "decode_stream", "register_stream_cleanup", "COMPLETION_TOKEN_PATHS"]
