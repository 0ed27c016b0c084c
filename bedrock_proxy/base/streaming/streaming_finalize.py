"""Terminal event construction with consolidated logging."""
from __future__ import annotations

import logging
from typing import Optional

from .streaming import ChatStreamEvent
from ..errors import ProxyError
from ..logging import LogContext, normalized_log_event
from .streaming_metrics import StreamMetrics


def finalize_stream(
    *,
    logger: logging.Logger,
    ctx: LogContext,
    model: str,
    metrics: StreamMetrics,
    error: Optional[ProxyError] = None,
    structured: bool = True,
) -> ChatStreamEvent:
    """Create the terminal `ChatStreamEvent` and log the stream summary once."""
    normalized_log_event(
        logger,
        "stream.decode.end" if error is None else "stream.decode.error",
        ctx,
        phase="finalize",
        structured=structured,
        level=logging.INFO if error is None else logging.ERROR,
        emitted=metrics.emitted > 0,
        tokens=metrics.tokens(),
        error_code=error.code.value if error is not None else None,
        emitted_count=metrics.emitted,
        skipped_count=metrics.skipped,
        time_to_first_token_ms=metrics.time_to_first_token_ms,
        total_duration_ms=metrics.total_duration_ms,
        error=error.message if error is not None else None,
    )
    return ChatStreamEvent(
        model=model,
        delta=None,
        finish=True,
        error=error.message if error is not None else None,
        error_code=error.code.value if error is not None else None,
    )


__all__ = ["finalize_stream"]
