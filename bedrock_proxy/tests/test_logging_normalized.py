"""Focused tests for bedrock_proxy.base.logging.

Covers:
- _parse_level string parsing
- normalized_log_event emits required keys and coerces tokens
- log_event drops None fields unless asked
- JsonFormatter hoists event payloads
- configure_logger level survives later get_logger calls
"""
from __future__ import annotations

import json
import logging

from bedrock_proxy.base.log_support import JsonFormatter, LogContext
from bedrock_proxy.base.logging import (
    BASE_LOGGER_NAME,
    LOG_LEVEL_ENV,
    REQUIRED_NORMALIZED_KEYS,
    _parse_level,  # type: ignore[attr-defined]
    configure_logger,
    get_logger,
    log_event,
    normalized_log_event,
)


class _ListHandler(logging.Handler):
    """Capture log records into a list for assertions."""

    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.messages: list[str] = []

    def emit(self, record: logging.LogRecord) -> None:  # pragma: no cover - exercised via tests
        self.messages.append(record.getMessage())


def _capture(name: str) -> tuple[logging.Logger, _ListHandler]:
    logger = get_logger(name)
    handler = _ListHandler()
    logger.handlers[:] = [handler]
    logger.propagate = False
    logger.setLevel(logging.DEBUG)
    return logger, handler


def test_parse_level_variants():
    assert _parse_level(None) == logging.INFO  # nosec B101
    assert _parse_level("debug") == logging.DEBUG  # nosec B101
    assert _parse_level(" WARN ") == logging.WARNING  # nosec B101
    assert _parse_level("unknown", default=logging.ERROR) == logging.ERROR  # nosec B101


def test_normalized_log_event_emits_required_keys():
    logger, handler = _capture("bedrock_proxy.test.logging")
    ctx = LogContext(model="Llama-3-8b", backend_id="meta.llama3-8b-instruct-v1:0")
    normalized_log_event(
        logger,
        "stream.decode.end",
        ctx,
        phase="finalize",
        error_code="timeout",
        emitted=True,
        tokens={"completion": 5},
        structured=False,
    )
    payload = json.loads(handler.messages[-1])
    for key in REQUIRED_NORMALIZED_KEYS:
        assert key in payload  # nosec B101
    assert payload["model"] == "Llama-3-8b"  # nosec B101
    assert payload["tokens"] == {"completion": 5}  # nosec B101
    assert payload["structured"] is False  # nosec B101
    assert payload["attempt"] is None  # nosec B101


def test_normalized_tokens_coerced_and_error_code_omitted():
    logger, handler = _capture("bedrock_proxy.test.logging2")
    normalized_log_event(logger, "x", phase="build", emitted=False, tokens=7, skipped=None, chunk_path="generation")
    payload = json.loads(handler.messages[-1])
    assert payload["tokens"] == {"value": "7"}  # nosec B101
    assert "error_code" not in payload and "skipped" not in payload  # nosec B101
    assert payload["chunk_path"] == "generation"  # nosec B101


def test_log_event_drops_none_unless_kept():
    logger, handler = _capture("bedrock_proxy.test.logging3")
    log_event(logger, "a", chars=None, n=1)
    log_event(logger, "b", keep_none=True, chars=None)
    first, second = (json.loads(m) for m in handler.messages[-2:])
    assert first == {"event": "a", "n": 1}  # nosec B101
    assert second == {"event": "b", "chars": None}  # nosec B101


def test_log_event_respects_level():
    logger, handler = _capture("bedrock_proxy.test.logging4")
    logger.setLevel(logging.WARNING)
    log_event(logger, "quiet", level=logging.DEBUG)
    assert handler.messages == []  # nosec B101


def test_json_formatter_hoists_event_payload():
    record = logging.LogRecord(
        "bedrock_proxy.x", logging.INFO, __file__, 1, json.dumps({"event": "request.build", "max_tokens": 800}), None, None
    )
    line = json.loads(JsonFormatter().format(record))
    assert line["event"] == "request.build"  # nosec B101
    assert line["max_tokens"] == 800  # nosec B101
    assert line["level"] == "INFO" and line["logger"] == "bedrock_proxy.x"  # nosec B101


def test_configure_logger_level_persists(monkeypatch):
    monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)
    base = get_logger(BASE_LOGGER_NAME)
    previous = base.level
    try:
        configure_logger(level="WARNING")
        get_logger("bedrock_proxy.test.persist")
        assert base.level == logging.WARNING  # nosec B101
        monkeypatch.setenv(LOG_LEVEL_ENV, "DEBUG")
        get_logger("bedrock_proxy.test.persist")
        assert base.level == logging.DEBUG  # nosec B101
    finally:
        configure_logger(level=previous)
