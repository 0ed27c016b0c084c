from __future__ import annotations

import types

import pytest

from bedrock_proxy.base.cancellation import CancelledError
from bedrock_proxy.base.errors import (
    ErrorCode,
    ProxyError,
    classify_error_frame,
    classify_exception,
    classify_transport_error,
)


class ThrottlingException(Exception):
    """Named like an SDK-modeled Bedrock exception."""


class _ClientError(Exception):
    def __init__(self, code: str, status: int = 400) -> None:
        super().__init__(f"An error occurred ({code})")
        self.response = {
            "Error": {"Code": code, "Message": "boom"},
            "ResponseMetadata": {"HTTPStatusCode": status},
        }


def test_classify_proxy_error_passthrough():
    e = ProxyError(code=ErrorCode.AUTH, message="nope", model="x")
    assert classify_exception(e) is ErrorCode.AUTH  # nosec B101 - assert is appropriate in unit tests


def test_classify_aws_error_codes():
    assert classify_exception(_ClientError("AccessDeniedException", 403)) is ErrorCode.AUTH  # nosec B101
    assert classify_exception(_ClientError("ValidationException")) is ErrorCode.MALFORMED  # nosec B101
    assert classify_exception(_ClientError("ModelTimeoutException", 408)) is ErrorCode.TIMEOUT  # nosec B101
    assert classify_exception(ThrottlingException("slow down")) is ErrorCode.RATE_LIMIT  # nosec B101


def test_unknown_aws_code_falls_back_to_status():
    assert classify_exception(_ClientError("SomethingNewException", 503)) is ErrorCode.UNAVAILABLE  # nosec B101


def test_classify_http_status_mapping():
    e1 = types.SimpleNamespace(status_code=429)
    assert classify_exception(e1) is ErrorCode.RATE_LIMIT  # nosec B101
    e2 = types.SimpleNamespace(response=types.SimpleNamespace(status_code=503))
    assert classify_exception(e2) is ErrorCode.UNAVAILABLE  # nosec B101


def test_classify_exception_types():
    assert classify_exception(TimeoutError()) is ErrorCode.TIMEOUT  # nosec B101
    assert classify_exception(CancelledError("gone")) is ErrorCode.CANCELLED  # nosec B101


def test_classify_heuristics():
    assert classify_exception(Exception("rate limit exceeded")) is ErrorCode.RATE_LIMIT  # nosec B101
    assert classify_exception(Exception("read timed out")) is ErrorCode.TIMEOUT  # nosec B101
    assert classify_exception(Exception("Connection reset by peer")) is ErrorCode.UNAVAILABLE  # nosec B101
    assert classify_exception(Exception("random")) is ErrorCode.UNKNOWN  # nosec B101


def test_transport_error_wraps_and_marks_retryable():
    exc = ThrottlingException("Too many tokens")
    err = classify_transport_error(exc, model="Llama-3-8b")
    assert err.code is ErrorCode.RATE_LIMIT and err.retryable  # nosec B101
    assert err.raw is exc and err.model == "Llama-3-8b"  # nosec B101
    auth = classify_transport_error(_ClientError("AccessDeniedException", 403))
    assert auth.code is ErrorCode.AUTH and not auth.retryable  # nosec B101


def test_transport_error_passthrough_fills_model():
    original = ProxyError(code=ErrorCode.UNAVAILABLE, message="down")
    assert classify_transport_error(original, model="m") is original  # nosec B101
    assert original.model == "m"  # nosec B101


@pytest.mark.parametrize(
    "frame, code",
    [
        ({"throttlingException": {"message": "slow"}}, ErrorCode.RATE_LIMIT),
        ({"modelStreamErrorException": {"message": "bad"}}, ErrorCode.UNAVAILABLE),
        ({"internalServerException": {}}, ErrorCode.UNAVAILABLE),
        ({"weirdException": "text"}, ErrorCode.UNKNOWN),
    ],
)
def test_error_frames(frame, code):
    err = classify_error_frame(frame, model="m")
    assert err is not None and err.code is code  # nosec B101
    assert err.model == "m"  # nosec B101


def test_error_frame_message():
    err = classify_error_frame({"throttlingException": {"message": "slow"}})
    assert err is not None and err.message == "slow"  # nosec B101


@pytest.mark.parametrize("frame", [{"generation": "hi"}, {"type": "message_stop"}, "text", None, [1]])
def test_ordinary_frames_are_not_errors(frame):
    assert classify_error_frame(frame) is None  # nosec B101
