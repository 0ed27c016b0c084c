"""End-to-end tests of the engine facade over the mock transport."""
from __future__ import annotations

import json

import pytest

from bedrock_proxy.base.cancellation import CancellationToken
from bedrock_proxy.base.errors import ErrorCode, ProxyError
from bedrock_proxy.base.models import GenerationParams
from bedrock_proxy.mock import MockTransport
from bedrock_proxy.service import ModelEngine, create_engine


class ThrottlingException(Exception):
    pass


@pytest.fixture()
def engine(registry):
    return ModelEngine(registry)


def test_create_engine_loads_packaged_catalog(clean_config_env):
    engine = create_engine()
    models = engine.list_models()
    assert len(models) == 17  # nosec B101
    assert models[0]["name"] == "Claude-3-7-Sonnet"  # nosec B101
    assert all("backend_id" not in m for m in models)  # nosec B101
    assert engine.default_params == GenerationParams()  # nosec B101


def test_create_engine_uses_configured_defaults(clean_config_env, monkeypatch, tmp_path):
    catalog = tmp_path / "one.json"
    catalog.write_text(
        json.dumps(
            [
                {
                    "name": "Solo",
                    "backend_id": "solo-v1",
                    "uses_structured_messages": True,
                    "token_limit_param_name": "max_tokens",
                    "max_supported_response_tokens": 100,
                    "stream_chunk_path": "delta.text",
                }
            ]
        ),
        encoding="utf-8",
    )
    monkeypatch.setenv("BEDROCK_PROXY_CATALOG_FILE", str(catalog))
    monkeypatch.setenv("BEDROCK_PROXY_DEFAULT_MAX_TOKENS", "50")
    engine = create_engine(overrides={"stream_timeout_seconds": 5})
    assert engine.registry.names() == ["Solo"]  # nosec B101
    request = engine.build_request([{"role": "user", "content": "x"}], "Solo")
    assert request.body["max_tokens"] == 50  # nosec B101


def test_unknown_model_never_reaches_transport(engine):
    transport = MockTransport.from_fixture("claude")
    with pytest.raises(ProxyError) as info:
        engine.complete(transport, [{"role": "user", "content": "hi"}], "gpt-4o")
    assert info.value.code is ErrorCode.NOT_FOUND  # nosec B101
    assert transport.calls == []  # nosec B101


def test_invalid_messages_never_reach_transport(engine):
    transport = MockTransport.from_fixture("llama")
    with pytest.raises(ProxyError) as info:
        engine.complete(transport, [{"role": "robot", "content": "hi"}], "Llama-3-8b")
    assert info.value.code is ErrorCode.VALIDATION  # nosec B101
    assert transport.calls == []  # nosec B101


@pytest.mark.parametrize("family, model", [("claude", "Claude-3-Haiku"), ("llama", "Llama-3-8b"), ("mistral", "Mistral-7b")])
def test_complete_single_shot(engine, family, model):
    transport = MockTransport.from_fixture(family)
    text = engine.complete(transport, [{"role": "user", "content": "hi"}], model)
    assert text == "Hello"  # nosec B101
    assert transport.calls[0].model_name == model and not transport.calls[0].stream  # nosec B101


@pytest.mark.parametrize("family, model", [("claude", "Claude-3-Haiku"), ("llama", "Llama-3-8b"), ("mistral", "Mistral-7b")])
def test_complete_streaming(engine, family, model):
    transport = MockTransport.from_fixture(family)
    chunks = engine.complete(transport, [{"role": "user", "content": "hi"}], model, {"stream": True})
    assert list(chunks) == ["Hel", "lo"]  # nosec B101
    assert transport.streams[0].closed  # nosec B101


def test_partial_params_merge_with_defaults(registry):
    engine = ModelEngine(registry, default_params=GenerationParams(max_tokens=100, temperature=0.3, top_p=0.8))
    request = engine.build_request([{"role": "user", "content": "hi"}], "Llama-3-8b", {"temperature": 0.9, "top_p": None})
    assert request.body["max_gen_len"] == 100  # nosec B101
    assert request.body["temperature"] == 0.9  # nosec B101
    assert request.body["top_p"] == 0.8  # nosec B101


def test_transport_open_failure_is_classified(engine):
    transport = MockTransport.from_fixture("claude", error=ThrottlingException("slow down"))
    with pytest.raises(ProxyError) as info:
        engine.complete(transport, [{"role": "user", "content": "hi"}], "Claude-3-Haiku")
    assert info.value.code is ErrorCode.RATE_LIMIT and info.value.retryable  # nosec B101
    assert info.value.model == "Claude-3-Haiku"  # nosec B101


def test_stream_events_end_with_terminal(engine):
    transport = MockTransport.from_fixture("llama")
    request = engine.build_request([{"role": "user", "content": "hi"}], "Llama-3-8b", {"stream": True})
    events = list(engine.stream_events(transport.invoke_stream(request), "Llama-3-8b"))
    assert [e.delta for e in events[:-1]] == ["Hel", "lo"]  # nosec B101
    assert events[-1].finish and not events[-1].is_error()  # nosec B101


def test_stream_events_cancelled_before_start(engine):
    token = CancellationToken()
    token.cancel("client gone")
    events = list(engine.stream_events(iter([{"generation": "x"}]), "Llama-3-8b", cancellation_token=token))
    assert len(events) == 1 and events[0].error_code == ErrorCode.CANCELLED.value  # nosec B101


def test_engine_default_stream_timeout(registry):
    engine = ModelEngine(registry, stream_timeout_seconds=0)
    with pytest.raises(ProxyError) as info:
        list(engine.decode_stream(iter([{"generation": "x"}]), "Llama-3-8b"))
    assert info.value.code is ErrorCode.TIMEOUT  # nosec B101
    assert list(engine.decode_stream(iter([{"generation": "x"}]), "Llama-3-8b", timeout_seconds=30)) == ["x"]  # nosec B101


def test_decode_full_by_name(engine):
    assert engine.decode_full({"outputs": [{"text": "ok", "stop_reason": "stop"}]}, "Mistral-Large") == "ok"  # nosec B101
