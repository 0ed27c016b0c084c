"""Pytest configuration for the bedrock_proxy test suite.

Provides sample descriptors for both calling conventions, a registry built
from the packaged catalog, a clean configuration environment, and structured
log capture on the shared ``bedrock_proxy`` logger.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterator, List

import pytest

from bedrock_proxy.base.logging import BASE_LOGGER_NAME, LOG_LEVEL_ENV, get_logger
from bedrock_proxy.base.models import ModelDescriptor, PromptTemplate, RoleMarkers
from bedrock_proxy.base.paths import Path
from bedrock_proxy.config import reset_config_cache
from bedrock_proxy.config.env import CONFIG_FILE_ENV, ENV_FIELD_MAP
from bedrock_proxy.registry import ModelRegistry, load_registry


class _JsonRecords(logging.Handler):
    """Collect structured log payloads emitted through ``log_event``."""

    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.records: List[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)

    def events(self, name: str | None = None) -> List[Dict[str, Any]]:
        out: List[Dict[str, Any]] = []
        for record in self.records:
            try:
                payload = json.loads(record.getMessage())
            except ValueError:
                continue
            if isinstance(payload, dict) and (name is None or payload.get("event") == name):
                payload["_level"] = record.levelno
                out.append(payload)
        return out


@pytest.fixture()
def log_records(monkeypatch: pytest.MonkeyPatch) -> Iterator[_JsonRecords]:
    """Capture every record on the shared logger at DEBUG level."""

    monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)
    base = get_logger(BASE_LOGGER_NAME)
    handler = _JsonRecords()
    previous_level = base.level
    base.addHandler(handler)
    base.setLevel(logging.DEBUG)
    try:
        yield handler
    finally:
        base.removeHandler(handler)
        base.setLevel(previous_level)


@pytest.fixture()
def clean_config_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Remove every engine config variable and forget cached config files."""

    monkeypatch.delenv(CONFIG_FILE_ENV, raising=False)
    for name, _parser in ENV_FIELD_MAP.values():
        monkeypatch.delenv(name, raising=False)
    reset_config_cache()
    yield
    reset_config_cache()


@pytest.fixture()
def scenario_descriptor() -> ModelDescriptor:
    """Flattened-prompt model with ``<BOS>`` and ``<|role|>`` markers."""

    markers = RoleMarkers(role_prefix="<|", role_suffix="|>")
    return ModelDescriptor(
        name="Scenario-Flat",
        backend_id="test.scenario-flat-v1:0",
        uses_structured_messages=False,
        token_limit_param_name="max_gen_len",
        max_supported_response_tokens=2048,
        stream_chunk_path=Path.parse("generation"),
        full_response_path=Path.parse("generation"),
        prompt_template=PromptTemplate(
            begin_of_sequence_marker="<BOS>",
            system=markers,
            user=markers,
            assistant=markers,
            end_of_message_marker="<EOM>",
            display_role_names=True,
        ),
    )


@pytest.fixture()
def structured_descriptor() -> ModelDescriptor:
    """Structured-message model that lifts the system prompt."""

    return ModelDescriptor(
        name="Scenario-Structured",
        backend_id="test.scenario-structured-v1:0",
        uses_structured_messages=True,
        system_as_separate_field=True,
        token_limit_param_name="max_tokens",
        max_supported_response_tokens=8192,
        stream_chunk_path=Path.parse("delta.text"),
        full_response_path=Path.parse("content[0].text"),
        special_request_fields={"anthropic_version": "bedrock-2023-05-31"},
    )


@pytest.fixture(scope="session")
def registry() -> ModelRegistry:
    """Registry loaded from the packaged catalog."""

    return load_registry()
