"""Unit tests for response path parsing and extraction."""
from __future__ import annotations

import copy

import pytest

from bedrock_proxy.base.errors import ErrorCode, ExtractError
from bedrock_proxy.base.paths import FieldStep, IndexStep, Path, extract, resolve


@pytest.mark.parametrize(
    "text, steps",
    [
        ("generation", (FieldStep("generation"),)),
        ("delta.text", (FieldStep("delta"), FieldStep("text"))),
        ("content[0].text", (FieldStep("content"), IndexStep(0), FieldStep("text"))),
        ("outputs[0].text", (FieldStep("outputs"), IndexStep(0), FieldStep("text"))),
        ("grid[1][2]", (FieldStep("grid"), IndexStep(1), IndexStep(2))),
        ("[0].generation", (IndexStep(0), FieldStep("generation"))),
        ("[1]", (IndexStep(1),)),
        ("amazon-bedrock-invocationMetrics.outputTokenCount",
         (FieldStep("amazon-bedrock-invocationMetrics"), FieldStep("outputTokenCount"))),
    ],
)
def test_parse_steps_and_text_form(text, steps):
    path = Path.parse(text)
    assert path.steps == steps  # nosec B101
    assert str(path) == text  # nosec B101


@pytest.mark.parametrize("text", ["", "   ", "a..b", "a.", ".[0]", "a.[0]", "[0].[1]", "[x]", "a[x]", "a[0", "a]0["])
def test_parse_rejects_malformed_text(text):
    with pytest.raises(ValueError):
        Path.parse(text)


def test_extract_returns_exact_string():
    value = {"content": [{"type": "text", "text": "  Hello\n"}]}
    assert extract(Path.parse("content[0].text"), value) == "  Hello\n"  # nosec B101


def test_extract_allows_empty_string():
    assert extract(Path.parse("generation"), {"generation": ""}) == ""  # nosec B101


def test_missing_field_is_path_not_found():
    with pytest.raises(ExtractError) as info:
        extract(Path.parse("delta.text"), {"delta": {"stop_reason": "end_turn"}})
    assert info.value.code is ErrorCode.PATH_NOT_FOUND  # nosec B101
    assert info.value.path == "delta.text"  # nosec B101
    assert "delta" in info.value.message  # nosec B101


def test_short_list_is_index_out_of_range():
    with pytest.raises(ExtractError) as info:
        extract(Path.parse("content[0].text"), {"content": []})
    assert info.value.code is ErrorCode.INDEX_OUT_OF_RANGE  # nosec B101


@pytest.mark.parametrize(
    "text, value",
    [
        ("delta.text", {"delta": "flat"}),          # field step on a string
        ("content[0].text", {"content": {"0": 1}}),  # index step on a mapping
        ("content[0]", {"content": "abc"}),          # strings are not lists
        ("generation", {"generation": 3}),           # final value not a string
        ("generation", {"generation": None}),
        ("generation", ["generation"]),              # field step on a list
    ],
)
def test_shape_mismatch_is_type_mismatch(text, value):
    with pytest.raises(ExtractError) as info:
        extract(Path.parse(text), value)
    assert info.value.code is ErrorCode.TYPE_MISMATCH  # nosec B101


def test_resolve_returns_non_string_nodes():
    value = {"usage": {"output_tokens": 7}}
    assert resolve(Path.parse("usage.output_tokens"), value) == 7  # nosec B101


def test_extract_does_not_mutate_input():
    value = {"outputs": [{"text": "Hi", "stop_reason": None}]}
    snapshot = copy.deepcopy(value)
    extract(Path.parse("outputs[0].text"), value)
    assert value == snapshot  # nosec B101


def test_extract_is_deterministic():
    path = Path.parse("outputs[0].text")
    value = {"outputs": [{"text": "same"}]}
    assert extract(path, value) == extract(path, value) == "same"  # nosec B101


def test_extract_from_list_at_root():
    value = [{"generation": "first"}, {"generation": "second"}]
    assert extract(Path.parse("[1].generation"), value) == "second"  # nosec B101
    with pytest.raises(ExtractError) as info:
        extract(Path.parse("[0].generation"), {"generation": "x"})
    assert info.value.code is ErrorCode.TYPE_MISMATCH  # nosec B101
