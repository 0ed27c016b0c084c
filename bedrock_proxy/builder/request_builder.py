"""Request builder: normalized chat input to a vendor-shaped request body.

Dispatch is on ``descriptor.uses_structured_messages``:

- structured: ``special_request_fields`` + token limit + sampling params +
  ``messages`` as role/content pairs. With ``system_as_separate_field`` the
  first system message is lifted into a top-level ``system`` key; later
  system messages stay in place.
- flattened prompt: ``special_request_fields`` + ``prompt`` + token limit +
  sampling params. The prompt starts with the template's
  begin-of-sequence marker and ends right after the last message; the
  end-of-message marker is returned as ``stop_sequences``.

The requested token limit is clamped to the model's supported maximum in both
modes. Building is pure: no I/O, inputs are not mutated.
"""
from __future__ import annotations

import copy
import logging
from dataclasses import asdict, is_dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError

from ..base.dto import ChatRequestDTO
from ..base.errors import ErrorCode, ProxyError
from ..base.logging import LogContext, get_logger, normalized_log_event
from ..base.models import BuiltRequest, ChatMessage, GenerationParams, ModelDescriptor, PromptTemplate

MessageLike = Union[ChatMessage, Mapping[str, Any]]
ParamsLike = Union[GenerationParams, Mapping[str, Any], None]

_logger = get_logger("bedrock_proxy.builder")


def clamp_max_tokens(requested: int, descriptor: ModelDescriptor) -> int:
    """Return ``min(requested, descriptor.max_supported_response_tokens)``."""
    return min(requested, descriptor.max_supported_response_tokens)


def _message_payload(message: Any) -> Any:
    if isinstance(message, Mapping):
        return dict(message)
    if hasattr(message, "role") and hasattr(message, "content"):
        return {"role": message.role, "content": message.content}
    return message


def _messages_payload(messages: Any, model: Optional[str]) -> List[Any]:
    if messages is None:
        return []
    if isinstance(messages, (str, bytes, bytearray, Mapping)) or not isinstance(messages, Iterable):
        raise ProxyError(
            code=ErrorCode.VALIDATION,
            message=f"messages must be a list of chat turns, got {type(messages).__name__}",
            model=model,
        )
    return [_message_payload(m) for m in messages]


def _params_payload(params: ParamsLike) -> Dict[str, Any]:
    if params is None:
        return {}
    if is_dataclass(params) and not isinstance(params, type):
        return asdict(params)
    if isinstance(params, Mapping):
        return dict(params)
    raise ProxyError(code=ErrorCode.VALIDATION, message=f"unsupported params type {type(params).__name__}")


def _format_validation_error(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "invalid request"


def validate_input(
    messages: Optional[Iterable[MessageLike]],
    params: ParamsLike = None,
    *,
    model: Optional[str] = None,
) -> tuple[List[ChatMessage], GenerationParams]:
    """Validate caller input and return normalized messages and params.

    Raises:
        ProxyError: ``VALIDATION`` for missing or non-list messages, unknown roles,
            non-string content, or out-of-range parameters.
    """
    payload = {
        "messages": _messages_payload(messages, model),
        "params": _params_payload(params),
    }
    try:
        dto = ChatRequestDTO.model_validate(payload)
    except ValidationError as exc:
        raise ProxyError(
            code=ErrorCode.VALIDATION,
            message=_format_validation_error(exc),
            model=model,
        ) from exc
    normalized = [ChatMessage(role=m.role, content=m.content) for m in dto.messages]
    p = dto.params
    return normalized, GenerationParams(
        max_tokens=p.max_tokens, temperature=p.temperature, top_p=p.top_p, stream=p.stream
    )


def flatten_prompt(messages: Iterable[ChatMessage], template: PromptTemplate) -> str:
    """Encode ``messages`` into a single prompt string using ``template``."""
    parts: List[str] = [template.begin_of_sequence_marker]
    for message in messages:
        markers = template.markers_for(message.role)
        if template.display_role_names:
            parts.append(f"{markers.role_prefix}{message.role}{markers.role_suffix}")
        parts.append(f"{markers.message_prefix}{message.content}{markers.message_suffix}")
    return "".join(parts)


def _structured_body(
    messages: List[ChatMessage], descriptor: ModelDescriptor, params: GenerationParams
) -> Dict[str, Any]:
    body: Dict[str, Any] = copy.deepcopy(dict(descriptor.special_request_fields))
    turns = list(messages)
    system_text: Optional[str] = None
    if descriptor.system_as_separate_field:
        for i, message in enumerate(turns):
            if message.role == "system":
                system_text = message.content
                del turns[i]
                break
    body[descriptor.token_limit_param_name] = clamp_max_tokens(params.max_tokens, descriptor)
    body["temperature"] = params.temperature
    body["top_p"] = params.top_p
    if system_text is not None:
        body["system"] = system_text
    body["messages"] = [m.to_dict() for m in turns]
    return body


def _flattened_body(
    messages: List[ChatMessage], descriptor: ModelDescriptor, params: GenerationParams
) -> Dict[str, Any]:
    template = descriptor.prompt_template
    if template is None:
        raise ProxyError(
            code=ErrorCode.INTERNAL,
            message="flattened-prompt model has no prompt_template",
            model=descriptor.name,
        )
    body: Dict[str, Any] = copy.deepcopy(dict(descriptor.special_request_fields))
    body["prompt"] = flatten_prompt(messages, template)
    body[descriptor.token_limit_param_name] = clamp_max_tokens(params.max_tokens, descriptor)
    body["temperature"] = params.temperature
    body["top_p"] = params.top_p
    return body


def build_request(
    messages: Iterable[MessageLike],
    descriptor: ModelDescriptor,
    params: ParamsLike = None,
    *,
    logger: Optional[logging.Logger] = None,
) -> BuiltRequest:
    """Build the backend request for ``descriptor``.

    Args:
        messages: Ordered chat turns (``ChatMessage`` or ``{"role", "content"}``).
        descriptor: Target model's encoding rules.
        params: ``GenerationParams``, a mapping of the same fields, or ``None``
            for defaults.

    Raises:
        ProxyError: ``VALIDATION`` on bad caller input; ``INTERNAL`` when the
            descriptor lacks what its calling convention requires.
    """
    normalized, gen = validate_input(messages, params, model=descriptor.name)
    if descriptor.uses_structured_messages:
        body = _structured_body(normalized, descriptor, gen)
        stop_sequences: tuple[str, ...] = ()
    else:
        body = _flattened_body(normalized, descriptor, gen)
        eom = descriptor.prompt_template.end_of_message_marker if descriptor.prompt_template else ""
        stop_sequences = (eom,) if eom else ()
    request = BuiltRequest(
        model_name=descriptor.name,
        backend_id=descriptor.backend_id,
        body=body,
        stream=gen.stream,
        stop_sequences=stop_sequences,
    )
    normalized_log_event(
        logger or _logger,
        "request.build",
        LogContext(model=descriptor.name, backend_id=descriptor.backend_id),
        phase="build",
        level=logging.DEBUG,
        structured=descriptor.uses_structured_messages,
        message_count=len(normalized),
        max_tokens=body[descriptor.token_limit_param_name],
        clamped=gen.max_tokens > descriptor.max_supported_response_tokens,
        stream=gen.stream,
    )
    return request


__all__ = ["build_request", "flatten_prompt", "clamp_max_tokens", "validate_input"]
