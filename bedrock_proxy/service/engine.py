"""Engine facade used by the HTTP layer.

``ModelEngine`` ties the registry, request builder and decoders together
behind model names:

    messages + model name + params
        -> registry.resolve -> build_request -> BuiltRequest
    raw events / raw response + model name
        -> decode_stream / decode_full -> text

The engine holds no per-request state; one instance can serve concurrent
requests. Unknown model names and invalid input fail before any transport
call is made.
"""
from __future__ import annotations

import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Union

from ..base.cancellation import CancellationToken
from ..base.errors import classify_transport_error
from ..base.interfaces import Transport
from ..base.logging import configure_logger, get_logger
from ..base.models import BuiltRequest, GenerationParams
from ..base.streaming import ChatStreamEvent, StreamDecoder, decode_full, decode_stream
from ..builder import build_request
from ..builder.request_builder import MessageLike, ParamsLike
from ..config import default_generation_params, get_engine_config
from ..registry import ModelRegistry, load_registry


class ModelEngine:
    """Model abstraction and stream normalization over a fixed registry."""

    def __init__(
        self,
        registry: ModelRegistry,
        *,
        default_params: Optional[GenerationParams] = None,
        stream_timeout_seconds: Optional[float] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._registry = registry
        self._defaults = default_params or GenerationParams()
        self._stream_timeout_seconds = stream_timeout_seconds
        self._logger = logger or get_logger("bedrock_proxy.engine")

    @property
    def registry(self) -> ModelRegistry:
        return self._registry

    @property
    def default_params(self) -> GenerationParams:
        return self._defaults

    def _params(self, params: ParamsLike) -> Union[GenerationParams, Dict[str, Any]]:
        """Fill parameters the caller left out with the configured defaults."""
        if params is None:
            return self._defaults
        if isinstance(params, Mapping):
            merged = asdict(self._defaults)
            merged.update({k: v for k, v in params.items() if v is not None})
            return merged
        return params

    def build_request(
        self,
        messages: Iterable[MessageLike],
        model_name: str,
        params: ParamsLike = None,
    ) -> BuiltRequest:
        """Resolve ``model_name`` and build its backend request.

        Raises:
            ProxyError: ``NOT_FOUND`` for unknown models, ``VALIDATION`` for
                bad input.
        """
        descriptor = self._registry.resolve(model_name)
        return build_request(messages, descriptor, self._params(params))

    def stream_events(
        self,
        raw_events: Iterable[Any],
        model_name: str,
        *,
        cancellation_token: Optional[CancellationToken] = None,
        timeout_seconds: Optional[float] = None,
    ) -> Iterator[ChatStreamEvent]:
        """Decode ``raw_events`` into delta events plus one terminal event."""
        descriptor = self._registry.resolve(model_name)
        decoder = StreamDecoder(
            descriptor,
            raw_events,
            cancellation_token=cancellation_token,
            timeout_seconds=self._timeout(timeout_seconds),
        )
        return decoder.run()

    def decode_stream(
        self,
        raw_events: Iterable[Any],
        model_name: str,
        *,
        cancellation_token: Optional[CancellationToken] = None,
        timeout_seconds: Optional[float] = None,
    ) -> Iterator[str]:
        """Decode ``raw_events`` into text increments.

        The returned iterator raises the terminal ``ProxyError`` (if any)
        after yielding every chunk decoded before the failure.
        """
        descriptor = self._registry.resolve(model_name)
        return decode_stream(
            descriptor,
            raw_events,
            cancellation_token=cancellation_token,
            timeout_seconds=self._timeout(timeout_seconds),
        )

    def decode_full(self, raw_response: Any, model_name: str) -> str:
        """Extract the complete reply from a single-shot response."""
        return decode_full(self._registry.resolve(model_name), raw_response)

    def list_models(self) -> List[Dict[str, Any]]:
        """Discovery view of the catalog, in catalog order."""
        return [summary.to_dict() for summary in self._registry.list_summaries()]

    def complete(
        self,
        transport: Transport,
        messages: Iterable[MessageLike],
        model_name: str,
        params: ParamsLike = None,
        *,
        cancellation_token: Optional[CancellationToken] = None,
    ) -> Union[str, Iterator[str]]:
        """Build, invoke and decode in one call.

        Returns the full text, or an iterator of increments when the
        effective params ask for streaming. Transport failures raised while
        opening the call are classified into ``ProxyError``.
        """
        request = self.build_request(messages, model_name, params)
        try:
            if request.stream:
                events = transport.invoke_stream(request)
            else:
                raw = transport.invoke(request)
        except Exception as exc:
            error = classify_transport_error(exc, model=model_name)
            if error is exc:
                raise
            raise error from exc
        if request.stream:
            return self.decode_stream(events, model_name, cancellation_token=cancellation_token)
        return self.decode_full(raw, model_name)

    def _timeout(self, timeout_seconds: Optional[float]) -> Optional[float]:
        return timeout_seconds if timeout_seconds is not None else self._stream_timeout_seconds


def create_engine(
    catalog_path: Optional[Union[str, Path]] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> ModelEngine:
    """Build a :class:`ModelEngine` from merged configuration.

    ``catalog_path`` wins over every configured catalog location; ``None``
    falls back to configuration, then to the packaged catalog.
    """
    merged = dict(overrides or {})
    if catalog_path is not None:
        merged["catalog_path"] = str(catalog_path)
    cfg = get_engine_config(merged)
    configure_logger(level=cfg.get("log_level"))
    registry = load_registry(cfg.get("catalog_path"))
    return ModelEngine(
        registry,
        default_params=default_generation_params(cfg),
        stream_timeout_seconds=cfg.get("stream_timeout_seconds"),
    )


__all__ = ["ModelEngine", "create_engine"]
