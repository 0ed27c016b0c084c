"""Unified configuration layer for the engine.

Merge order (later wins):
    1. Built-in defaults (``config.defaults``)
    2. Optional external config file (JSON or YAML) pointed to by
       ``BEDROCK_PROXY_CONFIG_FILE``
    3. Environment variables (``BEDROCK_PROXY_CATALOG_FILE``,
       ``BEDROCK_PROXY_DEFAULT_MAX_TOKENS``, ...; see ``config.env``)
    4. In-code overrides passed to :func:`get_engine_config`

External config file example::

    catalog_path: /etc/bedrock_proxy/models.yaml
    max_tokens: 1024
    temperature: 0.2
    stream_timeout_seconds: 120

Public API
----------
* get_engine_config(overrides: dict | None = None) -> dict
* default_generation_params(config: dict | None = None) -> GenerationParams
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..base.models import GenerationParams
from .defaults import (
    DEFAULT_CATALOG_PATH,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MAX_TOKENS,
    DEFAULT_STREAM,
    DEFAULT_STREAM_TIMEOUT_SECONDS,
    DEFAULT_TEMPERATURE,
    DEFAULT_TOP_P,
)
from .env import CONFIG_FILE_ENV, env_overrides


DEFAULTS: Dict[str, Any] = {
    "catalog_path": DEFAULT_CATALOG_PATH,
    "max_tokens": DEFAULT_MAX_TOKENS,
    "temperature": DEFAULT_TEMPERATURE,
    "top_p": DEFAULT_TOP_P,
    "stream": DEFAULT_STREAM,
    "stream_timeout_seconds": DEFAULT_STREAM_TIMEOUT_SECONDS,
    "log_level": DEFAULT_LOG_LEVEL,
}

# Config file contents keyed by path; cleared with ``reset_config_cache``.
_FILE_CACHE: Dict[str, Dict[str, Any]] = {}


def reset_config_cache() -> None:
    """Forget previously loaded config files (tests, reloads)."""
    _FILE_CACHE.clear()


def _load_external_config() -> Dict[str, Any]:
    path = os.getenv(CONFIG_FILE_ENV)
    if not path:
        return {}
    if path in _FILE_CACHE:
        return _FILE_CACHE[path]
    p = Path(path)
    if not p.exists():
        _FILE_CACHE[path] = {}
        return _FILE_CACHE[path]
    text = p.read_text(encoding="utf-8")
    # Try JSON first; YAML is a superset for the shapes used here.
    try:
        data: Any = json.loads(text)
    except ValueError:
        data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        data = {}
    _FILE_CACHE[path] = {k: v for k, v in data.items() if k in DEFAULTS}
    return _FILE_CACHE[path]


def get_engine_config(overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Return merged engine configuration.

    Merge order (later wins): defaults -> external config -> env vars -> overrides.
    ``None`` values in ``overrides`` are ignored.
    """
    cfg: Dict[str, Any] = dict(DEFAULTS)
    cfg |= _load_external_config()
    cfg |= env_overrides()
    if overrides:
        cfg |= {k: v for k, v in overrides.items() if v is not None}
    return cfg


def default_generation_params(config: Optional[Dict[str, Any]] = None) -> GenerationParams:
    """Build :class:`GenerationParams` from configuration defaults."""
    cfg = config if config is not None else get_engine_config()
    return GenerationParams(
        max_tokens=int(cfg["max_tokens"]),
        temperature=float(cfg["temperature"]),
        top_p=float(cfg["top_p"]),
        stream=bool(cfg["stream"]),
    )


__all__ = [
    "DEFAULTS",
    "get_engine_config",
    "default_generation_params",
    "reset_config_cache",
]
