"""bedrock_proxy.config.env
=========================

Environment variable names and parsing helpers for engine configuration.

Failure Modes
-------------
Helpers never raise on unset variables or unparsable values; they return
``None`` and the caller keeps whatever lower-precedence value it had.
"""

from __future__ import annotations

import os
from typing import Any, Callable, Dict, Optional, Tuple

CONFIG_FILE_ENV = "BEDROCK_PROXY_CONFIG_FILE"


def _parse_int(raw: str) -> Optional[int]:
    try:
        return int(raw.strip())
    except ValueError:
        return None


def _parse_float(raw: str) -> Optional[float]:
    try:
        return float(raw.strip())
    except ValueError:
        return None


def _parse_str(raw: str) -> Optional[str]:
    value = raw.strip()
    return value or None


# Config key -> (environment variable, parser)
ENV_FIELD_MAP: Dict[str, Tuple[str, Callable[[str], Any]]] = {
    "catalog_path": ("BEDROCK_PROXY_CATALOG_FILE", _parse_str),
    "max_tokens": ("BEDROCK_PROXY_DEFAULT_MAX_TOKENS", _parse_int),
    "temperature": ("BEDROCK_PROXY_DEFAULT_TEMPERATURE", _parse_float),
    "top_p": ("BEDROCK_PROXY_DEFAULT_TOP_P", _parse_float),
    "stream_timeout_seconds": ("BEDROCK_PROXY_STREAM_TIMEOUT_SECONDS", _parse_float),
    "log_level": ("BEDROCK_PROXY_LOG_LEVEL", _parse_str),
}


def get_env_var_name(field: str) -> Optional[str]:
    """Return the environment variable that sets config ``field``, if any."""
    entry = ENV_FIELD_MAP.get(field)
    return entry[0] if entry else None


def env_overrides() -> Dict[str, Any]:
    """Return config values set through the environment.

    Unset variables and values that fail to parse are left out.
    """
    out: Dict[str, Any] = {}
    for field, (name, parser) in ENV_FIELD_MAP.items():
        raw = os.getenv(name)
        if raw is None:
            continue
        value = parser(raw)
        if value is not None:
            out[field] = value
    return out


__all__ = ["CONFIG_FILE_ENV", "ENV_FIELD_MAP", "get_env_var_name", "env_overrides"]
