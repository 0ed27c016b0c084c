"""bedrock_proxy.config.defaults
==============================

Central place for small, stable default values used by the engine. These can
be overridden through the external config file, environment variables, or
explicit overrides (see :func:`bedrock_proxy.config.get_engine_config`).

Only plain constants live here; no I/O and no package imports.
"""

from __future__ import annotations

# ---- Generation defaults ----
# Applied when the caller omits a parameter (OpenAI-style handler behavior).
DEFAULT_MAX_TOKENS = 800
DEFAULT_TEMPERATURE = 0.4
DEFAULT_TOP_P = 0.9
DEFAULT_STREAM = False

# ---- Streaming ----
# Upper bound on the total duration of one decoded stream; None disables it.
DEFAULT_STREAM_TIMEOUT_SECONDS = None

# ---- Catalog ----
# None selects the catalog packaged with bedrock_proxy.registry.
DEFAULT_CATALOG_PATH = None

# ---- Logging ----
DEFAULT_LOG_LEVEL = "INFO"
