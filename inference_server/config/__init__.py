"""Aggregator of configuration modules.

This module re-exports the config API from smaller modules:
- models: served models, device, EOS token
- index: embedding matrix and corpus files
- generation: sampling defaults and stream buffering
- limits: request size limits
- server: bind address

Logging and telemetry settings are imported from their own modules.
"""

from .models import (
    CHAT_MODEL,
    CHAT_MODEL_REVISION,
    EMBED_MODEL,
    EMBED_MODEL_REVISION,
    HF_TOKEN,
    DEVICE,
    EOS_TOKEN,
)
from .index import (
    EMBEDDINGS_FILE,
    EMBEDDINGS_KEY,
    TEXT_MAP_FILE,
)
from .generation import (
    GEN_SEED,
    GEN_TEMPERATURE,
    GEN_TOP_P,
    MAX_LENGTH_LIMIT,
    STREAM_BUFFER_SIZE,
)
from .limits import (
    MAX_NUM_RESULTS,
    MAX_PROMPT_CHARS,
)
from .server import HOST, PORT, PRELOAD_CONTEXT

__all__ = [
    # models
    "CHAT_MODEL",
    "CHAT_MODEL_REVISION",
    "EMBED_MODEL",
    "EMBED_MODEL_REVISION",
    "HF_TOKEN",
    "DEVICE",
    "EOS_TOKEN",
    # index
    "EMBEDDINGS_FILE",
    "EMBEDDINGS_KEY",
    "TEXT_MAP_FILE",
    # generation
    "GEN_SEED",
    "GEN_TEMPERATURE",
    "GEN_TOP_P",
    "MAX_LENGTH_LIMIT",
    "STREAM_BUFFER_SIZE",
    # limits
    "MAX_NUM_RESULTS",
    "MAX_PROMPT_CHARS",
    # server
    "HOST",
    "PORT",
    "PRELOAD_CONTEXT",
]
