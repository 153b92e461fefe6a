"""Environment validation helpers."""

from __future__ import annotations

from ..config import (
    CHAT_MODEL,
    DEVICE,
    EMBED_MODEL,
    EMBEDDINGS_FILE,
    EMBEDDINGS_KEY,
    GEN_TEMPERATURE,
    GEN_TOP_P,
    MAX_LENGTH_LIMIT,
    MAX_NUM_RESULTS,
    MAX_PROMPT_CHARS,
    PORT,
    STREAM_BUFFER_SIZE,
    TEXT_MAP_FILE,
)

_DEVICE_PREFIXES = ("cpu", "cuda", "mps", "auto")


def validate_env() -> None:
    """Validate configuration once during startup."""
    errors: list[str] = []

    # Models
    if not CHAT_MODEL:
        errors.append("CHAT_MODEL must not be empty")
    if not EMBED_MODEL:
        errors.append("EMBED_MODEL must not be empty")
    if not DEVICE.startswith(_DEVICE_PREFIXES):
        errors.append(f"DEVICE must be one of 'cpu', 'cuda[:N]', 'mps' or 'auto', got: {DEVICE}")

    # Index inputs
    if EMBEDDINGS_FILE and not EMBEDDINGS_KEY:
        errors.append("EMBEDDINGS_KEY is required when EMBEDDINGS_FILE is set")
    if EMBEDDINGS_FILE and not TEXT_MAP_FILE:
        errors.append("TEXT_MAP_FILE is required when EMBEDDINGS_FILE is set")

    # Sampling
    if GEN_TEMPERATURE < 0:
        errors.append(f"GEN_TEMPERATURE must be >= 0, got: {GEN_TEMPERATURE}")
    if not (0.0 < GEN_TOP_P <= 1.0):
        errors.append(f"GEN_TOP_P must be in (0, 1], got: {GEN_TOP_P}")

    # Limits
    if MAX_LENGTH_LIMIT < 0:
        errors.append(f"MAX_LENGTH_LIMIT must be >= 0, got: {MAX_LENGTH_LIMIT}")
    if STREAM_BUFFER_SIZE < 1:
        errors.append(f"STREAM_BUFFER_SIZE must be >= 1, got: {STREAM_BUFFER_SIZE}")
    if MAX_NUM_RESULTS < 0:
        errors.append(f"MAX_NUM_RESULTS must be >= 0, got: {MAX_NUM_RESULTS}")
    if MAX_PROMPT_CHARS < 1:
        errors.append(f"MAX_PROMPT_CHARS must be >= 1, got: {MAX_PROMPT_CHARS}")
    if not (0 < PORT < 65536):
        errors.append(f"PORT must be in 1..65535, got: {PORT}")

    if errors:
        raise ValueError("; ".join(errors))


__all__ = ["validate_env"]
