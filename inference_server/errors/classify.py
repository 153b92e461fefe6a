"""Exception classification helpers for metrics and telemetry labels."""

from __future__ import annotations

from .validation import ValidationError
from .stream import ChannelClosedError
from .index import DimensionMismatchError, EmbeddingError, EmptyIndexError, IndexLoadError
from .generation import (
    CacheError,
    EncodingError,
    GenerationError,
    SamplingError,
    ForwardPassError,
)

ERROR_CATEGORIES: tuple[tuple[type[BaseException], str], ...] = (
    (ValidationError, "validation"),
    (EncodingError, "encoding"),
    (DimensionMismatchError, "dimension_mismatch"),
    (EmptyIndexError, "empty_index"),
    (IndexLoadError, "index_load"),
    (EmbeddingError, "embedding"),
    (ForwardPassError, "forward_pass"),
    (CacheError, "cache"),
    (SamplingError, "sampling"),
    (GenerationError, "generation"),
    (ChannelClosedError, "cancelled"),
    (TimeoutError, "timeout"),
    (ConnectionError, "connection"),
)


def classify_error(exc: BaseException) -> str:
    """Map an exception to a metric-friendly category label."""

    for cls, label in ERROR_CATEGORIES:
        if isinstance(exc, cls):
            return label
    return "unknown"


__all__ = ["ERROR_CATEGORIES", "classify_error"]
