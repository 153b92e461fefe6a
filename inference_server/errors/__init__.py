"""Centralized exception classes for the inference server.

This module re-exports all domain-specific exceptions from their respective
modules, providing a single import point for error handling.

Organization:
    - generation.py: Tokenization, forward pass, cache and sampling errors
    - index.py: Similarity index lookup and load errors
    - stream.py: Consumer disconnection during streaming
    - validation.py: Input validation errors with error codes
    - classify.py: Exception-to-telemetry label mapping
"""

from .classify import classify_error
from .validation import ValidationError
from .stream import ChannelClosedError
from .index import DimensionMismatchError, EmbeddingError, EmptyIndexError, IndexLoadError
from .generation import (
    STEP_ERRORS,
    CacheError,
    EncodingError,
    SamplingError,
    GenerationError,
    ForwardPassError,
)

__all__ = [
    # Generation
    "EncodingError",
    "ForwardPassError",
    "CacheError",
    "SamplingError",
    "GenerationError",
    "STEP_ERRORS",
    # Index
    "DimensionMismatchError",
    "EmptyIndexError",
    "IndexLoadError",
    "EmbeddingError",
    # Streaming
    "ChannelClosedError",
    # Validation
    "ValidationError",
    # Classification
    "classify_error",
]
