"""HTTP request handlers."""

from .http import router
from .requests import (
    GenerationRequest,
    SimilarityRequest,
    parse_generation_request,
    parse_similarity_request,
)

__all__ = [
    "router",
    "GenerationRequest",
    "SimilarityRequest",
    "parse_generation_request",
    "parse_similarity_request",
]
