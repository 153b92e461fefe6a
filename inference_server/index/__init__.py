"""Similarity index over precomputed sentence embeddings.

SimilarityIndex answers top-k cosine queries against an immutable matrix;
storage reads the embedding matrix and the corpus texts that back it.
"""

from .similarity import SimilarityIndex, SimilarityResult
from .storage import load_embedding_matrix, read_text_map

__all__ = [
    "SimilarityIndex",
    "SimilarityResult",
    "load_embedding_matrix",
    "read_text_map",
]
