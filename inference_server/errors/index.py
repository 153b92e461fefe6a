"""Similarity index exceptions."""


class DimensionMismatchError(ValueError):
    """Raised when a query vector's dimensionality differs from the index."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(f"query has dimension {actual}, index expects {expected}")
        self.expected = expected
        self.actual = actual


class EmptyIndexError(RuntimeError):
    """Raised when results are requested from an index that was never populated.

    A zero-row index built without an embeddings file is a valid index and
    never raises this; it simply returns no results.
    """


class IndexLoadError(RuntimeError):
    """Raised when the embedding matrix or corpus file cannot be loaded."""


class EmbeddingError(RuntimeError):
    """Raised when the embedding model fails on a query it could tokenize."""


__all__ = ["DimensionMismatchError", "EmbeddingError", "EmptyIndexError", "IndexLoadError"]
