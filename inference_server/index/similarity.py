"""Exhaustive top-k cosine similarity over a fixed embedding matrix.

Rows are L2-normalized once at construction, so the score of a row against a
normalized query is a plain dot product (cosine similarity, in [-1, 1]).
Every query rescans the full matrix; there is no approximate search.

Ranking:
    Scores are sorted descending with a stable sort over natural row order,
    so equal scores keep ascending corpus index. The ranking is then
    truncated to k.
"""

from __future__ import annotations

from dataclasses import dataclass

import torch  # type: ignore[import]
import torch.nn.functional as F  # type: ignore[import]

from ..errors import DimensionMismatchError, EmptyIndexError


@dataclass(frozen=True, slots=True)
class SimilarityResult:
    """One ranked hit: corpus row index and its cosine similarity."""

    index: int
    score: float


class SimilarityIndex:
    """Read-only matrix of normalized embeddings answering top-k queries.

    Safe to query from any number of concurrent requests: nothing is mutated
    after construction.
    """

    def __init__(self, embeddings: torch.Tensor | None) -> None:
        """Build an index from a (rows, dim) matrix.

        Args:
            embeddings: 2-D float tensor, or None for an index that was never
                populated (queries with k > 0 raise EmptyIndexError).
        """
        self._matrix: torch.Tensor | None = None
        self._dim: int | None = None
        if embeddings is None:
            return
        if embeddings.dim() != 2:
            raise ValueError(f"embedding matrix must be 2-D, got shape {tuple(embeddings.shape)}")
        matrix = embeddings.detach().to(torch.float32)
        self._matrix = F.normalize(matrix, p=2.0, dim=1)
        self._dim = int(matrix.shape[1])

    @classmethod
    def empty(cls) -> SimilarityIndex:
        """Zero-row index used when no embeddings file is configured.

        It accepts queries of any dimension and always answers with no results.
        """
        index = cls(None)
        index._matrix = torch.zeros((0, 0), dtype=torch.float32)
        return index

    def __len__(self) -> int:
        return 0 if self._matrix is None else int(self._matrix.shape[0])

    @property
    def dim(self) -> int | None:
        """Row dimensionality, or None when the index carries no rows shape."""
        return self._dim

    @property
    def populated(self) -> bool:
        return self._matrix is not None

    def query(self, embedding: torch.Tensor, k: int) -> list[SimilarityResult]:
        """Return the ``min(k, len(self))`` most similar rows, best first.

        Raises:
            ValueError: If k is negative or the query is not a vector.
            EmptyIndexError: If k > 0 and the index was never populated.
            DimensionMismatchError: If the query dimension differs from the rows.
        """
        if k < 0:
            raise ValueError("k must be >= 0")
        if k == 0:
            return []
        if self._matrix is None:
            raise EmptyIndexError("similarity index was never populated")

        query = _as_vector(embedding)
        if self._dim is not None and int(query.shape[0]) != self._dim:
            raise DimensionMismatchError(self._dim, int(query.shape[0]))
        if self._matrix.shape[0] == 0:
            return []

        query = F.normalize(query.to(self._matrix.device), p=2.0, dim=0)
        scores = self._matrix @ query
        ranked_scores, ranked_rows = torch.sort(scores, descending=True, stable=True)
        top = min(k, int(scores.shape[0]))
        return [
            SimilarityResult(index=int(row), score=float(score))
            for row, score in zip(ranked_rows[:top].tolist(), ranked_scores[:top].tolist())
        ]


def _as_vector(embedding: torch.Tensor) -> torch.Tensor:
    # Embedders return (1, dim); accept that as well as a bare vector.
    query = embedding.detach().to(torch.float32)
    if query.dim() == 2 and query.shape[0] == 1:
        query = query[0]
    if query.dim() != 1:
        raise ValueError(f"query must be a vector, got shape {tuple(embedding.shape)}")
    return query


__all__ = ["SimilarityIndex", "SimilarityResult"]
