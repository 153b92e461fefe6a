"""Unit tests for top-k cosine similarity ranking."""

from __future__ import annotations

import pytest
import torch

from inference_server.errors import DimensionMismatchError, EmptyIndexError
from inference_server.index import SimilarityIndex


def _index(rows: list[list[float]]) -> SimilarityIndex:
    return SimilarityIndex(torch.tensor(rows, dtype=torch.float32))


def test_returns_min_k_n_results_sorted_descending() -> None:
    generator = torch.Generator().manual_seed(0)
    index = SimilarityIndex(torch.randn(20, 8, generator=generator))
    query = torch.randn(8, generator=generator)
    for k in (1, 5, 20, 50):
        results = index.query(query, k)
        assert len(results) == min(k, 20)
        scores = [r.score for r in results]
        assert scores == sorted(scores, reverse=True)
        assert all(-1.0 - 1e-5 <= s <= 1.0 + 1e-5 for s in scores)


def test_ties_break_by_ascending_row_index() -> None:
    index = _index([[0.0, 1.0], [1.0, 0.0], [2.0, 0.0], [3.0, 0.0]])
    results = index.query(torch.tensor([1.0, 0.0]), 3)
    assert [r.index for r in results] == [1, 2, 3]
    assert results[0].score == pytest.approx(1.0)


def test_rows_and_query_are_normalized() -> None:
    index = _index([[10.0, 0.0], [0.0, 0.5]])
    results = index.query(torch.tensor([0.0, 3.0]), 2)
    assert results[0].index == 1
    assert results[0].score == pytest.approx(1.0)
    assert results[1].score == pytest.approx(0.0, abs=1e-6)


def test_accepts_batch_of_one_query() -> None:
    index = _index([[1.0, 0.0], [0.0, 1.0]])
    results = index.query(torch.tensor([[0.0, 1.0]]), 1)
    assert [r.index for r in results] == [1]


def test_cat_dog_car_example() -> None:
    corpus = ["cat", "dog", "car"]
    index = _index([[1.0, 0.0, 0.1], [0.0, 1.0, 0.0], [0.9, 0.0, 0.4]])
    kitten = torch.tensor([0.95, 0.05, 0.1])
    results = index.query(kitten, 2)
    assert [corpus[r.index] for r in results] == ["cat", "car"]
    assert results[0].score >= results[1].score


def test_k_zero_returns_empty() -> None:
    index = _index([[1.0, 0.0]])
    assert index.query(torch.tensor([1.0, 0.0]), 0) == []


def test_negative_k_raises() -> None:
    index = _index([[1.0, 0.0]])
    with pytest.raises(ValueError):
        index.query(torch.tensor([1.0, 0.0]), -1)


def test_dimension_mismatch_raises() -> None:
    index = _index([[1.0, 0.0, 0.0]])
    with pytest.raises(DimensionMismatchError) as excinfo:
        index.query(torch.tensor([1.0, 0.0]), 1)
    assert excinfo.value.expected == 3
    assert excinfo.value.actual == 2


def test_zero_row_index_returns_empty_for_any_k() -> None:
    index = SimilarityIndex.empty()
    assert len(index) == 0
    assert index.query(torch.tensor([1.0, 2.0, 3.0]), 5) == []


def test_unpopulated_index_raises_for_positive_k() -> None:
    index = SimilarityIndex(None)
    assert not index.populated
    assert index.query(torch.tensor([1.0]), 0) == []
    with pytest.raises(EmptyIndexError):
        index.query(torch.tensor([1.0]), 1)


def test_query_does_not_mutate_inputs() -> None:
    rows = torch.tensor([[3.0, 4.0], [1.0, 0.0]])
    query = torch.tensor([6.0, 8.0])
    index = SimilarityIndex(rows)
    index.query(query, 2)
    assert torch.equal(rows, torch.tensor([[3.0, 4.0], [1.0, 0.0]]))
    assert torch.equal(query, torch.tensor([6.0, 8.0]))


def test_rejects_non_matrix_embeddings() -> None:
    with pytest.raises(ValueError):
        SimilarityIndex(torch.zeros(3))
