"""AppContext builders over the in-memory fakes."""

from __future__ import annotations

import torch

from inference_server.index import SimilarityIndex
from inference_server.state import AppContext, GenerationSettings
from tests.helpers.fakes import FakeEmbedder, FakeTokenizer, ScriptedModel

CORPUS = ["cat", "dog", "car"]

VECTORS = {
    "cat": [1.0, 0.0, 0.1],
    "dog": [0.0, 1.0, 0.0],
    "car": [0.9, 0.0, 0.4],
    "kitten": [0.95, 0.05, 0.1],
    "puppy": [0.1, 0.9, 0.0],
    "flat": [1.0, 0.0],
}


def make_context(model=None, *, index: SimilarityIndex | None = None, corpus=None, buffer_size: int = 8) -> AppContext:
    if index is None:
        index = SimilarityIndex(torch.tensor([VECTORS[text] for text in CORPUS]))
        corpus = CORPUS if corpus is None else corpus
    return AppContext(
        index=index,
        corpus=list(corpus or []),
        embedder=FakeEmbedder(VECTORS),
        model=model or ScriptedModel([3, 4]),
        tokenizer=FakeTokenizer(),
        settings=GenerationSettings(seed=42, stream_buffer_size=buffer_size),
    )


__all__ = ["CORPUS", "VECTORS", "make_context"]
