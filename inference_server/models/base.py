"""Capability interfaces consumed by the decoding loop and similarity search.

The serving core only depends on these abstractions; concrete adapters over
Hugging Face models live next to them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

import torch  # type: ignore[import]

from .cache import GenerationCache


class Tokenizer(ABC):
    """Text <-> token id conversion for the causal model."""

    @abstractmethod
    def encode(self, text: str) -> list[int]:
        """Tokenize text into ids, raising EncodingError on malformed input."""

    @abstractmethod
    def decode_one(self, token_id: int) -> str:
        """Render one token id as a text fragment, independent of neighbors."""

    @property
    @abstractmethod
    def eos_token_id(self) -> int | None:
        """End-of-sequence id, or None when the vocabulary has none."""


class CausalLM(ABC):
    """Autoregressive model producing next-token logits."""

    @abstractmethod
    def create_cache(self) -> GenerationCache:
        """Return a fresh cache sized for this model."""

    @abstractmethod
    def forward(
        self,
        tokens: Sequence[int],
        position_index: int,
        cache: GenerationCache,
    ) -> torch.Tensor:
        """Run one forward pass and return logits for the last position.

        Implementations call ``cache.advance(tokens, position_index)`` exactly
        once per invocation. An empty ``tokens`` is only passed on the first
        step (position 0) of a prompt that tokenized to nothing; the model must
        still return logits for it without folding anything into the cache.
        """


class EmbeddingModel(ABC):
    """Sentence embedder used to turn a query into a vector."""

    @abstractmethod
    def embed(self, text: str) -> torch.Tensor:
        """Return the L2-normalized embedding of ``text``."""


__all__ = ["Tokenizer", "CausalLM", "EmbeddingModel"]
