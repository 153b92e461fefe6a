"""Per-sequence attention key/value cache.

A GenerationCache belongs to exactly one generation session. Each decoding
step folds its context tokens into the cache with ``advance`` and pairs that
call with exactly one model forward pass at the same position offset.
Positions only move forward: replaying an offset or skipping ahead would
desynchronize the cached keys/values from the token sequence, so both are
rejected.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from transformers import DynamicCache  # type: ignore[import]

from ..errors import CacheError


class GenerationCache:
    """Mutable attention memory for one sequence, sized from model config.

    Attributes:
        past_key_values: transformers cache object passed to the model.
        num_layers: Number of attention layers the cache serves.
        max_positions: Largest number of positions the model accepts, or None.
    """

    def __init__(self, *, num_layers: int, max_positions: int | None = None) -> None:
        if num_layers <= 0:
            raise CacheError(f"cache needs at least one layer, got {num_layers}")
        if max_positions is not None and max_positions <= 0:
            raise CacheError(f"max_positions must be positive, got {max_positions}")
        self.num_layers = num_layers
        self.max_positions = max_positions
        self.past_key_values = DynamicCache()
        self._position = 0

    @classmethod
    def from_config(cls, config: Any) -> GenerationCache:
        """Size a cache from a transformers model config."""
        num_layers = getattr(config, "num_hidden_layers", None)
        if not isinstance(num_layers, int):
            raise CacheError("model config does not define num_hidden_layers")
        max_positions = getattr(config, "max_position_embeddings", None)
        return cls(
            num_layers=num_layers,
            max_positions=max_positions if isinstance(max_positions, int) else None,
        )

    @property
    def position(self) -> int:
        """Number of tokens already folded into the cache."""
        return self._position

    def advance(self, tokens: Sequence[int], position_offset: int) -> None:
        """Record that ``tokens`` are being folded in starting at ``position_offset``.

        Raises:
            CacheError: If the offset is not the cache's current position, or the
                tokens would run past the model's maximum positions.
        """
        if position_offset != self._position:
            raise CacheError(
                f"cache is at position {self._position}, step requested offset {position_offset}"
            )
        end = self._position + len(tokens)
        if self.max_positions is not None and end > self.max_positions:
            raise CacheError(f"sequence length {end} exceeds model limit {self.max_positions}")
        self._position = end


__all__ = ["GenerationCache"]
