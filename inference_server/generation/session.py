"""Per-request generation state.

A GenerationSession is created when a generation request starts and dropped
when the response completes or the client disconnects. It is never reused
and never shared between requests.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..models.cache import GenerationCache
from .sampling import SamplingPolicy


@dataclass(slots=True)
class GenerationSession:
    """Mutable state of one decoding run.

    Attributes:
        tokens: Prompt tokens followed by generated tokens (append-only).
        cache: Key/value cache owned by this session alone.
        sampler: Sampler owned by this session alone.
        max_length: Number of decoding steps the caller allows.
        step_index: Generation steps taken so far.
        position_offset: Tokens already folded into the cache.
        prompt_length: Length of the prompt prefix of ``tokens``.
    """

    tokens: list[int]
    cache: GenerationCache
    sampler: SamplingPolicy
    max_length: int
    step_index: int = 0
    position_offset: int = 0
    prompt_length: int = field(init=False)

    def __post_init__(self) -> None:
        if self.max_length < 0:
            raise ValueError("max_length must be >= 0")
        self.prompt_length = len(self.tokens)

    @property
    def generated_tokens(self) -> list[int]:
        return self.tokens[self.prompt_length:]


__all__ = ["GenerationSession"]
