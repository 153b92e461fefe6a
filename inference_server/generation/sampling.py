"""Seeded token sampler.

A SamplingPolicy owns its own ``torch.Generator``: the same seed fed the same
sequence of logits yields the same token sequence, and no two sessions ever
share one instance.

Sampling Parameters:
    temperature: Divides logits before the softmax. 1.0 (default) samples from
        the model's full distribution; 0 picks the argmax token.

    top_p: Nucleus threshold. When below 1.0 only the smallest set of most
        likely tokens whose cumulative probability reaches top_p is kept.
"""

from __future__ import annotations

import torch  # type: ignore[import]

from ..errors import SamplingError


class SamplingPolicy:
    def __init__(self, seed: int, *, temperature: float = 1.0, top_p: float | None = None) -> None:
        if temperature < 0:
            raise ValueError(f"temperature must be >= 0, got {temperature}")
        if top_p is not None and not (0.0 < top_p <= 1.0):
            raise ValueError(f"top_p must be in (0, 1], got {top_p}")
        self.seed = seed
        self.temperature = temperature
        self.top_p = top_p
        self._generator = torch.Generator(device="cpu")
        self._generator.manual_seed(seed)

    def sample(self, logits: torch.Tensor) -> int:
        """Draw the next token id from a logits vector over the vocabulary.

        The input tensor is never modified.

        Raises:
            SamplingError: If the logits are empty, contain NaN, or mask out
                every token.
        """
        values = _as_logit_vector(logits)
        if self.temperature == 0:
            return int(torch.argmax(values).item())

        probs = torch.softmax(values / self.temperature, dim=-1)
        if not torch.isfinite(probs).all():
            raise SamplingError("logits produce a non-finite distribution")
        if self.top_p is not None and self.top_p < 1.0:
            probs = _nucleus(probs, self.top_p)
        return int(torch.multinomial(probs, 1, generator=self._generator).item())


def _as_logit_vector(logits: torch.Tensor) -> torch.Tensor:
    if not isinstance(logits, torch.Tensor):
        raise SamplingError(f"expected a tensor of logits, got {type(logits).__name__}")
    values = logits.detach()
    if values.dim() == 2 and values.shape[0] == 1:
        values = values[0]
    if values.dim() != 1:
        raise SamplingError(f"logits must be a vector, got shape {tuple(logits.shape)}")
    if values.numel() == 0:
        raise SamplingError("logits vector is empty")
    values = values.to(device="cpu", dtype=torch.float32)
    if torch.isnan(values).any():
        raise SamplingError("logits contain NaN")
    if torch.isneginf(values).all():
        raise SamplingError("every token is masked out")
    return values


def _nucleus(probs: torch.Tensor, top_p: float) -> torch.Tensor:
    sorted_probs, sorted_ids = torch.sort(probs, descending=True)
    cumulative = torch.cumsum(sorted_probs, dim=-1)
    # Keep the token that crosses the threshold.
    drop = (cumulative - sorted_probs) > top_p
    kept = sorted_probs.masked_fill(drop, 0.0)
    return torch.zeros_like(probs).scatter(0, sorted_ids, kept)


__all__ = ["SamplingPolicy"]
