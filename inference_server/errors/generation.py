"""Text generation exceptions.

Per-step failures (forward pass, cache, sampling) are fatal to the current
request only. Blocking callers receive them wrapped in GenerationError;
streaming callers receive them as a terminal error event.
"""

from __future__ import annotations


class EncodingError(ValueError):
    """Raised when text cannot be tokenized."""


class ForwardPassError(RuntimeError):
    """Raised when the model computation fails at a decoding step."""


class CacheError(RuntimeError):
    """Raised on generation cache misuse or an incompatible cache configuration."""


class SamplingError(ValueError):
    """Raised when logits cannot be sampled (empty, NaN, or fully masked)."""


# Errors a single decoding step may raise
STEP_ERRORS: tuple[type[Exception], ...] = (ForwardPassError, CacheError, SamplingError)


class GenerationError(RuntimeError):
    """Blocking generation failure carrying the failing step and its cause.

    Attributes:
        step_index: 0-based index of the step that failed.
        cause: The underlying step error.
    """

    def __init__(self, step_index: int, cause: BaseException) -> None:
        super().__init__(f"generation failed at step {step_index}: {cause}")
        self.step_index = step_index
        self.cause = cause


__all__ = [
    "EncodingError",
    "ForwardPassError",
    "CacheError",
    "SamplingError",
    "STEP_ERRORS",
    "GenerationError",
]
