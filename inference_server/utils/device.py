"""Torch device resolution."""

from __future__ import annotations

import torch  # type: ignore[import]


def resolve_device(name: str) -> torch.device:
    """Turn a configured device string into a torch.device.

    'auto' picks the first CUDA device when one is visible and falls back
    to CPU otherwise.
    """
    normalized = (name or "cpu").strip().lower()
    if normalized == "auto":
        normalized = "cuda" if torch.cuda.is_available() else "cpu"
    return torch.device(normalized)


__all__ = ["resolve_device"]
