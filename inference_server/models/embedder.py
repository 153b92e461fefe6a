"""Sentence embedding adapter (PyTorch / transformers).

Embeds one sentence with a BERT-style encoder, max-pools the token states and
L2-normalizes the result, matching how the served embedding matrix was built.
"""

from __future__ import annotations

import logging
import time
from threading import Lock

import torch  # type: ignore[import]
import torch.nn.functional as F  # type: ignore[import]
from transformers import AutoModel, AutoTokenizer  # type: ignore[import]

from ..errors import EncodingError
from .base import EmbeddingModel

logger = logging.getLogger(__name__)


def max_pool(hidden_states: torch.Tensor) -> torch.Tensor:
    """Max over the token axis of a (batch, tokens, hidden) tensor."""
    return hidden_states.max(dim=1).values


class SentenceEmbedder(EmbeddingModel):
    def __init__(self, model: torch.nn.Module, tokenizer, device: torch.device) -> None:
        self._model = model
        self._tokenizer = tokenizer
        self._device = device
        self._lock = Lock()

    @classmethod
    def load(
        cls,
        model_id: str,
        *,
        device: torch.device,
        revision: str = "main",
        token: str | None = None,
    ) -> SentenceEmbedder:
        start = time.perf_counter()
        tokenizer = AutoTokenizer.from_pretrained(model_id, revision=revision, token=token)
        model = AutoModel.from_pretrained(model_id, revision=revision, token=token)
        model.to(device)
        model.eval()
        logger.info(
            "embedder: loaded model=%s revision=%s device=%s in %.2fs",
            model_id,
            revision,
            device,
            time.perf_counter() - start,
        )
        return cls(model, tokenizer, device)

    def embed(self, text: str) -> torch.Tensor:
        if not isinstance(text, str):
            raise EncodingError(f"expected text, got {type(text).__name__}")
        try:
            with self._lock:
                enc = self._tokenizer(text, return_tensors="pt", truncation=True)
        except Exception as exc:  # noqa: BLE001 - tokenizer backends raise assorted types
            raise EncodingError(f"failed to tokenize query: {exc}") from exc
        enc = {k: v.to(self._device) for k, v in enc.items()}
        with torch.inference_mode():
            hidden = self._model(**enc).last_hidden_state
        pooled = max_pool(hidden)
        return F.normalize(pooled, p=2.0, dim=1)[0].float().cpu()


__all__ = ["SentenceEmbedder", "max_pool"]
