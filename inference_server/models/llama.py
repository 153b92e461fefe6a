"""Causal language model adapter (PyTorch / transformers).

Loads a Llama-family checkpoint with ``AutoModelForCausalLM`` and exposes the
incremental forward pass used by the decoding loop: the caller supplies only
the tokens not yet folded into the cache plus their starting position.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence

import torch  # type: ignore[import]
from transformers import AutoModelForCausalLM  # type: ignore[import]

from ..errors import CacheError, ForwardPassError
from .base import CausalLM
from .cache import GenerationCache
from .tokenizer import HFTokenizer

logger = logging.getLogger(__name__)


class LlamaInferenceModel(CausalLM):
    """Frozen causal LM shared read-only across requests.

    Attributes:
        model: The transformers model in eval mode.
        tokenizer: Tokenizer matching the model vocabulary.
        device: Torch device holding the weights.
    """

    def __init__(self, model: torch.nn.Module, tokenizer: HFTokenizer, device: torch.device) -> None:
        self.model = model
        self.tokenizer = tokenizer
        self.device = device
        self.config = model.config

    @classmethod
    def load(
        cls,
        model_id: str,
        *,
        device: torch.device,
        revision: str = "main",
        token: str | None = None,
        eos_token: str | None = "</s>",
    ) -> LlamaInferenceModel:
        start = time.perf_counter()
        dtype = torch.float16 if device.type == "cuda" else torch.float32
        model = AutoModelForCausalLM.from_pretrained(
            model_id,
            revision=revision,
            token=token,
            torch_dtype=dtype,
        )
        model.to(device)
        model.eval()
        tokenizer = HFTokenizer.load(model_id, revision=revision, token=token, eos_token=eos_token)
        logger.info(
            "llm: loaded model=%s revision=%s device=%s dtype=%s in %.2fs",
            model_id,
            revision,
            device,
            dtype,
            time.perf_counter() - start,
        )
        return cls(model, tokenizer, device)

    def create_cache(self) -> GenerationCache:
        return GenerationCache.from_config(self.config)

    def forward(
        self,
        tokens: Sequence[int],
        position_index: int,
        cache: GenerationCache,
    ) -> torch.Tensor:
        if not tokens and position_index != 0:
            raise ForwardPassError(f"empty context at position {position_index}")
        cache.advance(tokens, position_index)
        try:
            if not tokens:
                return self._bos_logits()
            input_ids = torch.tensor([list(tokens)], dtype=torch.long, device=self.device)
            positions = torch.arange(
                position_index,
                position_index + len(tokens),
                dtype=torch.long,
                device=self.device,
            )
            with torch.inference_mode():
                out = self.model(
                    input_ids=input_ids,
                    position_ids=positions.unsqueeze(0),
                    cache_position=positions,
                    past_key_values=cache.past_key_values,
                    use_cache=True,
                )
            return out.logits[0, -1, :].float()
        except (CacheError, ForwardPassError):
            raise
        except Exception as exc:  # noqa: BLE001 - surfaced as a step failure
            raise ForwardPassError(f"forward pass failed at position {position_index}: {exc}") from exc

    def _bos_logits(self) -> torch.Tensor:
        """Next-token logits for a prompt that tokenized to nothing.

        The model runs on its BOS token alone with no cache, so the session
        cache stays at position 0 and the first sampled token is folded there.
        """
        bos_token_id = getattr(self.config, "bos_token_id", None)
        if not isinstance(bos_token_id, int):
            raise ForwardPassError("empty prompt and the model config defines no bos_token_id")
        input_ids = torch.tensor([[bos_token_id]], dtype=torch.long, device=self.device)
        with torch.inference_mode():
            out = self.model(input_ids=input_ids, use_cache=False)
        return out.logits[0, -1, :].float()


__all__ = ["LlamaInferenceModel"]
