"""Tokenizer adapter for the causal model.

Wraps a Hugging Face ``tokenizers.Tokenizer`` loaded from a local directory
holding ``tokenizer.json`` or from a hub repo id.

Detokenization renders each token on its own, using the SentencePiece
conventions of Llama-family vocabularies: the word-boundary marker ``▁``
becomes a space and the byte token ``<0x0A>`` becomes a newline.
"""

from __future__ import annotations

import logging
import os
from threading import Lock

# Disable tokenizers parallelism before importing tokenizers (prevents fork warnings)
os.environ["TOKENIZERS_PARALLELISM"] = "false"

from tokenizers import Tokenizer as _HFTokenizer  # type: ignore[import]

from ..errors import EncodingError
from .base import Tokenizer

logger = logging.getLogger(__name__)

WORD_BOUNDARY_MARKER = "▁"
NEWLINE_TOKEN = "<0x0A>"


def render_token_text(piece: str) -> str:
    """Map a raw vocabulary piece to the text it stands for."""
    return piece.replace(WORD_BOUNDARY_MARKER, " ").replace(NEWLINE_TOKEN, "\n")


class HFTokenizer(Tokenizer):
    def __init__(self, tokenizer: _HFTokenizer, *, eos_token: str | None = "</s>") -> None:
        self._lock = Lock()
        self._tok = tokenizer
        self._eos_token_id = tokenizer.token_to_id(eos_token) if eos_token else None
        if eos_token and self._eos_token_id is None:
            logger.warning("tokenizer: eos token %r not in vocabulary; generation stops only at max_length", eos_token)

    @classmethod
    def load(
        cls,
        path_or_repo: str,
        *,
        revision: str = "main",
        token: str | None = None,
        eos_token: str | None = "</s>",
    ) -> HFTokenizer:
        """Load from a local directory or a Hugging Face repo id."""
        local_json = os.path.join(path_or_repo, "tokenizer.json")
        if os.path.isfile(local_json):
            tok = _HFTokenizer.from_file(local_json)
            logger.info("tokenizer: loaded local tokenizer.json at %s", local_json)
        else:
            kwargs: dict[str, str] = {"revision": revision}
            if token:
                kwargs["token"] = token
            tok = _HFTokenizer.from_pretrained(path_or_repo, **kwargs)
            logger.info("tokenizer: loaded %s@%s from hub", path_or_repo, revision)
        return cls(tok, eos_token=eos_token)

    @property
    def eos_token_id(self) -> int | None:
        return self._eos_token_id

    def encode(self, text: str) -> list[int]:
        if not isinstance(text, str):
            raise EncodingError(f"expected text, got {type(text).__name__}")
        try:
            with self._lock:
                return list(self._tok.encode(text, add_special_tokens=True).ids)
        except Exception as exc:  # noqa: BLE001 - tokenizers raises plain Exception
            raise EncodingError(f"failed to tokenize prompt: {exc}") from exc

    def decode_one(self, token_id: int) -> str:
        with self._lock:
            piece = self._tok.id_to_token(int(token_id))
        if piece is None:
            return ""
        return render_token_text(piece)


__all__ = ["HFTokenizer", "render_token_text", "WORD_BOUNDARY_MARKER", "NEWLINE_TOKEN"]
