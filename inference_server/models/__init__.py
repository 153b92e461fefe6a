"""Model capabilities and their Hugging Face adapters.

Interfaces (base.py):
    Tokenizer, CausalLM, EmbeddingModel

Adapters:
    HFTokenizer: tokenizers.Tokenizer with per-token SentencePiece rendering
    LlamaInferenceModel: AutoModelForCausalLM with incremental forward passes
    SentenceEmbedder: AutoModel encoder with max pooling + L2 normalization

GenerationCache (cache.py) is the per-sequence key/value memory threaded
through LlamaInferenceModel.forward.
"""

from .base import Tokenizer, CausalLM, EmbeddingModel
from .cache import GenerationCache

__all__ = [
    "Tokenizer",
    "CausalLM",
    "EmbeddingModel",
    "GenerationCache",
]
