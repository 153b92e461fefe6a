"""Model selection and device configuration.

Defines which causal language model and which sentence-embedding model are
served, plus the device they run on.
"""

from __future__ import annotations

import os


# Causal language model used for text generation
CHAT_MODEL = os.getenv("CHAT_MODEL", "TinyLlama/TinyLlama-1.1B-Chat-v1.0")
CHAT_MODEL_REVISION = os.getenv("CHAT_MODEL_REVISION", "main")

# Sentence-embedding model used to embed similarity queries
EMBED_MODEL = os.getenv("EMBED_MODEL", "sentence-transformers/all-MiniLM-L6-v2")
EMBED_MODEL_REVISION = os.getenv("EMBED_MODEL_REVISION", "refs/pr/21")

# Optional Hugging Face access token for gated repos
HF_TOKEN = os.getenv("HF_TOKEN") or None

# 'cpu', 'cuda', 'cuda:N' or 'auto' (cuda when available)
DEVICE = (os.getenv("DEVICE", "cpu") or "cpu").lower()

# End-of-sequence token text looked up in the tokenizer vocabulary
EOS_TOKEN = os.getenv("EOS_TOKEN", "</s>")


__all__ = [
    "CHAT_MODEL",
    "CHAT_MODEL_REVISION",
    "EMBED_MODEL",
    "EMBED_MODEL_REVISION",
    "HF_TOKEN",
    "DEVICE",
    "EOS_TOKEN",
]
