"""Request size limits."""

import os


MAX_NUM_RESULTS = int(os.getenv("MAX_NUM_RESULTS", "100"))
MAX_PROMPT_CHARS = int(os.getenv("MAX_PROMPT_CHARS", "8000"))


__all__ = [
    "MAX_NUM_RESULTS",
    "MAX_PROMPT_CHARS",
]
