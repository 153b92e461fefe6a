"""Similarity index input files.

EMBEDDINGS_FILE may be set to an empty string to serve a zero-row index
(similarity queries then always return no results).
"""

import os


EMBEDDINGS_FILE = os.getenv("EMBEDDINGS_FILE", "embeddings.bin")
EMBEDDINGS_KEY = os.getenv("EMBEDDINGS_KEY", "my_embedding")
TEXT_MAP_FILE = os.getenv("TEXT_MAP_FILE", "text_map.bin")


__all__ = [
    "EMBEDDINGS_FILE",
    "EMBEDDINGS_KEY",
    "TEXT_MAP_FILE",
]
