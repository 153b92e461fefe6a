"""Generation defaults.

Sampling Parameters:
    GEN_SEED: Seed for the per-request sampler. Every request starts from
        the same seed, so identical prompts reproduce identical output.

    GEN_TEMPERATURE: Logit temperature. 1.0 samples from the model's full
        distribution; 0 selects the argmax token.

    GEN_TOP_P: Nucleus threshold. 1.0 disables nucleus filtering.

Streaming:
    STREAM_BUFFER_SIZE: Capacity of the bounded channel between the decoding
        loop and the HTTP response writer. The decoder suspends when the
        client falls this many fragments behind.
"""

import os


GEN_SEED = int(os.getenv("GEN_SEED", "42"))
GEN_TEMPERATURE = float(os.getenv("GEN_TEMPERATURE", "1.0"))
GEN_TOP_P = float(os.getenv("GEN_TOP_P", "1.0"))

# Largest max_length a request may ask for
MAX_LENGTH_LIMIT = int(os.getenv("MAX_LENGTH_LIMIT", "2048"))

STREAM_BUFFER_SIZE = int(os.getenv("STREAM_BUFFER_SIZE", "8"))


__all__ = [
    "GEN_SEED",
    "GEN_TEMPERATURE",
    "GEN_TOP_P",
    "MAX_LENGTH_LIMIT",
    "STREAM_BUFFER_SIZE",
]
