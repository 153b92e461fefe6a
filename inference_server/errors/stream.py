"""Streaming exceptions.

This module provides the exception used when the stream consumer goes away
before generation finishes.
"""


class ChannelClosedError(Exception):
    """Raised when the producer hands off output after the consumer closed the stream.

    Never surfaced to clients; the producer stops issuing decoding steps.
    """


__all__ = ["ChannelClosedError"]
