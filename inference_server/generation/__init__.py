"""Autoregressive text generation: sampling, decoding loop and streaming."""

from .sampling import SamplingPolicy
from .session import GenerationSession
from .loop import DecodingLoop, DecodingState, StepOutput
from .transport import StreamTransport
from .events import (
    ErrorEvent,
    TokenEvent,
    StreamEvent,
    EndOfSequenceEvent,
    is_terminal,
)

__all__ = [
    "SamplingPolicy",
    "GenerationSession",
    "DecodingLoop",
    "DecodingState",
    "StepOutput",
    "StreamTransport",
    "TokenEvent",
    "EndOfSequenceEvent",
    "ErrorEvent",
    "StreamEvent",
    "is_terminal",
]
