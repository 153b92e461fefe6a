"""Events delivered to streaming consumers.

Stream Protocol:
    TokenEvent:          {"type": "token", "text": "fragment"}
    EndOfSequenceEvent:  {"type": "eos"}
    ErrorEvent:          {"type": "error", "error_code": "...", "message": "..."}

A stream carries zero or more TokenEvents followed by at most one
EndOfSequenceEvent or ErrorEvent. A stream that simply ends after its last
TokenEvent reached ``max_length`` without an end-of-sequence token.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar

from ..errors import classify_error


@dataclass(frozen=True, slots=True)
class TokenEvent:
    type: ClassVar[str] = "token"
    text: str

    def to_payload(self) -> dict[str, Any]:
        return {"type": self.type, "text": self.text}


@dataclass(frozen=True, slots=True)
class EndOfSequenceEvent:
    type: ClassVar[str] = "eos"

    def to_payload(self) -> dict[str, Any]:
        return {"type": self.type}


@dataclass(frozen=True, slots=True)
class ErrorEvent:
    type: ClassVar[str] = "error"
    error_code: str
    message: str

    @classmethod
    def from_exception(cls, exc: BaseException) -> ErrorEvent:
        return cls(error_code=f"{classify_error(exc)}_error", message=str(exc) or type(exc).__name__)

    def to_payload(self) -> dict[str, Any]:
        return {"type": self.type, "error_code": self.error_code, "message": self.message}


StreamEvent = TokenEvent | EndOfSequenceEvent | ErrorEvent


def is_terminal(event: StreamEvent) -> bool:
    return isinstance(event, (EndOfSequenceEvent, ErrorEvent))


__all__ = [
    "TokenEvent",
    "EndOfSequenceEvent",
    "ErrorEvent",
    "StreamEvent",
    "is_terminal",
]
