"""Server-sent event framing for streamed generation."""

from __future__ import annotations

from collections.abc import AsyncIterator

import orjson

from ..generation import StreamEvent

SSE_MEDIA_TYPE = "text/event-stream"

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "X-Accel-Buffering": "no",
}


def format_sse(event: StreamEvent) -> bytes:
    """One ``data:`` frame carrying the event as compact JSON."""
    return b"data: " + orjson.dumps(event.to_payload()) + b"\n\n"


async def sse_frames(events: AsyncIterator[StreamEvent]) -> AsyncIterator[bytes]:
    async for event in events:
        yield format_sse(event)


__all__ = ["SSE_HEADERS", "SSE_MEDIA_TYPE", "format_sse", "sse_frames"]
