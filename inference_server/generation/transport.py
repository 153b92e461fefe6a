"""Bounded, cancellable bridge from a DecodingLoop to an async consumer.

StreamTransport pairs one producer task with one consumer:

Producer:
    Owns the DecodingLoop. Each step is dispatched to a worker thread with
    ``asyncio.to_thread`` and awaited before the next one starts, so the
    session's cache and sampler only ever have one mutator. Each step's event
    is put on a bounded queue; a full queue suspends the producer until the
    consumer catches up.

Consumer:
    ``events()`` drains the queue in FIFO order and stops after a terminal
    event or the end-of-stream marker. Leaving the iterator early (client
    disconnect, task cancellation) closes the transport.

Cancellation:
    Closing marks the channel closed and cancels the producer. The producer
    checks the flag before every step, and a step already running on a worker
    thread has its output discarded, so no model computation is started after
    the close is observed.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncIterator

from ..errors import STEP_ERRORS, ChannelClosedError
from .events import ErrorEvent, StreamEvent, TokenEvent, EndOfSequenceEvent, is_terminal
from .loop import DecodingLoop

logger = logging.getLogger(__name__)

_END = object()


class StreamTransport:
    """Single-producer, single-consumer channel for one generation request."""

    def __init__(self, loop: DecodingLoop, *, buffer_size: int = 8, request_id: str = "-") -> None:
        if buffer_size < 1:
            raise ValueError("buffer_size must be >= 1")
        self._loop = loop
        self._request_id = request_id
        self._queue: asyncio.Queue[StreamEvent | object] = asyncio.Queue(maxsize=buffer_size)
        self._producer: asyncio.Task[None] | None = None
        self._closed = False
        self._cancelled = False
        self._start_time: float | None = None
        self._ttfb_ms: float | None = None

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def was_cancelled(self) -> bool:
        """True when the consumer left before the producer finished."""
        return self._cancelled

    @property
    def ttfb_ms(self) -> float | None:
        return self._ttfb_ms

    @property
    def steps_taken(self) -> int:
        return self._loop.step_index

    def start(self) -> None:
        """Launch the producer task. Idempotent."""
        if self._producer is None:
            self._start_time = time.perf_counter()
            self._producer = asyncio.create_task(self._produce(), name=f"decode-{self._request_id}")

    async def events(self) -> AsyncIterator[StreamEvent]:
        """Yield events in generation order until the stream terminates."""
        self.start()
        try:
            while True:
                item = await self._queue.get()
                if item is _END:
                    return
                if self._ttfb_ms is None and isinstance(item, TokenEvent) and self._start_time is not None:
                    self._ttfb_ms = (time.perf_counter() - self._start_time) * 1000.0
                yield item  # type: ignore[misc]
                if is_terminal(item):  # type: ignore[arg-type]
                    return
        finally:
            await self.aclose()

    async def aclose(self) -> None:
        """Close the channel and stop the producer. Idempotent."""
        if self._closed:
            return
        self._closed = True
        producer = self._producer
        if producer is None or producer.done():
            return
        self._cancelled = True
        producer.cancel()
        await asyncio.gather(producer, return_exceptions=True)
        logger.info(
            "stream: closed by consumer req_id=%s steps=%s",
            self._request_id,
            self._loop.step_index,
        )

    # ------------------------------------------------------------------ #
    # Producer
    # ------------------------------------------------------------------ #
    async def _produce(self) -> None:
        try:
            terminated = await self._run_steps()
            if not terminated:
                await self._send(_END)
        except ChannelClosedError:
            logger.info(
                "stream: consumer gone, stopping req_id=%s step=%s",
                self._request_id,
                self._loop.step_index,
            )

    async def _run_steps(self) -> bool:
        loop = self._loop
        while not loop.done:
            if self._closed:
                raise ChannelClosedError()
            try:
                output = await asyncio.to_thread(loop.step)
            except STEP_ERRORS as exc:
                logger.warning(
                    "stream: step failed req_id=%s step=%s error=%s",
                    self._request_id,
                    loop.step_index,
                    exc,
                )
                await self._send(ErrorEvent.from_exception(exc))
                return True
            except Exception as exc:  # noqa: BLE001 - reported in-band, stream already started
                logger.exception("stream: unexpected failure req_id=%s", self._request_id)
                await self._send(ErrorEvent(error_code="internal_error", message=str(exc) or type(exc).__name__))
                return True
            await self._send(TokenEvent(output.text))
            if output.eos:
                await self._send(EndOfSequenceEvent())
                return True
        return False

    async def _send(self, item: StreamEvent | object) -> None:
        if self._closed:
            raise ChannelClosedError()
        await self._queue.put(item)


__all__ = ["StreamTransport"]
