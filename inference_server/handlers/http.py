"""HTTP routes for similarity search and text generation.

Routes:
    POST /find_similar          {text, num_results} -> {top_results: [...]}
    POST /generate_text         {prompt, max_length} -> {generated_text}
    POST /generate_text_stream  {prompt, max_length} -> text/event-stream

Input errors (validation, tokenization, dimension mismatch) raise and are
turned into JSON error responses by the handlers registered in
``server.py``. Once a stream has started, failures travel in-band as an
error event instead.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from collections.abc import AsyncIterator
from typing import Any

import orjson
from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from ..errors import ValidationError, classify_error
from ..generation import StreamTransport, TokenEvent
from ..logging import log_context
from ..state import AppContext, get_app_context
from ..telemetry import capture_error, get_metrics
from .requests import parse_generation_request, parse_similarity_request
from .sse import SSE_HEADERS, SSE_MEDIA_TYPE, format_sse

logger = logging.getLogger(__name__)

router = APIRouter()


def _new_request_id() -> str:
    return uuid.uuid4().hex[:12]


async def _read_json(request: Request) -> Any:
    body = await request.body()
    try:
        return orjson.loads(body)
    except orjson.JSONDecodeError as exc:
        raise ValidationError("invalid_payload", "request body must be valid JSON") from exc


def _record_error(exc: BaseException, endpoint: str) -> None:
    get_metrics().errors_total.add(1, {"endpoint": endpoint, "error_type": classify_error(exc)})


@router.post("/find_similar")
async def find_similar(request: Request, ctx: AppContext = Depends(get_app_context)) -> dict[str, Any]:
    metrics = get_metrics()
    metrics.requests_total.add(1, {"endpoint": "find_similar"})
    with log_context(request_id=_new_request_id()):
        try:
            req = parse_similarity_request(await _read_json(request))
            start = time.perf_counter()
            hits = await asyncio.to_thread(ctx.ranked_hits, req.text, req.num_results)
        except Exception as exc:
            _record_error(exc, "find_similar")
            raise
        elapsed = time.perf_counter() - start
        metrics.search_latency.record(elapsed)
        logger.info("find_similar: k=%s hits=%s ms=%.1f", req.num_results, len(hits), elapsed * 1000.0)
        return {
            "top_results": [
                {"item": text, "index": hit.index, "score": hit.score}
                for hit, text in hits
            ]
        }


@router.post("/generate_text")
async def generate_text(request: Request, ctx: AppContext = Depends(get_app_context)) -> dict[str, str]:
    metrics = get_metrics()
    metrics.requests_total.add(1, {"endpoint": "generate_text"})
    with log_context(request_id=_new_request_id()):
        try:
            req = parse_generation_request(await _read_json(request))
            metrics.active_generations.add(1)
            start = time.perf_counter()
            try:
                text = await asyncio.to_thread(ctx.generate_blocking, req.prompt, req.max_length)
            finally:
                metrics.active_generations.add(-1)
        except Exception as exc:
            _record_error(exc, "generate_text")
            raise
        elapsed = time.perf_counter() - start
        metrics.generation_latency.record(elapsed, {"mode": "blocking"})
        logger.info("generate_text: max_length=%s chars=%s ms=%.1f", req.max_length, len(text), elapsed * 1000.0)
        return {"generated_text": text}


@router.post("/generate_text_stream")
async def generate_text_stream(request: Request, ctx: AppContext = Depends(get_app_context)) -> StreamingResponse:
    get_metrics().requests_total.add(1, {"endpoint": "generate_text_stream"})
    request_id = _new_request_id()
    with log_context(request_id=request_id):
        try:
            req = parse_generation_request(await _read_json(request))
            transport = await asyncio.to_thread(
                ctx.open_stream, req.prompt, req.max_length, request_id=request_id
            )
        except Exception as exc:
            _record_error(exc, "generate_text_stream")
            raise
        logger.info("generate_text_stream: open max_length=%s", req.max_length)
    return StreamingResponse(
        _stream_body(transport, request_id),
        media_type=SSE_MEDIA_TYPE,
        headers=SSE_HEADERS,
    )


async def _stream_body(transport: StreamTransport, request_id: str) -> AsyncIterator[bytes]:
    """Frame transport events as SSE; closing this generator cancels decoding."""
    metrics = get_metrics()
    tokens = 0
    start = time.perf_counter()
    metrics.active_generations.add(1)
    with log_context(request_id=request_id):
        try:
            async for event in transport.events():
                if isinstance(event, TokenEvent):
                    tokens += 1
                    if tokens == 1 and transport.ttfb_ms is not None:
                        metrics.ttft.record(transport.ttfb_ms / 1000.0)
                yield format_sse(event)
        except Exception as exc:
            _record_error(exc, "generate_text_stream")
            capture_error(exc, request_id=request_id)
            raise
        finally:
            await transport.aclose()
            metrics.active_generations.add(-1)
            metrics.tokens_generated_total.add(tokens)
            if transport.was_cancelled:
                metrics.cancellation_total.add(1)
            else:
                metrics.generation_latency.record(time.perf_counter() - start, {"mode": "stream"})
            logger.info(
                "generate_text_stream: closed tokens=%s steps=%s cancelled=%s ms=%.1f",
                tokens,
                transport.steps_taken,
                transport.was_cancelled,
                (time.perf_counter() - start) * 1000.0,
            )


__all__ = ["router"]
