"""FastAPI server for similarity search and text generation.

Server Lifecycle:
    1. On startup: initialize telemetry, then load the index and both models
       (unless PRELOAD_CONTEXT is off, in which case the first request loads
       them)
    2. Serve /find_similar, /generate_text and /generate_text_stream
    3. On shutdown: drop the shared context and flush telemetry

Example:
    Run directly with uvicorn:
        $ uvicorn inference_server.server:app --host 0.0.0.0 --port 8080

    Or through the console script:
        $ inference-server
"""

from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request
from fastapi.responses import ORJSONResponse

from .config import HOST, PORT, PRELOAD_CONTEXT
from .errors import (
    EmbeddingError,
    EncodingError,
    EmptyIndexError,
    GenerationError,
    ValidationError,
    DimensionMismatchError,
)
from .handlers import router
from .helpers.validation import validate_env
from .logging import configure_logging, current_request_id
from .state import app_context_ready, get_app_context, shutdown_app_context
from .telemetry import capture_error, init_telemetry, shutdown_telemetry

logger = logging.getLogger(__name__)

app = FastAPI(default_response_class=ORJSONResponse)

configure_logging()
validate_env()


def _error_response(status_code: int, error_code: str, message: str) -> ORJSONResponse:
    return ORJSONResponse(status_code=status_code, content={"error_code": error_code, "message": message})


@app.exception_handler(ValidationError)
async def _on_validation_error(_: Request, exc: ValidationError) -> ORJSONResponse:
    return _error_response(400, exc.error_code, exc.message)


@app.exception_handler(EncodingError)
async def _on_encoding_error(_: Request, exc: EncodingError) -> ORJSONResponse:
    return _error_response(400, "encoding_error", str(exc))


@app.exception_handler(DimensionMismatchError)
async def _on_dimension_mismatch(_: Request, exc: DimensionMismatchError) -> ORJSONResponse:
    return _error_response(400, "dimension_mismatch", str(exc))


@app.exception_handler(EmptyIndexError)
async def _on_empty_index(_: Request, exc: EmptyIndexError) -> ORJSONResponse:
    return _error_response(503, "empty_index", str(exc))


@app.exception_handler(EmbeddingError)
async def _on_embedding_error(_: Request, exc: EmbeddingError) -> ORJSONResponse:
    logger.error("find_similar: embedding failed error=%s", exc)
    capture_error(exc)
    return _error_response(500, "embedding_failed", "Failed to generate embedding")


@app.exception_handler(GenerationError)
async def _on_generation_error(_: Request, exc: GenerationError) -> ORJSONResponse:
    logger.error("generate_text: failed step=%s cause=%s", exc.step_index, exc.cause)
    capture_error(exc.cause, extra={"step_index": exc.step_index, "request_id": current_request_id()})
    return _error_response(500, "generation_failed", "Failed to generate text")


@app.on_event("startup")
async def preload_context() -> None:
    """Load the models and the index before accepting traffic."""
    init_telemetry()
    if not PRELOAD_CONTEXT:
        logger.info("preload_context: disabled, loading on first request")
        return
    start = time.perf_counter()
    logger.info("preload_context: loading index and models...")
    await get_app_context()
    logger.info("preload_context: ready in %.2fs", time.perf_counter() - start)


@app.on_event("shutdown")
async def stop_context() -> None:
    """Release the shared context and flush telemetry."""
    await shutdown_app_context()
    shutdown_telemetry()


@app.get("/")
async def root():
    """Root endpoint for load balancer health checks."""
    return {"status": "ok"}


@app.get("/healthz")
async def healthz():
    """Health check endpoint; reports whether models are loaded."""
    return {"status": "ok", "ready": app_context_ready()}


app.include_router(router)


def main() -> None:
    import uvicorn

    uvicorn.run(app, host=HOST, port=PORT, log_config=None)


if __name__ == "__main__":
    main()
