"""Build and hold the process-wide AppContext."""

from __future__ import annotations

import asyncio
import logging
import time

from ..config import (
    CHAT_MODEL,
    CHAT_MODEL_REVISION,
    DEVICE,
    EMBED_MODEL,
    EMBED_MODEL_REVISION,
    EMBEDDINGS_FILE,
    EMBEDDINGS_KEY,
    EOS_TOKEN,
    GEN_SEED,
    GEN_TEMPERATURE,
    GEN_TOP_P,
    HF_TOKEN,
    STREAM_BUFFER_SIZE,
    TEXT_MAP_FILE,
)
from ..errors import IndexLoadError
from ..index import SimilarityIndex, load_embedding_matrix, read_text_map
from ..utils import resolve_device
from .context import AppContext, GenerationSettings
from .singleton import AsyncSingleton

logger = logging.getLogger(__name__)


def load_index() -> tuple[SimilarityIndex, list[str]]:
    """Load the embedding matrix and its corpus.

    An empty EMBEDDINGS_FILE yields a zero-row index with an empty corpus.

    Raises:
        IndexLoadError: A file is unreadable or rows and texts disagree.
    """
    if not EMBEDDINGS_FILE:
        logger.info("index: no embeddings file configured, serving an empty index")
        return SimilarityIndex.empty(), []

    matrix = load_embedding_matrix(EMBEDDINGS_FILE, EMBEDDINGS_KEY)
    corpus = read_text_map(TEXT_MAP_FILE)
    if int(matrix.shape[0]) != len(corpus):
        raise IndexLoadError(
            f"{EMBEDDINGS_FILE} has {int(matrix.shape[0])} rows but {TEXT_MAP_FILE} has {len(corpus)} texts"
        )
    return SimilarityIndex(matrix), corpus


def generation_settings() -> GenerationSettings:
    return GenerationSettings(
        seed=GEN_SEED,
        temperature=GEN_TEMPERATURE,
        top_p=GEN_TOP_P if GEN_TOP_P < 1.0 else None,
        stream_buffer_size=STREAM_BUFFER_SIZE,
    )


def load_app_context() -> AppContext:
    """Load the index and both models. Blocking; run it off the event loop."""
    # Deferred: pulls in transformers
    from ..models.embedder import SentenceEmbedder  # noqa: PLC0415
    from ..models.llama import LlamaInferenceModel  # noqa: PLC0415

    start = time.perf_counter()
    device = resolve_device(DEVICE)
    index, corpus = load_index()
    embedder = SentenceEmbedder.load(
        EMBED_MODEL,
        device=device,
        revision=EMBED_MODEL_REVISION,
        token=HF_TOKEN,
    )
    model = LlamaInferenceModel.load(
        CHAT_MODEL,
        device=device,
        revision=CHAT_MODEL_REVISION,
        token=HF_TOKEN,
        eos_token=EOS_TOKEN,
    )
    ctx = AppContext(
        index=index,
        corpus=corpus,
        embedder=embedder,
        model=model,
        tokenizer=model.tokenizer,
        settings=generation_settings(),
    )
    logger.info(
        "context: ready rows=%s device=%s in %.2fs",
        len(index),
        device,
        time.perf_counter() - start,
    )
    return ctx


class _AppContextSingleton(AsyncSingleton[AppContext]):
    async def _create_instance(self) -> AppContext:
        return await asyncio.to_thread(load_app_context)


_context_singleton = _AppContextSingleton()


async def get_app_context() -> AppContext:
    """FastAPI dependency returning the shared AppContext, loading it on first use."""
    return await _context_singleton.get()


def set_app_context(ctx: AppContext) -> None:
    _context_singleton.set(ctx)


def app_context_ready() -> bool:
    return _context_singleton.is_initialized


async def shutdown_app_context() -> None:
    await _context_singleton.shutdown()


__all__ = [
    "app_context_ready",
    "generation_settings",
    "get_app_context",
    "load_app_context",
    "load_index",
    "set_app_context",
    "shutdown_app_context",
]
