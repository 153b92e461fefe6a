"""Application-scoped serving context.

AppContext bundles everything a request needs that outlives the request: the
similarity index with its corpus, the embedding model, the causal model and
its tokenizer, and the generation defaults. It is built once at startup and
handed by reference to every handler. Nothing on it is mutated afterwards;
each generation request builds its own cache and sampler.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import AsyncIterator, Sequence
from dataclasses import dataclass, field

from ..errors import STEP_ERRORS, EmbeddingError, EncodingError, GenerationError
from ..generation import DecodingLoop, SamplingPolicy, StreamEvent, StreamTransport
from ..index import SimilarityIndex, SimilarityResult
from ..models.base import CausalLM, EmbeddingModel, Tokenizer

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class GenerationSettings:
    """Per-request sampler defaults and stream buffering."""

    seed: int = 42
    temperature: float = 1.0
    top_p: float | None = None
    stream_buffer_size: int = 8

    def new_sampler(self) -> SamplingPolicy:
        return SamplingPolicy(self.seed, temperature=self.temperature, top_p=self.top_p)


@dataclass(frozen=True, slots=True)
class AppContext:
    index: SimilarityIndex
    corpus: Sequence[str]
    embedder: EmbeddingModel
    model: CausalLM
    tokenizer: Tokenizer
    settings: GenerationSettings = field(default_factory=GenerationSettings)

    def __post_init__(self) -> None:
        if len(self.index) != len(self.corpus):
            raise ValueError(
                f"index has {len(self.index)} rows but corpus has {len(self.corpus)} texts"
            )

    # ------------------------------------------------------------------ #
    # Retrieval
    # ------------------------------------------------------------------ #
    def ranked_hits(self, query_text: str, num_results: int) -> list[tuple[SimilarityResult, str]]:
        """Embed ``query_text`` and rank the corpus against it, best first.

        Raises:
            EncodingError: The query could not be tokenized.
            EmbeddingError: The embedding model failed.
            DimensionMismatchError: The embedder and index disagree on size.
            EmptyIndexError: The index was never populated.
        """
        if num_results == 0:
            return []
        try:
            embedding = self.embedder.embed(query_text)
        except EncodingError:
            raise
        except Exception as exc:  # noqa: BLE001 - model backends raise assorted types
            raise EmbeddingError(f"failed to embed query: {exc}") from exc
        return [(hit, self.corpus[hit.index]) for hit in self.index.query(embedding, num_results)]

    def similarity_search(self, query_text: str, num_results: int) -> list[tuple[str, float]]:
        """The ``(text, score)`` pairs of :meth:`ranked_hits`."""
        return [(text, hit.score) for hit, text in self.ranked_hits(query_text, num_results)]

    # ------------------------------------------------------------------ #
    # Generation
    # ------------------------------------------------------------------ #
    def new_decoding_loop(self, prompt: str, max_length: int) -> DecodingLoop:
        return DecodingLoop.start(
            prompt,
            max_length,
            model=self.model,
            tokenizer=self.tokenizer,
            sampler=self.settings.new_sampler(),
        )

    def generate_blocking(self, prompt: str, max_length: int) -> str:
        """Run a whole generation and return its text.

        Raises:
            EncodingError: The prompt could not be tokenized.
            GenerationError: A decoding step failed; no partial text is returned.
        """
        loop = self.new_decoding_loop(prompt, max_length)
        try:
            return loop.run_to_completion()
        except STEP_ERRORS as exc:
            logger.warning("generate: step failed step=%s error=%s", loop.step_index, exc)
            raise GenerationError(loop.step_index, exc) from exc

    def open_stream(self, prompt: str, max_length: int, *, request_id: str | None = None) -> StreamTransport:
        """Build a transport for one streamed generation.

        The prompt is encoded here, so an EncodingError surfaces before any
        response bytes are written.
        """
        loop = self.new_decoding_loop(prompt, max_length)
        return StreamTransport(
            loop,
            buffer_size=self.settings.stream_buffer_size,
            request_id=request_id or uuid.uuid4().hex[:12],
        )

    def generate_stream(self, prompt: str, max_length: int) -> AsyncIterator[StreamEvent]:
        """Events of one generation in order; closing the iterator cancels it."""
        return self.open_stream(prompt, max_length).events()


__all__ = ["AppContext", "GenerationSettings"]
