"""Incremental decoding loop shared by blocking and streaming generation.

State machine:
    START -> STEPPING -> COMPLETED | EOS_REACHED | FAILED

Each ``step()``:
    1. Picks the context: the whole token sequence on the first step (at
       position 0), afterwards only the newest token at the running offset.
    2. Runs one model forward pass, which advances the cache once.
    3. Samples the next token and appends it.
    4. Moves the position offset past the context just folded in.
    5. Decodes the token to text. An EOS token is still decoded and returned
       before the loop stops.
    6. Stops at EOS, or once ``max_length`` steps have run.

Steps are strictly sequential. Streaming callers may run ``step()`` on a
worker thread, but only one step per session is ever in flight: the caller
awaits each step before issuing the next.
"""

from __future__ import annotations

import enum
import logging
import time
from collections.abc import Iterator
from dataclasses import dataclass

from ..errors import STEP_ERRORS, CacheError, SamplingError, ForwardPassError
from ..models.base import CausalLM, Tokenizer
from .sampling import SamplingPolicy
from .session import GenerationSession

logger = logging.getLogger(__name__)


class DecodingState(str, enum.Enum):
    START = "start"
    STEPPING = "stepping"
    COMPLETED = "completed"
    EOS_REACHED = "eos_reached"
    FAILED = "failed"


_TERMINAL_STATES = frozenset({DecodingState.COMPLETED, DecodingState.EOS_REACHED, DecodingState.FAILED})


@dataclass(frozen=True, slots=True)
class StepOutput:
    """What one decoding step produced."""

    step_index: int
    token_id: int
    text: str
    eos: bool


class DecodingLoop:
    """Drives one GenerationSession to completion, one step at a time."""

    def __init__(self, session: GenerationSession, *, model: CausalLM, tokenizer: Tokenizer) -> None:
        self.session = session
        self._model = model
        self._tokenizer = tokenizer
        self._eos_token_id = tokenizer.eos_token_id
        self._in_step = False
        self.state = DecodingState.COMPLETED if session.max_length == 0 else DecodingState.START

    @classmethod
    def start(
        cls,
        prompt: str,
        max_length: int,
        *,
        model: CausalLM,
        tokenizer: Tokenizer,
        sampler: SamplingPolicy,
    ) -> DecodingLoop:
        """Encode the prompt and set up a fresh cache for a new session.

        Raises:
            EncodingError: If the prompt cannot be tokenized.
            CacheError: If the model cannot build a cache.
        """
        tokens = tokenizer.encode(prompt)
        session = GenerationSession(
            tokens=list(tokens),
            cache=model.create_cache(),
            sampler=sampler,
            max_length=max_length,
        )
        logger.debug("decode: start prompt_tokens=%s max_length=%s", len(tokens), max_length)
        return cls(session, model=model, tokenizer=tokenizer)

    @property
    def done(self) -> bool:
        return self.state in _TERMINAL_STATES

    @property
    def step_index(self) -> int:
        return self.session.step_index

    def step(self) -> StepOutput:
        """Run one decoding step.

        Raises:
            ForwardPassError, CacheError, SamplingError: The step failed; the
                loop moves to FAILED and must not be stepped again.
        """
        if self.done:
            raise RuntimeError(f"decoding loop already finished ({self.state.value})")
        if self._in_step:
            raise CacheError("a decoding step is already running for this session")

        session = self.session
        self._in_step = True
        self.state = DecodingState.STEPPING
        try:
            if session.step_index == 0:
                context, position = list(session.tokens), 0
            else:
                context, position = session.tokens[-1:], session.position_offset
            logits = self._forward(context, position)
            token_id = self._sample(logits)
        except STEP_ERRORS:
            self.state = DecodingState.FAILED
            raise
        finally:
            self._in_step = False

        session.tokens.append(token_id)
        session.position_offset += len(context)
        eos = self._eos_token_id is not None and token_id == self._eos_token_id
        text = self._tokenizer.decode_one(token_id)
        step_index = session.step_index
        session.step_index += 1

        if eos:
            self.state = DecodingState.EOS_REACHED
        elif session.step_index >= session.max_length:
            self.state = DecodingState.COMPLETED
        return StepOutput(step_index=step_index, token_id=token_id, text=text, eos=eos)

    def iter_steps(self) -> Iterator[StepOutput]:
        while not self.done:
            yield self.step()

    def run_to_completion(self) -> str:
        """Run every remaining step and return the concatenated text."""
        start = time.perf_counter()
        text = "".join(output.text for output in self.iter_steps())
        logger.info(
            "decode: done state=%s steps=%s tokens=%s ms=%.1f",
            self.state.value,
            self.session.step_index,
            len(self.session.tokens),
            (time.perf_counter() - start) * 1000.0,
        )
        return text

    def _forward(self, context: list[int], position: int):
        try:
            return self._model.forward(context, position, self.session.cache)
        except (ForwardPassError, CacheError):
            raise
        except Exception as exc:  # noqa: BLE001 - model backends raise assorted types
            raise ForwardPassError(f"forward pass failed at step {self.session.step_index}: {exc}") from exc

    def _sample(self, logits) -> int:
        try:
            return self.session.sampler.sample(logits)
        except SamplingError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise SamplingError(f"sampling failed at step {self.session.step_index}: {exc}") from exc


__all__ = ["DecodingLoop", "DecodingState", "StepOutput"]
