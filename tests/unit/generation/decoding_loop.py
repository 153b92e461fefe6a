"""Unit tests for the incremental decoding loop."""

from __future__ import annotations

import pytest

from inference_server.errors import CacheError, EncodingError, SamplingError, ForwardPassError
from inference_server.generation import DecodingLoop, DecodingState, SamplingPolicy
from tests.helpers.fakes import EOS_ID, FakeTokenizer, NoisyModel, ScriptedModel, token_id

HELLO, WORLD, NEWLINE, BANG = token_id("▁hello"), token_id("▁world"), token_id("<0x0A>"), token_id("!")


def _start(model, prompt: str = "hello world", max_length: int = 4, *, seed: int = 42) -> DecodingLoop:
    return DecodingLoop.start(
        prompt,
        max_length,
        model=model,
        tokenizer=FakeTokenizer(),
        sampler=SamplingPolicy(seed),
    )


def test_max_length_zero_runs_no_forward_passes() -> None:
    model = ScriptedModel([HELLO])
    loop = _start(model, max_length=0)
    assert loop.state is DecodingState.COMPLETED
    assert loop.run_to_completion() == ""
    assert model.calls == []


def test_first_step_uses_whole_prompt_then_single_tokens() -> None:
    model = ScriptedModel([HELLO, WORLD, BANG])
    loop = _start(model, "hello world", max_length=3)
    loop.run_to_completion()
    bos = token_id("<s>")
    assert model.calls == [
        ([bos, HELLO, WORLD], 0),
        ([HELLO], 3),
        ([WORLD], 4),
    ]
    assert loop.session.position_offset == 5
    assert loop.session.generated_tokens == [HELLO, WORLD, BANG]


def test_text_applies_marker_conventions_per_token() -> None:
    model = ScriptedModel([HELLO, NEWLINE, WORLD, BANG])
    assert _start(model, max_length=4).run_to_completion() == " hello\n world!"


def test_stops_at_max_length() -> None:
    model = ScriptedModel([HELLO])
    loop = _start(model, max_length=5)
    outputs = list(loop.iter_steps())
    assert len(outputs) == 5
    assert loop.state is DecodingState.COMPLETED
    assert [o.step_index for o in outputs] == [0, 1, 2, 3, 4]


def test_eos_token_is_decoded_and_ends_loop() -> None:
    model = ScriptedModel([HELLO, EOS_ID, WORLD])
    loop = _start(model, max_length=10)
    outputs = list(loop.iter_steps())
    assert [o.eos for o in outputs] == [False, True]
    assert outputs[-1].text == "</s>"
    assert loop.state is DecodingState.EOS_REACHED
    assert len(model.calls) == 2


def test_without_eos_id_runs_to_max_length() -> None:
    model = ScriptedModel([EOS_ID])
    loop = DecodingLoop.start(
        "hello",
        3,
        model=model,
        tokenizer=FakeTokenizer(eos_token=None),
        sampler=SamplingPolicy(0),
    )
    loop.run_to_completion()
    assert loop.state is DecodingState.COMPLETED
    assert len(model.calls) == 3


def test_empty_prompt_is_accepted() -> None:
    model = ScriptedModel([HELLO, WORLD])
    loop = DecodingLoop.start(
        "",
        2,
        model=model,
        tokenizer=FakeTokenizer(bos=False),
        sampler=SamplingPolicy(0),
    )
    assert loop.session.tokens == []
    assert loop.run_to_completion() == " hello world"
    assert model.calls == [([], 0), ([HELLO], 0)]


def test_forward_failure_moves_to_failed() -> None:
    model = ScriptedModel([HELLO], fail_at=1)
    loop = _start(model, max_length=4)
    loop.step()
    with pytest.raises(ForwardPassError):
        loop.step()
    assert loop.state is DecodingState.FAILED
    assert loop.done
    with pytest.raises(RuntimeError):
        loop.step()


def test_unexpected_model_error_is_wrapped() -> None:
    model = ScriptedModel([HELLO], fail_at=0, fail_with=IndexError)
    with pytest.raises(ForwardPassError) as excinfo:
        _start(model).step()
    assert isinstance(excinfo.value.__cause__, IndexError)


def test_nan_logits_raise_sampling_error() -> None:
    model = ScriptedModel([HELLO], nan_at=0)
    with pytest.raises(SamplingError):
        _start(model).step()


def test_cache_overflow_raises_cache_error() -> None:
    model = ScriptedModel([HELLO], max_positions=3)
    loop = _start(model, "hello world", max_length=5)
    loop.step()
    with pytest.raises(CacheError):
        loop.step()
    assert loop.state is DecodingState.FAILED


def test_same_seed_is_deterministic() -> None:
    first = _start(NoisyModel(), max_length=12, seed=42).run_to_completion()
    second = _start(NoisyModel(), max_length=12, seed=42).run_to_completion()
    assert first == second


def test_encoding_error_surfaces_before_any_step() -> None:
    model = ScriptedModel([HELLO])
    with pytest.raises(EncodingError):
        _start(model, "bad\x00prompt")
    assert model.calls == []
