"""Unit tests for the bounded streaming transport."""

from __future__ import annotations

import asyncio

from inference_server.generation import (
    DecodingLoop,
    ErrorEvent,
    TokenEvent,
    SamplingPolicy,
    StreamTransport,
    EndOfSequenceEvent,
)
from tests.helpers.fakes import EOS_ID, FakeTokenizer, GatedModel, NoisyModel, ScriptedModel, token_id

HELLO, WORLD = token_id("▁hello"), token_id("▁world")


def _loop(model, max_length: int, *, seed: int = 42) -> DecodingLoop:
    return DecodingLoop.start(
        "hello world",
        max_length,
        model=model,
        tokenizer=FakeTokenizer(),
        sampler=SamplingPolicy(seed),
    )


async def _collect(transport: StreamTransport) -> list:
    return [event async for event in transport.events()]


def test_stream_matches_blocking_generation() -> None:
    blocking = _loop(NoisyModel(), 16).run_to_completion()
    events = asyncio.run(_collect(StreamTransport(_loop(NoisyModel(), 16))))
    tokens = [e for e in events if isinstance(e, TokenEvent)]
    assert "".join(e.text for e in tokens) == blocking
    assert all(isinstance(e, TokenEvent) for e in events[: len(tokens)])


def test_normal_completion_has_no_terminal_marker() -> None:
    events = asyncio.run(_collect(StreamTransport(_loop(ScriptedModel([HELLO, WORLD]), 4))))
    assert events == [TokenEvent(" hello"), TokenEvent(" world"), TokenEvent(" hello"), TokenEvent(" world")]


def test_eos_is_final_event() -> None:
    model = ScriptedModel([HELLO, EOS_ID, WORLD])
    events = asyncio.run(_collect(StreamTransport(_loop(model, 10))))
    assert events == [TokenEvent(" hello"), TokenEvent("</s>"), EndOfSequenceEvent()]
    assert len(model.calls) == 2


def test_step_failure_becomes_error_event() -> None:
    model = ScriptedModel([HELLO], fail_at=2)
    events = asyncio.run(_collect(StreamTransport(_loop(model, 10))))
    assert events[:2] == [TokenEvent(" hello"), TokenEvent(" hello")]
    assert isinstance(events[-1], ErrorEvent)
    assert events[-1].error_code == "forward_pass_error"
    assert len(events) == 3


def test_sampling_failure_becomes_error_event() -> None:
    model = ScriptedModel([HELLO], nan_at=0)
    events = asyncio.run(_collect(StreamTransport(_loop(model, 3))))
    assert len(events) == 1
    assert events[0].error_code == "sampling_error"


def test_max_length_zero_yields_nothing() -> None:
    model = ScriptedModel([HELLO])
    assert asyncio.run(_collect(StreamTransport(_loop(model, 0)))) == []
    assert model.calls == []


def test_disconnect_stops_decoding() -> None:
    async def scenario() -> tuple[int, bool]:
        model = GatedModel([HELLO])
        transport = StreamTransport(_loop(model, 50), buffer_size=4)
        model.release(2)
        received = 0
        events = transport.events()
        async for _ in events:
            received += 1
            if received == 2:
                break
        await events.aclose()
        # Let any step already blocked in a worker thread finish
        model.release(50)
        await asyncio.sleep(0.2)
        assert received == 2
        return model.forward_count, transport.was_cancelled

    forward_count, cancelled = asyncio.run(scenario())
    assert forward_count <= 3
    assert cancelled


def test_full_buffer_suspends_producer() -> None:
    async def scenario() -> tuple[int, list]:
        model = ScriptedModel([HELLO, WORLD])
        transport = StreamTransport(_loop(model, 10), buffer_size=1)
        transport.start()
        await asyncio.sleep(0.2)
        steps_while_idle = model.forward_count
        events = await _collect(transport)
        return steps_while_idle, events

    steps_while_idle, events = asyncio.run(scenario())
    assert steps_while_idle <= 2
    assert len(events) == 10
    assert [e.text for e in events[:2]] == [" hello", " world"]


def test_aclose_is_idempotent_and_safe_before_start() -> None:
    async def scenario() -> bool:
        transport = StreamTransport(_loop(ScriptedModel([HELLO]), 3))
        await transport.aclose()
        await transport.aclose()
        return transport.closed

    assert asyncio.run(scenario())


def test_events_payloads() -> None:
    assert TokenEvent("a").to_payload() == {"type": "token", "text": "a"}
    assert EndOfSequenceEvent().to_payload() == {"type": "eos"}
    assert ErrorEvent("cache_error", "bad").to_payload() == {
        "type": "error",
        "error_code": "cache_error",
        "message": "bad",
    }


def test_first_token_latency_and_step_count() -> None:
    async def scenario() -> tuple[float | None, float | None, int, int]:
        transport = StreamTransport(_loop(ScriptedModel([HELLO, WORLD]), 3))
        before = transport.ttfb_ms
        events = await _collect(transport)
        return before, transport.ttfb_ms, transport.steps_taken, len(events)

    before, ttfb_ms, steps, count = asyncio.run(scenario())
    assert before is None
    assert ttfb_ms is not None and ttfb_ms >= 0.0
    assert steps == count == 3


def test_first_token_latency_unset_without_tokens() -> None:
    transport = StreamTransport(_loop(ScriptedModel([HELLO]), 0))
    assert asyncio.run(_collect(transport)) == []
    assert transport.ttfb_ms is None
    assert transport.steps_taken == 0
