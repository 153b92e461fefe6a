"""Unit tests for telemetry helpers that run without exporters."""

from __future__ import annotations

import logging

import pytest

import inference_server.telemetry.sentry as sentry_mod
from inference_server.logging import current_request_id, install_log_context, log_context
from inference_server.telemetry import capture_error, get_metrics
from inference_server.telemetry.otel import parse_headers


def test_parse_headers() -> None:
    assert parse_headers("authorization=Bearer abc, x-dataset = infer") == {
        "authorization": "Bearer abc",
        "x-dataset": "infer",
    }
    assert parse_headers("") == {}
    assert parse_headers("novalue") == {}


def test_should_report_rate_limits_per_class(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sentry_mod, "_error_timestamps", {})
    monkeypatch.setattr(sentry_mod, "SENTRY_RATE_LIMIT_S", 60.0)
    assert sentry_mod.should_report(ValueError("a"), now=100.0)
    assert not sentry_mod.should_report(ValueError("b"), now=130.0)
    assert sentry_mod.should_report(KeyError("c"), now=130.0)
    assert sentry_mod.should_report(ValueError("d"), now=161.0)


def test_capture_error_is_noop_when_disabled(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sentry_mod, "_initialized", False)
    capture_error(RuntimeError("ignored"))


def test_metrics_are_usable_without_provider() -> None:
    metrics = get_metrics()
    metrics.requests_total.add(1, {"endpoint": "generate_text"})
    metrics.active_generations.add(1)
    metrics.active_generations.add(-1)
    metrics.ttft.record(0.01)


def test_log_context_sets_and_restores_request_id(caplog: pytest.LogCaptureFixture) -> None:
    install_log_context()
    logger = logging.getLogger("inference_server.tests")
    assert current_request_id() == "-"
    with caplog.at_level(logging.INFO, logger="inference_server.tests"):
        with log_context(request_id="abc123"):
            assert current_request_id() == "abc123"
            logger.info("inside")
    assert current_request_id() == "-"
    assert caplog.records[-1].request_id == "abc123"
