"""MetricInstruments registry: typed accessors for the OTel instruments."""

from __future__ import annotations

import logging

from opentelemetry import metrics

from ..config.telemetry import (
    METRIC_TTFT,
    OTEL_SERVICE_NAME,
    METRIC_ERRORS_TOTAL,
    METRIC_REQUESTS_TOTAL,
    METRIC_SEARCH_LATENCY,
    METRIC_ACTIVE_GENERATIONS,
    METRIC_CANCELLATION_TOTAL,
    METRIC_GENERATION_LATENCY,
    METRIC_TOKENS_GENERATED_TOTAL,
)

logger = logging.getLogger(__name__)


def _histogram(meter: metrics.Meter, spec: tuple[str, str, str]) -> metrics.Histogram:
    name, unit, desc = spec
    return meter.create_histogram(name, unit=unit, description=desc)


def _counter(meter: metrics.Meter, spec: tuple[str, str, str]) -> metrics.Counter:
    name, unit, desc = spec
    return meter.create_counter(name, unit=unit, description=desc)


def _updown(meter: metrics.Meter, spec: tuple[str, str, str]) -> metrics.UpDownCounter:
    name, unit, desc = spec
    return meter.create_up_down_counter(name, unit=unit, description=desc)


class MetricInstruments:
    """Holds the OTel metric instruments created from config specs."""

    __slots__ = (
        "ttft",
        "generation_latency",
        "search_latency",
        "requests_total",
        "tokens_generated_total",
        "errors_total",
        "cancellation_total",
        "active_generations",
    )

    def __init__(self, meter: metrics.Meter) -> None:
        # Histograms
        self.ttft = _histogram(meter, METRIC_TTFT)
        self.generation_latency = _histogram(meter, METRIC_GENERATION_LATENCY)
        self.search_latency = _histogram(meter, METRIC_SEARCH_LATENCY)
        # Counters
        self.requests_total = _counter(meter, METRIC_REQUESTS_TOTAL)
        self.tokens_generated_total = _counter(meter, METRIC_TOKENS_GENERATED_TOTAL)
        self.errors_total = _counter(meter, METRIC_ERRORS_TOTAL)
        self.cancellation_total = _counter(meter, METRIC_CANCELLATION_TOTAL)
        # UpDown counters
        self.active_generations = _updown(meter, METRIC_ACTIVE_GENERATIONS)


_metrics: MetricInstruments | None = None


def get_metrics() -> MetricInstruments:
    """Return the global MetricInstruments (no-op meter if OTel not initialized)."""
    global _metrics  # noqa: PLW0603
    if _metrics is None:
        _metrics = MetricInstruments(metrics.get_meter(OTEL_SERVICE_NAME))
    return _metrics


def initialize_metrics() -> None:
    """Rebuild the instruments against the currently installed meter provider."""
    global _metrics  # noqa: PLW0603
    _metrics = MetricInstruments(metrics.get_meter(OTEL_SERVICE_NAME))
    logger.info("telemetry: metrics initialized")


__all__ = ["MetricInstruments", "get_metrics", "initialize_metrics"]
