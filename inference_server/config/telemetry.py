"""Telemetry configuration: env vars, metric specs, Sentry constants."""

import os

# ---------------------------------------------------------------------------
# Sentry
# ---------------------------------------------------------------------------
SENTRY_DSN: str = os.getenv("SENTRY_DSN", "")
SENTRY_ENVIRONMENT: str = os.getenv("SENTRY_ENVIRONMENT", "production")
SENTRY_RELEASE: str = os.getenv("SENTRY_RELEASE", "")
SENTRY_SAMPLE_RATE: float = float(os.getenv("SENTRY_SAMPLE_RATE", "1.0"))
SENTRY_RATE_LIMIT_S: float = float(os.getenv("SENTRY_RATE_LIMIT_S", "60"))
SENTRY_TAG_REQUEST_ID = "request_id"

# ---------------------------------------------------------------------------
# OTel
# ---------------------------------------------------------------------------
OTEL_SERVICE_NAME: str = os.getenv("OTEL_SERVICE_NAME", "inference-server")
OTEL_EXPORTER_ENDPOINT: str = os.getenv("OTEL_EXPORTER_ENDPOINT", "")
OTEL_EXPORTER_HEADERS: str = os.getenv("OTEL_EXPORTER_HEADERS", "")
OTEL_METRICS_EXPORT_INTERVAL_MS: int = int(os.getenv("OTEL_METRICS_EXPORT_INTERVAL_MS", "15000"))

# ---------------------------------------------------------------------------
# Metric spec tuples: (name, unit, description)
# ---------------------------------------------------------------------------

# Histograms
METRIC_TTFT = ("inference.ttft", "s", "Time to first streamed token")
METRIC_GENERATION_LATENCY = ("inference.generation_latency", "s", "End-to-end generation time")
METRIC_SEARCH_LATENCY = ("inference.search_latency", "s", "Similarity search time")

# Counters
METRIC_REQUESTS_TOTAL = ("inference.requests_total", "{request}", "Requests by endpoint")
METRIC_TOKENS_GENERATED_TOTAL = ("inference.tokens_generated_total", "{token}", "Generated tokens")
METRIC_ERRORS_TOTAL = ("inference.errors_total", "{error}", "Errors by category")
METRIC_CANCELLATION_TOTAL = ("inference.cancellation_total", "{request}", "Streams closed by the client")

# UpDown counters
METRIC_ACTIVE_GENERATIONS = ("inference.active_generations", "{request}", "In-flight generations")


__all__ = [
    "SENTRY_DSN",
    "SENTRY_ENVIRONMENT",
    "SENTRY_RELEASE",
    "SENTRY_SAMPLE_RATE",
    "SENTRY_RATE_LIMIT_S",
    "SENTRY_TAG_REQUEST_ID",
    "OTEL_SERVICE_NAME",
    "OTEL_EXPORTER_ENDPOINT",
    "OTEL_EXPORTER_HEADERS",
    "OTEL_METRICS_EXPORT_INTERVAL_MS",
    "METRIC_TTFT",
    "METRIC_GENERATION_LATENCY",
    "METRIC_SEARCH_LATENCY",
    "METRIC_REQUESTS_TOTAL",
    "METRIC_TOKENS_GENERATED_TOTAL",
    "METRIC_ERRORS_TOTAL",
    "METRIC_CANCELLATION_TOTAL",
    "METRIC_ACTIVE_GENERATIONS",
]
