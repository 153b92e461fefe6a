"""MeterProvider setup exporting OTLP over HTTP."""

from __future__ import annotations

import logging
import socket
import uuid as _uuid

from opentelemetry import metrics
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter

from ..config.telemetry import (
    OTEL_SERVICE_NAME,
    OTEL_EXPORTER_ENDPOINT,
    OTEL_EXPORTER_HEADERS,
    OTEL_METRICS_EXPORT_INTERVAL_MS,
)

logger = logging.getLogger(__name__)

_meter_provider: MeterProvider | None = None


def _build_resource() -> Resource:
    attrs: dict[str, str] = {
        "service.name": OTEL_SERVICE_NAME,
        "host.name": socket.gethostname(),
        "service.instance.id": _uuid.uuid4().hex[:12],
    }
    try:
        import torch

        if torch.cuda.is_available():
            attrs["gpu.device.name"] = torch.cuda.get_device_name(0)
    except Exception:  # noqa: BLE001
        pass
    return Resource.create(attrs)


def parse_headers(raw: str) -> dict[str, str]:
    """Parse ``key=value,key2=value2`` into a header dict."""
    headers: dict[str, str] = {}
    for part in raw.split(","):
        key, sep, value = part.partition("=")
        if sep and key.strip():
            headers[key.strip()] = value.strip()
    return headers


def init_otel() -> None:
    """Create and register the global MeterProvider. Idempotent."""
    global _meter_provider  # noqa: PLW0603
    if _meter_provider is not None:
        return

    exporter = OTLPMetricExporter(
        endpoint=OTEL_EXPORTER_ENDPOINT,
        headers=parse_headers(OTEL_EXPORTER_HEADERS),
    )
    reader = PeriodicExportingMetricReader(
        exporter,
        export_interval_millis=OTEL_METRICS_EXPORT_INTERVAL_MS,
    )
    mp = MeterProvider(resource=_build_resource(), metric_readers=[reader])
    metrics.set_meter_provider(mp)
    _meter_provider = mp

    logger.info("telemetry: otel metrics endpoint=%s", OTEL_EXPORTER_ENDPOINT)


def shutdown_otel() -> None:
    """Flush and shutdown the provider. Idempotent."""
    global _meter_provider  # noqa: PLW0603
    if _meter_provider is not None:
        _meter_provider.force_flush()
        _meter_provider.shutdown()
        _meter_provider = None


__all__ = ["init_otel", "shutdown_otel", "parse_headers"]
