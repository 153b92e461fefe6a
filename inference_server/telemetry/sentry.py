"""Sentry error tracking with per-class rate-limiting."""

from __future__ import annotations

import logging
import time
from typing import Any

from ..logging import current_request_id
from ..config.telemetry import (
    SENTRY_DSN,
    SENTRY_RELEASE,
    SENTRY_ENVIRONMENT,
    SENTRY_SAMPLE_RATE,
    SENTRY_RATE_LIMIT_S,
    SENTRY_TAG_REQUEST_ID,
)

logger = logging.getLogger(__name__)

_error_timestamps: dict[str, float] = {}
_initialized: bool = False


def init_sentry() -> None:
    """Initialize Sentry SDK. Idempotent."""
    global _initialized  # noqa: PLW0603
    if _initialized:
        return
    import sentry_sdk

    kwargs: dict[str, Any] = {
        "dsn": SENTRY_DSN,
        "environment": SENTRY_ENVIRONMENT,
        "traces_sample_rate": 0.0,
        "sample_rate": SENTRY_SAMPLE_RATE,
        "attach_stacktrace": True,
    }
    if SENTRY_RELEASE:
        kwargs["release"] = SENTRY_RELEASE

    sentry_sdk.init(**kwargs)
    _initialized = True
    logger.info("telemetry: sentry environment=%s", SENTRY_ENVIRONMENT)


def shutdown_sentry() -> None:
    """Flush Sentry events. Idempotent."""
    global _initialized  # noqa: PLW0603
    if not _initialized:
        return
    import sentry_sdk

    sentry_sdk.flush(timeout=2.0)
    _initialized = False


def should_report(error: BaseException, *, now: float | None = None) -> bool:
    """Return True at most once per SENTRY_RATE_LIMIT_S for each exception class."""
    key = type(error).__qualname__
    now = time.monotonic() if now is None else now
    last = _error_timestamps.get(key)
    if last is not None and (now - last) < SENTRY_RATE_LIMIT_S:
        return False
    _error_timestamps[key] = now
    return True


def capture_error(
    error: BaseException,
    *,
    request_id: str | None = None,
    extra: dict[str, Any] | None = None,
) -> None:
    """Report an error to Sentry with rate-limiting per error class."""
    if not _initialized or not should_report(error):
        return

    import sentry_sdk

    with sentry_sdk.new_scope() as scope:
        scope.set_tag(SENTRY_TAG_REQUEST_ID, request_id or current_request_id())
        for k, v in (extra or {}).items():
            scope.set_extra(k, v)
        sentry_sdk.capture_exception(error)


__all__ = ["init_sentry", "shutdown_sentry", "capture_error", "should_report"]
