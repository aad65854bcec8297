"""Prometheus metrics definitions and helpers."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests processed",
    ("method", "route", "status"),
)

REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ("method", "route"),
    buckets=(
        0.005,
        0.01,
        0.025,
        0.05,
        0.1,
        0.25,
        0.5,
        1.0,
        2.5,
        5.0,
        10.0,
    ),
)

ERROR_COUNTER = Counter(
    "app_internal_errors_total",
    "Number of requests ending in internal server error responses",
    ("method", "route"),
)

UPLOAD_COUNTER = Counter(
    "log_uploads_total",
    "Upload attempts by response status and content type",
    ("status", "content_type"),
)

RELAY_COUNT = Counter(
    "telegram_relay_requests_total",
    "Telegram Bot API calls by method and outcome",
    ("method", "outcome"),
)

RELAY_LATENCY = Histogram(
    "telegram_relay_duration_seconds",
    "Telegram Bot API call duration in seconds",
    ("method",),
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)


def observe_request(
    method: str,
    route: str,
    status_code: int,
    duration_seconds: float,
) -> None:
    """Record metrics for a completed HTTP request."""

    safe_route = route or "unknown"
    safe_method = method or "UNKNOWN"
    status_label = str(status_code)
    observed_duration = duration_seconds if duration_seconds >= 0 else 0

    REQUEST_COUNT.labels(
        method=safe_method,
        route=safe_route,
        status=status_label,
    ).inc()
    REQUEST_LATENCY.labels(
        method=safe_method,
        route=safe_route,
    ).observe(observed_duration)

    if status_code >= 500:
        ERROR_COUNTER.labels(
            method=safe_method,
            route=safe_route,
        ).inc()


def observe_upload(status_code: int, content_type: str | None) -> None:
    """Count one upload attempt; ``content_type`` is unknown before parsing."""

    UPLOAD_COUNTER.labels(
        status=str(status_code),
        content_type=content_type or "unknown",
    ).inc()


def observe_relay(method: str, outcome: str, duration_seconds: float) -> None:
    RELAY_COUNT.labels(method=method, outcome=outcome).inc()
    RELAY_LATENCY.labels(method=method).observe(max(duration_seconds, 0))
