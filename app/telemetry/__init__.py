"""Telemetry helpers and metrics."""

from .metrics import (
    ERROR_COUNTER,
    RELAY_COUNT,
    RELAY_LATENCY,
    REQUEST_COUNT,
    REQUEST_LATENCY,
    UPLOAD_COUNTER,
    observe_relay,
    observe_request,
    observe_upload,
)

__all__ = [
    "ERROR_COUNTER",
    "RELAY_COUNT",
    "RELAY_LATENCY",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "UPLOAD_COUNTER",
    "observe_relay",
    "observe_request",
    "observe_upload",
]
