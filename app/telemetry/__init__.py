"""Telemetry helpers and metrics."""

from .metrics import (
    ERROR_COUNTER,
    GEOLOCATION_LOOKUPS,
    GEOLOCATION_RETRIES,
    REQUEST_COUNT,
    REQUEST_LATENCY,
    observe_request,
    record_geolocation_lookup,
    record_geolocation_retry,
)

__all__ = [
    "ERROR_COUNTER",
    "GEOLOCATION_LOOKUPS",
    "GEOLOCATION_RETRIES",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "observe_request",
    "record_geolocation_lookup",
    "record_geolocation_retry",
]
