"""Observability module for Prometheus metrics and OpenTelemetry tracing."""

from recurrence.observability.tracing import (
    add_span_attributes,
    get_tracer,
    is_telemetry_configured,
    setup_telemetry,
    shutdown_telemetry,
    trace_operation,
    traced,
)

__all__ = [
    "add_span_attributes",
    "get_tracer",
    "is_telemetry_configured",
    "setup_telemetry",
    "shutdown_telemetry",
    "trace_operation",
    "traced",
]
