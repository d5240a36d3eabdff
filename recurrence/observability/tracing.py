"""OpenTelemetry tracing setup for Recurrence.

This module provides:
- Tracer provider setup with optional OTLP and console export
- Span helpers for ad-hoc operations
- A ``@traced`` decorator for sync and async callables
"""

from __future__ import annotations

import functools
import inspect
import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased

logger = logging.getLogger(__name__)

_provider: TracerProvider | None = None
_tracer: trace.Tracer | None = None


def setup_telemetry(
    service_name: str = "recurrence",
    environment: str = "development",
    otlp_endpoint: str | None = None,
    enable_console_export: bool = False,
    sample_rate: float = 1.0,
) -> trace.Tracer:
    """Setup OpenTelemetry tracing.

    Args:
        service_name: Name of the service
        environment: Environment (development, production)
        otlp_endpoint: OTLP collector endpoint (e.g., http://localhost:4317)
        enable_console_export: Export spans to console for debugging
        sample_rate: Sampling rate (0.0 to 1.0, 1.0 = all traces)

    Returns:
        Tracer instance
    """
    global _provider, _tracer

    if _provider is not None:
        return get_tracer()

    resource = Resource.create({
        "service.name": service_name,
        "service.namespace": "recurrence",
        "deployment.environment": environment,
    })
    provider = TracerProvider(resource=resource, sampler=TraceIdRatioBased(sample_rate))

    if otlp_endpoint:
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True)))
        logger.info(f"OTLP tracing enabled: {otlp_endpoint}")

    if enable_console_export:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
        logger.info("Console span export enabled")

    trace.set_tracer_provider(provider)
    _provider = provider
    _tracer = provider.get_tracer("recurrence")

    logger.info(f"Telemetry initialized: {service_name} ({environment}), sampling {sample_rate:.0%}")
    return _tracer


def is_telemetry_configured() -> bool:
    """Whether setup_telemetry() has installed a tracer provider."""
    return _provider is not None


def get_tracer() -> trace.Tracer:
    """Get the Recurrence tracer.

    Falls back to the globally configured (by default no-op) provider when
    setup_telemetry() has not been called.
    """
    if _tracer is None:
        return trace.get_tracer("recurrence")
    return _tracer


@contextmanager
def trace_operation(
    operation_name: str,
    attributes: dict[str, str] | None = None,
) -> Iterator[trace.Span]:
    """Context manager for tracing an operation.

    Example:
        with trace_operation("ingest_archive", {"archive": name}):
            result = await orchestrator.process_archive(name, data)
    """
    with get_tracer().start_as_current_span(operation_name, attributes=attributes or {}) as span:
        try:
            yield span
            span.set_status(trace.StatusCode.OK)
        except Exception as e:
            span.record_exception(e)
            span.set_status(trace.StatusCode.ERROR, str(e))
            raise


def add_span_attributes(attributes: dict[str, str | int | float | bool]) -> None:
    """Add attributes to the current span."""
    current_span = trace.get_current_span()
    if current_span and current_span.is_recording():
        current_span.set_attributes(attributes)


def traced(operation_name: str | None = None) -> Callable:
    """Decorator to automatically trace a function.

    Args:
        operation_name: Name of the span (defaults to module.function)

    Example:
        @traced("registry.record")
        async def record(self, message, source_archive): ...
    """

    def decorator(func: Callable) -> Callable:
        name = operation_name or f"{func.__module__}.{func.__name__}"

        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            with trace_operation(name) as span:
                span.set_attribute("function.name", func.__name__)
                return await func(*args, **kwargs)

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            with trace_operation(name) as span:
                span.set_attribute("function.name", func.__name__)
                return func(*args, **kwargs)

        if inspect.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator


def shutdown_telemetry() -> None:
    """Flush and shut down the tracer provider set up by setup_telemetry()."""
    global _provider, _tracer

    if _provider is None:
        return

    logger.info("Shutting down telemetry...")
    _provider.shutdown()
    _provider = None
    _tracer = None
