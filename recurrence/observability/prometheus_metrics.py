"""Prometheus metrics collection and export for Recurrence.

Example usage:

    ```python
    from recurrence.observability.prometheus_metrics import (
        observe_store_operation,
        record_exception_outcome,
        generate_metrics,
    )

    with observe_store_operation(backend="redis", operation="record"):
        result = await store.record_occurrence(message, source_archive)
    record_exception_outcome("duplicate" if result.is_duplicate else "new")
    ```

Metrics exposed:
    - recurrence_exceptions_recorded_total: Recorded exceptions by result (new, duplicate)
    - recurrence_exception_searches_total: Searches by whether a match was found
    - recurrence_store_operation_duration_seconds: Store latency by backend and operation
    - recurrence_store_operations_total: Store operations by backend, operation and status
    - recurrence_notifications_total: Notifications written by type
    - recurrence_archives_processed_total: Uploaded archives by status
    - recurrence_errors_total: Errors by component and type
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from threading import Lock
from typing import Literal

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

logger = logging.getLogger(__name__)

# Singleton registry for all Recurrence metrics
_registry: CollectorRegistry | None = None
_registry_lock = Lock()


def get_metrics_registry() -> CollectorRegistry:
    """Get or create the singleton Prometheus metrics registry.

    Returns:
        The shared CollectorRegistry for all Recurrence metrics.
    """
    global _registry

    if _registry is None:
        with _registry_lock:
            if _registry is None:
                _registry = CollectorRegistry()
                logger.debug("Created Prometheus metrics registry")

    return _registry


# ============================================================================
# Deduplication Metrics
# ============================================================================

exceptions_recorded_total: Counter = Counter(
    name="recurrence_exceptions_recorded_total",
    documentation="Exceptions recorded by deduplication result",
    labelnames=["result"],
    registry=get_metrics_registry(),
)

exception_searches_total: Counter = Counter(
    name="recurrence_exception_searches_total",
    documentation="Exception searches by whether a match was found",
    labelnames=["has_match"],
    registry=get_metrics_registry(),
)


def record_exception_outcome(result: Literal["new", "duplicate"]) -> None:
    """Record the deduplication result of one recorded exception."""
    exceptions_recorded_total.labels(result=result).inc()


def record_search(has_match: bool) -> None:
    """Record one exception search."""
    exception_searches_total.labels(has_match="true" if has_match else "false").inc()


# ============================================================================
# Store Metrics
# ============================================================================

store_operation_duration: Histogram = Histogram(
    name="recurrence_store_operation_duration_seconds",
    documentation="Fingerprint store operation latency in seconds",
    labelnames=["backend", "operation"],
    buckets=(0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
    registry=get_metrics_registry(),
)

store_operations_total: Counter = Counter(
    name="recurrence_store_operations_total",
    documentation="Fingerprint store operations by backend, operation and status",
    labelnames=["backend", "operation", "status"],
    registry=get_metrics_registry(),
)


@contextmanager
def observe_store_operation(
    backend: str,
    operation: Literal["record", "lookup", "list"],
) -> Iterator[None]:
    """Context manager timing a store operation and counting its status.

    Example:
        ```python
        with observe_store_operation("memory", "lookup"):
            result = await store.lookup(query)
        ```
    """
    start_time = time.perf_counter()
    status = "success"
    try:
        yield
    except Exception:
        status = "error"
        raise
    finally:
        store_operation_duration.labels(backend=backend, operation=operation).observe(
            time.perf_counter() - start_time
        )
        store_operations_total.labels(backend=backend, operation=operation, status=status).inc()


# ============================================================================
# Notification and Ingestion Metrics
# ============================================================================

notifications_total: Counter = Counter(
    name="recurrence_notifications_total",
    documentation="Notifications written by type",
    labelnames=["type"],
    registry=get_metrics_registry(),
)

archives_processed_total: Counter = Counter(
    name="recurrence_archives_processed_total",
    documentation="Uploaded archives processed by status",
    labelnames=["status"],
    registry=get_metrics_registry(),
)


def record_notification(notification_type: str) -> None:
    """Record one written notification."""
    notifications_total.labels(type=notification_type).inc()


def record_archive_processed(status: Literal["success", "error"]) -> None:
    """Record one processed archive."""
    archives_processed_total.labels(status=status).inc()


# ============================================================================
# Error Metrics
# ============================================================================

error_total: Counter = Counter(
    name="recurrence_errors_total",
    documentation="Total errors by component and type",
    labelnames=["component", "error_type"],
    registry=get_metrics_registry(),
)


def increment_errors(
    component: Literal[
        "fingerprint_store",
        "exception_registry",
        "notification_sink",
        "ingestion_orchestrator",
        "api",
    ],
    error_type: Literal[
        "storage_error",
        "validation_error",
        "archive_error",
        "io_error",
        "unknown_error",
    ],
) -> None:
    """Increment the error counter.

    Args:
        component: Component that raised the error
        error_type: Type/category of error
    """
    error_total.labels(component=component, error_type=error_type).inc()


# ============================================================================
# Metrics Endpoint
# ============================================================================


def generate_metrics() -> bytes:
    """Generate Prometheus metrics exposition format."""
    return generate_latest(get_metrics_registry())


def get_sample_value(name: str, labels: dict[str, str] | None = None) -> float:
    """Current value of one sample, 0.0 if it has never been recorded.

    Args:
        name: Sample name, e.g. ``recurrence_exceptions_recorded_total``
        labels: Label values identifying the sample
    """
    value = get_metrics_registry().get_sample_value(name, labels or {})
    return value if value is not None else 0.0


__all__ = [
    "archives_processed_total",
    "error_total",
    "exception_searches_total",
    "exceptions_recorded_total",
    "generate_metrics",
    "get_metrics_registry",
    "get_sample_value",
    "increment_errors",
    "notifications_total",
    "observe_store_operation",
    "record_archive_processed",
    "record_exception_outcome",
    "record_notification",
    "record_search",
    "store_operation_duration",
    "store_operations_total",
]
