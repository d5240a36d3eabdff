"""Unit tests for Prometheus metrics collection."""

from __future__ import annotations

import pytest

from recurrence.observability import prometheus_metrics
from recurrence.observability.prometheus_metrics import get_sample_value


class TestDeduplicationMetrics:
    """Test suite for exception recording and search metrics."""

    def test_record_exception_outcome(self):
        """Test recording new and duplicate outcomes."""
        before_new = get_sample_value("recurrence_exceptions_recorded_total", {"result": "new"})
        before_dup = get_sample_value("recurrence_exceptions_recorded_total", {"result": "duplicate"})

        prometheus_metrics.record_exception_outcome("new")
        prometheus_metrics.record_exception_outcome("duplicate")
        prometheus_metrics.record_exception_outcome("duplicate")

        assert get_sample_value("recurrence_exceptions_recorded_total", {"result": "new"}) == before_new + 1
        assert (
            get_sample_value("recurrence_exceptions_recorded_total", {"result": "duplicate"})
            == before_dup + 2
        )

    def test_record_search(self):
        """Test search metrics are labelled by match."""
        before = get_sample_value("recurrence_exception_searches_total", {"has_match": "false"})

        prometheus_metrics.record_search(False)

        assert get_sample_value("recurrence_exception_searches_total", {"has_match": "false"}) == before + 1


class TestStoreMetrics:
    """Test suite for store operation metrics."""

    def test_observe_successful_operation(self):
        """Test timing and counting a successful store call."""
        labels = {"backend": "memory", "operation": "lookup"}
        before_count = get_sample_value("recurrence_store_operation_duration_seconds_count", labels)
        before_ok = get_sample_value("recurrence_store_operations_total", {**labels, "status": "success"})

        with prometheus_metrics.observe_store_operation("memory", "lookup"):
            pass

        assert get_sample_value("recurrence_store_operation_duration_seconds_count", labels) == before_count + 1
        assert (
            get_sample_value("recurrence_store_operations_total", {**labels, "status": "success"})
            == before_ok + 1
        )

    def test_observe_failed_operation(self):
        """Test that a failing store call is counted as an error and re-raised."""
        labels = {"backend": "redis", "operation": "record", "status": "error"}
        before = get_sample_value("recurrence_store_operations_total", labels)

        with pytest.raises(RuntimeError):
            with prometheus_metrics.observe_store_operation("redis", "record"):
                raise RuntimeError("boom")

        assert get_sample_value("recurrence_store_operations_total", labels) == before + 1


class TestNotificationAndErrorMetrics:
    """Test suite for notification, archive and error counters."""

    def test_record_notification(self):
        before = get_sample_value("recurrence_notifications_total", {"type": "message"})

        prometheus_metrics.record_notification("message")

        assert get_sample_value("recurrence_notifications_total", {"type": "message"}) == before + 1

    def test_record_archive_processed(self):
        before = get_sample_value("recurrence_archives_processed_total", {"status": "success"})

        prometheus_metrics.record_archive_processed("success")

        assert get_sample_value("recurrence_archives_processed_total", {"status": "success"}) == before + 1

    def test_increment_errors(self):
        labels = {"component": "api", "error_type": "unknown_error"}
        before = get_sample_value("recurrence_errors_total", labels)

        prometheus_metrics.increment_errors(component="api", error_type="unknown_error")

        assert get_sample_value("recurrence_errors_total", labels) == before + 1

    def test_unrecorded_sample_is_zero(self):
        assert get_sample_value("recurrence_notifications_total", {"type": "never_used"}) == 0.0


class TestMetricsExport:
    """Test suite for the exposition output."""

    def test_generate_metrics(self):
        """Test that all metric families appear in the exposition."""
        prometheus_metrics.record_exception_outcome("new")

        output = prometheus_metrics.generate_metrics().decode()

        for family in (
            "recurrence_exceptions_recorded_total",
            "recurrence_exception_searches_total",
            "recurrence_store_operation_duration_seconds",
            "recurrence_store_operations_total",
            "recurrence_notifications_total",
            "recurrence_archives_processed_total",
            "recurrence_errors_total",
        ):
            assert family in output

    def test_registry_is_singleton(self):
        assert prometheus_metrics.get_metrics_registry() is prometheus_metrics.get_metrics_registry()
