"""Pytest configuration and fixtures for Recurrence tests."""

from __future__ import annotations

import io
import zipfile
from collections.abc import Callable
from pathlib import Path

import pytest

from recurrence.config import NotificationConfig, NotificationPolicy, RecurrenceConfig
from recurrence.ingestion.orchestrator import IngestionOrchestrator
from recurrence.notifications.sink import FileNotificationSink
from recurrence.services.registry import ExceptionRegistry
from recurrence.storage.memory_store import MemoryFingerprintStore


@pytest.fixture(scope="session", autouse=True)
def setup_telemetry():
    """Setup OpenTelemetry once per test session, without exporters."""
    from recurrence.observability.tracing import setup_telemetry

    setup_telemetry(
        service_name="recurrence-test",
        enable_console_export=False,
        otlp_endpoint=None,
    )

    yield


def build_zip(files: dict[str, str | bytes]) -> bytes:
    """Build an in-memory zip archive from ``{member_name: content}``."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        for name, content in files.items():
            zf.writestr(name, content)
    return buffer.getvalue()


@pytest.fixture
def make_zip() -> Callable[[dict[str, str | bytes]], bytes]:
    return build_zip


@pytest.fixture
def notifications_dir(tmp_path: Path) -> Path:
    return tmp_path / "notifications"


@pytest.fixture
def memory_store() -> MemoryFingerprintStore:
    return MemoryFingerprintStore()


@pytest.fixture
def registry(memory_store: MemoryFingerprintStore) -> ExceptionRegistry:
    return ExceptionRegistry(memory_store)


@pytest.fixture
async def sink(notifications_dir: Path) -> FileNotificationSink:
    sink = FileNotificationSink(notifications_dir)
    await sink.initialize()
    return sink


@pytest.fixture
def orchestrator(registry: ExceptionRegistry, sink: FileNotificationSink) -> IngestionOrchestrator:
    return IngestionOrchestrator(registry=registry, sink=sink)


@pytest.fixture
def lite_config(notifications_dir: Path) -> RecurrenceConfig:
    """Lite-mode configuration writing notifications under tmp_path."""
    return RecurrenceConfig(
        mode="lite",
        notifications=NotificationConfig(
            directory=notifications_dir,
            policy=NotificationPolicy.DUPLICATES_ONLY,
        ),
    )
