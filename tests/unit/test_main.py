"""Tests for application wiring and lifecycle."""

from __future__ import annotations

from pathlib import Path

import pytest

from recurrence.config import NotificationPolicy, RecurrenceConfig
from recurrence.main import RecurrenceApplication
from recurrence.storage.memory_store import MemoryFingerprintStore


class TestRecurrenceApplication:
    """Test suite for RecurrenceApplication."""

    def test_not_started_after_init(self, lite_config: RecurrenceConfig) -> None:
        application = RecurrenceApplication(lite_config)

        assert application.started is False
        assert application.registry is None
        assert application.mode.mode_config.name == "lite"

    @pytest.mark.asyncio
    async def test_start_wires_services(self, lite_config: RecurrenceConfig, notifications_dir: Path) -> None:
        application = RecurrenceApplication(lite_config)

        await application.start()

        assert application.started is True
        assert isinstance(application.store, MemoryFingerprintStore)
        assert application.registry.store is application.store
        assert application.orchestrator.policy is NotificationPolicy.DUPLICATES_ONLY
        assert notifications_dir.is_dir()

        await application.stop()
        assert application.started is False

    @pytest.mark.asyncio
    async def test_start_is_idempotent(self, lite_config: RecurrenceConfig) -> None:
        application = RecurrenceApplication(lite_config)

        await application.start()
        store = application.store
        await application.start()

        assert application.store is store
        await application.stop()

    @pytest.mark.asyncio
    async def test_injected_store(self, lite_config: RecurrenceConfig) -> None:
        store = MemoryFingerprintStore()
        application = RecurrenceApplication(lite_config, store=store)

        await application.start()

        assert application.store is store
        await application.stop()

    @pytest.mark.asyncio
    async def test_ingestion_settings_reach_orchestrator(self, lite_config: RecurrenceConfig) -> None:
        config = lite_config.model_copy(deep=True)
        config.ingestion.exception_keywords = ["crash"]
        config.ingestion.max_archive_bytes = 1024
        application = RecurrenceApplication(config)

        await application.start()

        assert application.orchestrator.exception_keywords == ("crash",)
        assert application.orchestrator.max_archive_bytes == 1024
        await application.stop()

    @pytest.mark.asyncio
    async def test_stop_without_start(self, lite_config: RecurrenceConfig) -> None:
        await RecurrenceApplication(lite_config).stop()
