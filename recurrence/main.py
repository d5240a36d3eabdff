"""Recurrence application wiring and lifecycle."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from recurrence.config import RecurrenceConfig
from recurrence.ingestion.orchestrator import IngestionOrchestrator
from recurrence.modes import get_mode
from recurrence.notifications.sink import FileNotificationSink
from recurrence.services.registry import ExceptionRegistry

if TYPE_CHECKING:
    from recurrence.storage.base import FingerprintStore

logger = logging.getLogger(__name__)


class RecurrenceApplication:
    """Recurrence application with lifecycle management.

    Builds the fingerprint store for the configured mode and wires the
    registry, notification sink and ingestion orchestrator around it.

    Attributes:
        config: Application configuration
        mode: Mode instance deciding the store backend
        store: Fingerprint store (set by start())
        registry: Exception registry (set by start())
        sink: Notification sink
        orchestrator: Ingestion orchestrator (set by start())
    """

    def __init__(
        self,
        config: RecurrenceConfig | None = None,
        store: FingerprintStore | None = None,
    ) -> None:
        """Initialize application.

        Args:
            config: Configuration; loaded from the environment when omitted
            store: Pre-built store, bypassing the mode's store (tests, embedding)
        """
        self.config = config or RecurrenceConfig()
        self.mode = get_mode(self.config.mode, self.config.store)
        self.sink = FileNotificationSink(self.config.notifications.directory)
        self._injected_store = store
        self.store: FingerprintStore | None = None
        self.registry: ExceptionRegistry | None = None
        self.orchestrator: IngestionOrchestrator | None = None
        logger.info(f"Initialized {self.mode.mode_config.name} mode: {self.mode.mode_config.description}")

    @property
    def started(self) -> bool:
        return self.store is not None

    async def start(self) -> None:
        """Initialize the store and sink and wire the services.

        Raises:
            StorageUnavailable: If the mode's store cannot be reached
        """
        if self.started:
            return

        logger.info("Starting Recurrence application")

        if self._injected_store is not None:
            store = self._injected_store
            await store.initialize()
        else:
            store = await self.mode.initialize_store()

        await self.sink.initialize()

        self.store = store
        self.registry = ExceptionRegistry(store)
        self.orchestrator = IngestionOrchestrator(
            registry=self.registry,
            sink=self.sink,
            policy=self.config.notifications.policy,
            message_keywords=self.config.ingestion.message_keywords,
            exception_keywords=self.config.ingestion.exception_keywords,
            max_archive_bytes=self.config.ingestion.max_archive_bytes,
        )

        logger.info("Recurrence application started")
        logger.info(f"   Mode: {self.mode.mode_config.name}")
        logger.info(f"   Store: {store.backend_name}")
        logger.info(f"   Notification policy: {self.config.notifications.policy.value}")

    async def stop(self) -> None:
        """Close the store."""
        if self.store is not None:
            await self.store.close()
            self.store = None
            self.registry = None
            self.orchestrator = None
        logger.info("Recurrence application shutdown complete")
