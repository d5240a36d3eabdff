"""Lite mode: in-memory fingerprint store, zero external dependencies."""

from __future__ import annotations

import logging

from recurrence.modes.base import BaseMode, ModeConfig
from recurrence.storage.memory_store import MemoryFingerprintStore

logger = logging.getLogger(__name__)


class LiteMode(BaseMode):
    """Lite mode with zero external dependencies.

    Counters live in process memory and are lost on restart, which makes
    this mode suited to development, tests and single-process deployments.

    Examples:
        >>> mode = get_mode("lite")
        >>> mode.mode_config.store_backend
        'memory'
    """

    def get_mode_config(self) -> ModeConfig:
        return ModeConfig(
            name="lite",
            description="Lite mode: In-memory fingerprint store, zero external dependencies",
            store_backend="memory",
            persistent=False,
        )

    def create_store(self) -> MemoryFingerprintStore:
        logger.info("Lite mode: Using in-memory fingerprint store")
        return MemoryFingerprintStore()

    @property
    def requires_external_services(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "LiteMode(services_required=False, store=memory)"
