"""Base mode interface for Recurrence operational modes."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from pydantic import BaseModel

if TYPE_CHECKING:
    from recurrence.config import StoreConfig
    from recurrence.storage.base import FingerprintStore


class ModeConfig(BaseModel):
    """Configuration for a specific operational mode.

    Attributes:
        name: Mode name (lite, standard)
        description: Human-readable description
        store_backend: Fingerprint store backend (memory, redis)
        persistent: Whether counters survive a restart
    """

    name: str
    description: str
    store_backend: str
    persistent: bool


class BaseMode(ABC):
    """Base class for operational modes.

    A mode decides which fingerprint store backs the registry and whether
    external services are required to start.

    Attributes:
        store_config: Store settings handed to the backend
        mode_config: Typed mode configuration
    """

    def __init__(self, store_config: StoreConfig) -> None:
        self.store_config = store_config
        self.mode_config = self.get_mode_config()

    @abstractmethod
    def get_mode_config(self) -> ModeConfig:
        """Get mode-specific configuration."""

    @abstractmethod
    def create_store(self) -> FingerprintStore:
        """Build the (uninitialized) fingerprint store for this mode."""

    async def initialize_store(self) -> FingerprintStore:
        """Build and initialize the fingerprint store.

        Raises:
            StorageUnavailable: If the backing storage cannot be reached
        """
        store = self.create_store()
        await store.initialize()
        return store

    @property
    @abstractmethod
    def requires_external_services(self) -> bool:
        """Whether the mode needs a service (Redis) running before startup."""

    def __repr__(self) -> str:
        return f"Mode(name={self.mode_config.name}, services_required={self.requires_external_services})"
