"""Standard mode: Redis-backed fingerprint store shared by every worker."""

from __future__ import annotations

import logging

from recurrence.modes.base import BaseMode, ModeConfig
from recurrence.storage.redis_store import RedisFingerprintStore

logger = logging.getLogger(__name__)


class StandardMode(BaseMode):
    """Standard mode with persistent counters in Redis.

    Startup fails with ``StorageUnavailable`` when Redis is unreachable.
    There is no in-memory fallback: a second store would fork the
    occurrence counters.

    Examples:
        >>> mode = get_mode("standard")
        >>> mode.requires_external_services
        True
    """

    def get_mode_config(self) -> ModeConfig:
        return ModeConfig(
            name="standard",
            description="Standard mode: Redis fingerprint store with persistent counters",
            store_backend="redis",
            persistent=True,
        )

    def create_store(self) -> RedisFingerprintStore:
        logger.info(f"Standard mode: Connecting to Redis at {self.store_config.redis_url}")
        return RedisFingerprintStore(
            url=self.store_config.redis_url,
            key_prefix=self.store_config.key_prefix,
            index_key=self.store_config.index_key,
            socket_timeout=self.store_config.socket_timeout,
        )

    @property
    def requires_external_services(self) -> bool:
        return True

    def __repr__(self) -> str:
        return "StandardMode(services_required=True, store=redis)"
