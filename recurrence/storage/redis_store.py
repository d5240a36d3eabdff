"""Redis-backed fingerprint store.

Key layout per fingerprint ``<fp>``:

- ``<prefix>:<fp>:count``  occurrence counter (INCR)
- ``<prefix>:<fp>``        hash with the latest message, sourceArchive, observedAt
- ``<index_key>``          sorted set of fingerprints scored by first-seen time

All three writes of one sighting run in a single MULTI/EXEC transaction, so
the counter increment is atomic and the index entry (ZADD NX) is created
exactly once, by the transaction that produced count 1.
"""

from __future__ import annotations

import contextlib
import logging
import time
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import redis.asyncio as redis
from redis.exceptions import RedisError

from recurrence.errors import StorageUnavailable
from recurrence.models import ExceptionRecord, LookupResult, OccurrenceResult, StoredException
from recurrence.observability.prometheus_metrics import increment_errors
from recurrence.storage.base import FingerprintStore
from recurrence.storage.fingerprint import fingerprint_message

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)


class RedisFingerprintStore(FingerprintStore):
    """Fingerprint store on a single Redis instance."""

    backend_name = "redis"

    def __init__(
        self,
        client: redis.Redis | None = None,
        url: str = "redis://localhost:6379/0",
        key_prefix: str = "exception",
        index_key: str = "exceptions:all",
        socket_timeout: float = 5.0,
    ) -> None:
        """Initialize redis store.

        Args:
            client: Existing client (must use ``decode_responses=True``);
                created from ``url`` on initialize() when omitted
            url: Redis connection URL
            key_prefix: Prefix for per-fingerprint keys
            index_key: Sorted set used for first-observed ordering
            socket_timeout: Connect and read timeout in seconds
        """
        self.url = url
        self.key_prefix = key_prefix
        self.index_key = index_key
        self.socket_timeout = socket_timeout
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> redis.Redis:
        if self._client is None:
            raise RuntimeError("Redis store not initialized")
        return self._client

    async def initialize(self) -> None:
        """Connect and verify the server answers.

        Raises:
            StorageUnavailable: If Redis cannot be reached
        """
        if self._client is None:
            self._client = redis.from_url(
                self.url,
                decode_responses=True,
                socket_timeout=self.socket_timeout,
                socket_connect_timeout=self.socket_timeout,
            )

        try:
            with self._storage_errors("initialize"):
                await self._client.ping()
        except StorageUnavailable:
            await self.close()
            raise

        logger.info(f"Redis fingerprint store connected ({self.url})")

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
            logger.info("Redis fingerprint store closed")

    async def ping(self) -> bool:
        try:
            return bool(await self.client.ping())
        except RedisError as e:
            logger.warning(f"Redis ping failed: {e}")
            return False

    def _record_key(self, key: str) -> str:
        return f"{self.key_prefix}:{key}"

    def _count_key(self, key: str) -> str:
        return f"{self.key_prefix}:{key}:count"

    @contextlib.contextmanager
    def _storage_errors(self, operation: str) -> Iterator[None]:
        try:
            yield
        except RedisError as e:
            logger.error(f"Redis {operation} failed: {e.__class__.__name__}: {e}")
            increment_errors(component="fingerprint_store", error_type="storage_error")
            raise StorageUnavailable(f"Exception store unavailable during {operation}: {e}") from e

    async def record_occurrence(self, message: str, source_archive: str) -> OccurrenceResult:
        key = fingerprint_message(message)
        observed_at = datetime.now(UTC)

        with self._storage_errors("record"):
            async with self.client.pipeline(transaction=True) as pipe:
                pipe.incr(self._count_key(key))
                pipe.hset(
                    self._record_key(key),
                    mapping={
                        "message": message,
                        "sourceArchive": source_archive,
                        "observedAt": observed_at.isoformat(),
                    },
                )
                pipe.zadd(self.index_key, {key: time.time_ns() // 1000}, nx=True)
                count, _, _ = await pipe.execute()

        count = int(count)
        logger.info(
            f"Exception stored: hash={key[:12]} source={source_archive} count={count} "
            f"message={message[:100]!r}"
        )
        return OccurrenceResult(fingerprint=key, occurrence_count=count)

    async def lookup(self, query_text: str) -> LookupResult:
        key = fingerprint_message(query_text)

        with self._storage_errors("lookup"):
            async with self.client.pipeline(transaction=True) as pipe:
                pipe.get(self._count_key(key))
                pipe.hgetall(self._record_key(key))
                count_str, data = await pipe.execute()

        if not count_str:
            return LookupResult(fingerprint=key, occurrence_count=0, record=None)

        count = int(count_str)
        return LookupResult(
            fingerprint=key,
            occurrence_count=count,
            record=self._to_record(key, data, count),
        )

    async def list_all(self) -> list[StoredException]:
        with self._storage_errors("list"):
            keys = await self.client.zrange(self.index_key, 0, -1)
            if not keys:
                return []

            async with self.client.pipeline(transaction=True) as pipe:
                for key in keys:
                    pipe.get(self._count_key(key))
                    pipe.hgetall(self._record_key(key))
                replies = await pipe.execute()

        entries = []
        for i, key in enumerate(keys):
            count_str = replies[2 * i]
            if count_str is None:
                raise StorageUnavailable(f"Indexed fingerprint {key[:12]} has no counter")
            count = int(count_str)
            entries.append(
                StoredException(
                    fingerprint=key,
                    occurrence_count=count,
                    record=self._to_record(key, replies[2 * i + 1], count),
                )
            )
        return entries

    @staticmethod
    def _to_record(key: str, data: dict[str, str], count: int) -> ExceptionRecord:
        try:
            return ExceptionRecord(
                message=data["message"],
                source_archive=data["sourceArchive"],
                observed_at=datetime.fromisoformat(data["observedAt"]),
                occurrence_count=count,
            )
        except (KeyError, ValueError) as e:
            raise StorageUnavailable(f"Stored record for {key[:12]} is incomplete: {e}") from e
