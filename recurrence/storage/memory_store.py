"""In-process fingerprint store guarded by per-fingerprint locks."""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime

from recurrence.models import ExceptionRecord, LookupResult, OccurrenceResult, StoredException
from recurrence.storage.base import FingerprintStore
from recurrence.storage.fingerprint import fingerprint_message

logger = logging.getLogger(__name__)


class MemoryFingerprintStore(FingerprintStore):
    """Fingerprint store kept in process memory.

    Each fingerprint gets its own ``asyncio.Lock`` so concurrent sightings
    of the same exception serialize their read-increment-write, while
    different fingerprints never wait on each other. State is lost when the
    process exits.
    """

    backend_name = "memory"

    def __init__(self) -> None:
        self._records: dict[str, ExceptionRecord] = {}
        self._order: list[str] = []
        self._locks: dict[str, asyncio.Lock] = {}

    def _lock_for(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    async def record_occurrence(self, message: str, source_archive: str) -> OccurrenceResult:
        key = fingerprint_message(message)

        async with self._lock_for(key):
            previous = self._records.get(key)
            count = previous.occurrence_count + 1 if previous else 1
            self._records[key] = ExceptionRecord(
                message=message,
                source_archive=source_archive,
                observed_at=datetime.now(UTC),
                occurrence_count=count,
            )
            if previous is None:
                self._order.append(key)

        logger.info(
            f"Exception stored: hash={key[:12]} source={source_archive} count={count} "
            f"message={message[:100]!r}"
        )
        return OccurrenceResult(fingerprint=key, occurrence_count=count)

    async def lookup(self, query_text: str) -> LookupResult:
        key = fingerprint_message(query_text)
        record = self._records.get(key)
        return LookupResult(
            fingerprint=key,
            occurrence_count=record.occurrence_count if record else 0,
            record=record,
        )

    async def list_all(self) -> list[StoredException]:
        return [
            StoredException(
                fingerprint=key,
                occurrence_count=self._records[key].occurrence_count,
                record=self._records[key],
            )
            for key in list(self._order)
        ]

    def __len__(self) -> int:
        return len(self._order)
