"""Fingerprint store interface.

Every backend exposes the same four operations so the registry never needs
to know which storage technology is behind it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from recurrence.models import LookupResult, OccurrenceResult, StoredException


class FingerprintStore(ABC):
    """Occurrence counter plus first-observed-order index of fingerprints.

    Implementations must make the per-fingerprint increment atomic with
    respect to the read of the previous count. Failures to reach the
    backing storage surface as ``StorageUnavailable``; nothing is retried.
    """

    backend_name = "abstract"

    async def initialize(self) -> None:
        """Prepare connections. Default: nothing to do."""

    async def close(self) -> None:
        """Release connections. Default: nothing to do."""

    async def ping(self) -> bool:
        """Report whether the backing storage is reachable."""
        return True

    @abstractmethod
    async def record_occurrence(self, message: str, source_archive: str) -> OccurrenceResult:
        """Increment (or start at 1) the counter for ``message`` and upsert its record."""

    @abstractmethod
    async def lookup(self, query_text: str) -> LookupResult:
        """Read the counter and record for ``query_text`` without modifying anything."""

    @abstractmethod
    async def list_all(self) -> list[StoredException]:
        """Snapshot of every known fingerprint in first-observed order."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(backend={self.backend_name})"
