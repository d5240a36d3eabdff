"""Exception registry: request boundary over the fingerprint store."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from recurrence.errors import InvalidRequest
from recurrence.models.schemas import (
    ExceptionEntry,
    ListExceptionsResponse,
    RecordExceptionResponse,
    SearchExceptionResponse,
)
from recurrence.observability.prometheus_metrics import (
    increment_errors,
    observe_store_operation,
    record_exception_outcome,
    record_search,
)
from recurrence.observability.tracing import add_span_attributes, traced

if TYPE_CHECKING:
    from recurrence.storage.base import FingerprintStore

logger = logging.getLogger(__name__)


def _require(value: str | None, field: str) -> str:
    if value is None or not value.strip():
        increment_errors(component="exception_registry", error_type="validation_error")
        raise InvalidRequest(f"Missing required field: {field}")
    return value


class ExceptionRegistry:
    """Validates requests and translates store results into response shapes.

    No deduplication logic lives here; storage failures propagate unchanged
    so a caller never sees a guessed duplicate flag or count.
    """

    def __init__(self, store: FingerprintStore) -> None:
        self.store = store

    @traced("registry.record")
    async def record(self, message: str | None, source_archive: str | None) -> RecordExceptionResponse:
        """Record one occurrence of an exception.

        Raises:
            InvalidRequest: If message or source_archive is missing or blank
            StorageUnavailable: If the store cannot be reached
        """
        message = _require(message, "message")
        source_archive = _require(source_archive, "sourceArchive")

        with observe_store_operation(self.store.backend_name, "record"):
            result = await self.store.record_occurrence(message, source_archive)

        record_exception_outcome("duplicate" if result.is_duplicate else "new")
        add_span_attributes({
            "exception.hash": result.fingerprint,
            "exception.occurrence_count": result.occurrence_count,
        })

        return RecordExceptionResponse(
            is_duplicate=result.is_duplicate,
            occurrence_count=result.occurrence_count,
        )

    @traced("registry.search")
    async def search(self, query_text: str | None) -> SearchExceptionResponse:
        """Exact-match lookup. An unknown exception is a normal, empty result.

        Raises:
            InvalidRequest: If query_text is missing or blank
            StorageUnavailable: If the store cannot be reached
        """
        query_text = _require(query_text, "query")

        with observe_store_operation(self.store.backend_name, "lookup"):
            result = await self.store.lookup(query_text)

        record_search(result.found)
        logger.debug(f"Exception search: hash={result.fingerprint[:12]} found={result.found}")

        return SearchExceptionResponse(
            query=query_text,
            match_count=1 if result.found else 0,
            is_duplicate=result.occurrence_count > 1,
            occurrence_count=result.occurrence_count,
            matches=[result.record] if result.record else [],
        )

    @traced("registry.list_all")
    async def list_all(self) -> ListExceptionsResponse:
        """Every known exception in first-observed order."""
        with observe_store_operation(self.store.backend_name, "list"):
            entries = await self.store.list_all()

        return ListExceptionsResponse(
            total_unique_exceptions=len(entries),
            exceptions=[
                ExceptionEntry(
                    hash=entry.fingerprint,
                    occurrence_count=entry.occurrence_count,
                    record=entry.record,
                )
                for entry in entries
            ],
        )
