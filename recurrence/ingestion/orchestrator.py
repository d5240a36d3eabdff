"""Ingestion orchestrator: route an uploaded archive to the registry and the sink."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from recurrence.config import NotificationPolicy
from recurrence.errors import RecurrenceError
from recurrence.ingestion.archive import classify_members, read_archive
from recurrence.models.schemas import ExceptionOutcome, IngestionResponse
from recurrence.notifications.models import (
    DuplicateExceptionDetails,
    MessageDetails,
    NewExceptionDetails,
    NotificationType,
)
from recurrence.observability.prometheus_metrics import increment_errors, record_archive_processed
from recurrence.observability.tracing import trace_operation
from recurrence.storage.fingerprint import fingerprint_message

if TYPE_CHECKING:
    from collections.abc import Sequence

    from recurrence.ingestion.archive import Archive, ArchiveMember
    from recurrence.notifications.sink import FileNotificationSink
    from recurrence.services.registry import ExceptionRegistry

logger = logging.getLogger(__name__)


class IngestionOrchestrator:
    """Classifies archive members and drives the registry and notification sink.

    At most one support message file and one exception file are processed per
    archive. Duplicate exceptions always notify; new exceptions notify only
    under ``NotificationPolicy.ALL``.
    """

    def __init__(
        self,
        registry: ExceptionRegistry,
        sink: FileNotificationSink,
        policy: NotificationPolicy = NotificationPolicy.DUPLICATES_ONLY,
        message_keywords: Sequence[str] = ("message", "support"),
        exception_keywords: Sequence[str] = ("exception", "error", "log"),
        max_archive_bytes: int | None = None,
    ) -> None:
        self.registry = registry
        self.sink = sink
        self.policy = policy
        self.message_keywords = tuple(message_keywords)
        self.exception_keywords = tuple(exception_keywords)
        self.max_archive_bytes = max_archive_bytes

    async def process_archive(self, name: str, data: bytes) -> IngestionResponse:
        """Read, classify and route one uploaded archive.

        Args:
            name: Archive identifier, recorded as the exception's source
            data: Raw zip bytes

        Returns:
            Summary of the chosen files, exception outcome and notifications

        Raises:
            InvalidRequest: If the archive cannot be read
            StorageUnavailable: If the store or the sink is unreachable
        """
        with trace_operation("ingestion.process_archive", {"archive": name}):
            try:
                archive = read_archive(name, data, self.max_archive_bytes)
                result = await self._route(archive)
            except RecurrenceError as e:
                record_archive_processed("error")
                increment_errors(
                    component="ingestion_orchestrator",
                    error_type="archive_error" if e.status_code == 400 else "storage_error",
                )
                logger.error(f"Archive {name} failed: {e.kind}: {e.message}")
                raise

        record_archive_processed("success")
        return result

    async def _route(self, archive: Archive) -> IngestionResponse:
        message_member, exception_member = classify_members(
            archive.members, self.message_keywords, self.exception_keywords
        )
        result = IngestionResponse(
            archive=archive.name,
            members=[m.name for m in archive.members],
            message_file=message_member.name if message_member else None,
            exception_file=exception_member.name if exception_member else None,
        )

        if message_member is None and exception_member is None:
            logger.info(f"Archive {archive.name}: no message or exception file found")

        if message_member is not None:
            notification_id = await self._forward_message(archive, message_member)
            if notification_id:
                result.notifications.append(notification_id)

        if exception_member is not None:
            outcome, notification_id = await self._record_exception(archive, exception_member)
            result.exception = outcome
            if notification_id:
                result.notifications.append(notification_id)

        return result

    async def _forward_message(self, archive: Archive, member: ArchiveMember) -> str | None:
        text = member.text().strip()
        if not text:
            logger.info(f"Archive {archive.name}: message file {member.name} is empty, skipped")
            return None

        return await self.sink.notify(
            type=NotificationType.MESSAGE,
            title="New support message",
            message=text,
            source_archive=archive.name,
            details=MessageDetails(file_name=member.name, size_bytes=member.size),
        )

    async def _record_exception(
        self, archive: Archive, member: ArchiveMember
    ) -> tuple[ExceptionOutcome | None, str | None]:
        text = member.text()
        if not text.strip():
            logger.info(f"Archive {archive.name}: exception file {member.name} is empty, skipped")
            return None, None

        recorded = await self.registry.record(text, archive.name)
        outcome = ExceptionOutcome(
            file_name=member.name,
            hash=fingerprint_message(text),
            is_duplicate=recorded.is_duplicate,
            occurrence_count=recorded.occurrence_count,
        )
        summary = text.strip()[:200]

        if outcome.is_duplicate:
            notification_id = await self.sink.notify(
                type=NotificationType.DUPLICATE_EXCEPTION,
                title="Duplicate exception detected",
                message=f"This exception has occurred {outcome.occurrence_count} times: {summary}",
                source_archive=archive.name,
                details=DuplicateExceptionDetails(
                    hash=outcome.hash,
                    occurrence_count=outcome.occurrence_count,
                    file_name=member.name,
                ),
            )
        elif self.policy is NotificationPolicy.ALL:
            notification_id = await self.sink.notify(
                type=NotificationType.NEW_EXCEPTION,
                title="New exception recorded",
                message=f"First occurrence of exception: {summary}",
                source_archive=archive.name,
                details=NewExceptionDetails(
                    hash=outcome.hash,
                    occurrence_count=outcome.occurrence_count,
                    file_name=member.name,
                ),
            )
        else:
            notification_id = None
            logger.info(f"Archive {archive.name}: new exception stored without notification")

        return outcome, notification_id
