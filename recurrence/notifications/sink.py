"""File-backed notification sink.

Each notification is one JSON document in the notifications directory,
named ``<type>_<timestamp>_<id>.json``. Writes go through a temporary file
and an atomic rename so a reader never sees a partial document.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from recurrence.errors import InvalidRequest, StorageUnavailable
from recurrence.notifications.models import NotificationRecord
from recurrence.observability.prometheus_metrics import increment_errors, record_notification

if TYPE_CHECKING:
    from recurrence.notifications.models import NotificationDetails, NotificationType, NotifyRequest

logger = logging.getLogger(__name__)


class FileNotificationSink:
    """Durably records notifications as JSON files."""

    def __init__(self, directory: str | Path) -> None:
        """Initialize sink.

        Args:
            directory: Directory receiving notification files (created if missing)
        """
        self.directory = Path(directory)

    async def initialize(self) -> None:
        await asyncio.to_thread(self.directory.mkdir, parents=True, exist_ok=True)
        logger.info(f"Notification sink writing to {self.directory}")

    async def notify(
        self,
        type: NotificationType | str,
        title: str,
        message: str,
        source_archive: str | None = None,
        details: NotificationDetails | dict[str, Any] | None = None,
    ) -> str:
        """Persist a notification.

        Args:
            type: One of the NotificationType values
            title: Short headline
            message: Notification body
            source_archive: Upload the notification refers to
            details: Payload matching ``type``; a dict without ``kind``
                is tagged with the notification type

        Returns:
            The new notification id

        Raises:
            InvalidRequest: If a required field is missing or details do not match the type
            StorageUnavailable: If the notification cannot be written
        """
        if isinstance(details, dict) and "kind" not in details:
            details = {**details, "kind": str(getattr(type, "value", type))}

        try:
            record = NotificationRecord(
                type=type,
                title=title,
                message=message,
                source_archive=source_archive,
                details=details,
            )
        except ValidationError as e:
            increment_errors(component="notification_sink", error_type="validation_error")
            raise InvalidRequest(f"Invalid notification: {_first_error(e)}") from e

        path = await asyncio.to_thread(self._write, record)
        record_notification(record.type.value)

        logger.info(
            f"Notification sent: type={record.type.value} title={record.title!r} "
            f"source={record.source_archive} file={path.name}"
        )
        return record.id

    async def notify_request(self, request: NotifyRequest) -> str:
        """Persist a notification received over the wire.

        Raises:
            InvalidRequest: If type, title or message is missing
        """
        missing = [name for name in ("type", "title", "message") if not getattr(request, name)]
        if missing:
            raise InvalidRequest(f"Missing required fields: {', '.join(missing)}")

        return await self.notify(
            type=request.type,
            title=request.title,
            message=request.message,
            source_archive=request.source_archive,
            details=request.details,
        )

    async def list_notifications(self) -> list[NotificationRecord]:
        """All stored notifications, oldest first."""
        records = await asyncio.to_thread(self._read_all)
        return sorted(records, key=lambda r: r.created_at)

    async def count(self) -> int:
        """Number of readable notifications; malformed files are excluded as in listing."""
        return len(await asyncio.to_thread(self._read_all))

    def _paths(self) -> list[Path]:
        try:
            return sorted(self.directory.glob("*.json"))
        except OSError as e:
            raise StorageUnavailable(f"Notification directory unreadable: {e}") from e

    def _read_all(self) -> list[NotificationRecord]:
        records = []
        for path in self._paths():
            try:
                records.append(NotificationRecord.model_validate_json(path.read_text("utf-8")))
            except OSError as e:
                raise StorageUnavailable(f"Cannot read notification {path.name}: {e}") from e
            except ValidationError as e:
                logger.warning(f"Skipping malformed notification file {path.name}: {_first_error(e)}")
        return records

    def _write(self, record: NotificationRecord) -> Path:
        stamp = record.created_at.isoformat().replace(":", "-").replace(".", "-").replace("+", "_")
        path = self.directory / f"{record.type.value}_{stamp}_{record.id[:8]}.json"
        payload = json.dumps(record.model_dump(mode="json", by_alias=True), indent=2)

        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=".notify_", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, path)
        except OSError as e:
            increment_errors(component="notification_sink", error_type="io_error")
            raise StorageUnavailable(f"Cannot write notification: {e}") from e

        return path


def _first_error(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first['msg']}" if location else first["msg"]


__all__ = ["FileNotificationSink"]
