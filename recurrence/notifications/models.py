"""Notification records and their type-specific details payloads."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Annotated, Any, Literal
from uuid import uuid4

from pydantic import AliasChoices, Field, model_validator

from recurrence.models import WireModel


class NotificationType(str, Enum):
    MESSAGE = "message"
    NEW_EXCEPTION = "new_exception"
    DUPLICATE_EXCEPTION = "duplicate_exception"


class MessageDetails(WireModel):
    """A support message file found in an uploaded archive."""

    kind: Literal["message"] = "message"
    file_name: str | None = None
    size_bytes: int | None = Field(default=None, ge=0)


class NewExceptionDetails(WireModel):
    """First sighting of an exception fingerprint."""

    kind: Literal["new_exception"] = "new_exception"
    hash: str
    occurrence_count: int = Field(default=1, ge=1)
    file_name: str | None = None


class DuplicateExceptionDetails(WireModel):
    """Repeat sighting of a known exception fingerprint."""

    kind: Literal["duplicate_exception"] = "duplicate_exception"
    hash: str
    occurrence_count: int = Field(ge=2)
    file_name: str | None = None


NotificationDetails = Annotated[
    MessageDetails | NewExceptionDetails | DuplicateExceptionDetails,
    Field(discriminator="kind"),
]


class NotificationRecord(WireModel):
    """A persisted notification, as written by the sink and listed back."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    type: NotificationType
    title: str = Field(min_length=1)
    message: str = Field(min_length=1)
    source_archive: str | None = None
    details: NotificationDetails | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    status: Literal["unread", "read"] = "unread"

    @model_validator(mode="after")
    def validate_details_kind(self) -> NotificationRecord:
        """Details, when present, must belong to the notification's type."""
        if self.details is not None and self.details.kind != self.type.value:
            raise ValueError(
                f"details of kind '{self.details.kind}' do not match notification type '{self.type.value}'"
            )
        return self


class NotifyRequest(WireModel):
    """Body of ``POST /notify``; validated by the sink, not by the framework."""

    type: str | None = None
    title: str | None = None
    message: str | None = None
    source_archive: str | None = Field(
        default=None,
        validation_alias=AliasChoices("sourceArchive", "source_archive", "zipFile"),
    )
    details: dict[str, Any] | None = None


__all__ = [
    "DuplicateExceptionDetails",
    "MessageDetails",
    "NewExceptionDetails",
    "NotificationDetails",
    "NotificationRecord",
    "NotificationType",
    "NotifyRequest",
]
