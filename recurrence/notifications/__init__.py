"""Notification sink and notification models."""

from recurrence.notifications.models import (
    DuplicateExceptionDetails,
    MessageDetails,
    NewExceptionDetails,
    NotificationRecord,
    NotificationType,
    NotifyRequest,
)
from recurrence.notifications.sink import FileNotificationSink

__all__ = [
    "DuplicateExceptionDetails",
    "FileNotificationSink",
    "MessageDetails",
    "NewExceptionDetails",
    "NotificationRecord",
    "NotificationType",
    "NotifyRequest",
]
