"""Error taxonomy shared by the store, the registry and the HTTP layer."""

from __future__ import annotations


class RecurrenceError(Exception):
    """Base error carrying a stable ``kind`` for structured responses."""

    kind = "RecurrenceError"
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        """Render as the ``error`` payload returned to callers."""
        return {"kind": self.kind, "message": self.message}


class InvalidRequest(RecurrenceError):
    """A required field is missing or empty. Never retryable."""

    kind = "InvalidRequest"
    status_code = 400


class StorageUnavailable(RecurrenceError):
    """The backing store could not be reached or rejected an operation."""

    kind = "StorageUnavailable"
    status_code = 503


__all__ = ["InvalidRequest", "RecurrenceError", "StorageUnavailable"]
