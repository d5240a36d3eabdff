"""HTTP API for Recurrence."""

from recurrence.api.app import create_app

__all__ = ["create_app"]
