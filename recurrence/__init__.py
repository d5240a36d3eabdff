"""Recurrence - exception deduplication and support notification service."""

__version__ = "0.3.0"
