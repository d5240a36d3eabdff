"""Recurrence services."""

from recurrence.services.registry import ExceptionRegistry

__all__ = ["ExceptionRegistry"]
