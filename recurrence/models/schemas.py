"""Request and response schemas for the exception registry and its HTTP binding.

Wire format is camelCase; Python attributes are snake_case.
"""

from __future__ import annotations

from typing import Literal

from pydantic import AliasChoices, Field

from recurrence.models import ExceptionRecord, WireModel

# ============================================================================
# Exception Registry
# ============================================================================


class RecordExceptionRequest(WireModel):
    """Body of ``POST /exceptions``.

    Fields default to empty so that missing values reach the registry and
    fail as ``InvalidRequest`` rather than as a framework validation error.
    ``zipFile`` is accepted as a legacy name for ``sourceArchive``.
    """

    message: str | None = None
    source_archive: str | None = Field(
        default=None,
        validation_alias=AliasChoices("sourceArchive", "source_archive", "zipFile"),
    )


class RecordExceptionResponse(WireModel):
    success: bool = True
    is_duplicate: bool
    occurrence_count: int = Field(ge=1)


class SearchExceptionResponse(WireModel):
    """Result of an exact-match search; ``match_count`` is always 0 or 1."""

    query: str
    match_count: Literal[0, 1]
    is_duplicate: bool
    occurrence_count: int = Field(ge=0)
    matches: list[ExceptionRecord] = Field(default_factory=list, max_length=1)


class ExceptionEntry(WireModel):
    hash: str
    occurrence_count: int = Field(ge=1)
    record: ExceptionRecord


class ListExceptionsResponse(WireModel):
    total_unique_exceptions: int = Field(ge=0)
    exceptions: list[ExceptionEntry] = Field(default_factory=list)


# ============================================================================
# Ingestion
# ============================================================================


class ExceptionOutcome(WireModel):
    file_name: str
    hash: str
    is_duplicate: bool
    occurrence_count: int = Field(ge=1)


class IngestionResponse(WireModel):
    """Summary of one processed archive."""

    success: bool = True
    archive: str
    members: list[str] = Field(default_factory=list)
    message_file: str | None = None
    exception_file: str | None = None
    exception: ExceptionOutcome | None = None
    notifications: list[str] = Field(default_factory=list)


# ============================================================================
# Health
# ============================================================================


class HealthResponse(WireModel):
    status: Literal["ok", "degraded"]
    service: str = "recurrence"
    mode: str
    store: str
    store_reachable: bool


__all__ = [
    "ExceptionEntry",
    "ExceptionOutcome",
    "HealthResponse",
    "IngestionResponse",
    "ListExceptionsResponse",
    "RecordExceptionRequest",
    "RecordExceptionResponse",
    "SearchExceptionResponse",
]
