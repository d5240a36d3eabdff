"""Recurrence data models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base for models serialized as camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ExceptionRecord(WireModel):
    """Most recent occurrence of a fingerprint.

    ``message``, ``source_archive`` and ``observed_at`` are overwritten on
    every sighting; ``occurrence_count`` only ever grows.
    """

    message: str
    source_archive: str
    observed_at: datetime
    occurrence_count: int = Field(ge=1)


@dataclass(frozen=True)
class OccurrenceResult:
    """Outcome of recording one occurrence."""

    fingerprint: str
    occurrence_count: int

    @property
    def is_duplicate(self) -> bool:
        return self.occurrence_count > 1


@dataclass(frozen=True)
class LookupResult:
    """Point lookup by fingerprint; ``record`` is None when never seen."""

    fingerprint: str
    occurrence_count: int
    record: ExceptionRecord | None

    @property
    def found(self) -> bool:
        return self.record is not None


@dataclass(frozen=True)
class StoredException:
    """One entry of the first-observed-order enumeration."""

    fingerprint: str
    occurrence_count: int
    record: ExceptionRecord


__all__ = [
    "ExceptionRecord",
    "LookupResult",
    "OccurrenceResult",
    "StoredException",
    "WireModel",
]
