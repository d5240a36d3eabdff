"""Archive ingestion: member classification and routing."""

from recurrence.ingestion.archive import Archive, ArchiveMember, classify_members, read_archive
from recurrence.ingestion.orchestrator import IngestionOrchestrator

__all__ = [
    "Archive",
    "ArchiveMember",
    "IngestionOrchestrator",
    "classify_members",
    "read_archive",
]
