"""Zip archive reading and member classification by file name."""

from __future__ import annotations

import io
import logging
import zipfile
import zlib
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from recurrence.errors import InvalidRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArchiveMember:
    """One regular file inside an archive."""

    name: str
    size: int
    content: bytes = field(repr=False)

    def text(self) -> str:
        """Content decoded as UTF-8, invalid bytes replaced. Whitespace is kept."""
        return self.content.decode("utf-8", errors="replace")


@dataclass(frozen=True)
class Archive:
    name: str
    members: list[ArchiveMember]

    @property
    def total_size(self) -> int:
        return sum(m.size for m in self.members)


def read_archive(name: str, data: bytes, max_bytes: int | None = None) -> Archive:
    """Read every regular file of a zip archive into memory.

    Args:
        name: Archive identifier (usually the uploaded file name)
        data: Raw zip bytes
        max_bytes: Reject archives whose compressed or uncompressed size exceeds this

    Raises:
        InvalidRequest: If the data is empty, not a zip archive, or too large
    """
    if not data:
        raise InvalidRequest("Uploaded archive is empty")
    if max_bytes is not None and len(data) > max_bytes:
        raise InvalidRequest(f"Archive exceeds {max_bytes} bytes")

    try:
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            infos = [info for info in zf.infolist() if not info.is_dir()]
            declared = sum(info.file_size for info in infos)
            if max_bytes is not None and declared > max_bytes:
                raise InvalidRequest(f"Archive expands beyond {max_bytes} bytes")
            members = [ArchiveMember(info.filename, info.file_size, zf.read(info)) for info in infos]
    except (
        zipfile.BadZipFile,
        zipfile.LargeZipFile,
        zlib.error,
        EOFError,
        NotImplementedError,
        RuntimeError,
    ) as e:
        # RuntimeError: encrypted member; NotImplementedError: unsupported compression;
        # zlib.error and EOFError: corrupt or truncated member data
        raise InvalidRequest(f"{name} is not a readable zip archive: {e}") from e

    archive = Archive(name=name, members=members)
    _log_contents(archive)
    return archive


def _log_contents(archive: Archive) -> None:
    logger.info(f"Archive received: {archive.name} ({len(archive.members)} files)")
    for member in archive.members:
        logger.info(f"  - {member.name} ({member.size / 1024:.2f} KB)")
    logger.info(f"Total size: {archive.total_size / 1024:.2f} KB")


def _matches(member: ArchiveMember, keywords: Iterable[str]) -> bool:
    lowered = member.name.lower()
    return any(keyword.lower() in lowered for keyword in keywords)


def classify_members(
    members: Sequence[ArchiveMember],
    message_keywords: Iterable[str] = ("message", "support"),
    exception_keywords: Iterable[str] = ("exception", "error", "log"),
) -> tuple[ArchiveMember | None, ArchiveMember | None]:
    """Pick at most one support message file and one exception file.

    Matching is a case-insensitive substring test on the member name.
    The first member in archive order wins each role; message keywords are
    checked first and a member never fills both roles.

    Returns:
        (message_member, exception_member), either may be None
    """
    message_keywords = tuple(message_keywords)
    exception_keywords = tuple(exception_keywords)

    message_member = next((m for m in members if _matches(m, message_keywords)), None)
    exception_member = next(
        (m for m in members if m is not message_member and _matches(m, exception_keywords)),
        None,
    )
    return message_member, exception_member


__all__ = ["Archive", "ArchiveMember", "classify_members", "read_archive"]
