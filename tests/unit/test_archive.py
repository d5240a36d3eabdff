"""Tests for archive reading and member classification."""

from __future__ import annotations

import io
import zipfile

import pytest

from recurrence.errors import InvalidRequest
from recurrence.ingestion.archive import ArchiveMember, classify_members, read_archive


def _member(name: str, content: bytes = b"x") -> ArchiveMember:
    return ArchiveMember(name=name, size=len(content), content=content)


class TestReadArchive:
    """Test suite for read_archive()."""

    def test_reads_regular_files(self, make_zip) -> None:
        data = make_zip({"message.txt": "hello", "logs/error.log": "Traceback"})

        archive = read_archive("a.zip", data)

        assert archive.name == "a.zip"
        assert [m.name for m in archive.members] == ["message.txt", "logs/error.log"]
        assert archive.total_size == len("hello") + len("Traceback")

    def test_skips_directories(self) -> None:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as zf:
            zf.writestr("logs/", "")
            zf.writestr("logs/exception.txt", "boom")

        archive = read_archive("a.zip", buffer.getvalue())

        assert [m.name for m in archive.members] == ["logs/exception.txt"]

    def test_text_is_decoded_with_whitespace_kept(self, make_zip) -> None:
        archive = read_archive("a.zip", make_zip({"error.log": b"  boom \xff\n"}))

        assert archive.members[0].text() == "  boom \ufffd\n"

    def test_empty_upload_rejected(self) -> None:
        with pytest.raises(InvalidRequest, match="empty"):
            read_archive("a.zip", b"")

    def test_not_a_zip_rejected(self) -> None:
        with pytest.raises(InvalidRequest, match="not a readable zip"):
            read_archive("a.zip", b"definitely not a zip archive")

    def test_corrupt_member_data_rejected(self, make_zip) -> None:
        data = bytearray(make_zip({"error.log": "Traceback (most recent call last):\n" * 20}))
        # First deflate block header: final block with the reserved block type
        data[30 + len("error.log")] = 0xFF

        with pytest.raises(InvalidRequest, match="not a readable zip"):
            read_archive("a.zip", bytes(data))

    def test_oversized_upload_rejected(self, make_zip) -> None:
        data = make_zip({"error.log": "boom"})

        with pytest.raises(InvalidRequest, match="exceeds"):
            read_archive("a.zip", data, max_bytes=len(data) - 1)

    def test_oversized_expansion_rejected(self, make_zip) -> None:
        data = make_zip({"error.log": "a" * 10_000})

        with pytest.raises(InvalidRequest, match="expands"):
            read_archive("a.zip", data, max_bytes=len(data) + 100)

    def test_empty_archive_has_no_members(self, make_zip) -> None:
        archive = read_archive("a.zip", make_zip({}))

        assert archive.members == []


class TestClassifyMembers:
    """Test suite for classify_members()."""

    def test_message_and_exception(self) -> None:
        members = [_member("readme.md"), _member("support_message.txt"), _member("exception.txt")]

        message, exception = classify_members(members)

        assert message.name == "support_message.txt"
        assert exception.name == "exception.txt"

    def test_case_insensitive(self) -> None:
        message, exception = classify_members([_member("MESSAGE.TXT"), _member("App.Error.LOG")])

        assert message.name == "MESSAGE.TXT"
        assert exception.name == "App.Error.LOG"

    def test_first_match_wins(self) -> None:
        members = [_member("error1.log"), _member("error2.log")]

        _, exception = classify_members(members)

        assert exception.name == "error1.log"

    def test_member_never_fills_both_roles(self) -> None:
        message, exception = classify_members([_member("message_error.log")])

        assert message.name == "message_error.log"
        assert exception is None

    def test_directory_part_of_name_matches(self) -> None:
        _, exception = classify_members([_member("logs/output.txt")])

        assert exception.name == "logs/output.txt"

    def test_nothing_matches(self) -> None:
        assert classify_members([_member("readme.md"), _member("photo.png")]) == (None, None)

    def test_custom_keywords(self) -> None:
        message, exception = classify_members(
            [_member("ticket.txt"), _member("crash.dmp")],
            message_keywords=("ticket",),
            exception_keywords=("crash",),
        )

        assert message.name == "ticket.txt"
        assert exception.name == "crash.dmp"
