"""
Tests for the file acceptance filter.
"""

import pytest

from app.schemas.workflow import UploadedFile
from app.services.file_filter import (
    Accepted,
    FileAcceptanceFilter,
    Rejected,
    format_file_size,
)

TEN_MIB = 10 * 1024 * 1024


class TestFileTypePolicy:
    """Tests for the name/content-type check."""

    @pytest.mark.parametrize(
        "filename",
        ["harness.vec", "HARNESS.VEC", "my.harness.Vec"],
    )
    def test_vec_extension_accepted_regardless_of_type(self, filename):
        """Test .vec files pass even with an unrelated content type."""
        decision = FileAcceptanceFilter().accept(filename, "application/pdf", 100)
        assert isinstance(decision, Accepted)

    @pytest.mark.parametrize(
        "content_type",
        ["application/octet-stream", "text/plain", "text/plain; charset=utf-8"],
    )
    def test_allowed_content_type_accepted(self, content_type):
        """Test generic binary/text types pass without a .vec extension."""
        decision = FileAcceptanceFilter().accept("export.xml", content_type, 100)
        assert isinstance(decision, Accepted)

    @pytest.mark.parametrize(
        "filename,content_type",
        [
            ("report.pdf", "application/pdf"),
            ("harness.vec.zip", "application/zip"),
            ("data.xml", "application/xml"),
            ("noextension", ""),
        ],
    )
    def test_unsupported_type_rejected(self, filename, content_type):
        """Test files failing both checks are rejected as unsupported."""
        decision = FileAcceptanceFilter().accept(filename, content_type, 100)
        assert isinstance(decision, Rejected)
        assert decision.reason == "fileTypeNotSupported"
        assert not decision.accepted

    def test_type_checked_before_size(self):
        """Test an oversized unsupported file reports the type problem."""
        decision = FileAcceptanceFilter().accept("big.pdf", "application/pdf", TEN_MIB * 2)
        assert decision.reason == "fileTypeNotSupported"


class TestFileSizePolicy:
    """Tests for the size ceiling."""

    def test_file_at_ceiling_accepted(self):
        decision = FileAcceptanceFilter().accept("harness.vec", "", TEN_MIB)
        assert decision.accepted

    def test_file_over_ceiling_rejected(self):
        """Test files over 10 MiB are rejected with the formatted ceiling."""
        decision = FileAcceptanceFilter().accept("harness.vec", "", TEN_MIB + 1)
        assert isinstance(decision, Rejected)
        assert decision.reason == "fileTooLarge"
        assert decision.params == {"maxSize": "10 MB"}
        assert "10 MB" in decision.message

    def test_custom_ceiling(self):
        file_filter = FileAcceptanceFilter(max_size_bytes=1024)
        assert file_filter.accept("a.vec", "", 1024).accepted
        assert file_filter.accept("a.vec", "", 1025).reason == "fileTooLarge"

    def test_accept_file_uses_content_length(self):
        """Test accept_file measures the uploaded content."""
        file_filter = FileAcceptanceFilter(max_size_bytes=4)
        small = UploadedFile(filename="a.vec", content=b"1234")
        large = UploadedFile(filename="a.vec", content=b"12345")
        assert file_filter.accept_file(small).accepted
        assert not file_filter.accept_file(large).accepted


class TestFormatFileSize:
    @pytest.mark.parametrize(
        "size,expected",
        [
            (0, "0 B"),
            (512, "512 B"),
            (1536, "1.5 KB"),
            (20 * 1024, "20 KB"),
            (TEN_MIB, "10 MB"),
            (3 * 1024**3, "3.0 GB"),
        ],
    )
    def test_format(self, size, expected):
        assert format_file_size(size) == expected
