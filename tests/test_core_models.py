"""Tests for core enums, exceptions, and result models."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from logcourier.artifacts.models import ArchiveEntry, ArchiveResult, Artifact, PersistResult
from logcourier.core.exceptions import (
    ArtifactError,
    ConfigurationError,
    CorruptArchiveError,
    DeliveryError,
    DirectoryUnavailableError,
    EntryMissingError,
    IOFailureError,
    LogCourierError,
    OperationCancelledError,
    error_for_kind,
)
from logcourier.core.models import ArtifactFormat, FailureKind


class TestArtifactFormat:
    """Tests for ArtifactFormat."""

    def test_for_name(self) -> None:
        assert ArtifactFormat.for_name("a_20240101_000000.zip") == ArtifactFormat.ARCHIVE
        assert ArtifactFormat.for_name("A.ZIP") == ArtifactFormat.ARCHIVE
        assert ArtifactFormat.for_name("a.log") == ArtifactFormat.RAW_LOG

    def test_mime_and_extension(self) -> None:
        assert ArtifactFormat.ARCHIVE.mime_type == "application/zip"
        assert ArtifactFormat.RAW_LOG.mime_type == "text/plain"
        assert ArtifactFormat.ARCHIVE.extension == "zip"
        assert ArtifactFormat.RAW_LOG.extension == "log"


class TestExceptions:
    """Tests for the exception hierarchy."""

    def test_base_error_str_with_details(self) -> None:
        """Details are appended to the message."""
        error = LogCourierError("Something broke", details={"a": 1})
        assert str(error) == "Something broke (a=1)"

    def test_artifact_error_records_path(self) -> None:
        error = IOFailureError("write failed", path="/tmp/a.log")
        assert error.path == "/tmp/a.log"
        assert error.details == {"path": "/tmp/a.log"}
        assert isinstance(error, ArtifactError)

    def test_to_dict_includes_kind(self) -> None:
        data = DirectoryUnavailableError("no dir", path="/x").to_dict()
        assert data == {
            "error_type": "DirectoryUnavailableError",
            "kind": "directory_unavailable",
            "message": "no dir",
            "details": {"path": "/x"},
        }

    def test_cancelled_default_message(self) -> None:
        error = OperationCancelledError()
        assert error.message == "Interrupted by listener"
        assert error.kind is FailureKind.CANCELLED

    def test_corrupt_archive_entry_name(self) -> None:
        error = CorruptArchiveError("bad entry", entry_name="../x", path="/dest")
        assert error.entry_name == "../x"
        assert error.details == {"entry_name": "../x", "path": "/dest"}

    def test_non_artifact_errors_have_no_kind(self) -> None:
        assert DeliveryError("nope", channel="email").kind is None
        assert ConfigurationError("bad", config_key="chunk_size").details == {
            "config_key": "chunk_size"
        }

    @pytest.mark.parametrize(
        "kind,expected",
        [
            (FailureKind.DIRECTORY_UNAVAILABLE, DirectoryUnavailableError),
            (FailureKind.IO_FAILURE, IOFailureError),
            (FailureKind.CANCELLED, OperationCancelledError),
            (FailureKind.ENTRY_MISSING, EntryMissingError),
            (FailureKind.CORRUPT_ARCHIVE, CorruptArchiveError),
        ],
    )
    def test_error_for_kind(self, kind: FailureKind, expected: type) -> None:
        """Every failure kind maps back to its exception class."""
        error = error_for_kind(kind, "message", path="/p")
        assert type(error) is expected
        assert error.kind is kind


class TestResultModels:
    """Tests for operation result models."""

    def test_persist_result_from_error(self) -> None:
        result = PersistResult.from_error(EntryMissingError("gone", path="/a"), 10)
        assert result.success is False
        assert result.failure == FailureKind.ENTRY_MISSING
        assert result.error == "gone"
        assert result.bytes_written == 10
        assert result.path is None

    def test_persist_result_unwrap_without_path(self) -> None:
        """A success that reports no path is an I/O failure, even under python -O."""
        with pytest.raises(IOFailureError):
            PersistResult(success=True).unwrap()

    def test_archive_result_unwrap_success(self) -> None:
        result = ArchiveResult(success=True, archive_path=Path("/a.zip"))
        assert result.unwrap() is result

    def test_archive_result_unwrap_failure(self) -> None:
        result = ArchiveResult.from_error(
            CorruptArchiveError("bad"), destination=Path("/out")
        )
        with pytest.raises(CorruptArchiveError) as exc_info:
            result.unwrap()
        assert exc_info.value.path == "/out"

    def test_archive_entry_directory_has_no_size(self) -> None:
        with pytest.raises(ValidationError):
            ArchiveEntry(path="docs", is_dir=True, size_bytes=5)

    def test_archive_entry_size_non_negative(self) -> None:
        with pytest.raises(ValidationError):
            ArchiveEntry(path="a.txt", size_bytes=-1)

    def test_artifact_format_from_string(self) -> None:
        artifact = Artifact(path=Path("/a.zip"), prefix="a_", format="archive")
        assert artifact.format == ArtifactFormat.ARCHIVE
