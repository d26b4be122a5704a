"""
Pydantic models for artifact persistence and archiving.

Defines the typed results returned by the persist, archive and purge
operations, and the records describing artifacts and archive entries.
"""

from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, Field, field_validator, model_validator

from logcourier.core.exceptions import ArtifactError, IOFailureError, error_for_kind
from logcourier.core.models import ArtifactFormat, FailureKind


class Artifact(BaseModel):
    """A file produced by a persist or archive operation."""

    path: Path = Field(description="Absolute path on disk")
    prefix: str = Field(description="Naming prefix identifying the artifact family")
    created_at: datetime | None = Field(
        default=None, description="Timestamp decoded from the file name"
    )
    format: ArtifactFormat = Field(
        default=ArtifactFormat.RAW_LOG, description="raw-log or archive"
    )
    size_bytes: int | None = Field(default=None, description="Size in bytes")

    @field_validator("format", mode="before")
    @classmethod
    def validate_format(cls, v):
        """Convert string to ArtifactFormat enum."""
        if isinstance(v, str):
            return ArtifactFormat(v)
        return v


class ArchiveEntry(BaseModel):
    """One entry inside an archive container."""

    path: str = Field(description="Relative, '/'-separated path inside the archive")
    size_bytes: int = Field(default=0, ge=0, description="Uncompressed size")
    is_dir: bool = Field(default=False, description="Whether this is a directory entry")

    @model_validator(mode="after")
    def validate_directory_has_no_content(self) -> "ArchiveEntry":
        """Directory entries carry no content."""
        if self.is_dir and self.size_bytes:
            raise ValueError("directory entries have no content")
        return self


class _OperationResult(BaseModel):
    """Shared failure fields for operation results."""

    success: bool = Field(description="Whether the operation succeeded")
    failure: FailureKind | None = Field(default=None, description="Failure kind if failed")
    error: str | None = Field(default=None, description="Error message if failed")

    @property
    def cancelled(self) -> bool:
        """Return True if the operation stopped on a listener request."""
        return self.failure is FailureKind.CANCELLED

    def _raise_for_failure(self, path: Path | None) -> None:
        if self.success:
            return
        kind = self.failure or FailureKind.IO_FAILURE
        raise error_for_kind(
            kind,
            self.error or kind.value,
            path=str(path) if path else None,
        )

    @classmethod
    def _from_error(cls, exc: ArtifactError, **fields):
        return cls(
            success=False,
            failure=exc.kind or FailureKind.IO_FAILURE,
            error=exc.message,
            **fields,
        )


class PersistResult(_OperationResult):
    """Result of a stream persist operation."""

    path: Path | None = Field(default=None, description="Fully-qualified path on success")
    bytes_written: int = Field(default=0, description="Bytes consumed from the source")

    def unwrap(self) -> Path:
        """Return the written path, or raise the matching ArtifactError."""
        self._raise_for_failure(self.path)
        if self.path is None:
            raise IOFailureError("Persist succeeded without reporting a path")
        return self.path

    @classmethod
    def from_error(cls, exc: ArtifactError, bytes_written: int = 0) -> "PersistResult":
        """Translate an ArtifactError into a failed result."""
        return cls._from_error(exc, bytes_written=bytes_written)


class ArchiveResult(_OperationResult):
    """Result of a compress or decompress operation."""

    archive_path: Path | None = Field(default=None, description="Archive file, if a path")
    destination: Path | None = Field(
        default=None, description="Extraction root for decompress"
    )
    entries: list[ArchiveEntry] = Field(
        default_factory=list, description="Entries written, in archive order"
    )
    skipped: list[Path] = Field(
        default_factory=list, description="Missing source files skipped by compress"
    )

    def unwrap(self) -> "ArchiveResult":
        """Return self on success, or raise the matching ArtifactError."""
        self._raise_for_failure(self.archive_path or self.destination)
        return self

    @classmethod
    def from_error(cls, exc: ArtifactError, **fields) -> "ArchiveResult":
        """Translate an ArtifactError into a failed result."""
        return cls._from_error(exc, **fields)


class PurgeResult(BaseModel):
    """Result of purging an artifact family from a directory."""

    directory: Path = Field(description="Directory that was scanned")
    prefix: str = Field(description="Prefix that was matched")
    deleted: list[Path] = Field(default_factory=list, description="Paths removed")
    errors: list[str] = Field(default_factory=list, description="Paths that could not be removed")

    @property
    def success(self) -> bool:
        """Return True if every matched artifact was removed."""
        return not self.errors
