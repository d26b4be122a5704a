"""
Core enumerations for Log Courier.

Shared by the artifact, delivery, and configuration layers so that
failure kinds and artifact formats have a single definition.
"""

from enum import Enum


class FailureKind(Enum):
    """Why a persist or archive operation did not succeed."""

    DIRECTORY_UNAVAILABLE = "directory_unavailable"
    IO_FAILURE = "io_failure"
    CANCELLED = "cancelled"
    ENTRY_MISSING = "entry_missing"
    CORRUPT_ARCHIVE = "corrupt_archive"


class ArtifactFormat(Enum):
    """On-disk format of an artifact."""

    RAW_LOG = "raw-log"
    ARCHIVE = "archive"

    @staticmethod
    def for_name(name: str) -> "ArtifactFormat":
        """Return the format implied by a file name's extension."""
        if name.lower().endswith(".zip"):
            return ArtifactFormat.ARCHIVE
        return ArtifactFormat.RAW_LOG

    @property
    def extension(self) -> str:
        """Default file extension for this format (without the dot)."""
        match self:
            case ArtifactFormat.ARCHIVE:
                return "zip"
            case _:
                return "log"

    @property
    def mime_type(self) -> str:
        """MIME type used when handing the artifact to a recipient."""
        match self:
            case ArtifactFormat.ARCHIVE:
                return "application/zip"
            case _:
                return "text/plain"


class MissingEntryPolicy(Enum):
    """What compress does when a source file does not exist."""

    ABORT = "abort"
    SKIP = "skip"
