"""
Log Courier Exception Hierarchy.

Defines the failure taxonomy used across persistence, archiving and
delivery. Operation boundaries translate these into typed results;
``unwrap()`` on a result turns them back into exceptions.
"""

from typing import Any

from logcourier.core.models import FailureKind


class LogCourierError(Exception):
    """
    Base exception for all Log Courier errors.

    All custom exceptions inherit from this class, allowing
    generic catch blocks and consistent error handling.
    """

    kind: FailureKind | None = None

    def __init__(self, message: str, *, details: dict[str, Any] | None = None):
        """
        Initialize a LogCourierError.

        Args:
            message: Human-readable error message
            details: Optional structured data for debugging
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation with details."""
        base = self.message
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{base} ({details_str})"
        return base

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "kind": self.kind.value if self.kind else None,
            "message": self.message,
            "details": self.details,
        }


class ArtifactError(LogCourierError):
    """
    Errors raised while writing, archiving or extracting artifacts.

    Carries the path being operated on when one is known.
    """

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if path:
            details["path"] = path

        super().__init__(message, details=details)
        self.path = path


class DirectoryUnavailableError(ArtifactError):
    """Raised when a target directory cannot be created or accessed."""

    kind = FailureKind.DIRECTORY_UNAVAILABLE


class IOFailureError(ArtifactError):
    """Raised when a read or write fails mid-stream."""

    kind = FailureKind.IO_FAILURE


class OperationCancelledError(ArtifactError):
    """
    Raised when a progress listener requests cancellation.

    Cleanup is identical to an I/O failure, but callers should not
    report it as an error.
    """

    kind = FailureKind.CANCELLED

    def __init__(self, message: str = "Interrupted by listener", **kwargs):
        super().__init__(message, **kwargs)


class EntryMissingError(ArtifactError):
    """Raised when a file named for compression does not exist."""

    kind = FailureKind.ENTRY_MISSING


class CorruptArchiveError(ArtifactError):
    """
    Raised when an archive entry is malformed or unsafe.

    Covers bad containers, CRC mismatches, and entry names that would
    escape the extraction root.
    """

    kind = FailureKind.CORRUPT_ARCHIVE

    def __init__(
        self,
        message: str,
        *,
        entry_name: str | None = None,
        **kwargs,
    ):
        details = kwargs.pop("details", {}) or {}
        if entry_name:
            details["entry_name"] = entry_name
        kwargs["details"] = details

        super().__init__(message, **kwargs)
        self.entry_name = entry_name


class DeliveryError(LogCourierError):
    """Raised when an artifact cannot be handed to a recipient."""

    def __init__(
        self,
        message: str,
        *,
        channel: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if channel:
            details["channel"] = channel

        super().__init__(message, details=details)
        self.channel = channel


class ConfigurationError(LogCourierError):
    """Raised when configuration values are missing or invalid."""

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if config_key:
            details["config_key"] = config_key

        super().__init__(message, details=details)
        self.config_key = config_key


_ERRORS_BY_KIND: dict[FailureKind, type[ArtifactError]] = {
    FailureKind.DIRECTORY_UNAVAILABLE: DirectoryUnavailableError,
    FailureKind.IO_FAILURE: IOFailureError,
    FailureKind.CANCELLED: OperationCancelledError,
    FailureKind.ENTRY_MISSING: EntryMissingError,
    FailureKind.CORRUPT_ARCHIVE: CorruptArchiveError,
}


def error_for_kind(
    kind: FailureKind, message: str, *, path: str | None = None
) -> ArtifactError:
    """Build the exception matching a failure kind."""
    return _ERRORS_BY_KIND[kind](message, path=path)
