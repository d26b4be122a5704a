"""
Log Courier Core Module.

Provides the failure taxonomy and shared enumerations.
"""

__all__ = [
    "ArtifactFormat",
    "FailureKind",
    "MissingEntryPolicy",
    # Exceptions
    "LogCourierError",
    "ArtifactError",
    "DirectoryUnavailableError",
    "IOFailureError",
    "OperationCancelledError",
    "EntryMissingError",
    "CorruptArchiveError",
    "DeliveryError",
    "ConfigurationError",
    "error_for_kind",
]

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
from logcourier.core.models import ArtifactFormat, FailureKind, MissingEntryPolicy
