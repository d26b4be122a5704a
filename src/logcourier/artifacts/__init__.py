"""
Log Courier Artifacts Module.

Provides streaming persistence, zip archiving, and lifecycle management
(naming and stale-file cleanup) for captured log artifacts.
"""

from .models import (
    ArchiveEntry,
    ArchiveResult,
    Artifact,
    PersistResult,
    PurgeResult,
)
from .progress import (
    CallbackProgressListener,
    ProgressListener,
    RecordingProgressListener,
)
from .storage import StreamPersister, delete_file, iter_chunks
from .archiver import Archiver
from .lifecycle import (
    list_artifacts,
    make_name,
    make_timestamped_name,
    parse_timestamp,
    purge,
)

__all__ = [
    # Models
    "Artifact",
    "ArchiveEntry",
    "ArchiveResult",
    "PersistResult",
    "PurgeResult",
    # Progress
    "ProgressListener",
    "CallbackProgressListener",
    "RecordingProgressListener",
    # Storage
    "StreamPersister",
    "delete_file",
    "iter_chunks",
    # Archiving
    "Archiver",
    # Lifecycle
    "make_name",
    "make_timestamped_name",
    "parse_timestamp",
    "purge",
    "list_artifacts",
]
