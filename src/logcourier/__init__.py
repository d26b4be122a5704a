"""
Log Courier - capture, compress, and hand off application logs.

Persists a log byte stream to disk atomically, optionally zips it, and
passes the result to a delivery channel. The functions below are the
caller-facing API, backed by default-configured components.
"""

import os
from typing import BinaryIO

from logcourier.artifacts import (
    ArchiveResult,
    Archiver,
    PersistResult,
    ProgressListener,
    PurgeResult,
    StreamPersister,
    make_timestamped_name,
    purge,
)
from logcourier.artifacts.storage import ByteSource

__version__ = "0.1.0"


def persist(
    directory: str | os.PathLike,
    name: str,
    stream: ByteSource,
    listener: ProgressListener | None = None,
) -> PersistResult:
    """Write a byte stream to directory/name. See StreamPersister.save."""
    return StreamPersister().save(directory, name, stream, listener)


def archive(zip_path: str | os.PathLike, files: list[str | os.PathLike]) -> ArchiveResult:
    """Compress files into zip_path. See Archiver.compress."""
    return Archiver().compress(zip_path, files)


def unarchive(
    source: str | os.PathLike | BinaryIO, dest_dir: str | os.PathLike
) -> ArchiveResult:
    """Extract an archive path or stream into dest_dir. See Archiver.decompress."""
    return Archiver().decompress(source, dest_dir)


def purge_by_prefix(directory: str | os.PathLike, prefix: str) -> PurgeResult:
    """Delete every artifact in directory whose name starts with prefix."""
    return purge(directory, prefix)


__all__ = [
    "__version__",
    "persist",
    "archive",
    "unarchive",
    "purge_by_prefix",
    "make_timestamped_name",
]
