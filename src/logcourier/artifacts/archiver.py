"""
Zip archiving for artifacts.

Compresses one or more files into a single deflate zip container and
extracts a container back into a directory tree. Both directions copy
data in bounded chunks; nothing holds a whole archive or entry in
memory.
"""

import logging
import os
import shutil
import tempfile
import zipfile
import zlib
from pathlib import Path, PurePosixPath
from typing import BinaryIO, Iterable

from logcourier.artifacts.models import ArchiveEntry, ArchiveResult
from logcourier.artifacts.progress import ProgressListener
from logcourier.artifacts.storage import StreamPersister, delete_file
from logcourier.core.exceptions import (
    ArtifactError,
    CorruptArchiveError,
    DirectoryUnavailableError,
    EntryMissingError,
    IOFailureError,
    OperationCancelledError,
)
from logcourier.core.models import FailureKind, MissingEntryPolicy

logger = logging.getLogger(__name__)

DEFAULT_ARCHIVE_CHUNK_SIZE = 2048
# Non-seekable archive streams are spooled; past this size the spool moves to disk.
SPOOL_MAX_MEMORY = 1024 * 1024


class _ListenerProxy(ProgressListener):
    """Offsets per-entry progress so the caller sees a running total."""

    def __init__(self, target: ProgressListener, base_kbytes: float):
        super().__init__()
        self._target = target
        self._base = base_kbytes

    def on_progress(self, kbytes: float) -> None:
        self._target.on_progress(self._base + kbytes)

    def cancel(self) -> None:
        self._target.cancel()

    @property
    def is_cancelled(self) -> bool:
        return self._target.is_cancelled


class _EntryReader:
    """Read-only view of an archive member that reports bad data as corruption."""

    def __init__(self, stream: BinaryIO, entry_name: str):
        self._stream = stream
        self._entry_name = entry_name

    def read(self, size: int = -1) -> bytes:
        try:
            return self._stream.read(size)
        except (zipfile.BadZipFile, zlib.error, EOFError) as e:
            raise CorruptArchiveError(
                f"Corrupt entry: {e}", entry_name=self._entry_name
            ) from e


class Archiver:
    """
    Zip compressor and decompressor.

    Entry names written by compress() are base names only, so two source
    files with the same base name collide inside the archive. Callers
    are responsible for keeping base names unique.
    """

    def __init__(
        self,
        chunk_size: int = DEFAULT_ARCHIVE_CHUNK_SIZE,
        missing_policy: MissingEntryPolicy = MissingEntryPolicy.ABORT,
        compression: int = zipfile.ZIP_DEFLATED,
    ):
        """
        Initialize the archiver.

        Args:
            chunk_size: Bytes copied per read/write (default 2 KiB)
            missing_policy: Default handling for missing source files
            compression: zipfile compression constant
        """
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.chunk_size = chunk_size
        self.missing_policy = missing_policy
        self.compression = compression
        # Extraction writes each entry atomically; no markers in restored trees.
        self._persister = StreamPersister(chunk_size=chunk_size, mark_private=False)

    # ------------------------------------------------------------------
    # Compression
    # ------------------------------------------------------------------

    def compress(
        self,
        archive_path: str | os.PathLike,
        source_files: Iterable[str | os.PathLike],
        listener: ProgressListener | None = None,
        missing_policy: MissingEntryPolicy | None = None,
    ) -> ArchiveResult:
        """
        Compress one or more files into a single zip file.

        Args:
            archive_path: The zip file to create (overwritten if present)
            source_files: Files to add, in order
            listener: Optional progress listener, polled per chunk
            missing_policy: Override the default missing-file policy

        Returns:
            ArchiveResult listing the entries written. On failure the
            archive file is removed; treat its contents as unreliable.
        """
        archive = Path(archive_path)
        if isinstance(source_files, (str, bytes, os.PathLike)):
            source_files = [source_files]
        policy = missing_policy or self.missing_policy
        result = ArchiveResult(success=True, archive_path=archive)
        total = 0

        try:
            try:
                archive.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise DirectoryUnavailableError(
                    f"Cannot create archive directory: {e}", path=str(archive.parent)
                ) from e

            with zipfile.ZipFile(archive, "w", compression=self.compression) as zf:
                for source in map(Path, source_files):
                    if not source.exists():
                        if policy is MissingEntryPolicy.SKIP:
                            logger.warning(f"zip, skipping missing file: {source}")
                            result.skipped.append(source)
                            continue
                        raise EntryMissingError(
                            f"Source file not found: {source}", path=str(source)
                        )
                    if not source.is_file():
                        raise IOFailureError(
                            "Source is not a regular file", path=str(source)
                        )

                    logger.debug(f"zip, adding: {source}")
                    size = self._add_file(zf, source, listener, total)
                    total += size
                    result.entries.append(ArchiveEntry(path=source.name, size_bytes=size))

        except ArtifactError as e:
            return self._compress_failed(archive, e)
        except (OSError, zipfile.LargeZipFile, ValueError) as e:
            return self._compress_failed(
                archive, IOFailureError(f"I/O error: {e}", path=str(archive))
            )

        logger.debug(f"zip, wrote {len(result.entries)} entries to {archive}")
        return result

    def _add_file(
        self,
        zf: zipfile.ZipFile,
        source: Path,
        listener: ProgressListener | None,
        base_bytes: int,
    ) -> int:
        """Stream one file into the archive under its base name."""
        info = zipfile.ZipInfo.from_file(
            source, arcname=source.name, strict_timestamps=False
        )
        info.compress_type = self.compression
        copied = 0
        with open(source, "rb") as origin, zf.open(info, "w") as out:
            while True:
                data = origin.read(self.chunk_size)
                if not data:
                    break
                out.write(data)
                copied += len(data)
                if listener is not None:
                    if listener.is_cancelled:
                        raise OperationCancelledError(path=str(source))
                    listener.on_progress((base_bytes + copied) / 1024)
        return copied

    def _compress_failed(self, archive: Path, error: ArtifactError) -> ArchiveResult:
        if error.kind is FailureKind.CANCELLED:
            logger.info(f"zip of {archive} cancelled")
        else:
            logger.warning(f"zip of {archive} failed: {error}")
        if not delete_file(archive):
            logger.debug(f"Could not remove partial archive {archive}")
        return ArchiveResult.from_error(error, archive_path=archive)

    # ------------------------------------------------------------------
    # Decompression
    # ------------------------------------------------------------------

    def decompress(
        self,
        archive_source: str | os.PathLike | BinaryIO,
        destination: str | os.PathLike,
        listener: ProgressListener | None = None,
    ) -> ArchiveResult:
        """
        Decompress an archive into a directory.

        Args:
            archive_source: Path of a zip file, or a binary stream of one
            destination: Directory to receive the extracted tree; created
                         if it doesn't exist

        Returns:
            ArchiveResult listing entries in archive order. Entries
            extracted before a failure are left on disk.
        """
        root = Path(os.path.abspath(destination))
        archive_path = None if _is_stream(archive_source) else Path(archive_source)
        result = ArchiveResult(success=True, archive_path=archive_path, destination=root)

        try:
            try:
                root.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise DirectoryUnavailableError(
                    f"Cannot create destination: {e}", path=str(root)
                ) from e

            if archive_path is not None:
                if not archive_path.is_file():
                    raise IOFailureError("Archive not found", path=str(archive_path))
                with open(archive_path, "rb") as stream:
                    self._extract_stream(stream, root, result, listener)
            elif _is_seekable(archive_source):
                self._extract_stream(archive_source, root, result, listener)
            else:
                with tempfile.SpooledTemporaryFile(max_size=SPOOL_MAX_MEMORY) as spool:
                    shutil.copyfileobj(archive_source, spool, self.chunk_size)
                    spool.seek(0)
                    self._extract_stream(spool, root, result, listener)

        except OperationCancelledError as e:
            logger.info(f"unzip into {root} cancelled")
            return self._decompress_failed(e, result)
        except ArtifactError as e:
            logger.warning(f"unzip into {root} failed: {e}")
            return self._decompress_failed(e, result)
        except (zipfile.BadZipFile, zlib.error, EOFError) as e:
            logger.warning(f"unzip into {root} failed, corrupt archive: {e}")
            return self._decompress_failed(
                CorruptArchiveError(f"Corrupt archive: {e}", path=str(root)), result
            )
        except (OSError, ValueError) as e:
            logger.warning(f"unzip into {root} failed: {e}")
            return self._decompress_failed(
                IOFailureError(f"I/O error: {e}", path=str(root)), result
            )

        return result

    @staticmethod
    def _decompress_failed(error: ArtifactError, partial: ArchiveResult) -> ArchiveResult:
        return ArchiveResult.from_error(
            error,
            archive_path=partial.archive_path,
            destination=partial.destination,
            entries=partial.entries,
        )

    def _extract_stream(
        self,
        stream: BinaryIO,
        root: Path,
        result: ArchiveResult,
        listener: ProgressListener | None,
    ) -> None:
        total = 0
        with zipfile.ZipFile(stream) as zf:
            for info in zf.infolist():
                relative = _safe_relative_path(info.filename)
                target = root.joinpath(*relative.parts) if relative.parts else root
                logger.debug(f"unzip, extracting {info.filename}")

                if info.is_dir():
                    try:
                        target.mkdir(parents=True, exist_ok=True)
                    except OSError as e:
                        raise DirectoryUnavailableError(
                            f"Cannot create directory: {e}", path=str(target)
                        ) from e
                    result.entries.append(ArchiveEntry(path=relative.as_posix(), is_dir=True))
                    continue

                if not relative.parts:
                    raise CorruptArchiveError("File entry has no name", entry_name=info.filename)

                proxy = _ListenerProxy(listener, total / 1024) if listener else None
                try:
                    entry_stream = zf.open(info)
                except (RuntimeError, NotImplementedError) as e:
                    # Encrypted entries and unknown compression methods.
                    raise CorruptArchiveError(
                        f"Unreadable entry: {e}", entry_name=info.filename
                    ) from e
                with entry_stream:
                    saved = self._persister.save(
                        root,
                        relative.as_posix(),
                        _EntryReader(entry_stream, info.filename),
                        proxy,
                    )
                saved.unwrap()

                total += saved.bytes_written
                result.entries.append(
                    ArchiveEntry(path=relative.as_posix(), size_bytes=saved.bytes_written)
                )


def _is_stream(source) -> bool:
    return hasattr(source, "read")


def _is_seekable(stream) -> bool:
    seekable = getattr(stream, "seekable", None)
    try:
        return bool(seekable()) if callable(seekable) else False
    except (OSError, ValueError):
        return False


def _safe_relative_path(name: str) -> PurePosixPath:
    """Validate an entry name and return it as a relative path."""
    normalized = name.replace("\\", "/")
    path = PurePosixPath(normalized)
    if path.is_absolute() or (path.parts and path.parts[0].endswith(":")):
        raise CorruptArchiveError("Absolute entry path", entry_name=name)
    if ".." in path.parts:
        raise CorruptArchiveError("Entry escapes extraction root", entry_name=name)
    return PurePosixPath(*[p for p in path.parts if p not in ("", ".")])
