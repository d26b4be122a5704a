"""
Streaming artifact persistence.

Writes a byte stream to a named file under a target directory in
fixed-size chunks. Data lands in a hidden sibling ``.part`` file that is
fsynced and then atomically renamed over the destination, so readers
never observe a half-written artifact. Any failure or cancellation
removes both the temporary file and the destination path.
"""

import logging
import os
from pathlib import Path
from typing import BinaryIO, Iterable, Iterator, Union

from logcourier.artifacts.models import PersistResult
from logcourier.artifacts.progress import ProgressListener
from logcourier.core.exceptions import (
    ArtifactError,
    DirectoryUnavailableError,
    IOFailureError,
    OperationCancelledError,
)

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 10 * 1024
DEFAULT_MARKER_NAME = ".nomedia"
PART_SUFFIX = ".part"

ByteSource = Union[BinaryIO, Iterable[bytes]]


def iter_chunks(source: ByteSource, chunk_size: int) -> Iterator[bytes]:
    """
    Yield successive chunks of at most chunk_size bytes from a source.

    A source with a ``read`` method is read until it returns an empty
    result. Any other iterable of bytes is re-split so no chunk exceeds
    chunk_size.
    """
    read = getattr(source, "read", None)
    if callable(read):
        while True:
            chunk = read(chunk_size)
            if not chunk:
                return
            yield bytes(chunk)
    else:
        for piece in source:
            if not isinstance(piece, (bytes, bytearray, memoryview)):
                raise TypeError(f"Expected bytes from source, got {type(piece).__name__}")
            view = memoryview(piece)
            for start in range(0, len(view), chunk_size):
                yield bytes(view[start : start + chunk_size])


def delete_file(path: str | os.PathLike) -> bool:
    """
    Delete a file or directory from storage.

    Directories are removed recursively. Every child is attempted even
    if a sibling fails; the result is False if anything could not be
    removed. Symlinks are unlinked, never followed.

    Args:
        path: The file or directory to delete

    Returns:
        True if the path is now gone from storage: successfully deleted,
        or not there in the first place
    """
    condemned = Path(path)
    if not condemned.exists() and not condemned.is_symlink():
        return True

    if condemned.is_dir() and not condemned.is_symlink():
        result = True
        try:
            children = list(condemned.iterdir())
        except OSError as e:
            logger.warning(f"Cannot list {condemned} for deletion: {e}")
            children = []
            result = False

        for child in children:
            result = delete_file(child) and result

        try:
            condemned.rmdir()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Failed to remove directory {condemned}: {e}")
            return False
        return result

    try:
        condemned.unlink(missing_ok=True)
        return True
    except OSError as e:
        logger.warning(f"Failed to delete {condemned}: {e}")
        return False


class StreamPersister:
    """
    Persist byte streams to disk safely.

    Layout for ``save(directory, "sub/a.log", ...)``:
    - {directory}/sub/               (created as needed)
    - {directory}/sub/.nomedia       (privacy marker, best effort)
    - {directory}/sub/.a.log.part    (only while writing)
    - {directory}/sub/a.log          (appears atomically on success)

    Blocking and single-threaded; callers run it on a worker thread and
    cancel through the ProgressListener.
    """

    def __init__(
        self,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        mark_private: bool = True,
        marker_name: str = DEFAULT_MARKER_NAME,
    ):
        """
        Initialize the persister.

        Args:
            chunk_size: Bytes read and written per chunk (default 10 KiB)
            mark_private: Drop a marker file in each directory written to
            marker_name: Name of the marker file
        """
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.chunk_size = chunk_size
        self.mark_private = mark_private
        self.marker_name = marker_name

    def init_directory(self, path: str | os.PathLike) -> bool:
        """
        Prepare a directory for use as private storage.

        Creates the directory if necessary and marks it to be excluded
        from user-facing media indexing.

        Args:
            path: Directory to initialize. If it names an existing file,
                  that file's parent directory is used.

        Returns:
            Whether the directory exists now
        """
        target = Path(path)
        directory = target.parent if target.is_file() else target
        try:
            self._ensure_directory(directory)
        except DirectoryUnavailableError as e:
            logger.warning(str(e))
            return False
        return True

    def _ensure_directory(self, directory: Path) -> None:
        """Create directory and any missing parents, then add the marker."""
        if not directory.is_dir():
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise DirectoryUnavailableError(
                    f"Cannot create directory: {e}", path=str(directory)
                ) from e
            logger.debug(f"Created directory {directory}")

        if self.mark_private:
            self._write_marker(directory)

    def _write_marker(self, directory: Path) -> None:
        """Create the zero-byte marker file; failure is ignored."""
        marker = directory / self.marker_name
        if marker.exists():
            return
        try:
            marker.touch(exist_ok=True)
        except OSError as e:
            logger.debug(f"Could not create marker {marker}: {e}")

    @staticmethod
    def _check_cancelled(listener: ProgressListener | None, destination: Path) -> None:
        if listener is not None and listener.is_cancelled:
            raise OperationCancelledError(path=str(destination))

    def save(
        self,
        directory: str | os.PathLike,
        name: str,
        source: ByteSource,
        listener: ProgressListener | None = None,
    ) -> PersistResult:
        """
        Write the supplied byte stream to a file.

        Args:
            directory: Directory in which to save the data; created if needed
            name: File name within that directory; may contain its own
                  subdirectory segments
            source: Binary file-like object or iterable of bytes, consumed
                    strictly in order
            listener: Optional listener notified after every chunk and
                      polled for cancellation

        Returns:
            PersistResult with the fully-qualified path on success. On
            failure the destination path does not exist.
        """
        relative = str(name).lstrip("/\\")
        destination = Path(os.path.abspath(Path(directory) / relative))
        temp_path = destination.with_name(f".{destination.name}{PART_SUFFIX}")
        written = 0

        try:
            self._ensure_directory(destination.parent)

            with open(temp_path, "wb") as out:
                for chunk in iter_chunks(source, self.chunk_size):
                    out.write(chunk)
                    written += len(chunk)
                    self._check_cancelled(listener, destination)
                    if listener is not None:
                        listener.on_progress(written / 1024)
                # Cancel requested after the final chunk still counts.
                self._check_cancelled(listener, destination)
                out.flush()
                os.fsync(out.fileno())

            os.replace(temp_path, destination)

        except OperationCancelledError as e:
            self._discard(temp_path, destination)
            logger.info(f"Save of {destination} cancelled after {written} bytes")
            return PersistResult.from_error(e, written)

        except ArtifactError as e:
            self._discard(temp_path, destination)
            logger.warning(f"Save of {destination} failed: {e}")
            return PersistResult.from_error(e, written)

        except (OSError, ValueError, TypeError) as e:
            self._discard(temp_path, destination)
            logger.warning(f"Save of {destination} failed after {written} bytes: {e}")
            error = IOFailureError(f"I/O error: {e}", path=str(destination))
            return PersistResult.from_error(error, written)

        except Exception as e:
            self._discard(temp_path, destination)
            logger.exception(f"Unexpected error saving {destination}")
            error = IOFailureError(f"Unexpected error: {e}", path=str(destination))
            return PersistResult.from_error(error, written)

        logger.debug(f"Saved {written} bytes to {destination}")
        return PersistResult(success=True, path=destination, bytes_written=written)

    def _discard(self, temp_path: Path, destination: Path) -> None:
        """Remove any remnant of an interrupted write."""
        for condemned in (temp_path, destination):
            if not delete_file(condemned):
                logger.error(f"Could not remove incomplete artifact {condemned}")
