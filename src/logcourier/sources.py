"""
Log sources.

A log source produces a read-once binary stream of the raw log. The
persistence layer only needs ``read(n)`` on the result; no seeking.
"""

import io
import logging
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO

from logcourier.core.exceptions import LogCourierError

logger = logging.getLogger(__name__)


class LogSourceError(LogCourierError):
    """Raised when a log source cannot produce a stream."""


class LogSource(ABC):
    """Abstract producer of a raw log byte stream."""

    name: str = "base"

    @abstractmethod
    def open(self) -> BinaryIO:
        """
        Open a fresh stream of the current log.

        Returns:
            A readable binary stream; the caller closes it

        Raises:
            LogSourceError: if the log cannot be obtained
        """
        pass

    def close(self) -> None:
        """Release any resources held since the last open()."""


class CommandLogSource(LogSource):
    """
    Log produced by a dump command's standard output.

    The command should print the log and exit, like
    ``journalctl --no-pager`` or ``logcat -d``.
    """

    name = "command"

    def __init__(self, command: list[str]):
        if not command:
            raise ValueError("command must not be empty")
        self.command = list(command)
        self._process: subprocess.Popen | None = None

    def open(self) -> BinaryIO:
        self.close()
        try:
            self._process = subprocess.Popen(
                self.command,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                stdin=subprocess.DEVNULL,
            )
        except OSError as e:
            raise LogSourceError(
                f"Cannot run log command: {e}",
                details={"command": " ".join(self.command)},
            ) from e

        logger.debug(f"Started log command: {' '.join(self.command)}")
        assert self._process.stdout is not None
        return self._process.stdout

    def close(self) -> None:
        process, self._process = self._process, None
        if process is None:
            return
        if process.stdout is not None:
            process.stdout.close()
        if process.poll() is None:
            process.terminate()
        try:
            process.wait(timeout=5)
        except subprocess.TimeoutExpired:
            process.kill()
            process.wait()


class FileLogSource(LogSource):
    """Log read from an existing file."""

    name = "file"

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def open(self) -> BinaryIO:
        try:
            return open(self.path, "rb")
        except OSError as e:
            raise LogSourceError(
                f"Cannot open log file: {e}", details={"path": str(self.path)}
            ) from e


class BytesLogSource(LogSource):
    """In-memory log, mainly for tests and embedding."""

    name = "bytes"

    def __init__(self, data: bytes | str):
        self.data = data.encode("utf-8") if isinstance(data, str) else bytes(data)

    def open(self) -> BinaryIO:
        return io.BytesIO(self.data)
