"""
Progress reporting and cooperative cancellation.

A listener is shared between the thread running a long write and the
thread that may want to stop it. The cancel flag is polled once per
chunk, so cancellation is prompt but never mid-chunk.
"""

import threading
from abc import ABC, abstractmethod
from typing import Callable


class ProgressListener(ABC):
    """
    Monitor the progress of a long-running data operation.

    Subclasses implement on_progress(); any thread may call cancel().
    """

    def __init__(self) -> None:
        self._cancelled = threading.Event()

    @abstractmethod
    def on_progress(self, kbytes: float) -> None:
        """
        Receive a progress update.

        Args:
            kbytes: How many KiB of the data have been processed so far
        """
        pass

    def cancel(self) -> None:
        """Request cancellation. No guarantee is made of its immediacy."""
        self._cancelled.set()

    @property
    def is_cancelled(self) -> bool:
        """Whether a cancel request has been issued."""
        return self._cancelled.is_set()


class CallbackProgressListener(ProgressListener):
    """Listener that forwards progress to a plain callable."""

    def __init__(self, callback: Callable[[float], None] | None = None) -> None:
        super().__init__()
        self._callback = callback

    def on_progress(self, kbytes: float) -> None:
        if self._callback is not None:
            self._callback(kbytes)


class RecordingProgressListener(ProgressListener):
    """
    Listener that keeps every update it receives.

    Optionally cancels itself once a byte threshold has been reported,
    which is how callers impose a size cap on an unbounded source.
    """

    def __init__(self, cancel_after_kbytes: float | None = None) -> None:
        super().__init__()
        self.updates: list[float] = []
        self._cancel_after = cancel_after_kbytes

    def on_progress(self, kbytes: float) -> None:
        self.updates.append(kbytes)
        if self._cancel_after is not None and kbytes >= self._cancel_after:
            self.cancel()

    @property
    def last_kbytes(self) -> float:
        """Most recent progress value, 0.0 if none yet."""
        return self.updates[-1] if self.updates else 0.0
