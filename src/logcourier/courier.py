"""
Log capture and sharing pipeline.

Grabs the current log from a LogSource, saves it under the cache
directory with a timestamped name, optionally zips it, and hands the
result to a delivery channel. Old captures are purged by prefix.
"""

import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable

from pydantic import BaseModel, Field

from logcourier.artifacts.archiver import Archiver
from logcourier.artifacts.lifecycle import make_timestamped_name, purge
from logcourier.artifacts.models import PurgeResult
from logcourier.artifacts.progress import ProgressListener
from logcourier.artifacts.storage import StreamPersister, delete_file
from logcourier.config import CourierConfig
from logcourier.core.models import ArtifactFormat, FailureKind
from logcourier.delivery.base import BaseChannel, DeliveryResult, ShareRequest
from logcourier.delivery.console import ConsoleChannel
from logcourier.sources import CommandLogSource, LogSource, LogSourceError

logger = logging.getLogger(__name__)


class CaptureResult(BaseModel):
    """Result of capturing the log to disk."""

    success: bool = Field(description="Whether a log artifact was produced")
    path: Path | None = Field(default=None, description="Artifact path on success")
    format: ArtifactFormat | None = Field(default=None, description="raw-log or archive")
    failure: FailureKind | None = Field(default=None, description="Failure kind if failed")
    error: str | None = Field(default=None, description="Error message if failed")

    @property
    def is_zip(self) -> bool:
        return self.format is ArtifactFormat.ARCHIVE


class LogCourier:
    """
    Capture the application log and share it.

    Artifacts are written to ``{cache_dir}/{log_subdir}`` and named
    ``{app_id}_log_{yyyyMMdd_HHmmss}.log`` (or ``.zip``).
    """

    def __init__(
        self,
        config: CourierConfig | None = None,
        source: LogSource | None = None,
        channel: BaseChannel | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """
        Initialize the courier.

        Args:
            config: Settings (default: from LC_* environment variables)
            source: Where the raw log comes from (default: config.log_command)
            channel: Where the artifact goes (default: console)
            clock: Time source for artifact names
        """
        self.config = config or CourierConfig.from_env()
        self.source = source or CommandLogSource(self.config.log_command)
        self.channel = channel or ConsoleChannel()
        self._clock = clock
        self.persister = StreamPersister(
            chunk_size=self.config.chunk_size,
            mark_private=self.config.mark_private,
            marker_name=self.config.marker_name,
        )
        self.archiver = Archiver(
            chunk_size=self.config.archive_chunk_size,
            missing_policy=self.config.missing_entry_policy,
        )

    def get_log(self) -> str | None:
        """Return the current log as text, or None if it can't be read."""
        try:
            stream = self.source.open()
        except LogSourceError as e:
            logger.warning(f"Log unavailable: {e}")
            return None

        try:
            with stream:
                return stream.read().decode("utf-8", errors="replace")
        except OSError as e:
            logger.warning(f"Failed reading log: {e}")
            return None
        finally:
            self.source.close()

    def artifact_name(self) -> str:
        """Fresh timestamped name for a log capture."""
        return make_timestamped_name(self.config.log_prefix, "log", self._clock)

    def capture(
        self,
        should_zip: bool = False,
        listener: ProgressListener | None = None,
    ) -> CaptureResult:
        """
        Save the current log to the cache directory.

        Args:
            should_zip: Compress the log into a .zip; on zip failure the
                        uncompressed log is kept instead
            listener: Optional progress listener / cancel handle

        Returns:
            CaptureResult with the artifact path on success
        """
        name = self.artifact_name()
        try:
            stream = self.source.open()
        except LogSourceError as e:
            logger.warning(f"Log capture failed: {e}")
            return CaptureResult(success=False, failure=FailureKind.IO_FAILURE, error=str(e))

        try:
            with stream:
                saved = self.persister.save(self.config.log_dir, name, stream, listener)
        finally:
            self.source.close()

        if not saved.success:
            return CaptureResult(success=False, failure=saved.failure, error=saved.error)

        log_path = saved.unwrap()
        if not should_zip:
            return CaptureResult(success=True, path=log_path, format=ArtifactFormat.RAW_LOG)

        zip_path = log_path.with_suffix(".zip")
        zipped = self.archiver.compress(zip_path, [log_path], listener)
        if zipped.success:
            delete_file(log_path)
            return CaptureResult(success=True, path=zip_path, format=ArtifactFormat.ARCHIVE)

        if zipped.cancelled:
            delete_file(log_path)
            return CaptureResult(
                success=False, failure=FailureKind.CANCELLED, error=zipped.error
            )

        # Problem zipping; fall back to the uncompressed log.
        logger.warning(f"Zipping {log_path.name} failed, sharing uncompressed: {zipped.error}")
        return CaptureResult(success=True, path=log_path, format=ArtifactFormat.RAW_LOG)

    def build_request(
        self,
        captured: CaptureResult,
        email_recipient: str | None = None,
        email_headers: str | None = None,
    ) -> ShareRequest:
        """Describe a captured artifact for a delivery channel."""
        if not captured.success or captured.path is None or captured.format is None:
            raise ValueError("Only a successful capture can be shared")
        return ShareRequest(
            artifact_path=captured.path,
            mime_type=captured.format.mime_type,
            subject=f"{self.config.app_name} log",
            body=f"{email_headers}\n" if email_headers is not None else None,
            recipient=email_recipient,
        )

    def share(
        self,
        email_recipient: str | None = None,
        email_headers: str | None = None,
        should_zip: bool = False,
        listener: ProgressListener | None = None,
    ) -> DeliveryResult | None:
        """
        Capture the log and hand it to the channel.

        Returns:
            The channel's DeliveryResult, or None if capture failed
        """
        captured = self.capture(should_zip=should_zip, listener=listener)
        if not captured.success:
            return None
        request = self.build_request(captured, email_recipient, email_headers)
        return self.channel.deliver(request)

    def share_log(
        self,
        email_recipient: str | None = None,
        email_headers: str | None = None,
        should_zip: bool = False,
    ) -> bool:
        """
        Share the current log.

        With no arguments, the log is shared as plain text through the
        configured channel.

        Args:
            email_recipient: Address the log is meant for
            email_headers: Text placed before the log in the message body
            should_zip: Compress the log into a .zip file first

        Returns:
            Whether the log was captured and handed off
        """
        delivered = self.share(email_recipient, email_headers, should_zip)
        return delivered is not None and delivered.success

    def purge_stale(self, older_than: timedelta | None = None) -> PurgeResult:
        """Remove earlier captures of this app's log from the cache."""
        return purge(self.config.log_dir, self.config.log_prefix, older_than=older_than)
