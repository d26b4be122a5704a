"""
Base channel class for artifact delivery.

A channel takes a finished artifact and hands it off to a recipient.
All channels inherit from BaseChannel and implement deliver().
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


def _iso_timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class ShareRequest(BaseModel):
    """Everything a channel needs to hand an artifact to a recipient."""

    artifact_path: Path = Field(description="Artifact to deliver")
    mime_type: str = Field(default="text/plain", description="MIME type of the artifact")
    subject: str = Field(description="Subject line / title")
    body: str | None = Field(default=None, description="Optional text sent with the artifact")
    recipient: str | None = Field(default=None, description="Recipient address, if any")


@dataclass
class DeliveryResult:
    """Result of a delivery attempt."""

    success: bool
    channel: str
    artifact_path: str
    location: str | None = None
    error_message: str | None = None
    delivered_at: str = field(default_factory=_iso_timestamp)


class BaseChannel(ABC):
    """
    Abstract base class for delivery channels.

    All channels must implement:
    - deliver(): Hand the artifact off
    - validate_request(): Check a request can be delivered here
    """

    channel_type: str = "base"

    def __init__(self, enabled: bool = True):
        self.enabled = enabled

    def validate_request(self, request: ShareRequest) -> str | None:
        """
        Check a request before delivery.

        Returns:
            An error message, or None if the request is deliverable
        """
        if not self.is_enabled():
            return f"Channel {self.channel_type} is disabled"
        if not request.artifact_path.is_file():
            return f"Artifact not found: {request.artifact_path}"
        return None

    @abstractmethod
    def deliver(self, request: ShareRequest) -> DeliveryResult:
        """
        Deliver an artifact through this channel.

        Args:
            request: What to deliver and to whom

        Returns:
            DeliveryResult with delivery status
        """
        pass

    def is_enabled(self) -> bool:
        """Check if channel is enabled."""
        return self.enabled

    def _failed(self, request: ShareRequest, error: str) -> DeliveryResult:
        self._log_delivery(request, False, error)
        return DeliveryResult(
            success=False,
            channel=self.channel_type,
            artifact_path=str(request.artifact_path),
            error_message=error,
        )

    def _delivered(self, request: ShareRequest, location: str | None) -> DeliveryResult:
        self._log_delivery(request, True)
        return DeliveryResult(
            success=True,
            channel=self.channel_type,
            artifact_path=str(request.artifact_path),
            location=location,
        )

    def _log_delivery(
        self,
        request: ShareRequest,
        success: bool,
        error: str | None = None,
    ) -> None:
        if success:
            logger.info(f"[{self.channel_type}] delivered {request.artifact_path}")
        else:
            logger.warning(
                f"[{self.channel_type}] failed to deliver {request.artifact_path}: {error}"
            )
