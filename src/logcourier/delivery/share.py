"""
Directory share channel.

Copies the artifact into a share directory, the generic "share with any
app" target: whatever watches that directory takes it from there.
"""

from pathlib import Path

from logcourier.artifacts.storage import StreamPersister
from logcourier.delivery.base import BaseChannel, DeliveryResult, ShareRequest


class DirectoryShareChannel(BaseChannel):
    """Delivery by atomic copy into a shared directory."""

    channel_type = "share"

    def __init__(
        self,
        share_dir: str | Path,
        persister: StreamPersister | None = None,
        enabled: bool = True,
    ):
        super().__init__(enabled=enabled)
        self.share_dir = Path(share_dir)
        self._persister = persister or StreamPersister(mark_private=False)

    def deliver(self, request: ShareRequest) -> DeliveryResult:
        error = self.validate_request(request)
        if error:
            return self._failed(request, error)

        try:
            with open(request.artifact_path, "rb") as source:
                saved = self._persister.save(
                    self.share_dir, request.artifact_path.name, source
                )
        except OSError as e:
            return self._failed(request, f"Cannot read artifact: {e}")

        if not saved.success:
            return self._failed(request, f"Cannot copy artifact: {saved.error}")
        return self._delivered(request, str(saved.path))
