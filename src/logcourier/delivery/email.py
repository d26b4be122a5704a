"""
Email draft delivery channel.

Builds an email carrying the artifact as an attachment and drops it as
an ``.eml`` file in an outbox directory, where a mail client or relay
picks it up. Nothing is sent over the network from here.
"""

import io
from email.message import EmailMessage
from email.utils import formataddr, formatdate, make_msgid
from pathlib import Path

from logcourier.artifacts.storage import StreamPersister
from logcourier.core.exceptions import DeliveryError
from logcourier.delivery.base import BaseChannel, DeliveryResult, ShareRequest


class EmailDraftChannel(BaseChannel):
    """
    Delivery as an email draft in an outbox.

    A recipient is required. The draft is written atomically, so an
    outbox watcher never sees a partial message.
    """

    channel_type = "email"

    def __init__(
        self,
        outbox_dir: str | Path,
        sender_address: str = "logcourier@localhost",
        sender_name: str | None = None,
        persister: StreamPersister | None = None,
        enabled: bool = True,
    ):
        """
        Initialize the email draft channel.

        Args:
            outbox_dir: Directory drafts are written to
            sender_address: From address
            sender_name: Optional display name for the From header
            persister: StreamPersister used to write drafts
        """
        super().__init__(enabled=enabled)
        self.outbox_dir = Path(outbox_dir)
        self.sender_address = sender_address
        self.sender_name = sender_name
        self._persister = persister or StreamPersister(mark_private=False)

    def validate_request(self, request: ShareRequest) -> str | None:
        error = super().validate_request(request)
        if error:
            return error
        if not request.recipient:
            return "Email delivery requires a recipient"
        if "@" not in request.recipient:
            return f"Invalid recipient address: {request.recipient}"
        return None

    def prepare_message(self, request: ShareRequest) -> EmailMessage:
        """
        Build the email for a request, with the artifact attached.

        Raises:
            DeliveryError: if the artifact cannot be read
        """
        try:
            attachment = request.artifact_path.read_bytes()
        except OSError as e:
            raise DeliveryError(
                f"Cannot read artifact: {e}", channel=self.channel_type
            ) from e

        msg = EmailMessage()
        if request.recipient:
            msg["To"] = request.recipient
        if self.sender_name:
            msg["From"] = formataddr((self.sender_name, self.sender_address))
        else:
            msg["From"] = self.sender_address
        msg["Subject"] = request.subject
        msg["Date"] = formatdate(localtime=True)
        msg["Message-ID"] = make_msgid()
        msg.set_content(request.body or "")

        maintype, _, subtype = request.mime_type.partition("/")
        msg.add_attachment(
            attachment,
            maintype=maintype or "application",
            subtype=subtype or "octet-stream",
            filename=request.artifact_path.name,
        )
        return msg

    def deliver(self, request: ShareRequest) -> DeliveryResult:
        """
        Write an email draft for the request to the outbox.

        Returns:
            DeliveryResult whose location is the draft path
        """
        error = self.validate_request(request)
        if error:
            return self._failed(request, error)

        try:
            message = self.prepare_message(request)
        except DeliveryError as e:
            return self._failed(request, e.message)

        draft_name = f"{request.artifact_path.name}.eml"
        saved = self._persister.save(
            self.outbox_dir, draft_name, io.BytesIO(message.as_bytes())
        )
        if not saved.success:
            return self._failed(request, f"Cannot write draft: {saved.error}")

        return self._delivered(request, str(saved.path))
