"""
Log Courier Delivery Module.

Channels that hand a finished artifact to its recipient: an email draft
in an outbox, a copy in a share directory, or console output.
"""

from logcourier.delivery.base import BaseChannel, DeliveryResult, ShareRequest
from logcourier.delivery.console import ConsoleChannel
from logcourier.delivery.email import EmailDraftChannel
from logcourier.delivery.share import DirectoryShareChannel

__all__ = [
    "BaseChannel",
    "DeliveryResult",
    "ShareRequest",
    "ConsoleChannel",
    "EmailDraftChannel",
    "DirectoryShareChannel",
    "create_channel",
]


def create_channel(kind: str, config, console=None) -> BaseChannel:
    """
    Build a delivery channel by name from configuration.

    Args:
        kind: "console", "email", or "share"
        config: CourierConfig supplying directories and sender address
        console: rich Console for the console channel

    Raises:
        ValueError: for an unknown channel name
    """
    match kind:
        case "console":
            return ConsoleChannel(console=console)
        case "email":
            return EmailDraftChannel(
                outbox_dir=config.resolved_outbox_dir,
                sender_address=config.sender_address,
                sender_name=config.app_name,
            )
        case "share":
            return DirectoryShareChannel(share_dir=config.resolved_share_dir)
        case _:
            raise ValueError(f"Unknown delivery channel: {kind}")
