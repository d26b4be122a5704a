"""
Console delivery channel.

Prints where the artifact is and who it is for. Useful for development
and as the CLI's default when no outbox or share directory is wanted.
"""

from rich.console import Console
from rich.panel import Panel

from logcourier.delivery.base import BaseChannel, DeliveryResult, ShareRequest


class ConsoleChannel(BaseChannel):
    """Delivery by printing the handoff details."""

    channel_type = "console"

    def __init__(self, console: Console | None = None, enabled: bool = True):
        super().__init__(enabled=enabled)
        self.console = console or Console()

    def deliver(self, request: ShareRequest) -> DeliveryResult:
        error = self.validate_request(request)
        if error:
            return self._failed(request, error)

        lines = [
            f"[bold]{request.subject}[/bold]",
            f"File: {request.artifact_path}",
            f"Type: {request.mime_type}",
        ]
        if request.recipient:
            lines.append(f"To: {request.recipient}")
        if request.body:
            lines.append("")
            lines.append(request.body.rstrip("\n"))

        self.console.print(Panel.fit("\n".join(lines), title="Log ready to share"))
        return self._delivered(request, str(request.artifact_path))
