"""
Log Courier CLI - Command-line interface.

Capture, share, archive, and clean up log artifacts from the terminal.
"""

import logging
import shlex
import sys
from datetime import timedelta
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from logcourier import __version__
from logcourier.artifacts import (
    Archiver,
    RecordingProgressListener,
    list_artifacts,
    make_timestamped_name,
    purge as purge_artifacts,
)
from logcourier.config import CourierConfig
from logcourier.core.exceptions import ConfigurationError
from logcourier.core.models import FailureKind, MissingEntryPolicy
from logcourier.courier import LogCourier
from logcourier.delivery import create_channel
from logcourier.sources import CommandLogSource, FileLogSource, LogSource

app = typer.Typer(
    name="log-courier",
    help="Log Courier - capture, compress, and hand off application logs",
    no_args_is_help=True,
)
console = Console()

CHANNELS = ("console", "email", "share")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Configure logging for every command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _load_config() -> CourierConfig:
    try:
        return CourierConfig.from_env()
    except ConfigurationError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(2)


def _source_for(
    config: CourierConfig, source_file: Optional[Path], command: Optional[str]
) -> LogSource:
    if source_file is not None and command is not None:
        console.print("[red]Use either --file or --command, not both[/red]")
        raise typer.Exit(2)
    if source_file is not None:
        return FileLogSource(source_file)
    if command is not None:
        return CommandLogSource(shlex.split(command))
    return CommandLogSource(config.log_command)


@app.command()
def capture(
    zip_log: bool = typer.Option(False, "--zip", "-z", help="Compress into a .zip"),
    source_file: Optional[Path] = typer.Option(
        None, "--file", "-f", help="Read the log from this file"
    ),
    command: Optional[str] = typer.Option(
        None, "--command", "-c", help="Run this command and capture its output"
    ),
    max_kb: Optional[float] = typer.Option(
        None, "--max-kb", help="Cancel the capture once this many KiB are written"
    ),
):
    """Save the current log to the cache directory."""
    config = _load_config()
    courier = LogCourier(config=config, source=_source_for(config, source_file, command))
    listener = RecordingProgressListener(cancel_after_kbytes=max_kb)

    result = courier.capture(should_zip=zip_log, listener=listener)
    if not result.success:
        if result.failure is FailureKind.CANCELLED:
            console.print(f"[yellow]Capture cancelled after {listener.last_kbytes:.1f} KiB[/yellow]")
        else:
            console.print(f"[red]Capture failed: {result.error}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]Saved:[/green] {result.path}")


@app.command()
def share(
    email: Optional[str] = typer.Option(None, "--email", "-e", help="Recipient address"),
    headers: Optional[str] = typer.Option(
        None, "--headers", help="Text to put before the log in the message"
    ),
    zip_log: bool = typer.Option(False, "--zip", "-z", help="Compress into a .zip"),
    channel: str = typer.Option(
        "console", "--channel", help=f"Delivery channel: {', '.join(CHANNELS)}"
    ),
    source_file: Optional[Path] = typer.Option(
        None, "--file", "-f", help="Read the log from this file"
    ),
    command: Optional[str] = typer.Option(
        None, "--command", "-c", help="Run this command and capture its output"
    ),
):
    """Capture the log and hand it to a delivery channel."""
    if channel not in CHANNELS:
        console.print(f"[red]Unknown channel: {channel}[/red]")
        raise typer.Exit(2)

    config = _load_config()
    courier = LogCourier(
        config=config,
        source=_source_for(config, source_file, command),
        channel=create_channel(channel, config, console=console),
    )

    delivered = courier.share(email_recipient=email, email_headers=headers, should_zip=zip_log)
    if delivered is None:
        console.print("[red]Log capture failed[/red]")
        raise typer.Exit(1)
    if not delivered.success:
        console.print(f"[red]Delivery failed: {delivered.error_message}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]Delivered via {delivered.channel}:[/green] {delivered.location}")


@app.command("zip")
def zip_files(
    archive: Path = typer.Argument(..., help="Zip file to create"),
    files: list[Path] = typer.Argument(..., help="Files to add"),
    skip_missing: bool = typer.Option(
        False, "--skip-missing", help="Skip missing files instead of failing"
    ),
):
    """Compress files into a zip archive (entries use base names)."""
    config = _load_config()
    policy = MissingEntryPolicy.SKIP if skip_missing else config.missing_entry_policy
    archiver = Archiver(chunk_size=config.archive_chunk_size, missing_policy=policy)

    result = archiver.compress(archive, files)
    if not result.success:
        console.print(f"[red]Zip failed: {result.error}[/red]")
        raise typer.Exit(1)

    for skipped in result.skipped:
        console.print(f"[yellow]Skipped missing file:[/yellow] {skipped}")
    console.print(f"[green]Wrote {len(result.entries)} entries to[/green] {archive}")


@app.command("unzip")
def unzip_archive(
    source: str = typer.Argument(..., help="Zip file, or '-' to read from stdin"),
    destination: Path = typer.Argument(..., help="Directory to extract into"),
):
    """Extract a zip archive into a directory."""
    config = _load_config()
    archiver = Archiver(chunk_size=config.archive_chunk_size)

    archive_source = sys.stdin.buffer if source == "-" else Path(source)
    result = archiver.decompress(archive_source, destination)
    if not result.success:
        console.print(f"[red]Unzip failed: {result.error}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]Extracted {len(result.entries)} entries to[/green] {result.destination}")


@app.command()
def purge(
    directory: Optional[Path] = typer.Option(
        None, "--dir", "-d", help="Directory to clean (default: the log cache)"
    ),
    prefix: Optional[str] = typer.Option(
        None, "--prefix", "-p", help="Artifact prefix (default: this app's log prefix)"
    ),
    older_than_days: Optional[float] = typer.Option(
        None, "--older-than-days", help="Only remove artifacts older than this"
    ),
):
    """Remove stale artifacts whose names start with a prefix."""
    config = _load_config()
    target = directory or config.log_dir
    family = prefix or config.log_prefix
    older_than = timedelta(days=older_than_days) if older_than_days is not None else None

    result = purge_artifacts(target, family, older_than=older_than)
    console.print(f"Removed {len(result.deleted)} '{family}' artifacts from {target}")
    for error in result.errors:
        console.print(f"[red]Could not remove:[/red] {error}")
    if result.errors:
        raise typer.Exit(1)


@app.command("list")
def list_command(
    directory: Optional[Path] = typer.Option(
        None, "--dir", "-d", help="Directory to list (default: the log cache)"
    ),
    prefix: Optional[str] = typer.Option(
        None, "--prefix", "-p", help="Artifact prefix (default: this app's log prefix)"
    ),
):
    """List artifacts of a prefix family, newest first."""
    config = _load_config()
    target = directory or config.log_dir
    family = prefix or config.log_prefix

    artifacts = list_artifacts(target, family)
    table = Table(title=f"Artifacts ({len(artifacts)})")
    table.add_column("Name", style="cyan")
    table.add_column("Format", style="magenta")
    table.add_column("Created")
    table.add_column("Size", justify="right", style="green")

    for artifact in artifacts:
        created = artifact.created_at.isoformat(sep=" ") if artifact.created_at else "-"
        size = f"{artifact.size_bytes:,}" if artifact.size_bytes is not None else "-"
        table.add_row(artifact.path.name, artifact.format.value, created, size)

    console.print(table)


@app.command()
def name(
    prefix: str = typer.Argument(..., help="Artifact prefix"),
    ext: str = typer.Option("log", "--ext", help="File extension"),
):
    """Print a timestamped artifact name for a prefix."""
    typer.echo(make_timestamped_name(prefix, ext))


@app.command()
def version():
    """Show version information."""
    console.print(
        Panel.fit(
            f"[bold blue]Log Courier[/bold blue]\nVersion: {__version__}",
        )
    )


if __name__ == "__main__":
    app()
