"""
FILE: personadev/cli/commands/sync.py
PURPOSE: Relay sync commands (sync push/pull/history/export/import/health)
NOTES:
  - Each command runs one SyncClient operation under asyncio.run
  - push reads local state immediately before sending
"""

import asyncio
import json
from pathlib import Path
from typing import Optional

import typer

from ..main import sync_app, console, error_console, fail
from ...config import ClientConfig
from ...core import service
from ...core.constants import EXPORT_FORMAT_JSON
from ...core.exceptions import PersonaDevError
from ...core.snapshot import check_format, export_filename, read_import
from ...core.sync import RelayApi, SyncClient, SyncStatus, detect_device
from ...formatting import TrackerFormatter


def build_client() -> SyncClient:
    try:
        config = ClientConfig.from_env()
    except PersonaDevError as e:
        fail(e)
    return SyncClient(RelayApi(config.api_url, config.timeout))


def _report(client: SyncClient) -> None:
    if client.status is SyncStatus.ERROR:
        error_console.print(f"[red]✗ {client.message}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]✓ {client.message or 'Nothing to sync'}[/green]")


@sync_app.command("push")
def push(
    device: Optional[str] = typer.Option(None, "--device", help="Override the detected device label"),
):
    """
    Upload the whole local state to the relay.

    Example:
        personadev sync push
    """
    try:
        state = service.load()
    except PersonaDevError as e:
        fail(e)

    client = build_client()
    result = asyncio.run(client.push(state, device))
    _report(client)
    if result and result.timestamp:
        console.print(f"[dim]Stored at {result.timestamp}[/dim]")


@sync_app.command("pull")
def pull():
    """
    Replace local state with the relay's latest snapshot.

    Local data not present in the snapshot is discarded.
    """
    client = build_client()
    result = asyncio.run(client.pull())
    _report(client)
    if result and result.state is not None:
        console.print(
            f"[dim]{len(result.state.tasks)} tasks, streak {result.state.streak} "
            f"(snapshot {result.timestamp})[/dim]"
        )


@sync_app.command("history")
def history(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Show the relay's sync audit log, most recent first."""
    client = build_client()
    try:
        entries = asyncio.run(client.history())
    except PersonaDevError as e:
        fail(e)

    if json_output:
        console.print(json.dumps(entries, indent=2))
    elif not entries:
        console.print("[dim]No sync history[/dim]")
    else:
        console.print(TrackerFormatter.history_table(entries))


@sync_app.command("export")
def export(
    fmt: str = typer.Argument(EXPORT_FORMAT_JSON, help="json or pdev"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="File to write (default: dated name)"),
):
    """
    Download the relay's latest snapshot to a file.

    Example:
        personadev sync export pdev -o backup.pdev
    """
    client = build_client()
    try:
        check_format(fmt)
        payload = asyncio.run(client.remote_export(fmt))
    except PersonaDevError as e:
        fail(e)

    path = output or Path(export_filename(fmt))
    try:
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    except OSError as e:
        error_console.print(f"[red]Error:[/red] Cannot write export: {e}")
        raise typer.Exit(1)
    console.print(f"[green]✓ Exported relay snapshot to[/green] {path}")


@sync_app.command("import")
def import_(
    file: Path = typer.Argument(..., help="Exported .json or .pdev file"),
):
    """
    Upload an exported file to the relay as a new snapshot.

    Local state is not changed; run 'personadev sync pull' afterwards to adopt it.
    """
    client = build_client()
    try:
        state = read_import(file)
        body = asyncio.run(client.remote_import(state.to_dict(), detect_device()))
    except PersonaDevError as e:
        fail(e)
    console.print(f"[green]✓ {body.get('message', 'Imported')}[/green] [dim]{body.get('timestamp', '')}[/dim]")


@sync_app.command("health")
def health():
    """Check that the relay is reachable and configured."""
    client = build_client()
    try:
        body = asyncio.run(client.health())
    except PersonaDevError as e:
        fail(e)

    console.print(f"[green]✓ Relay {body.get('status', 'ok')}[/green] [dim]{client.api.base_url}[/dim]")
    if body.get("spreadsheetId") == "missing":
        error_console.print("[yellow]Relay is running but has no spreadsheet configured[/yellow]")
