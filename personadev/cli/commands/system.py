"""
FILE: personadev/cli/commands/system.py
PURPOSE: System commands (status, streak, export, import, reset, notifications, serve, version)
"""

import json
from dataclasses import asdict
from pathlib import Path
from typing import Optional

import typer

from ..main import app, console, error_console, fail, __version__
from ...config import RelayConfig
from ...core import service
from ...core.constants import EXPORT_FORMAT_JSON
from ...core.exceptions import PersonaDevError
from ...core.snapshot import check_format, write_export
from ...core.streak import current_run
from ...formatting import format_minutes


@app.command()
def version():
    """Show PersonaDev version."""
    console.print(f"PersonaDev v{__version__}")


@app.command()
def status(
    day: Optional[str] = typer.Option(None, "--date", "-d", help="Day (YYYY-MM-DD), default today"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Show the dashboard for a day: task progress, tracked minutes, streak.

    Example:
        personadev status
        personadev status --date 2024-01-01 --json
    """
    try:
        summary = service.day_summary(day)
    except PersonaDevError as e:
        fail(e)

    if json_output:
        payload = asdict(summary)
        payload["progress"] = summary.progress
        console.print(json.dumps(payload, indent=2))
        return

    console.print(f"\n[bold cyan]PersonaDev[/bold cyan] [dim]{summary.day}[/dim]\n")
    console.print(
        f"  Tasks     [bold]{summary.tasks_done}/{summary.tasks_total}[/bold] "
        f"[dim]({summary.progress}%)[/dim]"
    )
    console.print(f"  Exercise  {format_minutes(summary.exercise_minutes)}")
    console.print(f"  Reading   {format_minutes(summary.reading_minutes)}")
    console.print(f"  Language  {format_minutes(summary.language_minutes)}")
    console.print(f"  Screen    {format_minutes(summary.screen_time)}")
    console.print(f"\n  🔥 Streak [bold]{summary.streak}[/bold]")
    if summary.last_check_in:
        console.print(f"  [dim]Last check-in {summary.last_check_in}[/dim]")
    console.print()


@app.command()
def streak():
    """Show the current streak and the run of consecutive qualifying days."""
    try:
        state = service.load()
    except PersonaDevError as e:
        fail(e)

    run = current_run(state.daily_checkins, service.today())
    console.print(f"🔥 Streak: [bold]{state.streak}[/bold]")
    console.print(f"[dim]Last check-in: {state.last_check_in or 'never'}[/dim]")
    if run != state.streak:
        console.print(f"[dim]Consecutive days with a completed task: {run}[/dim]")


@app.command()
def export(
    fmt: str = typer.Option(EXPORT_FORMAT_JSON, "--format", "-f", help="json or pdev"),
    directory: Path = typer.Option(Path("."), "--dir", help="Directory to write into"),
):
    """
    Export local state to a dated file.

    Example:
        personadev export --format pdev
    """
    try:
        check_format(fmt)
        path = write_export(service.load(), fmt, directory)
    except PersonaDevError as e:
        fail(e)
    except OSError as e:
        error_console.print(f"[red]Error:[/red] Cannot write export: {e}")
        raise typer.Exit(1)
    console.print(f"[green]✓ Exported to[/green] {path}")


@app.command("import")
def import_(
    file: Path = typer.Argument(..., help="Exported .json or .pdev file"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """
    Replace local state with an exported file.

    Example:
        personadev import personadev-2024-01-01.pdev
    """
    if not yes:
        typer.confirm("Replace all local data with this file?", abort=True)
    try:
        state = service.import_file(file)
    except PersonaDevError as e:
        fail(e)
    console.print(f"[green]✓ Imported {len(state.tasks)} tasks[/green] [dim](streak {state.streak})[/dim]")


@app.command()
def reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Erase all local data."""
    if not yes:
        typer.confirm("Erase all local data?", abort=True)
    try:
        service.reset()
    except PersonaDevError as e:
        fail(e)
    console.print("[green]✓ Local data reset[/green]")


@app.command()
def notifications(
    setting: str = typer.Argument(..., help="on or off"),
):
    """Turn reminder notifications on or off."""
    if setting not in ("on", "off"):
        error_console.print(f"[red]Error:[/red] Expected 'on' or 'off', got '{setting}'")
        raise typer.Exit(1)
    try:
        enabled = service.set_notifications(setting == "on")
    except PersonaDevError as e:
        fail(e)
    console.print(f"[green]✓ Notifications {'on' if enabled else 'off'}[/green]")


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (default: HOST or 0.0.0.0)"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port (default: PORT or 3001)"),
):
    """
    Run the sync relay server.

    Reads GOOGLE_SHEET_ID and GOOGLE_CREDENTIALS_FILE from the environment or .env.
    """
    import uvicorn

    from ...relay import create_app

    config = RelayConfig.from_env()
    if host:
        config.host = host
    if port:
        config.port = port

    console.print(f"[bold cyan]PersonaDev relay[/bold cyan] on http://{config.host}:{config.port}/api")
    uvicorn.run(create_app(config), host=config.host, port=config.port)
