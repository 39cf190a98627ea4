"""
FILE: personadev/cli/main.py
PURPOSE: Typer-based CLI for the habit tracker, sync, and the relay server
EXPORTS:
  - app (Typer application) and its sub-apps
  - console / error_console (Rich consoles)
  - fail(error) - print an error and exit 1
  - main() (entry point)
DEPENDENCIES:
  - typer (CLI framework)
  - rich (formatted output, log handler)
  - personadev.cli.commands (command modules register themselves on import)
NOTES:
  - Running with no command shows today's dashboard
  - --verbose turns on DEBUG logging (to stderr via RichHandler)
  - Error messages go to stderr
  - Exit codes: 0=success, 1=error
"""

import logging
import sys
from typing import NoReturn

# Fix Windows console encoding for Unicode characters
if sys.platform == "win32":
    import io
    sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding='utf-8')
    sys.stderr = io.TextIOWrapper(sys.stderr.buffer, encoding='utf-8')

import typer
from rich.console import Console
from rich.logging import RichHandler

from ..core.exceptions import PersonaDevError, InvalidInputError, ItemNotFoundError

# Typer app setup
app = typer.Typer(
    name="personadev",
    help="Personal habit and productivity tracker",
    add_completion=False,
)

task_app = typer.Typer(name="task", help="Daily tasks")
exercise_app = typer.Typer(name="exercise", help="Exercise tracking")
book_app = typer.Typer(name="book", help="Reading progress")
lang_app = typer.Typer(name="lang", help="Language learning sessions and vocabulary")
goal_app = typer.Typer(name="goal", help="Weekly goals")
reminder_app = typer.Typer(name="reminder", help="Reminders")
yt_app = typer.Typer(name="yt", help="YouTube watch history")
sync_app = typer.Typer(name="sync", help="Synchronize with the remote relay")

for sub_app in (task_app, exercise_app, book_app, lang_app, goal_app, reminder_app, yt_app, sync_app):
    app.add_typer(sub_app, name=sub_app.info.name)

# Rich console for formatted output
console = Console()
error_console = Console(stderr=True)

# Version
__version__ = "1.0.0"


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_path=False)],
        force=True,
    )


def fail(error: PersonaDevError) -> NoReturn:
    """Print a service error to stderr and exit with status 1."""
    if isinstance(error, (InvalidInputError, ItemNotFoundError)):
        error_console.print(f"[red]Error:[/red] {error}")
    else:
        error_console.print(f"[red]Unexpected error:[/red] {error}")
    raise typer.Exit(1)


@app.callback(invoke_without_command=True)
def default_command(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """
    Default callback - shows today's dashboard when no command is specified.
    """
    configure_logging(verbose)
    if ctx.invoked_subcommand is None:
        from .commands.system import status
        status(day=None, json_output=False)


# Import command modules to register commands with app
# Commands are decorated with @<app>.command() in their modules
from .commands import (  # noqa: E402
    planning,
    sync,
    system,
    tasks,
    tracking,
)


def main():
    """Main entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
