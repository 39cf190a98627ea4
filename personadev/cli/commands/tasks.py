"""
FILE: personadev/cli/commands/tasks.py
PURPOSE: Daily task commands (task add/ls/rm, check, screen)
"""

import json
from typing import Optional

import typer

from ..main import app, task_app, console, error_console, fail
from ...core import service
from ...core.constants import DEFAULT_IMPORTANCE
from ...core.dates import resolve_day
from ...core.exceptions import PersonaDevError
from ...formatting import TrackerFormatter, parse_ids, to_json


@task_app.command("add")
def add(
    title: str = typer.Argument(..., help="Task title"),
    importance: str = typer.Option(DEFAULT_IMPORTANCE, "--importance", "-i", help="low, medium or high"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Create a new daily task.

    Example:
        personadev task add "Meditate"
        personadev task add "Deep work block" --importance high
    """
    try:
        task = service.add_task(title, importance)
    except PersonaDevError as e:
        fail(e)

    if json_output:
        console.print(json.dumps(task.to_dict(), indent=2))
    else:
        console.print(f"[green]✓ Created task [bold]{task.id}[/bold]:[/green] {task.title}")


@task_app.command("ls")
def ls(
    day: Optional[str] = typer.Option(None, "--date", "-d", help="Day (YYYY-MM-DD), default today"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    List tasks with their checkins for a day.

    Example:
        personadev task ls
        personadev task ls --date 2024-01-01
    """
    try:
        day = resolve_day(day)
        state = service.load()
    except PersonaDevError as e:
        fail(e)

    checkins = state.daily_checkins.get(day, {})
    if json_output:
        console.print(to_json(state.tasks))
        return
    if not state.tasks:
        console.print("[dim]No tasks yet[/dim]")
        console.print("[dim]Use 'personadev task add \"Title\"' to create one[/dim]")
        return

    console.print(TrackerFormatter.tasks_table(state.tasks, checkins, day))
    done = sum(1 for t in state.tasks if checkins.get(t.id))
    console.print(f"[dim]{done}/{len(state.tasks)} done[/dim]")


@task_app.command("rm")
def rm(
    task_ids: str = typer.Argument(..., help="Task ID(s), comma-separated"),
):
    """
    Delete task(s) and their checkin history.

    Example:
        personadev task rm 1700000000000
    """
    failures = 0
    for task_id in parse_ids(task_ids):
        try:
            task = service.delete_task(task_id)
            console.print(f"[green]✓ Deleted task [bold]{task.id}[/bold]:[/green] {task.title}")
        except PersonaDevError as e:
            error_console.print(f"[red]Error:[/red] {e}")
            failures += 1
    if failures:
        raise typer.Exit(1)


@app.command()
def check(
    task_ids: str = typer.Argument(..., help="Task ID(s), comma-separated"),
    day: Optional[str] = typer.Option(None, "--date", "-d", help="Day (YYYY-MM-DD), default today"),
    undo: bool = typer.Option(False, "--undo", help="Mark as not done"),
    toggle: bool = typer.Option(False, "--toggle", help="Flip the current value"),
):
    """
    Check in task(s) for a day and update the streak.

    Example:
        personadev check 1700000000000
        personadev check 1700000000000,1700000000001 --date 2024-01-01
        personadev check 1700000000000 --undo
    """
    value = None if toggle else not undo
    failures = 0
    for task_id in parse_ids(task_ids):
        try:
            done = service.set_checkin(task_id, value, day)
            marker = "[green]✓ done[/green]" if done else "[yellow]○ not done[/yellow]"
            console.print(f"Task [bold]{task_id}[/bold]: {marker}")
        except PersonaDevError as e:
            error_console.print(f"[red]Error:[/red] {e}")
            failures += 1

    if failures:
        raise typer.Exit(1)

    state = service.load()
    console.print(f"🔥 Streak: [bold]{state.streak}[/bold]")


@app.command()
def screen(
    minutes: int = typer.Argument(..., help="Screen time in minutes"),
    day: Optional[str] = typer.Option(None, "--date", "-d", help="Day (YYYY-MM-DD), default today"),
):
    """
    Record screen time for a day (replaces any earlier value).

    Example:
        personadev screen 180
    """
    try:
        service.set_screen_time(minutes, day)
    except PersonaDevError as e:
        fail(e)
    console.print(f"[green]✓ Screen time set to {minutes}m[/green]")
