"""
FILE: personadev/cli/commands/planning.py
PURPOSE: Planning and media commands (goal, reminder, yt)
"""

from typing import Optional

import typer

from ..main import goal_app, reminder_app, yt_app, console, fail
from ...core import service
from ...core.constants import DEFAULT_IMPORTANCE, DEFAULT_REMINDER_TIME, DEFAULT_YOUTUBE_CATEGORY
from ...core.dates import resolve_day
from ...core.exceptions import PersonaDevError
from ...formatting import TrackerFormatter, format_minutes, to_json


# --- Weekly goals ---


@goal_app.command("add")
def goal_add(
    title: str = typer.Argument(..., help="Goal title"),
    description: str = typer.Option("", "--description", "-D", help="Details"),
    progress: int = typer.Option(0, "--progress", "-p", help="Starting progress (0-100)"),
):
    """Add a weekly goal."""
    try:
        goal = service.add_goal(title, description, progress)
    except PersonaDevError as e:
        fail(e)
    console.print(f"[green]✓ Added goal [bold]{goal.id}[/bold]:[/green] {goal.title}")


@goal_app.command("ls")
def goal_ls(
    show_all: bool = typer.Option(False, "--all", "-a", help="Include completed goals"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """List weekly goals (active only by default)."""
    try:
        goals = service.load().weekly_goals
    except PersonaDevError as e:
        fail(e)

    if not show_all:
        goals = [g for g in goals if not g.completed]
    if json_output:
        console.print(to_json(goals))
    elif not goals:
        console.print("[dim]No goals[/dim]")
    else:
        console.print(TrackerFormatter.goals_table(goals))


@goal_app.command("update")
def goal_update(
    goal_id: str = typer.Argument(..., help="Goal ID"),
    progress: Optional[int] = typer.Option(None, "--progress", "-p", help="Progress (0-100)"),
    done: Optional[bool] = typer.Option(None, "--done/--not-done", help="Mark completed or not"),
    title: Optional[str] = typer.Option(None, "--title", help="New title"),
    description: Optional[str] = typer.Option(None, "--description", "-D", help="New description"),
):
    """
    Update a weekly goal.

    Example:
        personadev goal update 1700000000000 --progress 60
        personadev goal update 1700000000000 --done
    """
    try:
        goal = service.update_goal(goal_id, progress, done, title, description)
    except PersonaDevError as e:
        fail(e)
    state = "completed" if goal.completed else f"{goal.progress}%"
    console.print(f"[green]✓ {goal.title}:[/green] {state}")


@goal_app.command("rm")
def goal_rm(goal_id: str = typer.Argument(..., help="Goal ID")):
    """Delete a weekly goal."""
    try:
        goal = service.delete_goal(goal_id)
    except PersonaDevError as e:
        fail(e)
    console.print(f"[green]✓ Deleted goal:[/green] {goal.title}")


# --- Reminders ---


@reminder_app.command("add")
def reminder_add(
    title: str = typer.Argument(..., help="Reminder title"),
    day: Optional[str] = typer.Option(None, "--date", "-d", help="Day (YYYY-MM-DD), default today"),
    time_of_day: str = typer.Option(DEFAULT_REMINDER_TIME, "--time", "-t", help="Time (HH:MM)"),
    importance: str = typer.Option(DEFAULT_IMPORTANCE, "--importance", "-i", help="low, medium or high"),
):
    """
    Add a reminder.

    Example:
        personadev reminder add "Dentist" --date 2024-03-01 --time 14:30
    """
    try:
        reminder = service.add_reminder(title, day, time_of_day, importance)
    except PersonaDevError as e:
        fail(e)
    console.print(
        f"[green]✓ Added reminder [bold]{reminder.id}[/bold]:[/green] "
        f"{reminder.title} ({reminder.date} {reminder.time})"
    )


@reminder_app.command("ls")
def reminder_ls(
    which: str = typer.Argument("all", help="all, today, upcoming or overdue"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """List reminders, soonest first."""
    try:
        reminders = service.list_reminders(which)
    except PersonaDevError as e:
        fail(e)

    if json_output:
        console.print(to_json(reminders))
    elif not reminders:
        console.print("[dim]No reminders[/dim]")
    else:
        console.print(TrackerFormatter.reminders_table(reminders))


@reminder_app.command("done")
def reminder_done(reminder_id: str = typer.Argument(..., help="Reminder ID")):
    """Toggle a reminder's completed state."""
    try:
        reminder = service.toggle_reminder(reminder_id)
    except PersonaDevError as e:
        fail(e)
    state = "completed" if reminder.completed else "reopened"
    console.print(f"[green]✓ {reminder.title}:[/green] {state}")


@reminder_app.command("rm")
def reminder_rm(reminder_id: str = typer.Argument(..., help="Reminder ID")):
    """Delete a reminder."""
    try:
        reminder = service.delete_reminder(reminder_id)
    except PersonaDevError as e:
        fail(e)
    console.print(f"[green]✓ Deleted reminder:[/green] {reminder.title}")


# --- YouTube history ---


@yt_app.command("add")
def yt_add(
    title: str = typer.Argument(..., help="Video title"),
    category: str = typer.Option(DEFAULT_YOUTUBE_CATEGORY, "--category", "-c", help="Video category"),
    duration: int = typer.Option(10, "--minutes", "-m", help="Minutes watched"),
    day: Optional[str] = typer.Option(None, "--date", "-d", help="Day (YYYY-MM-DD), default today"),
):
    """Record a watched video."""
    try:
        entry = service.add_youtube_entry(title, category, duration, day)
    except PersonaDevError as e:
        fail(e)
    console.print(f"[green]✓ Logged [bold]{entry.id}[/bold]:[/green] {entry.title} ({format_minutes(entry.duration)})")


@yt_app.command("ls")
def yt_ls(
    day: Optional[str] = typer.Option(None, "--date", "-d", help="Day (YYYY-MM-DD), default today"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """List videos watched on a day."""
    try:
        day = resolve_day(day)
        entries = service.load().youtube_history.get(day, [])
    except PersonaDevError as e:
        fail(e)

    if json_output:
        console.print(to_json(entries))
    elif not entries:
        console.print("[dim]Nothing watched[/dim]")
    else:
        console.print(TrackerFormatter.youtube_table(entries, day))
        total = sum(e.duration for e in entries)
        console.print(f"[dim]Total: {format_minutes(total)}[/dim]")


@yt_app.command("rm")
def yt_rm(
    entry_id: str = typer.Argument(..., help="Entry ID"),
    day: Optional[str] = typer.Option(None, "--date", "-d", help="Day (YYYY-MM-DD), default today"),
):
    """Remove a watched video."""
    try:
        entry = service.delete_youtube_entry(entry_id, day)
    except PersonaDevError as e:
        fail(e)
    console.print(f"[green]✓ Removed:[/green] {entry.title}")
