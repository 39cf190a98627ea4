"""
FILE: personadev/formatting.py
PURPOSE: Shared formatting utilities for CLI output
EXPORTS:
  - TrackerFormatter: Rich tables for the tracked collections
  - format_minutes(minutes) -> str
  - parse_ids(id_string) -> List[str]
  - to_json(items) -> str
DEPENDENCIES:
  - rich (for table formatting)
  - json (for JSON serialization)
  - personadev.core.models
NOTES:
  - Centralized formatting logic so commands stay thin
"""

import json
from typing import Any, Dict, Iterable, List, Optional

from rich.table import Table

from .core.models import Task, Exercise, Book, Language, Goal, Reminder, YouTubeEntry

IMPORTANCE_STYLES = {
    "low": "dim",
    "medium": "yellow",
    "high": "bold red",
}


def format_minutes(minutes: int) -> str:
    """Render minutes as '45m' or '1h 30m'."""
    if minutes < 60:
        return f"{minutes}m"
    return f"{minutes // 60}h {minutes % 60}m"


def _importance(value: str) -> str:
    style = IMPORTANCE_STYLES.get(value, "white")
    return f"[{style}]{value}[/{style}]"


def _check(done: bool) -> str:
    return "[green]✓[/green]" if done else "[yellow]○[/yellow]"


class TrackerFormatter:
    """Centralized display formatting for tracked items."""

    @staticmethod
    def tasks_table(tasks: List[Task], checkins: Dict[str, bool], day: str) -> Table:
        """
        Create Rich table of tasks with their checkin state for a day.

        Args:
            tasks: Tasks to display
            checkins: {task_id: done} for the day
            day: Day key shown in the title
        """
        table = Table(title=f"Tasks - {day}", show_header=True, header_style="bold cyan")
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Done", width=4)
        table.add_column("Title", style="white")
        table.add_column("Importance", width=10)

        for task in tasks:
            table.add_row(
                task.id,
                _check(checkins.get(task.id, False)),
                task.title,
                _importance(task.importance),
            )
        return table

    @staticmethod
    def exercises_table(exercises: List[Exercise], day: str) -> Table:
        table = Table(title=f"Exercise - {day}", show_header=True, header_style="bold cyan")
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Name", style="white")
        table.add_column("Today", justify="right")
        table.add_column("Target", justify="right", style="dim")

        for exercise in exercises:
            logged = exercise.minutes_on(day)
            style = "green" if logged >= exercise.target_duration else "white"
            table.add_row(
                exercise.id,
                exercise.name,
                f"[{style}]{format_minutes(logged)}[/{style}]",
                format_minutes(exercise.target_duration),
            )
        return table

    @staticmethod
    def books_table(books: List[Book], day: str) -> Table:
        table = Table(title=f"Reading - {day}", show_header=True, header_style="bold cyan")
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Title", style="white")
        table.add_column("Author", style="dim")
        table.add_column("Today", justify="right")
        table.add_column("Pages", justify="right")

        for book in books:
            pages = f"{book.pages_read}/{book.pages_total}" if book.pages_total else str(book.pages_read)
            table.add_row(
                book.id,
                book.title,
                book.author or "-",
                format_minutes(book.minutes_on(day)),
                pages,
            )
        return table

    @staticmethod
    def languages_table(languages: List[Language], day: str) -> Table:
        table = Table(title=f"Languages - {day}", show_header=True, header_style="bold cyan")
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Language", style="white")
        table.add_column("Today", justify="right")
        table.add_column("Target", justify="right", style="dim")
        table.add_column("Words", justify="right", style="magenta")

        for language in languages:
            table.add_row(
                language.id,
                language.name,
                format_minutes(language.minutes_on(day)),
                format_minutes(language.target_mins),
                str(len(language.words)),
            )
        return table

    @staticmethod
    def goals_table(goals: List[Goal]) -> Table:
        table = Table(title="Weekly Goals", show_header=True, header_style="bold cyan")
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Done", width=4)
        table.add_column("Title", style="white")
        table.add_column("Progress", justify="right")
        table.add_column("Week", style="dim")

        for goal in goals:
            table.add_row(goal.id, _check(goal.completed), goal.title, f"{goal.progress}%", goal.week or "-")
        return table

    @staticmethod
    def reminders_table(reminders: List[Reminder]) -> Table:
        table = Table(title="Reminders", show_header=True, header_style="bold cyan")
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Done", width=4)
        table.add_column("When", style="blue")
        table.add_column("Title", style="white")
        table.add_column("Importance", width=10)

        for reminder in reminders:
            table.add_row(
                reminder.id,
                _check(reminder.completed),
                f"{reminder.date} {reminder.time}",
                reminder.title,
                _importance(reminder.importance),
            )
        return table

    @staticmethod
    def youtube_table(entries: List[YouTubeEntry], day: str) -> Table:
        table = Table(title=f"YouTube - {day}", show_header=True, header_style="bold cyan")
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Title", style="white")
        table.add_column("Category", style="magenta")
        table.add_column("Duration", justify="right")

        for entry in entries:
            table.add_row(entry.id, entry.title, entry.category, format_minutes(entry.duration))
        return table

    @staticmethod
    def history_table(history: List[Dict[str, Any]]) -> Table:
        table = Table(title="Sync History", show_header=True, header_style="bold cyan")
        table.add_column("Timestamp", style="blue")
        table.add_column("Action", style="white")
        table.add_column("Device", style="magenta")
        table.add_column("Status")

        for entry in history:
            status = entry.get("status", "")
            style = "green" if status == "SUCCESS" else "red"
            table.add_row(
                entry.get("timestamp", ""),
                entry.get("action", ""),
                entry.get("device", ""),
                f"[{style}]{status}[/{style}]",
            )
        return table


def to_json(items: Iterable[Any], indent: Optional[int] = 2) -> str:
    """Serialize model objects (anything with to_dict()) to a JSON array."""
    return json.dumps([item.to_dict() for item in items], indent=indent)


def parse_ids(id_string: str) -> List[str]:
    """
    Parse comma-separated IDs.

    Args:
        id_string: Comma-separated string of IDs (e.g., "1700000000000,1700000000001")

    Returns:
        List of non-empty ID strings
    """
    return [part.strip() for part in id_string.split(",") if part.strip()]
