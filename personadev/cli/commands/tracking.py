"""
FILE: personadev/cli/commands/tracking.py
PURPOSE: Time-tracking commands (exercise, book, lang)
"""

from typing import Optional

import typer

from ..main import exercise_app, book_app, lang_app, console, fail
from ...core import service
from ...core.constants import (
    DEFAULT_EXERCISE_TARGET,
    DEFAULT_READING_TARGET,
    DEFAULT_LANGUAGE_TARGET,
)
from ...core.dates import resolve_day
from ...core.exceptions import PersonaDevError, ItemNotFoundError
from ...formatting import TrackerFormatter, format_minutes, to_json

DAY_OPTION = typer.Option(None, "--date", "-d", help="Day (YYYY-MM-DD), default today")


# --- Exercise ---


@exercise_app.command("add")
def exercise_add(
    name: str = typer.Argument(..., help="Exercise name"),
    target: int = typer.Option(DEFAULT_EXERCISE_TARGET, "--target", "-t", help="Daily target in minutes"),
):
    """Add an exercise to track."""
    try:
        exercise = service.add_exercise(name, target)
    except PersonaDevError as e:
        fail(e)
    console.print(f"[green]✓ Added exercise [bold]{exercise.id}[/bold]:[/green] {exercise.name}")


@exercise_app.command("ls")
def exercise_ls(
    day: Optional[str] = DAY_OPTION,
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """List exercises with minutes logged for a day."""
    try:
        day = resolve_day(day)
        exercises = service.load().exercises
    except PersonaDevError as e:
        fail(e)

    if json_output:
        console.print(to_json(exercises))
    elif not exercises:
        console.print("[dim]No exercises yet[/dim]")
    else:
        console.print(TrackerFormatter.exercises_table(exercises, day))
        total = sum(e.minutes_on(day) for e in exercises)
        console.print(f"[dim]Total: {format_minutes(total)}[/dim]")


@exercise_app.command("log")
def exercise_log(
    exercise_id: str = typer.Argument(..., help="Exercise ID"),
    minutes: int = typer.Argument(..., help="Minutes to add"),
    day: Optional[str] = DAY_OPTION,
):
    """
    Add minutes to an exercise for a day.

    Example:
        personadev exercise log 1700000000000 20
    """
    try:
        exercise = service.log_exercise(exercise_id, minutes, day)
    except PersonaDevError as e:
        fail(e)
    logged = exercise.minutes_on(resolve_day(day))
    console.print(f"[green]✓ {exercise.name}:[/green] {format_minutes(logged)} logged")


@exercise_app.command("rm")
def exercise_rm(exercise_id: str = typer.Argument(..., help="Exercise ID")):
    """Delete an exercise and its logs."""
    try:
        exercise = service.delete_exercise(exercise_id)
    except PersonaDevError as e:
        fail(e)
    console.print(f"[green]✓ Deleted exercise:[/green] {exercise.name}")


# --- Reading ---


@book_app.command("add")
def book_add(
    title: str = typer.Argument(..., help="Book title"),
    author: str = typer.Option("", "--author", "-a", help="Author"),
    target: int = typer.Option(DEFAULT_READING_TARGET, "--target", "-t", help="Daily target in minutes"),
    pages: int = typer.Option(0, "--pages", "-p", help="Total pages"),
):
    """Add a book to track."""
    try:
        book = service.add_book(title, author, target, pages)
    except PersonaDevError as e:
        fail(e)
    console.print(f"[green]✓ Added book [bold]{book.id}[/bold]:[/green] {book.title}")


@book_app.command("ls")
def book_ls(
    day: Optional[str] = DAY_OPTION,
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """List books with reading logged for a day."""
    try:
        day = resolve_day(day)
        books = service.load().books
    except PersonaDevError as e:
        fail(e)

    if json_output:
        console.print(to_json(books))
    elif not books:
        console.print("[dim]No books yet[/dim]")
    else:
        console.print(TrackerFormatter.books_table(books, day))


@book_app.command("log")
def book_log(
    book_id: str = typer.Argument(..., help="Book ID"),
    minutes: int = typer.Option(0, "--minutes", "-m", help="Minutes read"),
    pages: int = typer.Option(0, "--pages", "-p", help="Pages read"),
    day: Optional[str] = DAY_OPTION,
):
    """
    Log reading time and/or pages.

    Example:
        personadev book log 1700000000000 --minutes 25 --pages 12
    """
    try:
        book = service.log_reading(book_id, minutes, pages, day)
    except PersonaDevError as e:
        fail(e)
    console.print(f"[green]✓ {book.title}:[/green] {book.pages_read} pages read in total")


@book_app.command("rm")
def book_rm(book_id: str = typer.Argument(..., help="Book ID")):
    """Delete a book and its logs."""
    try:
        book = service.delete_book(book_id)
    except PersonaDevError as e:
        fail(e)
    console.print(f"[green]✓ Deleted book:[/green] {book.title}")


# --- Languages ---


@lang_app.command("add")
def lang_add(
    name: str = typer.Argument(..., help="Language name"),
    target: int = typer.Option(DEFAULT_LANGUAGE_TARGET, "--target", "-t", help="Daily target in minutes"),
):
    """Add a language to study."""
    try:
        language = service.add_language(name, target)
    except PersonaDevError as e:
        fail(e)
    console.print(f"[green]✓ Added language [bold]{language.id}[/bold]:[/green] {language.name}")


@lang_app.command("ls")
def lang_ls(
    day: Optional[str] = DAY_OPTION,
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """List languages with study time for a day."""
    try:
        day = resolve_day(day)
        languages = service.load().languages
    except PersonaDevError as e:
        fail(e)

    if json_output:
        console.print(to_json(languages))
    elif not languages:
        console.print("[dim]No languages yet[/dim]")
    else:
        console.print(TrackerFormatter.languages_table(languages, day))


@lang_app.command("log")
def lang_log(
    language_id: str = typer.Argument(..., help="Language ID"),
    minutes: int = typer.Argument(..., help="Minutes studied"),
    day: Optional[str] = DAY_OPTION,
):
    """Add study minutes for a language."""
    try:
        language = service.log_language(language_id, minutes, day)
    except PersonaDevError as e:
        fail(e)
    logged = language.minutes_on(resolve_day(day))
    console.print(f"[green]✓ {language.name}:[/green] {format_minutes(logged)} logged")


@lang_app.command("word")
def lang_word(
    language_id: str = typer.Argument(..., help="Language ID"),
    word: str = typer.Argument(..., help="Word or phrase"),
    meaning: str = typer.Argument("", help="Meaning"),
    day: Optional[str] = DAY_OPTION,
):
    """
    Add a vocabulary word.

    Example:
        personadev lang word 1700000000000 "gato" "cat"
    """
    try:
        entry = service.add_word(language_id, word, meaning, day)
    except PersonaDevError as e:
        fail(e)
    console.print(f"[green]✓ Added word [bold]{entry.id}[/bold]:[/green] {entry.word} - {entry.meaning}")


@lang_app.command("words")
def lang_words(language_id: str = typer.Argument(..., help="Language ID")):
    """List vocabulary for a language."""
    try:
        state = service.load()
        language = next((l for l in state.languages if l.id == language_id), None)
        if language is None:
            raise ItemNotFoundError("language", language_id)
    except PersonaDevError as e:
        fail(e)

    if not language.words:
        console.print("[dim]No words yet[/dim]")
    for entry in language.words:
        console.print(f"[cyan]{entry.id}[/cyan] {entry.word} - {entry.meaning} [dim]({entry.date})[/dim]")


@lang_app.command("unword")
def lang_unword(
    language_id: str = typer.Argument(..., help="Language ID"),
    word_id: str = typer.Argument(..., help="Word ID"),
):
    """Remove a vocabulary word."""
    try:
        entry = service.delete_word(language_id, word_id)
    except PersonaDevError as e:
        fail(e)
    console.print(f"[green]✓ Removed word:[/green] {entry.word}")


@lang_app.command("rm")
def lang_rm(language_id: str = typer.Argument(..., help="Language ID")):
    """Delete a language with its logs and vocabulary."""
    try:
        language = service.delete_language(language_id)
    except PersonaDevError as e:
        fail(e)
    console.print(f"[green]✓ Deleted language:[/green] {language.name}")
