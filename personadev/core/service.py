"""
FILE: personadev/core/service.py
PURPOSE: Business logic layer - the explicit mutation API over AppState
EXPORTS:
  - load() -> AppState
  - mutate() -> context manager yielding AppState
  - replace_state(state) -> AppState
  - reset() -> AppState
  - import_file(path) -> AppState
  - add_task / delete_task / list_tasks / set_checkin
  - set_screen_time
  - add_exercise / delete_exercise / log_exercise
  - add_book / delete_book / log_reading
  - add_language / delete_language / log_language / add_word / delete_word
  - add_goal / update_goal / delete_goal
  - add_reminder / toggle_reminder / delete_reminder / list_reminders
  - add_youtube_entry / delete_youtube_entry
  - set_notifications
  - day_summary(day) -> DaySummary
DEPENDENCIES:
  - personadev.core.repository (load_state, save_state, reset_state)
  - personadev.core.streak (apply_streak)
  - personadev.core.models (domain dataclasses)
  - personadev.core.exceptions (ItemNotFoundError, InvalidInputError)
NOTES:
  - Every command loads the document, mutates it, re-evaluates the streak
    and persists it before returning
  - Only replace_state(), reset() and import_file() swap the whole document
  - No direct database access (use repository layer)
"""

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, TypeVar

from . import repository
from .constants import (
    IMPORTANCE_LEVELS,
    DEFAULT_IMPORTANCE,
    DEFAULT_EXERCISE_TARGET,
    DEFAULT_READING_TARGET,
    DEFAULT_LANGUAGE_TARGET,
    DEFAULT_REMINDER_TIME,
    YOUTUBE_CATEGORIES,
    DEFAULT_YOUTUBE_CATEGORY,
)
from .dates import parse_day, parse_time, resolve_day, week_key
from .exceptions import InvalidInputError, ItemNotFoundError
from .models import (
    AppState,
    Task,
    Exercise,
    Book,
    Word,
    Language,
    Goal,
    Reminder,
    YouTubeEntry,
)
from .snapshot import read_import, utc_timestamp
from .streak import apply_streak

logger = logging.getLogger(__name__)

T = TypeVar("T")

REMINDER_FILTERS = ("all", "today", "upcoming", "overdue")


def today() -> date:
    """Device-local calendar day."""
    return date.today()


def _day(value: Optional[str]) -> str:
    return resolve_day(value if value is not None else today())


# --- State lifecycle ---


def load() -> AppState:
    """
    Load local state with the streak re-evaluated for today.

    Persists the document if re-evaluation changed the streak.
    """
    state = repository.load_state()
    if apply_streak(state, today()):
        repository.save_state(state)
    return state


@contextmanager
def mutate() -> Iterator[AppState]:
    """
    Load state, let the caller mutate it, then re-evaluate the streak and save.

    Nothing is saved if the block raises.
    """
    state = repository.load_state()
    yield state
    if apply_streak(state, today()):
        logger.info("Streak is now %d (last check-in %s)", state.streak, state.last_check_in)
    repository.save_state(state)


def replace_state(state: AppState) -> AppState:
    """Replace the local document wholesale (no merge)."""
    repository.save_state(state)
    logger.info("Replaced local state (%d tasks)", len(state.tasks))
    return state


def reset() -> AppState:
    """Reset local state to empty defaults."""
    return repository.reset_state()


def import_file(path: Path) -> AppState:
    """
    Replace local state with the snapshot in an exported file.

    Raises:
        MalformedSnapshotError: If the file isn't a valid snapshot; local
            state is left unchanged
    """
    state = read_import(path)
    return replace_state(state)


# --- Helpers ---


def _new_id(existing: Iterable[str]) -> str:
    """Millisecond timestamp id, bumped until unique within existing."""
    taken = set(existing)
    candidate = int(time.time() * 1000)
    while str(candidate) in taken:
        candidate += 1
    return str(candidate)


def _find(items: List[T], item_id: str, kind: str) -> T:
    for item in items:
        if item.id == item_id:
            return item
    raise ItemNotFoundError(kind, item_id)


def _clean_title(value: str, what: str) -> str:
    value = (value or "").strip()
    if not value:
        raise InvalidInputError(f"{what} cannot be empty")
    return value


def _check_importance(importance: str) -> str:
    if importance not in IMPORTANCE_LEVELS:
        raise InvalidInputError(
            f"Invalid importance '{importance}'. Must be one of: {', '.join(IMPORTANCE_LEVELS)}"
        )
    return importance


def _check_minutes(minutes: int, allow_zero: bool = False) -> int:
    if minutes < 0 or (minutes == 0 and not allow_zero):
        raise InvalidInputError("Minutes must be a positive number")
    return minutes


def _add_duration(logs: dict, day: str, minutes: int) -> None:
    entry = logs.setdefault(day, {})
    entry["duration"] = entry.get("duration", 0) + minutes


# --- Tasks and checkins ---


def add_task(title: str, importance: str = DEFAULT_IMPORTANCE) -> Task:
    """
    Create a new daily task.

    Raises:
        InvalidInputError: If title is empty or importance is invalid
    """
    title = _clean_title(title, "Task title")
    _check_importance(importance)
    with mutate() as state:
        task = Task(id=_new_id(t.id for t in state.tasks), title=title, importance=importance)
        state.tasks.append(task)
    return task


def list_tasks() -> List[Task]:
    return load().tasks


def delete_task(task_id: str) -> Task:
    """
    Delete a task and its checkins on every day.

    Days left without any checkin are dropped.
    """
    with mutate() as state:
        task = _find(state.tasks, task_id, "task")
        state.tasks.remove(task)
        for day in list(state.daily_checkins):
            marks = state.daily_checkins[day]
            marks.pop(task_id, None)
            if not marks:
                del state.daily_checkins[day]
    return task


def set_checkin(task_id: str, done: Optional[bool] = None, day: Optional[str] = None) -> bool:
    """
    Record a checkin for a task.

    Args:
        task_id: Task to check in
        done: New value; None toggles the current value
        day: Day key (defaults to today)

    Returns:
        The recorded value
    """
    day = _day(day)
    with mutate() as state:
        _find(state.tasks, task_id, "task")
        marks = state.daily_checkins.setdefault(day, {})
        value = (not marks.get(task_id, False)) if done is None else bool(done)
        marks[task_id] = value
    return value


def set_screen_time(minutes: int, day: Optional[str] = None) -> int:
    day = _day(day)
    _check_minutes(minutes, allow_zero=True)
    with mutate() as state:
        state.screen_time[day] = minutes
    return minutes


# --- Exercise ---


def add_exercise(name: str, target_duration: int = DEFAULT_EXERCISE_TARGET) -> Exercise:
    name = _clean_title(name, "Exercise name")
    _check_minutes(target_duration)
    with mutate() as state:
        exercise = Exercise(
            id=_new_id(e.id for e in state.exercises),
            name=name,
            target_duration=target_duration,
        )
        state.exercises.append(exercise)
    return exercise


def delete_exercise(exercise_id: str) -> Exercise:
    with mutate() as state:
        exercise = _find(state.exercises, exercise_id, "exercise")
        state.exercises.remove(exercise)
    return exercise


def log_exercise(exercise_id: str, minutes: int, day: Optional[str] = None) -> Exercise:
    """Add minutes to an exercise's log for a day (cumulative)."""
    day = _day(day)
    _check_minutes(minutes)
    with mutate() as state:
        exercise = _find(state.exercises, exercise_id, "exercise")
        _add_duration(exercise.logs, day, minutes)
    return exercise


# --- Reading ---


def add_book(
    title: str,
    author: str = "",
    target_mins: int = DEFAULT_READING_TARGET,
    pages_total: int = 0,
) -> Book:
    title = _clean_title(title, "Book title")
    _check_minutes(target_mins)
    if pages_total < 0:
        raise InvalidInputError("Total pages cannot be negative")
    with mutate() as state:
        book = Book(
            id=_new_id(b.id for b in state.books),
            title=title,
            author=(author or "").strip(),
            target_mins=target_mins,
            pages_total=pages_total,
        )
        state.books.append(book)
    return book


def delete_book(book_id: str) -> Book:
    with mutate() as state:
        book = _find(state.books, book_id, "book")
        state.books.remove(book)
    return book


def log_reading(book_id: str, minutes: int = 0, pages: int = 0, day: Optional[str] = None) -> Book:
    """
    Log reading time and/or pages for a day.

    Pages also advance the book's running pages_read total.

    Raises:
        InvalidInputError: If neither minutes nor pages is positive
    """
    day = _day(day)
    if minutes < 0 or pages < 0 or (minutes == 0 and pages == 0):
        raise InvalidInputError("Log some minutes or pages")
    with mutate() as state:
        book = _find(state.books, book_id, "book")
        _add_duration(book.logs, day, minutes)
        if pages:
            entry = book.logs[day]
            entry["pages"] = entry.get("pages", 0) + pages
            book.pages_read += pages
    return book


# --- Languages ---


def add_language(name: str, target_mins: int = DEFAULT_LANGUAGE_TARGET) -> Language:
    name = _clean_title(name, "Language name")
    _check_minutes(target_mins)
    with mutate() as state:
        language = Language(
            id=_new_id(l.id for l in state.languages),
            name=name,
            target_mins=target_mins,
        )
        state.languages.append(language)
    return language


def delete_language(language_id: str) -> Language:
    with mutate() as state:
        language = _find(state.languages, language_id, "language")
        state.languages.remove(language)
    return language


def log_language(language_id: str, minutes: int, day: Optional[str] = None) -> Language:
    day = _day(day)
    _check_minutes(minutes)
    with mutate() as state:
        language = _find(state.languages, language_id, "language")
        _add_duration(language.logs, day, minutes)
    return language


def add_word(language_id: str, word: str, meaning: str = "", day: Optional[str] = None) -> Word:
    day = _day(day)
    word = _clean_title(word, "Word")
    with mutate() as state:
        language = _find(state.languages, language_id, "language")
        entry = Word(
            id=_new_id(w.id for w in language.words),
            word=word,
            meaning=(meaning or "").strip(),
            date=day,
        )
        language.words.append(entry)
    return entry


def delete_word(language_id: str, word_id: str) -> Word:
    with mutate() as state:
        language = _find(state.languages, language_id, "language")
        entry = _find(language.words, word_id, "word")
        language.words.remove(entry)
    return entry


# --- Weekly goals ---


def _check_progress(progress: int) -> int:
    if not 0 <= progress <= 100:
        raise InvalidInputError("Progress must be between 0 and 100")
    return progress


def add_goal(title: str, description: str = "", progress: int = 0) -> Goal:
    title = _clean_title(title, "Goal title")
    _check_progress(progress)
    with mutate() as state:
        goal = Goal(
            id=_new_id(g.id for g in state.weekly_goals),
            title=title,
            description=(description or "").strip(),
            progress=progress,
            week=week_key(today()),
        )
        state.weekly_goals.append(goal)
    return goal


def update_goal(
    goal_id: str,
    progress: Optional[int] = None,
    completed: Optional[bool] = None,
    title: Optional[str] = None,
    description: Optional[str] = None,
) -> Goal:
    """
    Update fields of a weekly goal. Only the given fields change.

    Reaching 100% progress marks the goal completed.
    """
    if progress is not None:
        _check_progress(progress)
    if title is not None:
        title = _clean_title(title, "Goal title")
    with mutate() as state:
        goal = _find(state.weekly_goals, goal_id, "goal")
        if title is not None:
            goal.title = title
        if description is not None:
            goal.description = description.strip()
        if progress is not None:
            goal.progress = progress
            if progress == 100 and completed is None:
                goal.completed = True
        if completed is not None:
            goal.completed = completed
    return goal


def delete_goal(goal_id: str) -> Goal:
    with mutate() as state:
        goal = _find(state.weekly_goals, goal_id, "goal")
        state.weekly_goals.remove(goal)
    return goal


# --- Reminders ---


def add_reminder(
    title: str,
    day: Optional[str] = None,
    time_of_day: str = DEFAULT_REMINDER_TIME,
    importance: str = DEFAULT_IMPORTANCE,
) -> Reminder:
    title = _clean_title(title, "Reminder title")
    day = _day(day)
    parse_time(time_of_day)
    _check_importance(importance)
    with mutate() as state:
        reminder = Reminder(
            id=_new_id(r.id for r in state.reminders),
            title=title,
            date=day,
            time=time_of_day,
            importance=importance,
        )
        state.reminders.append(reminder)
    return reminder


def toggle_reminder(reminder_id: str) -> Reminder:
    with mutate() as state:
        reminder = _find(state.reminders, reminder_id, "reminder")
        reminder.completed = not reminder.completed
    return reminder


def delete_reminder(reminder_id: str) -> Reminder:
    with mutate() as state:
        reminder = _find(state.reminders, reminder_id, "reminder")
        state.reminders.remove(reminder)
    return reminder


def list_reminders(which: str = "all") -> List[Reminder]:
    """
    List reminders sorted by date and time.

    Args:
        which: 'all', 'today', 'upcoming' (after today) or 'overdue'
            (before today and not completed)
    """
    if which not in REMINDER_FILTERS:
        raise InvalidInputError(
            f"Invalid filter '{which}'. Must be one of: {', '.join(REMINDER_FILTERS)}"
        )
    current = today()
    reminders = load().reminders
    if which == "today":
        reminders = [r for r in reminders if parse_day(r.date) == current]
    elif which == "upcoming":
        reminders = [r for r in reminders if parse_day(r.date) > current]
    elif which == "overdue":
        reminders = [r for r in reminders if not r.completed and parse_day(r.date) < current]
    return sorted(reminders, key=lambda r: r.datetime)


# --- YouTube history ---


def add_youtube_entry(
    title: str,
    category: str = DEFAULT_YOUTUBE_CATEGORY,
    duration: int = 10,
    day: Optional[str] = None,
) -> YouTubeEntry:
    title = _clean_title(title, "Video title")
    day = _day(day)
    if category not in YOUTUBE_CATEGORIES:
        raise InvalidInputError(
            f"Invalid category '{category}'. Must be one of: {', '.join(YOUTUBE_CATEGORIES)}"
        )
    _check_minutes(duration)
    with mutate() as state:
        entries = state.youtube_history.setdefault(day, [])
        entry = YouTubeEntry(
            id=_new_id(e.id for e in entries),
            date=day,
            title=title,
            category=category,
            duration=duration,
            timestamp=utc_timestamp(),
        )
        entries.append(entry)
    return entry


def delete_youtube_entry(entry_id: str, day: Optional[str] = None) -> YouTubeEntry:
    day = _day(day)
    with mutate() as state:
        entries = state.youtube_history.get(day, [])
        entry = _find(entries, entry_id, "video")
        entries.remove(entry)
        if not entries:
            del state.youtube_history[day]
    return entry


# --- Settings ---


def set_notifications(enabled: bool) -> bool:
    with mutate() as state:
        state.settings.notifications = enabled
    return enabled


# --- Summary ---


@dataclass
class DaySummary:
    """Aggregates for one day, as shown on the dashboard."""

    day: str
    tasks_total: int
    tasks_done: int
    exercise_minutes: int
    reading_minutes: int
    language_minutes: int
    screen_time: int
    streak: int
    last_check_in: Optional[str]

    @property
    def progress(self) -> int:
        if not self.tasks_total:
            return 0
        return round(self.tasks_done / self.tasks_total * 100)


def day_summary(day: Optional[str] = None) -> DaySummary:
    day = _day(day)
    state = load()
    marks = state.daily_checkins.get(day, {})
    return DaySummary(
        day=day,
        tasks_total=len(state.tasks),
        tasks_done=sum(1 for done in marks.values() if done),
        exercise_minutes=sum(e.minutes_on(day) for e in state.exercises),
        reading_minutes=sum(b.minutes_on(day) for b in state.books),
        language_minutes=sum(l.minutes_on(day) for l in state.languages),
        screen_time=state.screen_time.get(day, 0),
        streak=state.streak,
        last_check_in=state.last_check_in,
    )
