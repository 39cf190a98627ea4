"""
FILE: personadev/core/models.py
PURPOSE: Domain models for the application-state document
EXPORTS:
  - Task, Exercise, Book, Word, Language, Goal, Reminder, YouTubeEntry (dataclasses)
  - Settings (dataclass)
  - AppState (dataclass, single root document)
DEPENDENCIES:
  - dataclasses (stdlib)
  - json (stdlib)
  - typing (stdlib)
  - personadev.core.exceptions (MalformedSnapshotError)
NOTES:
  - All models have from_dict() for snapshot decoding
  - All models have to_dict() producing the camelCase wire layout
  - Per-day logs are kept as plain dicts ({date: {"duration": n, ...}})
  - Unknown top-level snapshot keys are preserved in AppState.extra
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import json

from .constants import (
    DEFAULT_IMPORTANCE,
    DEFAULT_EXERCISE_TARGET,
    DEFAULT_READING_TARGET,
    DEFAULT_LANGUAGE_TARGET,
    DEFAULT_REMINDER_TIME,
    DEFAULT_YOUTUBE_CATEGORY,
)
from .exceptions import MalformedSnapshotError


def _expect_dict(value: Any, where: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise MalformedSnapshotError(f"{where} must be an object")
    return value


def _expect_list(value: Any, where: str) -> List[Any]:
    if not isinstance(value, list):
        raise MalformedSnapshotError(f"{where} must be a list")
    return value


def _require(raw: Dict[str, Any], key: str, where: str) -> Any:
    try:
        return raw[key]
    except KeyError:
        raise MalformedSnapshotError(f"{where} is missing '{key}'")


def _copy_logs(raw: Any, where: str) -> Dict[str, Dict[str, Any]]:
    logs = _expect_dict(raw if raw is not None else {}, where)
    return {day: dict(_expect_dict(entry, f"{where}[{day}]")) for day, entry in logs.items()}


@dataclass
class Task:
    """A daily task that can be checked in once per day."""

    id: str
    title: str
    importance: str = DEFAULT_IMPORTANCE

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Task":
        raw = _expect_dict(raw, "task")
        return cls(
            id=str(_require(raw, "id", "task")),
            title=_require(raw, "title", "task"),
            importance=raw.get("importance", DEFAULT_IMPORTANCE),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "title": self.title, "importance": self.importance}


@dataclass
class Exercise:
    """An exercise with a daily target and per-day logged minutes."""

    id: str
    name: str
    target_duration: int = DEFAULT_EXERCISE_TARGET
    logs: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Exercise":
        raw = _expect_dict(raw, "exercise")
        return cls(
            id=str(_require(raw, "id", "exercise")),
            name=_require(raw, "name", "exercise"),
            target_duration=raw.get("targetDuration", DEFAULT_EXERCISE_TARGET),
            logs=_copy_logs(raw.get("logs"), "exercise.logs"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "targetDuration": self.target_duration,
            "logs": self.logs,
        }

    def minutes_on(self, day: str) -> int:
        return self.logs.get(day, {}).get("duration", 0)


@dataclass
class Book:
    """A book being read, with reading time and pages logged per day."""

    id: str
    title: str
    author: str = ""
    target_mins: int = DEFAULT_READING_TARGET
    pages_total: int = 0
    pages_read: int = 0
    logs: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Book":
        raw = _expect_dict(raw, "book")
        return cls(
            id=str(_require(raw, "id", "book")),
            title=_require(raw, "title", "book"),
            author=raw.get("author") or "",
            target_mins=raw.get("targetMins", DEFAULT_READING_TARGET),
            pages_total=raw.get("pagesTotal") or 0,
            pages_read=raw.get("pagesRead") or 0,
            logs=_copy_logs(raw.get("logs"), "book.logs"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "targetMins": self.target_mins,
            "pagesTotal": self.pages_total,
            "pagesRead": self.pages_read,
            "logs": self.logs,
        }

    def minutes_on(self, day: str) -> int:
        return self.logs.get(day, {}).get("duration", 0)


@dataclass
class Word:
    """A vocabulary entry learned on a given day."""

    id: str
    word: str
    meaning: str
    date: str

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Word":
        raw = _expect_dict(raw, "word")
        return cls(
            id=str(_require(raw, "id", "word")),
            word=_require(raw, "word", "word"),
            meaning=raw.get("meaning", ""),
            date=_require(raw, "date", "word"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "word": self.word, "meaning": self.meaning, "date": self.date}


@dataclass
class Language:
    """A language being studied: session minutes per day plus vocabulary."""

    id: str
    name: str
    target_mins: int = DEFAULT_LANGUAGE_TARGET
    logs: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    words: List[Word] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Language":
        raw = _expect_dict(raw, "language")
        words = _expect_list(raw.get("words", []), "language.words")
        return cls(
            id=str(_require(raw, "id", "language")),
            name=_require(raw, "name", "language"),
            target_mins=raw.get("targetMins", DEFAULT_LANGUAGE_TARGET),
            logs=_copy_logs(raw.get("logs"), "language.logs"),
            words=[Word.from_dict(w) for w in words],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "targetMins": self.target_mins,
            "logs": self.logs,
            "words": [w.to_dict() for w in self.words],
        }

    def minutes_on(self, day: str) -> int:
        return self.logs.get(day, {}).get("duration", 0)


@dataclass
class Goal:
    """A weekly goal with percentage progress."""

    id: str
    title: str
    description: str = ""
    progress: int = 0
    completed: bool = False
    week: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Goal":
        raw = _expect_dict(raw, "goal")
        return cls(
            id=str(_require(raw, "id", "goal")),
            title=_require(raw, "title", "goal"),
            description=raw.get("description") or "",
            progress=raw.get("progress", 0),
            completed=bool(raw.get("completed", False)),
            week=raw.get("week"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "progress": self.progress,
            "completed": self.completed,
            "week": self.week,
        }


@dataclass
class Reminder:
    """A dated reminder."""

    id: str
    title: str
    date: str
    time: str = DEFAULT_REMINDER_TIME
    importance: str = DEFAULT_IMPORTANCE
    completed: bool = False

    @property
    def datetime(self) -> str:
        return f"{self.date}T{self.time}"

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Reminder":
        raw = _expect_dict(raw, "reminder")
        return cls(
            id=str(_require(raw, "id", "reminder")),
            title=_require(raw, "title", "reminder"),
            date=_require(raw, "date", "reminder"),
            time=raw.get("time", DEFAULT_REMINDER_TIME),
            importance=raw.get("importance", DEFAULT_IMPORTANCE),
            completed=bool(raw.get("completed", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "date": self.date,
            "time": self.time,
            "importance": self.importance,
            "completed": self.completed,
            "datetime": self.datetime,
        }


@dataclass
class YouTubeEntry:
    """A watched video recorded in the YouTube history."""

    id: str
    date: str
    title: str
    category: str = DEFAULT_YOUTUBE_CATEGORY
    duration: int = 0
    timestamp: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "YouTubeEntry":
        raw = _expect_dict(raw, "youtube entry")
        return cls(
            id=str(_require(raw, "id", "youtube entry")),
            date=_require(raw, "date", "youtube entry"),
            title=_require(raw, "title", "youtube entry"),
            category=raw.get("category", DEFAULT_YOUTUBE_CATEGORY),
            duration=raw.get("duration", 0),
            timestamp=raw.get("timestamp"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "title": self.title,
            "category": self.category,
            "duration": self.duration,
            "timestamp": self.timestamp,
        }


@dataclass
class Settings:
    """User preferences. Unknown keys are carried through untouched."""

    notifications: bool = True
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Optional[Dict[str, Any]]) -> "Settings":
        raw = dict(_expect_dict(raw if raw is not None else {}, "settings"))
        notifications = bool(raw.pop("notifications", True))
        return cls(notifications=notifications, extra=raw)

    def to_dict(self) -> Dict[str, Any]:
        return {"notifications": self.notifications, **self.extra}


_KNOWN_KEYS = (
    "tasks",
    "dailyCheckins",
    "exercises",
    "books",
    "languages",
    "weeklyGoals",
    "reminders",
    "screenTime",
    "youtubeHistory",
    "streak",
    "lastCheckIn",
    "settings",
)


@dataclass
class AppState:
    """The single application-state document (one per installation)."""

    tasks: List[Task] = field(default_factory=list)
    daily_checkins: Dict[str, Dict[str, bool]] = field(default_factory=dict)
    exercises: List[Exercise] = field(default_factory=list)
    books: List[Book] = field(default_factory=list)
    languages: List[Language] = field(default_factory=list)
    weekly_goals: List[Goal] = field(default_factory=list)
    reminders: List[Reminder] = field(default_factory=list)
    screen_time: Dict[str, int] = field(default_factory=dict)
    youtube_history: Dict[str, List[YouTubeEntry]] = field(default_factory=dict)
    streak: int = 0
    last_check_in: Optional[str] = None
    settings: Settings = field(default_factory=Settings)
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Any) -> "AppState":
        """
        Decode a snapshot into an AppState.

        Missing sections fall back to empty defaults, so a snapshot that
        omits a section replaces it with an empty one.

        Raises:
            MalformedSnapshotError: If any section has the wrong shape
        """
        raw = _expect_dict(raw, "snapshot")

        checkins = {}
        for day, marks in _expect_dict(raw.get("dailyCheckins") or {}, "dailyCheckins").items():
            marks = _expect_dict(marks, f"dailyCheckins[{day}]")
            for task_id, done in marks.items():
                if not isinstance(done, bool):
                    raise MalformedSnapshotError(f"dailyCheckins[{day}][{task_id}] must be true or false")
            checkins[day] = dict(marks)

        history = {}
        for day, entries in _expect_dict(raw.get("youtubeHistory") or {}, "youtubeHistory").items():
            entries = _expect_list(entries, f"youtubeHistory[{day}]")
            history[day] = [YouTubeEntry.from_dict(e) for e in entries]

        streak = raw.get("streak", 0)
        if isinstance(streak, bool) or not isinstance(streak, int) or streak < 0:
            raise MalformedSnapshotError("streak must be a non-negative integer")

        last_check_in = raw.get("lastCheckIn")
        if last_check_in is not None and not isinstance(last_check_in, str):
            raise MalformedSnapshotError("lastCheckIn must be a date string or null")

        return cls(
            tasks=[Task.from_dict(t) for t in _expect_list(raw.get("tasks", []), "tasks")],
            daily_checkins=checkins,
            exercises=[Exercise.from_dict(e) for e in _expect_list(raw.get("exercises", []), "exercises")],
            books=[Book.from_dict(b) for b in _expect_list(raw.get("books", []), "books")],
            languages=[Language.from_dict(l) for l in _expect_list(raw.get("languages", []), "languages")],
            weekly_goals=[Goal.from_dict(g) for g in _expect_list(raw.get("weeklyGoals", []), "weeklyGoals")],
            reminders=[Reminder.from_dict(r) for r in _expect_list(raw.get("reminders", []), "reminders")],
            screen_time=dict(_expect_dict(raw.get("screenTime") or {}, "screenTime")),
            youtube_history=history,
            streak=streak,
            last_check_in=last_check_in,
            settings=Settings.from_dict(raw.get("settings")),
            extra={k: v for k, v in raw.items() if k not in _KNOWN_KEYS},
        )

    def to_dict(self) -> Dict[str, Any]:
        """Encode to the wire/storage layout."""
        data = {
            "tasks": [t.to_dict() for t in self.tasks],
            "dailyCheckins": {day: dict(marks) for day, marks in self.daily_checkins.items()},
            "exercises": [e.to_dict() for e in self.exercises],
            "books": [b.to_dict() for b in self.books],
            "languages": [l.to_dict() for l in self.languages],
            "weeklyGoals": [g.to_dict() for g in self.weekly_goals],
            "reminders": [r.to_dict() for r in self.reminders],
            "screenTime": dict(self.screen_time),
            "youtubeHistory": {
                day: [e.to_dict() for e in entries]
                for day, entries in self.youtube_history.items()
            },
            "streak": self.streak,
            "lastCheckIn": self.last_check_in,
            "settings": self.settings.to_dict(),
        }
        data.update(self.extra)
        return data

    def to_json(self, indent: Optional[int] = None) -> str:
        """Serialize state to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, text: str) -> "AppState":
        """
        Parse a JSON document into an AppState.

        Raises:
            MalformedSnapshotError: If text is not JSON or has the wrong shape
        """
        try:
            raw = json.loads(text)
        except (TypeError, ValueError) as e:
            raise MalformedSnapshotError(f"Snapshot is not valid JSON: {e}")
        return cls.from_dict(raw)
