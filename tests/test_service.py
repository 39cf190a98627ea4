"""
Tests for the service layer mutation API.
"""

from datetime import date

import pytest

# Path setup handled by conftest.py
from personadev.core import repository, service
from personadev.core.exceptions import InvalidInputError, ItemNotFoundError, MalformedSnapshotError
from personadev.core.models import AppState


@pytest.fixture(autouse=True)
def fixed_today(monkeypatch):
    """Pin the device-local day."""
    monkeypatch.setattr(service, "today", lambda: date(2024, 1, 1))


def test_add_task_assigns_unique_ids():
    first = service.add_task("Meditate")
    second = service.add_task("Journal", importance="high")

    assert first.id != second.id
    assert first.importance == "medium"
    assert [t.title for t in service.list_tasks()] == ["Meditate", "Journal"]


def test_add_task_validation():
    with pytest.raises(InvalidInputError):
        service.add_task("   ")
    with pytest.raises(InvalidInputError):
        service.add_task("Meditate", importance="urgent")
    assert service.list_tasks() == []


def test_checkin_updates_streak():
    task = service.add_task("Meditate")
    assert service.set_checkin(task.id) is True

    state = service.load()
    assert state.daily_checkins == {"2024-01-01": {task.id: True}}
    assert state.streak == 1
    assert state.last_check_in == "2024-01-01"


def test_checkin_continues_streak_from_yesterday():
    task = service.add_task("Meditate")
    repository.save_state(
        AppState(tasks=[task], streak=5, last_check_in="2023-12-31")
    )

    service.set_checkin(task.id)
    service.set_checkin(task.id, True)

    state = service.load()
    assert state.streak == 6


def test_toggle_and_undo_checkin():
    task = service.add_task("Meditate")
    assert service.set_checkin(task.id, None) is True
    assert service.set_checkin(task.id, None) is False
    assert service.set_checkin(task.id, False, day="2023-12-31") is False


def test_unchecking_keeps_the_streak():
    task = service.add_task("Meditate")
    service.set_checkin(task.id)
    service.set_checkin(task.id, False)

    state = service.load()
    assert state.streak == 1
    assert state.last_check_in == "2024-01-01"


def test_checkin_unknown_task():
    with pytest.raises(ItemNotFoundError):
        service.set_checkin("nope")


def test_checkin_rejects_bad_day():
    task = service.add_task("Meditate")
    with pytest.raises(InvalidInputError):
        service.set_checkin(task.id, day="01/01/2024")


def test_delete_task_cleans_checkins():
    keep = service.add_task("Keep")
    drop = service.add_task("Drop")
    service.set_checkin(keep.id, day="2023-12-31")
    service.set_checkin(drop.id, day="2023-12-31")
    service.set_checkin(drop.id, day="2023-12-30")

    service.delete_task(drop.id)

    state = service.load()
    assert [t.id for t in state.tasks] == [keep.id]
    assert state.daily_checkins == {"2023-12-31": {keep.id: True}}


def test_exercise_minutes_accumulate():
    exercise = service.add_exercise("Run", 30)
    service.log_exercise(exercise.id, 10)
    service.log_exercise(exercise.id, 15)

    stored = service.load().exercises[0]
    assert stored.minutes_on("2024-01-01") == 25
    assert stored.target_duration == 30

    with pytest.raises(InvalidInputError):
        service.log_exercise(exercise.id, 0)


def test_reading_logs_minutes_and_pages():
    book = service.add_book("Dune", author="Herbert", pages_total=400)
    service.log_reading(book.id, minutes=20, pages=15)
    service.log_reading(book.id, pages=5)

    stored = service.load().books[0]
    assert stored.pages_read == 20
    assert stored.logs["2024-01-01"] == {"duration": 20, "pages": 20}

    with pytest.raises(InvalidInputError):
        service.log_reading(book.id)


def test_language_words():
    language = service.add_language("Spanish")
    service.log_language(language.id, 20)
    word = service.add_word(language.id, "gato", "cat")

    stored = service.load().languages[0]
    assert stored.minutes_on("2024-01-01") == 20
    assert stored.words[0].word == "gato"
    assert stored.words[0].date == "2024-01-01"

    service.delete_word(language.id, word.id)
    assert service.load().languages[0].words == []

    with pytest.raises(ItemNotFoundError):
        service.delete_word(language.id, word.id)


def test_goal_progress_completes_at_100():
    goal = service.add_goal("Ship feature", progress=40)
    assert goal.week == "2024-01"

    updated = service.update_goal(goal.id, progress=100)
    assert updated.completed is True

    reopened = service.update_goal(goal.id, completed=False)
    assert reopened.completed is False
    assert reopened.progress == 100

    with pytest.raises(InvalidInputError):
        service.update_goal(goal.id, progress=150)


def test_reminder_filters():
    past = service.add_reminder("Past", day="2023-12-30")
    now = service.add_reminder("Now", day="2024-01-01", time_of_day="08:00")
    later = service.add_reminder("Later", day="2024-01-05")
    service.toggle_reminder(past.id)

    assert [r.id for r in service.list_reminders()] == [past.id, now.id, later.id]
    assert [r.id for r in service.list_reminders("today")] == [now.id]
    assert [r.id for r in service.list_reminders("upcoming")] == [later.id]
    assert service.list_reminders("overdue") == []

    with pytest.raises(InvalidInputError):
        service.add_reminder("Bad", time_of_day="25:00")
    with pytest.raises(InvalidInputError):
        service.list_reminders("someday")


def test_youtube_history_by_day():
    entry = service.add_youtube_entry("Talk", category="tutorial", duration=30)
    state = service.load()
    assert [e.title for e in state.youtube_history["2024-01-01"]] == ["Talk"]
    assert state.youtube_history["2024-01-01"][0].timestamp

    with pytest.raises(InvalidInputError):
        service.add_youtube_entry("Clip", category="cats")

    service.delete_youtube_entry(entry.id)
    assert "2024-01-01" not in service.load().youtube_history


def test_screen_time_replaces_value():
    service.set_screen_time(120)
    service.set_screen_time(90)
    assert service.load().screen_time == {"2024-01-01": 90}


def test_notifications_setting():
    service.set_notifications(False)
    assert service.load().settings.notifications is False


def test_failed_mutation_saves_nothing():
    service.add_task("Meditate")
    before = service.load()

    with pytest.raises(RuntimeError):
        with service.mutate() as state:
            state.tasks.clear()
            raise RuntimeError("boom")

    assert service.load() == before


def test_day_summary():
    task = service.add_task("Meditate")
    service.add_task("Journal")
    service.set_checkin(task.id)
    exercise = service.add_exercise("Run")
    service.log_exercise(exercise.id, 45)

    summary = service.day_summary()
    assert summary.day == "2024-01-01"
    assert (summary.tasks_done, summary.tasks_total) == (1, 2)
    assert summary.progress == 50
    assert summary.exercise_minutes == 45
    assert summary.streak == 1


def test_import_file_replaces_state(tmp_path):
    service.add_task("Local only")
    path = tmp_path / "backup.json"
    path.write_text(AppState(streak=2, last_check_in="2023-12-31").to_json(), encoding="utf-8")

    state = service.import_file(path)
    assert state.tasks == []
    assert service.load().streak == 2


def test_import_bad_file_keeps_state(tmp_path):
    service.add_task("Local")
    path = tmp_path / "broken.json"
    path.write_text('{"tasks": "nope"}', encoding="utf-8")

    with pytest.raises(MalformedSnapshotError):
        service.import_file(path)
    assert [t.title for t in service.load().tasks] == ["Local"]


def test_reset():
    service.add_task("Meditate")
    service.reset()
    assert service.load() == AppState()
