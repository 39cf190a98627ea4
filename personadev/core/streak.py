"""
FILE: personadev/core/streak.py
PURPOSE: Consecutive qualifying day (streak) computation
EXPORTS:
  - StreakState (named tuple)
  - qualifies(marks) -> bool
  - evaluate(today, checkins, streak, last_check_in) -> StreakState
  - apply_streak(state, today) -> bool
  - current_run(checkins, today) -> int
DEPENDENCIES:
  - datetime (stdlib)
  - personadev.core.models (AppState)
NOTES:
  - Pure and total: never raises, same inputs give same outputs
  - A day qualifies when at least one of its checkins is True
  - Streak only moves on a qualifying day; a gap is noticed lazily,
    the next time a later day qualifies, and never decays on its own
"""

from datetime import date, timedelta
from typing import Mapping, NamedTuple, Optional

from .models import AppState


class StreakState(NamedTuple):
    streak: int
    last_check_in: Optional[str]


def qualifies(marks: Optional[Mapping[str, bool]]) -> bool:
    """Return True if any checkin for the day is True."""
    return bool(marks) and any(value is True for value in marks.values())


def evaluate(
    today: date,
    checkins: Mapping[str, Mapping[str, bool]],
    streak: int,
    last_check_in: Optional[str],
) -> StreakState:
    """
    Evaluate the streak rule for today.

    Args:
        today: Device-local calendar day
        checkins: Mapping of day key -> {task_id: done}
        streak: Previous streak value
        last_check_in: Previous qualifying day key, or None

    Returns:
        The new (streak, last_check_in) pair

    Rule:
        - today not qualifying: unchanged
        - today qualifying, last_check_in already today: unchanged
        - last_check_in is yesterday: streak + 1
        - otherwise (gap, never checked in, unreadable): reset to 1
    """
    today_key = today.isoformat()
    if not qualifies(checkins.get(today_key)):
        return StreakState(streak, last_check_in)
    if last_check_in == today_key:
        return StreakState(streak, last_check_in)

    yesterday_key = (today - timedelta(days=1)).isoformat()
    if last_check_in == yesterday_key:
        return StreakState(streak + 1, today_key)
    return StreakState(1, today_key)


def apply_streak(state: AppState, today: Optional[date] = None) -> bool:
    """
    Re-evaluate the streak on state in place.

    Returns:
        True if streak or last_check_in changed
    """
    today = today or date.today()
    result = evaluate(today, state.daily_checkins, state.streak, state.last_check_in)
    if result == (state.streak, state.last_check_in):
        return False
    state.streak, state.last_check_in = result
    return True


def current_run(checkins: Mapping[str, Mapping[str, bool]], today: Optional[date] = None) -> int:
    """
    Count consecutive qualifying days ending today (or yesterday, when
    today has no qualifying checkin yet). Display helper only.
    """
    today = today or date.today()
    day = today if qualifies(checkins.get(today.isoformat())) else today - timedelta(days=1)
    run = 0
    while qualifies(checkins.get(day.isoformat())):
        run += 1
        day -= timedelta(days=1)
    return run
