"""
FILE: personadev/core/dates.py
PURPOSE: Calendar-day helpers shared by the streak engine and service layer
EXPORTS:
  - day_key(day) -> str
  - parse_day(value) -> date
  - resolve_day(value) -> str
  - week_key(day) -> str
  - parse_time(value) -> str
DEPENDENCIES:
  - datetime (stdlib)
NOTES:
  - Date keys are canonical YYYY-MM-DD strings, no timezone
  - "Today" is always the device-local calendar day
"""

import re
from datetime import date, datetime
from typing import Optional, Union

from .exceptions import InvalidInputError

_DAY_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def day_key(day: date) -> str:
    """Format a date as a canonical day key."""
    return day.isoformat()


def parse_day(value: str) -> date:
    """
    Parse a canonical YYYY-MM-DD day key.

    Raises:
        InvalidInputError: If value is not a valid calendar day
    """
    if not isinstance(value, str) or not _DAY_PATTERN.match(value):
        raise InvalidInputError(f"Invalid date '{value}'. Use YYYY-MM-DD")
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise InvalidInputError(f"Invalid date '{value}'. Use YYYY-MM-DD")


def resolve_day(value: Optional[Union[str, date]] = None) -> str:
    """Return the day key for value, defaulting to today."""
    if value is None:
        return day_key(date.today())
    if isinstance(value, date):
        return day_key(value)
    return day_key(parse_day(value))


def week_key(day: date) -> str:
    """ISO week label (YYYY-WW) used to tag weekly goals."""
    year, week, _ = day.isocalendar()
    return f"{year}-{week:02d}"


def parse_time(value: str) -> str:
    """Validate an HH:MM time string."""
    if not isinstance(value, str) or not _TIME_PATTERN.match(value):
        raise InvalidInputError(f"Invalid time '{value}'. Use HH:MM (24h)")
    return value
