# meetcoord/services/time_utils.py
from __future__ import annotations

import logging
import re
from datetime import date as date_type
from datetime import datetime, time, timedelta

from meetcoord.core.config import get_settings
from meetcoord.core.errors import InvalidTimeError, InvalidWindowError

logger = logging.getLogger(__name__)

TIME_TBD = "Time TBD"

_TIME_OF_DAY_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


def parse_time_of_day(value: str | time) -> time:
    """
    Parse a time of day in `HH:mm` or `HH:mm:ss` form.

    A `datetime.time` is returned unchanged so callers can pass either raw
    strings from a payload or values already loaded from the store.

    Raises
    ------
    InvalidTimeError
        If the value is not a string in the accepted forms, or if any
        component is out of range (e.g. "24:00", "09:60").
    """
    if isinstance(value, time):
        return value
    if not isinstance(value, str):
        raise InvalidTimeError(value)

    match = _TIME_OF_DAY_RE.match(value.strip())
    if match is None:
        raise InvalidTimeError(value)

    hours, minutes, seconds = match.groups()
    try:
        return time(int(hours), int(minutes), int(seconds or 0))
    except ValueError as exc:
        raise InvalidTimeError(value) from exc


def parse_time_or_default(
    value: str | time | None,
    default: time | None = None,
) -> time:
    """
    Resilient variant of `parse_time_of_day` used by display code.

    Missing or malformed values degrade to `default` (or the configured
    DEFAULT_TIME_OF_DAY, 09:00) instead of raising.
    """
    fallback = default if default is not None else get_settings().DEFAULT_TIME_OF_DAY
    if value is None:
        return fallback
    try:
        return parse_time_of_day(value)
    except InvalidTimeError:
        logger.debug("Unparseable time %r, substituting %s", value, fallback)
        return fallback


def combine(day: date_type, time_of_day: time) -> datetime:
    """
    Combine a calendar date and a time of day into a naive, comparable instant.

    Used only for interval comparison; never persisted.
    """
    return datetime.combine(day, time_of_day)


def duration_minutes(
    day: date_type,
    start: time | None,
    end: time | None,
) -> int:
    """
    Return the length of `[start, end)` on `day` in whole minutes.

    If either bound is missing, or the result is zero or negative, the
    configured default (60 minutes) is returned. The underlying record is
    never modified.
    """
    default = get_settings().DEFAULT_DURATION_MINUTES
    if start is None or end is None:
        return default

    delta = combine(day, end) - combine(day, start)
    minutes = round(delta.total_seconds() / 60)
    if minutes <= 0:
        return default
    return minutes


def add_minutes(day: date_type, start: time, minutes: int) -> time:
    """
    Return the end time of a window of `minutes` length starting at `start`.

    Raises InvalidWindowError if the length is not positive or the window
    would run past midnight.
    """
    if minutes <= 0:
        raise InvalidWindowError(f"Duration must be positive, got {minutes}")

    end_dt = combine(day, start) + timedelta(minutes=minutes)
    if end_dt.date() != day:
        raise InvalidWindowError(
            f"A {minutes} minute window starting at {start.isoformat()} crosses midnight"
        )
    return end_dt.time()


def format_time(value: str | time | None) -> str:
    """
    Format a time of day as e.g. "9:00 AM" / "2:30 PM".

    Never raises: missing or malformed values render as the TIME_TBD
    placeholder.
    """
    if value is None:
        return TIME_TBD
    try:
        parsed = parse_time_of_day(value)
    except InvalidTimeError:
        return TIME_TBD

    suffix = "PM" if parsed.hour >= 12 else "AM"
    display_hour = parsed.hour % 12 or 12
    return f"{display_hour}:{parsed.minute:02d} {suffix}"


def format_window(start: str | time | None, end: str | time | None) -> str:
    """
    Format a time range as "9:00 AM - 10:00 AM".

    A missing or malformed end yields just the start label; a missing start
    yields TIME_TBD.
    """
    start_label = format_time(start)
    if start_label == TIME_TBD:
        return TIME_TBD

    end_label = format_time(end)
    if end_label == TIME_TBD:
        return start_label
    return f"{start_label} - {end_label}"


def format_date(day: date_type | None) -> str:
    """Format a date as e.g. "Tue, Jun 17, 2025"."""
    if day is None:
        return "Date TBD"
    return f"{day.strftime('%a, %b')} {day.day}, {day.year}"


def format_duration(minutes: int) -> str:
    return f"{minutes} minutes"
