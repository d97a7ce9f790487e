"""Utility functions for timetable generation."""

from datetime import datetime

from .constants import TIME_FORMAT, WORKING_DAYS


def normalize_time(value: object) -> str | None:
    """Normalize a time value to zero-padded HH:MM.

    Args:
        value: Time string such as "8:00" or "08:00"

    Returns:
        Normalized "HH:MM" string, or None if the value is not a valid time
    """
    if not isinstance(value, str):
        return None
    try:
        parsed = datetime.strptime(value.strip(), TIME_FORMAT)
    except ValueError:
        return None
    return parsed.strftime(TIME_FORMAT)


def is_valid_range(start_time: str, end_time: str) -> bool:
    """Check that both ends are valid times and the range is not empty."""
    start = normalize_time(start_time)
    end = normalize_time(end_time)
    return start is not None and end is not None and start < end


def times_overlap(start_a: str, end_a: str, start_b: str, end_b: str) -> bool:
    """Check whether two HH:MM ranges overlap.

    Zero-padded HH:MM strings order lexicographically, so plain string
    comparison is enough.
    """
    return start_a < end_b and end_a > start_b


def day_index(day: str) -> int:
    """Get the position of a day in the working week (unknown days sort last)."""
    value = getattr(day, "value", day)
    if value in WORKING_DAYS:
        return WORKING_DAYS.index(value)
    return len(WORKING_DAYS)


def slot_key(day: str, start_time: str, end_time: str) -> tuple[str, str, str]:
    """Natural key of a period: (day, start, end)."""
    return (getattr(day, "value", day), start_time, end_time)


def minutes_between(start_time: str, end_time: str) -> int:
    """Length of a time range in minutes."""
    start = datetime.strptime(start_time, TIME_FORMAT)
    end = datetime.strptime(end_time, TIME_FORMAT)
    return int((end - start).total_seconds() // 60)
