"""
Calendar helpers for habit analytics

All functions are pure: the "current" date is always passed in explicitly
(as_of / end_date) so results are reproducible.

Weekdays follow date.weekday(): Monday=0 ... Sunday=6.
"""

import logging
from datetime import date, time, timedelta
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)

WEEKEND_DAYS = (5, 6)

WEEKDAY_NAMES = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


class TimeBucket(str, Enum):
    """Fixed clock buckets for time-of-day analysis"""
    MORNING = "morning"      # 05:00 - 11:59
    AFTERNOON = "afternoon"  # 12:00 - 17:59
    EVENING = "evening"      # 18:00 - 22:59
    NIGHT = "night"          # 23:00 - 04:59


def is_weekend(day: date) -> bool:
    """Saturday or Sunday"""
    return day.weekday() in WEEKEND_DAYS


def weekday_name(weekday: int) -> str:
    """
    Lower-case English weekday name for a weekday index

    Raises:
        ValueError: If weekday is not 0-6
    """
    if not 0 <= weekday <= 6:
        raise ValueError(f"Invalid weekday: {weekday}. Weekdays must be 0-6 (Monday=0, Sunday=6)")
    return WEEKDAY_NAMES[weekday]


def time_bucket(time_of_day: Optional[time]) -> Optional[TimeBucket]:
    """
    Map a time of day to its bucket

    Args:
        time_of_day: Completion time, or None if unknown

    Returns:
        TimeBucket, or None when the time is unknown
    """
    if time_of_day is None:
        return None

    hour = time_of_day.hour
    if 5 <= hour <= 11:
        return TimeBucket.MORNING
    if 12 <= hour <= 17:
        return TimeBucket.AFTERNOON
    if 18 <= hour <= 22:
        return TimeBucket.EVENING
    return TimeBucket.NIGHT


def days_between(start: date, end: date) -> int:
    """Signed number of days from start to end"""
    return (end - start).days


def in_window(day: date, start: date, end: date) -> bool:
    """Inclusive window membership"""
    return start <= day <= end


def window_midpoint(start: date, end: date) -> date:
    """
    Temporal midpoint of an inclusive window

    Dates strictly before the midpoint form the first half, which holds
    floor(n / 2) of the window's n days.
    """
    length = days_between(start, end) + 1
    return start + timedelta(days=length // 2)
