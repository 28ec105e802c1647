"""
Week numbering used for the ``week``/``year`` reporting key.

Weeks start on Sunday and week 1 is the (possibly partial) week that
contains January 1st, so a year has 53 or 54 week numbers in total.
"""
import math
from datetime import date
from typing import Optional


def sunday_based_weekday(day: date) -> int:
    """Weekday of *day* with Sunday as 0 and Saturday as 6."""
    return (day.weekday() + 1) % 7


def week_number(day: date) -> int:
    """Return the week of the year that *day* falls in."""
    jan1 = date(day.year, 1, 1)
    days_since_jan1 = (day - jan1).days
    return math.ceil((days_since_jan1 + sunday_based_weekday(jan1) + 1) / 7)


def current_week(today: Optional[date] = None) -> tuple[int, int]:
    """Return ``(week, year)`` for *today* (defaults to the local date)."""
    today = today or date.today()
    return week_number(today), today.year
