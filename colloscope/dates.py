"""
Calendar helpers: French day/month names and the week projection.

Weekdays are plain integers following datetime.date.weekday()
(Monday == 0 ... Sunday == 6).
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Dict, Sequence

from colloscope.errors import WeekRangeError


# Two-letter codes used in the catalog table
WEEKDAY_CODES: Dict[str, int] = {
    "Lu": 0,
    "Ma": 1,
    "Me": 2,
    "Je": 3,
    "Ve": 4,
    "Sa": 5,
    "Di": 6,
}

WEEKDAY_NAMES = ("Lundi", "Mardi", "Mercredi", "Jeudi", "Vendredi", "Samedi", "Dimanche")

MONTH_SHORT_NAMES = (
    "Jan",
    "Fév",
    "Mars",
    "Avril",
    "Mai",
    "Juin",
    "Juil",
    "Août",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)


def next_occurrence(day: date, weekday: int) -> date:
    """
    First date strictly after `day` that falls on `weekday`.
    """
    days_ahead = (weekday - day.weekday()) % 7 or 7
    return day + timedelta(days=days_ahead)


def project_date(anchors: Sequence[date], week: int, weekday: int) -> date:
    """
    Concrete date of `weekday` in week number `week` (1-based).

    Anchors are recorded one week ahead: step back 7 days from the anchor,
    then move to the next strictly-later occurrence of the weekday.
    """
    if week < 1 or week > len(anchors):
        raise WeekRangeError(f"week must be between 1 and {len(anchors)}", token=str(week))
    return next_occurrence(anchors[week - 1] - timedelta(days=7), weekday)


def short_french_date(day: date) -> str:
    """
    e.g. 'Lundi 2 Sep'.
    """
    return f"{WEEKDAY_NAMES[day.weekday()]} {day.day} {MONTH_SHORT_NAMES[day.month - 1]}"
