"""
Cycle clock: maps calendar dates onto the 12 weeks of a cycle.

All arithmetic is done on local calendar days. Aware datetimes are
converted to local time before their date is taken; naive datetimes are
assumed to already be local.
"""

from datetime import date, datetime, timedelta
from typing import List, Optional, Union

from dateutil import parser as date_parser

from twelve_week_year.models.entities import DAY_KEYS


WEEKS_PER_CYCLE = 12
DAYS_PER_WEEK = 7
CYCLE_LENGTH_DAYS = WEEKS_PER_CYCLE * DAYS_PER_WEEK

# Returned by week_number once the 84 days are over
CYCLE_COMPLETE_WEEK = WEEKS_PER_CYCLE + 1

DateLike = Union[date, datetime, str]


def to_local_date(value: DateLike) -> date:
    """
    Reduce a date, datetime or ISO string to a local calendar date.

    Args:
        value: date, datetime (naive = local) or string such as "2026-01-05"

    Returns:
        The local calendar date
    """
    if isinstance(value, str):
        value = date_parser.parse(value)
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    return value


def elapsed_days(start_date: DateLike, now: Optional[DateLike] = None) -> int:
    """Whole local calendar days from start_date to now (negative before start)."""
    today = to_local_date(now if now is not None else datetime.now())
    return (today - to_local_date(start_date)).days


def week_number(start_date: DateLike, now: Optional[DateLike] = None) -> int:
    """
    Current 1-based week of a cycle.

    Returns 0 before the cycle starts, 1-12 while it runs and 13 once
    it is complete.

    Example:
        >>> week_number("2026-01-05", "2026-01-15")
        2
    """
    days = elapsed_days(start_date, now)
    if days < 0:
        return 0
    week = days // DAYS_PER_WEEK + 1
    return min(week, CYCLE_COMPLETE_WEEK)


def week_status(week: int) -> str:
    """Describe a week_number result: not_started, in_progress or complete."""
    if week <= 0:
        return "not_started"
    if week > WEEKS_PER_CYCLE:
        return "complete"
    return "in_progress"


def current_scorecard_week(start_date: DateLike, now: Optional[DateLike] = None) -> int:
    """The week a scorecard opens on: week_number clamped to 1-12."""
    return max(1, min(week_number(start_date, now), WEEKS_PER_CYCLE))


def calc_end_date(start_date: DateLike) -> date:
    """Last day of a cycle: start + 83 days."""
    return to_local_date(start_date) + timedelta(days=CYCLE_LENGTH_DAYS - 1)


def today_key(now: Optional[DateLike] = None) -> str:
    """Sunday-first day key ('sun'..'sat') of a date."""
    today = to_local_date(now if now is not None else datetime.now())
    # date.weekday() is Monday=0
    return DAY_KEYS[(today.weekday() + 1) % DAYS_PER_WEEK]


def week_dates(start_date: DateLike, week: int) -> List[date]:
    """
    The seven calendar dates of a cycle week.

    Raises:
        ValueError: If week is outside 1-12
    """
    check_week(week)
    first = to_local_date(start_date) + timedelta(days=(week - 1) * DAYS_PER_WEEK)
    return [first + timedelta(days=i) for i in range(DAYS_PER_WEEK)]


def check_week(week: int) -> None:
    """
    Validate a cycle week number.

    Raises:
        ValueError: If week is outside 1-12
    """
    if not 1 <= week <= WEEKS_PER_CYCLE:
        raise ValueError(f"week must be between 1 and {WEEKS_PER_CYCLE}, got {week}")
