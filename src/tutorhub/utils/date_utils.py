"""
Date window helpers.

All datetimes stored by the service are naive UTC.
"""
import math
from datetime import date, datetime, time, timedelta, timezone
from typing import Tuple


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def day_bounds(day: date) -> Tuple[datetime, datetime]:
    """[00:00, next day 00:00) for the given calendar day."""
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)


def month_windows(now: datetime) -> Tuple[datetime, datetime, datetime]:
    """
    Windows used for month-over-month growth.

    Returns:
        (start of current month, start of previous month, last second of previous month)
    """
    start_current = datetime(now.year, now.month, 1)
    if now.month == 1:
        start_previous = datetime(now.year - 1, 12, 1)
    else:
        start_previous = datetime(now.year, now.month - 1, 1)
    end_previous = start_current - timedelta(seconds=1)
    return start_current, start_previous, end_previous


def week_window(now: datetime) -> Tuple[datetime, datetime]:
    """Sunday 00:00 of the current week and seven days later."""
    days_since_sunday = (now.weekday() + 1) % 7
    start = datetime.combine(now.date() - timedelta(days=days_since_sunday), time.min)
    return start, start + timedelta(days=7)


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def growth_percentage(current: int, previous: int) -> int:
    if previous == 0:
        return 100 if current > 0 else 0
    return round_half_up((current - previous) / previous * 100)


def time_ago(then: datetime, now: datetime) -> str:
    seconds = int((now - then).total_seconds())
    if seconds < 60:
        return f"{seconds} seconds ago"
    if seconds < 3600:
        return f"{seconds // 60} minutes ago"
    if seconds < 86400:
        return f"{seconds // 3600} hours ago"
    return f"{seconds // 86400} days ago"


def report_window(range_name: str, now: datetime) -> Tuple[datetime, datetime]:
    """
    Reporting window ending now.

    last_7_days and last_30_days count back from now; this_quarter and
    this_year start at midnight on the first day of the period.
    """
    if range_name == "last_7_days":
        return now - timedelta(days=7), now
    if range_name == "this_quarter":
        quarter_month = (now.month - 1) // 3 * 3 + 1
        return datetime(now.year, quarter_month, 1), now
    if range_name == "this_year":
        return datetime(now.year, 1, 1), now
    return now - timedelta(days=30), now
