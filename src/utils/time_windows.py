"""
PPE Safety Violation Tracker - Reporting Time Windows

All statistics are computed against naive local datetimes in the reporting
timezone (REPORTING_TIMEZONE). Violation timestamps are stored the same way,
so window boundaries compare directly against the timestamp column.

Windows:
- Week: Monday 00:00 through now
- Month: first day of the month 00:00 through now
- Day range: first date 00:00 through last date 23:59:59.999999
"""

from datetime import datetime, date, time, timedelta
from zoneinfo import ZoneInfo

from .config import REPORTING_TIMEZONE


def get_now(timezone: str = REPORTING_TIMEZONE) -> datetime:
    """
    Get the current wall-clock time in the reporting timezone, without tzinfo.

    Args:
        timezone: IANA timezone name

    Returns:
        Naive datetime
    """
    return datetime.now(ZoneInfo(timezone)).replace(tzinfo=None)


def get_week_start(now: datetime) -> datetime:
    """
    Get Monday 00:00 of the week containing `now`.

    Example:
        Thursday 2025-06-12 15:30 -> Monday 2025-06-09 00:00
        Monday 2025-06-09 08:00   -> Monday 2025-06-09 00:00
    """
    monday = now.date() - timedelta(days=now.weekday())
    return datetime.combine(monday, time.min)


def get_month_start(now: datetime) -> datetime:
    """Get 00:00 on the first day of the month containing `now`."""
    return datetime.combine(now.date().replace(day=1), time.min)


def get_day_range(start_date: date, end_date: date) -> tuple[datetime, datetime]:
    """
    Get the inclusive datetime range covering whole calendar days.

    Args:
        start_date: First day (inclusive)
        end_date: Last day (inclusive)

    Returns:
        tuple: (start of start_date, last instant of end_date)
    """
    return datetime.combine(start_date, time.min), datetime.combine(end_date, time.max)


def iter_dates(start_date: date, end_date: date):
    """Yield every calendar date from start_date through end_date inclusive."""
    current = start_date
    while current <= end_date:
        yield current
        current += timedelta(days=1)
