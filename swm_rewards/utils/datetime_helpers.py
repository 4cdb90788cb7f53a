"""
Standardized Date/Time Handling Utilities

CRITICAL RULES:
- All reward timestamps are stored as timezone-aware UTC
- Calendar-day comparisons (streaks) always use the UTC day
- Naive datetimes coming from collaborators are interpreted as UTC
"""

import calendar
import logging
from datetime import datetime, date, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)

UTC = ZoneInfo("UTC")


def now_utc() -> datetime:
    """
    Get current datetime in UTC (timezone-aware)

    Returns:
        Current datetime in UTC with timezone info
    """
    return datetime.now(UTC)


def to_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Convert a datetime to timezone-aware UTC

    Naive datetimes are assumed to already be in UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def utc_day(dt: datetime) -> date:
    """Calendar day of a datetime in UTC"""
    return to_utc(dt).date()


def days_between(earlier: datetime, later: datetime) -> int:
    """Number of UTC calendar days from earlier to later (negative if reversed)"""
    return (utc_day(later) - utc_day(earlier)).days


def one_month_before(dt: datetime) -> datetime:
    """
    Same wall-clock instant one calendar month earlier

    The day is clamped to the length of the target month,
    so 31 March becomes 28/29 February.
    """
    dt = to_utc(dt)
    year, month = (dt.year, dt.month - 1) if dt.month > 1 else (dt.year - 1, 12)
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)


def one_week_before(dt: datetime) -> datetime:
    """Rolling seven-day window start"""
    return to_utc(dt) - timedelta(days=7)
