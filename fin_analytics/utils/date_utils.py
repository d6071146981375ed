"""Date manipulation utilities"""

from datetime import date, datetime, time, timezone

from dateutil.relativedelta import relativedelta

SECONDS_PER_DAY = 86_400


def utc_now() -> datetime:
    """Current wall-clock time, timezone-aware UTC. Shared clock for every trailing window."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime | date) -> datetime:
    """Promote dates to midnight UTC and treat naive datetimes as UTC"""
    if not isinstance(value, datetime):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def days_between(a: datetime, b: datetime) -> float:
    """Absolute distance between two instants in fractional days"""
    return abs((a - b).total_seconds()) / SECONDS_PER_DAY


def add_months(value: datetime, months: int) -> datetime:
    """Calendar-month step; clamps to the last day of shorter months (Jan 31 -> Feb 28)"""
    return value + relativedelta(months=months)


def add_years(value: datetime, years: int) -> datetime:
    """Calendar-year step; Feb 29 clamps to Feb 28"""
    return value + relativedelta(years=years)
