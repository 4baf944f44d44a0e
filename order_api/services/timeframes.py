"""Symbolic reporting periods relative to the current UTC date."""

import calendar
from datetime import datetime, timezone

THIS_MONTH = 'thisMonth'
LAST_MONTH = 'lastMonth'
THIS_YEAR = 'thisYear'
LAST_YEAR = 'lastYear'
TIMEFRAMES = (THIS_MONTH, LAST_MONTH, THIS_YEAR, LAST_YEAR)


def _month_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    last_day = calendar.monthrange(year, month)[1]
    return datetime(year, month, 1), datetime(year, month, last_day, 23, 59, 59, 999000)


def _year_bounds(year: int) -> tuple[datetime, datetime]:
    return datetime(year, 1, 1), datetime(year, 12, 31, 23, 59, 59, 999000)


def resolve_timeframe(timeframe: str | None, now: datetime | None = None) -> tuple[datetime, datetime] | None:
    """Return the inclusive (start, end) range for a timeframe.

    Unknown or missing timeframes return None, meaning no date filter.
    """
    now = now or datetime.now(timezone.utc).replace(tzinfo=None)

    if timeframe == THIS_MONTH:
        return _month_bounds(now.year, now.month)
    if timeframe == LAST_MONTH:
        if now.month == 1:
            return _month_bounds(now.year - 1, 12)
        return _month_bounds(now.year, now.month - 1)
    if timeframe == THIS_YEAR:
        return _year_bounds(now.year)
    if timeframe == LAST_YEAR:
        return _year_bounds(now.year - 1)
    return None


def comparison_timeframe(timeframe: str | None) -> str:
    return LAST_YEAR if timeframe == THIS_YEAR else LAST_MONTH


def percentage_change(current: float, previous: float) -> float:
    if previous == 0:
        return 100 if current > 0 else 0
    return (current - previous) / previous * 100
