"""Calendar helpers. All "today" values are UTC calendar dates.

The core never reads the wall clock on its own: the web layer resolves today
once per request (see get_today) and passes it down.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

PERIOD_DAYS: dict[str, int | None] = {
    "week": 7,
    "month": 30,
    "year": 365,
    "all": None,
}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def today_utc(now: datetime | None = None) -> date:
    """Calendar date in UTC for now (or the given instant)."""
    if now is None:
        now = utcnow()
    return now.astimezone(timezone.utc).date()


def days_ago(today: date, days: int) -> date:
    return today - timedelta(days=days)


def yesterday(today: date) -> date:
    return days_ago(today, 1)


def is_yesterday(value: date | None, today: date) -> bool:
    return value is not None and value == yesterday(today)


def is_same_day(value: date | None, today: date) -> bool:
    return value is not None and value == today


def period_start(period: str, today: date) -> date | None:
    """First date included in a stats period, or None for all-time.

    Raises ValueError for unknown periods.
    """
    if period not in PERIOD_DAYS:
        raise ValueError(f"Unknown period: {period}")
    days = PERIOD_DAYS[period]
    if days is None:
        return None
    return days_ago(today, days)


async def get_today() -> date:
    """FastAPI dependency: today's UTC date (overridden in tests)."""
    return today_utc()
