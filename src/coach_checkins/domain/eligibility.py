"""Check-in eligibility windows on the user's local calendar.

Calendar weeks run Sunday 00:00:00 through Saturday 23:59:59. Every function
takes an aware ``now`` whose ``tzinfo`` is the user's local zone; stored
dates are converted into that zone before comparing. Records without a date
never count as submitted.
"""

from collections.abc import Iterable
from datetime import datetime, time, timedelta
from typing import Protocol

SUNDAY = 1
SATURDAY = 7
DAYS_IN_WEEK = 7
SECONDS_PER_HOUR = 3600


class Dated(Protocol):
    """Anything carrying an optional timestamp."""

    @property
    def date(self) -> datetime | None: ...


def _require_aware(moment: datetime) -> None:
    if moment.tzinfo is None or moment.utcoffset() is None:
        raise ValueError(f"Expected a timezone-aware datetime, got {moment!r}")


def weekday_index(moment: datetime) -> int:
    """Return the weekday as 1=Sunday .. 7=Saturday."""
    return (moment.weekday() + 1) % DAYS_IN_WEEK + 1


def start_of_day(now: datetime) -> datetime:
    """Return local midnight for ``now``."""
    _require_aware(now)
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(now: datetime) -> datetime:
    """Return 23:59:59 local time on the day of ``now``."""
    _require_aware(now)
    return datetime.combine(now.date(), time(23, 59, 59), tzinfo=now.tzinfo)


def day_window(now: datetime) -> tuple[datetime, datetime]:
    """Return the half-open local day ``[midnight, next midnight)``."""
    start = start_of_day(now)
    return start, start + timedelta(days=1)


def start_of_week(now: datetime) -> datetime:
    """Return Sunday 00:00 of the calendar week containing ``now``."""
    start = start_of_day(now)
    return start - timedelta(days=weekday_index(now) - SUNDAY)


def end_of_week(now: datetime) -> datetime:
    """Return Saturday 23:59:59 of the calendar week containing ``now``."""
    return end_of_day(start_of_week(now) + timedelta(days=SATURDAY - SUNDAY))


def week_window(now: datetime) -> tuple[datetime, datetime]:
    """Return the half-open calendar week ``[Sunday, next Sunday)``."""
    start = start_of_week(now)
    return start, start + timedelta(days=DAYS_IN_WEEK)


def _local(moment: datetime, now: datetime) -> datetime:
    _require_aware(moment)
    return moment.astimezone(now.tzinfo)


def _within(moment: datetime | None, window: tuple[datetime, datetime]) -> bool:
    if moment is None:
        return False
    start, end = window
    local = _local(moment, start)
    return start <= local < end


def has_completed_weekly_this_week(now: datetime, history: Iterable[Dated]) -> bool:
    """Return True when any record falls in the current calendar week."""
    window = week_window(now)
    return any(_within(record.date, window) for record in history)


def can_submit_weekly(now: datetime, history: Iterable[Dated]) -> bool:
    """Return True when no record falls in the current calendar week."""
    return not has_completed_weekly_this_week(now, history)


def time_until_next_weekly(now: datetime) -> str:
    """Return a short countdown label until the current week closes."""
    weekday = weekday_index(now)
    hours_remaining = int(
        (end_of_day(now) - now).total_seconds() // SECONDS_PER_HOUR
    )
    if weekday == SATURDAY:
        return f"{hours_remaining}h"
    days = DAYS_IN_WEEK - 1 if weekday == SUNDAY else DAYS_IN_WEEK - weekday
    if days > 1:
        return f"{days}d"
    return f"{hours_remaining + 1}h"


def should_show_reminder(
    now: datetime, history: Iterable[Dated], dismissed_at: datetime | None
) -> bool:
    """Return True when this week is unsubmitted and the reminder not dismissed.

    A dismissal only applies to the calendar week it was recorded in.
    """
    if has_completed_weekly_this_week(now, history):
        return False
    return not _within(dismissed_at, week_window(now))


def can_submit_daily(now: datetime, todays_records: Iterable[Dated]) -> bool:
    """Return True when no record falls on the local calendar day of ``now``."""
    window = day_window(now)
    return not any(_within(record.date, window) for record in todays_records)
