"""Bucketing and series helpers for progress charts."""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo
from enum import Enum
from typing import Generic, Protocol, TypeVar

from coach_checkins.domain.eligibility import DAYS_IN_WEEK

MONTH_LABELS = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)
MONTHS_IN_YEAR = 12
NO_BEST_MONTH = "N/A"
WEEK_STARTS_SUNDAY = 6


class Observation(Protocol):
    """A dated numeric value."""

    @property
    def date(self) -> datetime | None: ...

    @property
    def value(self) -> float: ...


class DatedRecord(Protocol):
    @property
    def date(self) -> datetime | None: ...


RecordT = TypeVar("RecordT", bound=DatedRecord)


class MonthPeriod(Enum):
    """Look-back presets offered by the monthly progress chart."""

    THREE_MONTHS = "3M"
    SIX_MONTHS = "6M"
    ONE_YEAR = "1Y"

    @property
    def months(self) -> int:
        return {"3M": 3, "6M": 6, "1Y": 12}[self.value]


@dataclass(frozen=True)
class MonthBucket:
    """Average value for one calendar month and change from the month before."""

    month: date
    month_label: str
    average: float
    delta: float


@dataclass(frozen=True)
class MonthlySummary:
    """Headline numbers over a run of month buckets."""

    total_change: float
    average_monthly_change: float
    best_month: str


@dataclass(frozen=True)
class WeekGroup(Generic[RecordT]):
    """Records sharing a calendar week, newest first."""

    week_start: date
    week_label: str
    records: list[RecordT]


@dataclass(frozen=True)
class SeriesPoint:
    """A single chart point."""

    date: datetime
    value: float


def subtract_months(moment: datetime, months: int) -> datetime:
    """Step back whole calendar months, clamping to the target month's end."""
    index = moment.year * MONTHS_IN_YEAR + (moment.month - 1) - months
    year, month_zero = divmod(index, MONTHS_IN_YEAR)
    month = month_zero + 1
    day = min(moment.day, _days_in_month(year, month))
    return moment.replace(year=year, month=month, day=day)


def _days_in_month(year: int, month: int) -> int:
    if month == MONTHS_IN_YEAR:
        following = date(year + 1, 1, 1)
    else:
        following = date(year, month + 1, 1)
    return (following - date(year, month, 1)).days


def _localize(moment: datetime, tz: tzinfo | None) -> datetime:
    if moment.tzinfo is None:
        raise ValueError(f"Expected a timezone-aware datetime, got {moment!r}")
    return moment.astimezone(tz) if tz is not None else moment


def month_label(month: date) -> str:
    return MONTH_LABELS[month.month - 1]


def day_label(day: date) -> str:
    return f"{MONTH_LABELS[day.month - 1]} {day.day}"


def group_by_month(
    observations: Iterable[Observation], period_months: int, now: datetime
) -> list[MonthBucket]:
    """Average observations per local calendar month within the look-back."""
    cutoff = subtract_months(now, period_months)
    groups: dict[date, list[float]] = {}
    for observation in observations:
        if observation.date is None:
            continue
        local = _localize(observation.date, now.tzinfo)
        if local < cutoff:
            continue
        month = local.date().replace(day=1)
        groups.setdefault(month, []).append(float(observation.value))

    buckets: list[MonthBucket] = []
    previous: float | None = None
    for month in sorted(groups):
        values = groups[month]
        average = sum(values) / len(values)
        delta = 0.0 if previous is None else average - previous
        buckets.append(
            MonthBucket(
                month=month,
                month_label=month_label(month),
                average=average,
                delta=delta,
            )
        )
        previous = average
    return buckets


def summarize(buckets: Sequence[MonthBucket]) -> MonthlySummary:
    """Return total change, mean monthly change and the best month."""
    if not buckets:
        return MonthlySummary(
            total_change=0.0, average_monthly_change=0.0, best_month=NO_BEST_MONTH
        )
    deltas = [bucket.delta for bucket in buckets]
    # max() keeps the first of equal deltas, i.e. the earliest month.
    best = max(buckets, key=lambda bucket: bucket.delta)
    return MonthlySummary(
        total_change=buckets[-1].average - buckets[0].average,
        average_monthly_change=sum(deltas) / len(deltas),
        best_month=best.month_label,
    )


def group_by_week(
    records: Iterable[RecordT],
    week_start: int = WEEK_STARTS_SUNDAY,
    tz: tzinfo | None = None,
) -> list[WeekGroup[RecordT]]:
    """Group records by calendar week, newest week and record first.

    ``week_start`` uses ``date.weekday()`` numbering (Monday=0, Sunday=6).
    """
    groups: dict[date, list[tuple[datetime, RecordT]]] = {}
    for record in records:
        if record.date is None:
            continue
        local = _localize(record.date, tz)
        offset = (local.weekday() - week_start) % DAYS_IN_WEEK
        start = local.date() - timedelta(days=offset)
        groups.setdefault(start, []).append((local, record))

    result = []
    for start in sorted(groups, reverse=True):
        end = start + timedelta(days=DAYS_IN_WEEK - 1)
        entries = sorted(groups[start], key=lambda entry: entry[0], reverse=True)
        result.append(
            WeekGroup(
                week_start=start,
                week_label=f"{day_label(start)} - {day_label(end)}",
                records=[record for _, record in entries],
            )
        )
    return result


def to_series(
    observations: Iterable[Observation],
    year: int | None = None,
    tz: tzinfo | None = None,
) -> list[SeriesPoint]:
    """Return chart points in ascending date order, optionally for one year."""
    points = []
    for observation in observations:
        if observation.date is None:
            continue
        local = _localize(observation.date, tz)
        if year is not None and local.year != year:
            continue
        points.append(SeriesPoint(date=local, value=float(observation.value)))
    return sorted(points, key=lambda point: point.date)
