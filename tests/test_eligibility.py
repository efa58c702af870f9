"""Tests for check-in eligibility windows."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from coach_checkins.domain.eligibility import (
    can_submit_daily,
    can_submit_weekly,
    end_of_week,
    has_completed_weekly_this_week,
    should_show_reminder,
    start_of_day,
    start_of_week,
    time_until_next_weekly,
    weekday_index,
)

LONDON = ZoneInfo("Europe/London")
NEW_YORK = ZoneInfo("America/New_York")


@dataclass(frozen=True)
class Entry:
    date: datetime | None


def test_weekday_index_starts_on_sunday() -> None:
    sunday = datetime(2024, 3, 10, 9, tzinfo=LONDON)
    assert weekday_index(sunday) == 1
    assert weekday_index(sunday + timedelta(days=6)) == 7


def test_week_bounds_run_sunday_to_saturday() -> None:
    now = datetime(2024, 3, 13, 12, tzinfo=LONDON)
    assert start_of_week(now) == datetime(2024, 3, 10, tzinfo=LONDON)
    assert end_of_week(now) == datetime(2024, 3, 16, 23, 59, 59, tzinfo=LONDON)


def test_sunday_is_start_of_its_own_week() -> None:
    now = datetime(2024, 3, 10, 0, 0, tzinfo=LONDON)
    assert start_of_week(now) == now


def test_can_submit_weekly_with_empty_history() -> None:
    now = datetime(2024, 3, 13, 12, tzinfo=LONDON)
    assert can_submit_weekly(now, [])
    assert not has_completed_weekly_this_week(now, [])


def test_record_this_week_blocks_submission() -> None:
    now = datetime(2024, 3, 13, 12, tzinfo=LONDON)
    history = [Entry(datetime(2024, 3, 10, 0, 30, tzinfo=LONDON))]
    assert not can_submit_weekly(now, history)
    assert has_completed_weekly_this_week(now, history)


def test_records_outside_week_do_not_change_a_blocked_result() -> None:
    now = datetime(2024, 3, 13, 12, tzinfo=LONDON)
    history = [Entry(datetime(2024, 3, 12, 8, tzinfo=LONDON))]
    assert not can_submit_weekly(now, history)

    outside = [
        Entry(datetime(2024, 3, 9, 23, 59, 59, tzinfo=LONDON)),
        Entry(datetime(2024, 3, 17, 0, 0, tzinfo=LONDON)),
        Entry(datetime(2023, 3, 13, 12, tzinfo=LONDON)),
    ]
    for extra in outside:
        assert not can_submit_weekly(now, [*history, extra])


def test_record_from_last_saturday_does_not_block() -> None:
    now = datetime(2024, 3, 13, 12, tzinfo=LONDON)
    history = [Entry(datetime(2024, 3, 9, 23, 59, 59, tzinfo=LONDON))]
    assert can_submit_weekly(now, history)


def test_records_without_date_never_count() -> None:
    now = datetime(2024, 3, 13, 12, tzinfo=LONDON)
    assert can_submit_weekly(now, [Entry(None)])
    assert can_submit_daily(now, [Entry(None)])


def test_week_follows_local_calendar() -> None:
    # Saturday 22:00 in New York is already Sunday in London.
    stored = Entry(datetime(2024, 3, 10, 3, tzinfo=UTC))
    assert not can_submit_weekly(datetime(2024, 3, 13, 12, tzinfo=LONDON), [stored])
    assert can_submit_weekly(datetime(2024, 3, 13, 12, tzinfo=NEW_YORK), [stored])


def test_naive_now_is_rejected() -> None:
    with pytest.raises(ValueError):
        can_submit_weekly(datetime(2024, 3, 13, 12), [])


@pytest.mark.parametrize(
    ("now", "expected"),
    [
        (datetime(2024, 3, 10, 9, tzinfo=LONDON), "6d"),
        (datetime(2024, 3, 11, 9, tzinfo=LONDON), "5d"),
        (datetime(2024, 3, 13, 12, tzinfo=LONDON), "3d"),
        (datetime(2024, 3, 14, 12, tzinfo=LONDON), "2d"),
        (datetime(2024, 3, 15, 12, tzinfo=LONDON), "12h"),
        (datetime(2024, 3, 16, 20, tzinfo=LONDON), "3h"),
    ],
)
def test_time_until_next_weekly(now: datetime, expected: str) -> None:
    assert time_until_next_weekly(now) == expected


def test_saturday_evening_countdown_is_in_hours() -> None:
    now = datetime(2024, 3, 16, 20, tzinfo=NEW_YORK)
    assert time_until_next_weekly(now).endswith("h")


def test_reminder_shown_until_submitted_or_dismissed() -> None:
    now = datetime(2024, 3, 13, 12, tzinfo=LONDON)
    assert should_show_reminder(now, [], None)
    assert not should_show_reminder(
        now, [Entry(datetime(2024, 3, 11, tzinfo=LONDON))], None
    )
    assert not should_show_reminder(
        now, [], datetime(2024, 3, 12, 8, tzinfo=LONDON)
    )


def test_dismissal_from_last_week_does_not_hide_reminder() -> None:
    now = datetime(2024, 3, 13, 12, tzinfo=LONDON)
    last_week = datetime(2024, 3, 8, 18, tzinfo=LONDON)
    assert should_show_reminder(now, [], last_week)


def test_daily_eligibility() -> None:
    now = datetime(2024, 3, 13, 15, tzinfo=NEW_YORK)
    midnight = start_of_day(now)
    assert can_submit_daily(now, [])
    assert not can_submit_daily(now, [Entry(midnight + timedelta(hours=1))])
    assert can_submit_daily(now, [Entry(midnight - timedelta(seconds=1))])


def test_daily_window_uses_local_day() -> None:
    now = datetime(2024, 3, 13, 20, tzinfo=NEW_YORK)
    # 01:00 UTC on the 14th is still the 13th in New York.
    assert not can_submit_daily(now, [Entry(datetime(2024, 3, 14, 1, tzinfo=UTC))])
