"""Tests for the weekly check-in service."""

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from coach_checkins.domain.errors import (
    CheckinNotAllowedError,
    NotRecordOwnerError,
    RecordNotFoundError,
)
from coach_checkins.domain.models import ImageUpload, Ratings

TZ = "Europe/London"


def _submit(container, user_id: str = "user-1", **overrides):
    payload = {
        "user_id": user_id,
        "name": "Alex",
        "weight": 82.5,
        "ratings": Ratings(calories=5, steps=3, protein=6, training=4),
        "timezone_name": TZ,
    }
    payload.update(overrides)
    return container.weekly_service.submit(**payload)


def test_status_before_submission(container) -> None:
    status = container.weekly_service.status("user-1", TZ)

    assert status.can_submit
    assert not status.completed_this_week
    assert status.countdown == "3d"
    assert status.show_reminder


def test_submit_stores_score_with_ratings(container, document_store) -> None:
    record = _submit(container, biggest_win="Hit my steps")

    assert record.final_score == 7.0
    stored = document_store.collections["updates"][record.id]
    assert stored["finalScore"] == 7.0
    assert stored["caloriesRating"] == 5
    assert stored["userId"] == "user-1"
    assert stored["biggestWin"] == "Hit my steps"


def test_submit_uploads_image(container, blob_store) -> None:
    record = _submit(
        container, image=ImageUpload(data=b"jpeg", content_type="image/jpeg")
    )

    assert record.image_url == "https://storage.test/checkin_images/1.jpg"
    assert blob_store.exists("checkin_images/1.jpg")


def test_second_submission_in_week_is_rejected(container) -> None:
    _submit(container)

    status = container.weekly_service.status("user-1", TZ)
    assert not status.can_submit
    assert status.completed_this_week
    assert not status.show_reminder
    with pytest.raises(CheckinNotAllowedError):
        _submit(container)


def test_other_users_do_not_block(container) -> None:
    _submit(container, user_id="user-2")
    assert container.weekly_service.status("user-1", TZ).can_submit


def test_new_week_reopens_submission(container, clock) -> None:
    _submit(container)

    clock.now = clock.now + timedelta(days=7)

    assert container.weekly_service.status("user-1", TZ).can_submit


def test_edit_recomputes_score_and_keeps_date(container) -> None:
    record = _submit(container)

    updated = container.weekly_service.edit(
        record.id, "user-1", ratings=Ratings(7, 7, 7, 5), weight=81.0
    )

    assert updated.final_score == 10.0
    assert updated.weight == 81.0
    assert updated.date == record.date
    assert updated.name == "Alex"


def test_edit_without_ratings_keeps_stored_score(container, document_store) -> None:
    record = _submit(container)
    document_store.collections["updates"][record.id]["finalScore"] = 6.2

    updated = container.weekly_service.edit(record.id, "user-1", issues="Sleep")

    assert updated.final_score == 6.2
    assert updated.issues == "Sleep"


def test_only_author_can_edit_or_delete(container) -> None:
    record = _submit(container)

    with pytest.raises(NotRecordOwnerError):
        container.weekly_service.edit(record.id, "coach", name="Changed")
    with pytest.raises(NotRecordOwnerError):
        container.weekly_service.delete(record.id, "coach")
    with pytest.raises(RecordNotFoundError):
        container.weekly_service.delete("missing", "user-1")

    container.weekly_service.delete(record.id, "user-1")
    assert container.weekly_service.status("user-1", TZ).can_submit


def test_list_grouped_by_week(container, document_store) -> None:
    london = ZoneInfo("Europe/London")
    for doc_id, moment in [
        ("old", datetime(2024, 3, 4, 9, tzinfo=london)),
        ("older", datetime(2024, 2, 26, 9, tzinfo=london)),
    ]:
        document_store.seed(
            "updates",
            doc_id,
            {"userId": "user-1", "date": moment.isoformat(), "weight": 80.0},
        )
    current = _submit(container)

    groups = container.weekly_service.list_grouped("user-1", TZ)

    assert [group.week_label for group in groups] == [
        "Mar 10 - Mar 16",
        "Mar 3 - Mar 9",
        "Feb 25 - Mar 2",
    ]
    assert groups[0].records[0].id == current.id


def test_dismissed_reminder_returns_next_week(container, clock) -> None:
    container.weekly_service.dismiss_reminder("user-1")
    assert not container.weekly_service.status("user-1", TZ).show_reminder

    clock.now = clock.now + timedelta(days=7)

    assert container.weekly_service.status("user-1", TZ).show_reminder
