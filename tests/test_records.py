"""Tests for document codecs."""

from datetime import UTC, datetime, timedelta, timezone

from coach_checkins.adapters.records import (
    decode_checkin,
    decode_daily_checkin,
    decode_goal_set,
    decode_meal_plan,
    decode_user,
    decode_visibility,
    encode_checkin,
    format_datetime,
    parse_datetime,
)
from coach_checkins.domain.models import CheckinRecord, Ratings, UserRole
from coach_checkins.services.store import Document


def test_parse_datetime_variants() -> None:
    assert parse_datetime("2024-03-13T12:00:00+00:00") == datetime(
        2024, 3, 13, 12, tzinfo=UTC
    )
    assert parse_datetime("2024-03-13T12:00:00").tzinfo == UTC
    assert parse_datetime("not a date") is None
    assert parse_datetime(None) is None
    assert parse_datetime("") is None


def test_format_datetime_normalises_to_utc() -> None:
    moment = datetime(2024, 3, 13, 12, tzinfo=timezone(timedelta(hours=-4)))
    assert format_datetime(moment) == "2024-03-13T16:00:00+00:00"
    assert format_datetime(None) is None


def test_decode_checkin_reads_app_field_names() -> None:
    document = Document(
        id="c1",
        fields={
            "userId": "user-1",
            "date": "2024-03-13T12:00:00+00:00",
            "name": "Alex",
            "weight": "82.4",
            "caloriesRating": 5,
            "stepsRating": 3.0,
            "proteinRating": "6",
            "trainingRating": True,
            "finalScore": 7.0,
            "imageUrl": "https://img/1.jpg",
            "biggestWin": "",
        },
    )

    record = decode_checkin(document)

    assert record.user_id == "user-1"
    assert record.weight == 82.4
    assert record.ratings == Ratings(calories=5, steps=3, protein=6, training=0)
    assert record.final_score == 7.0
    assert record.image_url == "https://img/1.jpg"
    assert record.biggest_win is None


def test_decode_checkin_with_bad_date() -> None:
    record = decode_checkin(Document(id="c1", fields={"date": "yesterday"}))
    assert record.date is None
    assert record.weight == 0.0


def test_encode_checkin_uses_app_field_names() -> None:
    record = CheckinRecord(
        id="c1",
        user_id="user-1",
        date=datetime(2024, 3, 13, 12, tzinfo=UTC),
        name="Alex",
        weight=80.0,
        ratings=Ratings(1, 2, 3, 4),
        final_score=4.2,
    )

    fields = encode_checkin(record)

    assert fields["userId"] == "user-1"
    assert fields["trainingRating"] == 4
    assert fields["finalScore"] == 4.2
    assert "id" not in fields


def test_decode_daily_checkin_skips_malformed_goals() -> None:
    document = Document(
        id="d1",
        fields={
            "userId": "user-1",
            "date": "2024-03-13T08:00:00+00:00",
            "completedGoals": [
                {"id": "g1", "goalId": "steps", "name": "Steps", "completed": True},
                {"name": "No id"},
                "junk",
            ],
            "imageUrls": ["https://img/1.jpg"],
        },
    )

    record = decode_daily_checkin(document)

    assert [goal.goal_id for goal in record.completed_goals] == ["steps"]
    assert record.completed_count == 1
    assert record.image_urls == ["https://img/1.jpg"]
    assert record.notes is None


def test_decode_goal_set_ignores_unknown_keys() -> None:
    goal_set = decode_goal_set(
        "user-1", {"calories": " 2000 ", "steps": "", "mood": "happy", "protein": 5}
    )

    assert goal_set.calories == "2000"
    assert goal_set.steps is None
    assert goal_set.protein is None
    assert [item.goal_id for item in goal_set.items()] == ["calories"]


def test_decode_visibility_fills_defaults() -> None:
    settings = decode_visibility(
        Document(id="client-1", fields={"showMealPlans": False, "showTrainingPDF": 0})
    )

    assert settings.client_id == "client-1"
    assert not settings.show_meal_plans
    assert settings.show_training_pdf
    assert settings.show_weekly_checkins


def test_decode_user_requires_known_role() -> None:
    coach = decode_user(
        Document(id="u1", fields={"firstName": "Sam", "role": "coach", "groupId": ""})
    )

    assert coach is not None
    assert coach.user_id == "u1"
    assert coach.role is UserRole.COACH
    assert coach.group_id is None
    assert decode_user(Document(id="u2", fields={"role": "owner"})) is None
    assert decode_user(Document(id="u3", fields={})) is None


def test_decode_meal_plan_skips_malformed_meals() -> None:
    plan = decode_meal_plan(
        Document(
            id="client-1_Monday",
            fields={
                "clientId": "client-1",
                "day": "Monday",
                "meals": {
                    "Meal 1": {
                        "mealName": "Oats",
                        "imageUrl": None,
                        "ingredients": [{"name": "Oats", "amount": "80g"}, {}],
                    },
                    "Meal 2": "junk",
                },
            },
        )
    )

    assert list(plan.meals) == ["Meal 1"]
    assert [item.name for item in plan.meals["Meal 1"].ingredients] == ["Oats"]
    assert plan.meals["Meal 1"].image_url is None
