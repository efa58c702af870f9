"""Tests for coach rosters and daily meal plans."""

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from coach_checkins.api.app import create_app
from coach_checkins.domain.errors import RecordNotFoundError
from coach_checkins.domain.models import ImageUpload, Ingredient


def _seed_group(document_store) -> None:
    users = {
        "coach-1": ("Sam", "Coach", "coach"),
        "client-b": ("Bea", "Stone", "client"),
        "client-a": ("Alex", "Reed", "client"),
        "broken": ("Old", "Account", "admin"),
    }
    for user_id, (first_name, last_name, role) in users.items():
        document_store.seed(
            "users",
            user_id,
            {
                "userId": user_id,
                "firstName": first_name,
                "lastName": last_name,
                "email": f"{user_id}@example.com",
                "role": role,
                "groupId": "group-1",
            },
        )
    document_store.seed(
        "users",
        "client-z",
        {"userId": "client-z", "firstName": "Zed", "role": "client", "groupId": "g2"},
    )


def test_roster_lists_group_clients(container, document_store) -> None:
    _seed_group(document_store)

    clients = container.roster_service.clients("coach-1")

    assert [client.user_id for client in clients] == ["client-a", "client-b"]
    assert clients[0].full_name == "Alex Reed"


def test_roster_for_coach_without_group(container, document_store) -> None:
    document_store.seed("users", "coach-2", {"firstName": "Kim", "role": "coach"})

    assert container.roster_service.clients("coach-2") == []


def test_roster_rejects_unknown_coach(container, document_store) -> None:
    _seed_group(document_store)

    with pytest.raises(RecordNotFoundError):
        container.roster_service.clients("missing")
    with pytest.raises(RecordNotFoundError):
        container.roster_service.clients("client-a")


def test_roster_subscription_follows_new_clients(container, document_store) -> None:
    _seed_group(document_store)
    snapshots = []

    subscription = container.roster_service.subscribe("group-1", snapshots.append)
    document_store.write(
        "users",
        "client-c",
        {"firstName": "Cas", "role": "client", "groupId": "group-1"},
    )
    subscription.cancel()

    assert [[client.user_id for client in snapshot] for snapshot in snapshots] == [
        ["client-a", "client-b"],
        ["client-a", "client-b", "client-c"],
    ]


def test_update_meal_keeps_other_slots(container, document_store, clock) -> None:
    service = container.meal_plan_service
    service.update_meal(
        "client-1",
        "monday",
        "Meal 1",
        meal_name="Oats",
        ingredients=[Ingredient(name="Oats", amount="80g")],
    )
    clock.now = clock.now + timedelta(hours=1)

    plan = service.update_meal(
        "client-1", "Monday", "Snack 1", meal_name="Apple", ingredients=[]
    )

    assert plan.day == "Monday"
    assert sorted(plan.meals) == ["Meal 1", "Snack 1"]
    stored = document_store.collections["daily_meal_plans"]["client-1_Monday"]
    assert stored["clientId"] == "client-1"
    assert stored["meals"]["Meal 1"]["ingredients"] == [
        {"name": "Oats", "amount": "80g"}
    ]
    assert stored["updatedAt"] == "2024-03-13T13:00:00+00:00"
    assert document_store.writes[-1] == ("daily_meal_plans", "client-1_Monday", True)


def test_update_meal_uploads_image_under_slot_folder(container, blob_store) -> None:
    plan = container.meal_plan_service.update_meal(
        "client-1",
        "Tuesday",
        "Meal 2",
        meal_name="Chicken",
        ingredients=[],
        image=ImageUpload(data=b"meal-photo"),
    )

    (key,) = blob_store.objects
    assert key.startswith("daily_meal_plans/client-1/Tuesday/Meal 2/")
    assert plan.meals["Meal 2"].image_url == f"https://storage.test/{key}"


def test_resaving_slot_without_image_clears_it(container) -> None:
    service = container.meal_plan_service
    service.update_meal(
        "client-1",
        "Friday",
        "Meal 1",
        meal_name="Eggs",
        ingredients=[],
        image=ImageUpload(data=b"photo"),
    )

    plan = service.update_meal(
        "client-1", "Friday", "Meal 1", meal_name="Eggs", ingredients=[]
    )

    assert plan.meals["Meal 1"].image_url is None


def test_meal_plan_rejects_unknown_day_and_blank_slot(container) -> None:
    service = container.meal_plan_service

    with pytest.raises(ValueError):
        service.update_meal("client-1", "Funday", "Meal 1", "Eggs", [])
    with pytest.raises(ValueError):
        service.update_meal("client-1", "Monday", "  ", "Eggs", [])


def test_week_orders_plans_by_weekday(container) -> None:
    service = container.meal_plan_service
    for day in ["Sunday", "Monday", "Wednesday"]:
        service.update_meal("client-1", day, "Meal 1", meal_name=day, ingredients=[])
    service.update_meal("client-2", "Tuesday", "Meal 1", meal_name="x", ingredients=[])

    plans = service.week("client-1")

    assert [plan.day for plan in plans] == ["Monday", "Wednesday", "Sunday"]
    assert service.get("client-1", "thursday").meals == {}


def test_roster_endpoint(container, document_store) -> None:
    _seed_group(document_store)
    client = TestClient(create_app(container))

    response = client.get("/coaches/coach-1/clients")
    missing = client.get("/coaches/nobody/clients")

    assert response.status_code == 200
    assert [item["full_name"] for item in response.json()] == [
        "Alex Reed",
        "Bea Stone",
    ]
    assert missing.status_code == 404


def test_meal_plan_endpoints(container) -> None:
    client = TestClient(create_app(container))

    saved = client.put(
        "/clients/client-1/meal-plans/Monday/Meal 1",
        json={
            "meal_name": "Porridge",
            "ingredients": [{"name": "Oats", "amount": "80g"}],
            "image": {"data": "cGhvdG8="},
        },
    )
    day = client.get("/clients/client-1/meal-plans/monday")
    week = client.get("/clients/client-1/meal-plans")
    bad_day = client.get("/clients/client-1/meal-plans/someday")

    assert saved.status_code == 200
    meal = saved.json()["meals"]["Meal 1"]
    assert meal["ingredients"] == [{"name": "Oats", "amount": "80g"}]
    assert meal["image_url"].startswith("https://storage.test/daily_meal_plans/")
    assert day.json()["meals"]["Meal 1"]["meal_name"] == "Porridge"
    assert datetime.fromisoformat(day.json()["updated_at"]).tzinfo is not None
    assert [plan["day"] for plan in week.json()] == ["Monday"]
    assert bad_day.status_code == 400
