"""Conversion between stored documents and domain records.

Field names follow the documents the mobile app has always written
(``userId``, ``date``, ``weight``, ``completedGoals`` ...), so every adapter
reads and writes through these helpers.
"""

from datetime import UTC, datetime

from coach_checkins.domain.models import (
    GOAL_FIELDS,
    CheckinRecord,
    CompletedGoal,
    DailyCheckinRecord,
    DailyGoalSet,
    DailyMealPlan,
    Ingredient,
    Meal,
    Ratings,
    UserProfile,
    UserRole,
    VisibilitySettings,
)
from coach_checkins.services.store import Document


def parse_datetime(value: object) -> datetime | None:
    """Parse a stored timestamp; naive values are taken as UTC."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def format_datetime(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.astimezone(UTC).isoformat()


def _as_int(value: object) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int | float):
        return int(value)
    if isinstance(value, str):
        try:
            return int(float(value))
        except ValueError:
            return 0
    return 0


def _as_float(value: object) -> float:
    if isinstance(value, int | float) and not isinstance(value, bool):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return 0.0
    return 0.0


def _as_text(value: object) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text or None


def decode_checkin(document: Document) -> CheckinRecord:
    fields = document.fields
    return CheckinRecord(
        id=document.id,
        user_id=str(fields.get("userId", "")),
        date=parse_datetime(fields.get("date")),
        name=str(fields.get("name") or ""),
        weight=_as_float(fields.get("weight")),
        ratings=Ratings(
            calories=_as_int(fields.get("caloriesRating")),
            steps=_as_int(fields.get("stepsRating")),
            protein=_as_int(fields.get("proteinRating")),
            training=_as_int(fields.get("trainingRating")),
        ),
        final_score=_as_float(fields.get("finalScore")),
        image_url=_as_text(fields.get("imageUrl")),
        biggest_win=_as_text(fields.get("biggestWin")),
        issues=_as_text(fields.get("issues")),
        extra_coach_request=_as_text(fields.get("extraCoachRequest")),
    )


def encode_checkin(record: CheckinRecord) -> dict[str, object]:
    return {
        "userId": record.user_id,
        "date": format_datetime(record.date),
        "name": record.name,
        "weight": record.weight,
        "imageUrl": record.image_url,
        "biggestWin": record.biggest_win,
        "issues": record.issues,
        "extraCoachRequest": record.extra_coach_request,
        "caloriesRating": record.ratings.calories,
        "stepsRating": record.ratings.steps,
        "proteinRating": record.ratings.protein,
        "trainingRating": record.ratings.training,
        "finalScore": record.final_score,
    }


def _decode_goal(raw: object) -> CompletedGoal | None:
    if not isinstance(raw, dict):
        return None
    goal_id = raw.get("goalId")
    if not goal_id:
        return None
    return CompletedGoal(
        id=str(raw.get("id") or ""),
        goal_id=str(goal_id),
        name=str(raw.get("name") or goal_id),
        completed=bool(raw.get("completed", False)),
    )


def decode_daily_checkin(document: Document) -> DailyCheckinRecord:
    fields = document.fields
    raw_goals = fields.get("completedGoals")
    goals = []
    if isinstance(raw_goals, list):
        goals = [goal for goal in map(_decode_goal, raw_goals) if goal is not None]
    raw_urls = fields.get("imageUrls")
    image_urls = [str(url) for url in raw_urls] if isinstance(raw_urls, list) else []
    return DailyCheckinRecord(
        id=document.id,
        user_id=str(fields.get("userId", "")),
        date=parse_datetime(fields.get("date")),
        completed_goals=goals,
        image_urls=image_urls,
        notes=_as_text(fields.get("notes")),
        timestamp=parse_datetime(fields.get("timestamp")),
    )


def encode_daily_checkin(record: DailyCheckinRecord) -> dict[str, object]:
    return {
        "userId": record.user_id,
        "date": format_datetime(record.date),
        "completedGoals": [
            {
                "id": goal.id,
                "goalId": goal.goal_id,
                "name": goal.name,
                "completed": goal.completed,
            }
            for goal in record.completed_goals
        ],
        "notes": record.notes,
        "imageUrls": list(record.image_urls),
        "timestamp": format_datetime(record.timestamp),
    }


def decode_goal_set(user_id: str, fields: dict[str, object]) -> DailyGoalSet:
    """Read the known goal fields; anything else in the document is ignored."""
    values = {}
    for name in GOAL_FIELDS:
        raw = fields.get(name)
        if isinstance(raw, str) and raw.strip():
            values[name] = raw.strip()
        else:
            values[name] = None
    return DailyGoalSet(user_id=user_id, **values)


def encode_goal_set(goal_set: DailyGoalSet) -> dict[str, object]:
    return {name: getattr(goal_set, name) or "" for name in GOAL_FIELDS}


def decode_visibility(document: Document) -> VisibilitySettings:
    fields = document.fields
    defaults = VisibilitySettings.default_for(document.id)

    def flag(key: str, default: bool) -> bool:
        raw = fields.get(key)
        return raw if isinstance(raw, bool) else default

    return VisibilitySettings(
        client_id=str(fields.get("clientId") or document.id),
        show_weekly_goals=flag("showWeeklyGoals", defaults.show_weekly_goals),
        show_progress_graph=flag("showProgressGraph", defaults.show_progress_graph),
        show_meal_plans=flag("showMealPlans", defaults.show_meal_plans),
        show_training_pdf=flag("showTrainingPDF", defaults.show_training_pdf),
        show_daily_checkins=flag("showDailyCheckins", defaults.show_daily_checkins),
        show_weekly_checkins=flag(
            "showWeeklyCheckins", defaults.show_weekly_checkins
        ),
        updated_at=parse_datetime(fields.get("updatedAt")),
    )


def encode_visibility(settings: VisibilitySettings) -> dict[str, object]:
    return {
        "clientId": settings.client_id,
        "showWeeklyGoals": settings.show_weekly_goals,
        "showProgressGraph": settings.show_progress_graph,
        "showMealPlans": settings.show_meal_plans,
        "showTrainingPDF": settings.show_training_pdf,
        "showDailyCheckins": settings.show_daily_checkins,
        "showWeeklyCheckins": settings.show_weekly_checkins,
        "updatedAt": format_datetime(settings.updated_at),
    }


def decode_user(document: Document) -> UserProfile | None:
    """Decode a user document; accounts without a known role are skipped."""
    fields = document.fields
    try:
        role = UserRole(fields.get("role"))
    except ValueError:
        return None
    return UserProfile(
        user_id=str(fields.get("userId") or document.id),
        first_name=str(fields.get("firstName") or ""),
        last_name=str(fields.get("lastName") or ""),
        email=str(fields.get("email") or ""),
        role=role,
        group_id=_as_text(fields.get("groupId")),
        profile_image_url=_as_text(fields.get("profileImageUrl")),
        created_at=parse_datetime(fields.get("createdAt")),
    )


def _decode_meal(raw: object) -> Meal | None:
    if not isinstance(raw, dict):
        return None
    ingredients = []
    raw_ingredients = raw.get("ingredients")
    if isinstance(raw_ingredients, list):
        for item in raw_ingredients:
            if isinstance(item, dict) and item.get("name"):
                ingredients.append(
                    Ingredient(
                        name=str(item["name"]), amount=str(item.get("amount", ""))
                    )
                )
    return Meal(
        meal_name=str(raw.get("mealName") or ""),
        ingredients=ingredients,
        image_url=_as_text(raw.get("imageUrl")),
    )


def decode_meal_plan(document: Document) -> DailyMealPlan:
    fields = document.fields
    meals = {}
    raw_meals = fields.get("meals")
    if isinstance(raw_meals, dict):
        for slot, raw in raw_meals.items():
            meal = _decode_meal(raw)
            if meal is not None:
                meals[str(slot)] = meal
    return DailyMealPlan(
        client_id=str(fields.get("clientId") or ""),
        day=str(fields.get("day") or ""),
        meals=meals,
        updated_at=parse_datetime(fields.get("updatedAt")),
    )


def encode_meal_plan(plan: DailyMealPlan) -> dict[str, object]:
    return {
        "clientId": plan.client_id,
        "day": plan.day,
        "meals": {
            slot: {
                "mealName": meal.meal_name,
                "imageUrl": meal.image_url,
                "ingredients": [
                    {"name": item.name, "amount": item.amount}
                    for item in meal.ingredients
                ],
            }
            for slot, meal in plan.meals.items()
        },
        "updatedAt": format_datetime(plan.updated_at),
    }
