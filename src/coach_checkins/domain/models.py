"""Domain models for coaching check-ins."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum


@dataclass(frozen=True)
class WeightObservation:
    """One weekly check-in's weight at a point in time."""

    date: datetime | None
    weight: float
    author_id: str

    @property
    def value(self) -> float:
        return self.weight


@dataclass(frozen=True)
class ScoreObservation:
    """One weekly check-in's composite score at a point in time."""

    date: datetime | None
    score: float

    @property
    def value(self) -> float:
        return self.score


@dataclass(frozen=True)
class Ratings:
    """Raw ordinal ratings captured with a weekly check-in."""

    calories: int
    steps: int
    protein: int
    training: int


@dataclass(frozen=True)
class CheckinRecord:
    """A weekly check-in submitted by a client."""

    id: str
    user_id: str
    date: datetime | None
    name: str
    weight: float
    ratings: Ratings
    final_score: float
    image_url: str | None = None
    biggest_win: str | None = None
    issues: str | None = None
    extra_coach_request: str | None = None

    def observation(self) -> WeightObservation:
        """Return the weight observation carried by this check-in."""
        return WeightObservation(
            date=self.date, weight=self.weight, author_id=self.user_id
        )


@dataclass(frozen=True)
class CompletedGoal:
    """Point-in-time copy of a goal inside a daily check-in."""

    goal_id: str
    name: str
    completed: bool
    id: str = ""


@dataclass(frozen=True)
class DailyCheckinRecord:
    """A daily check-in with goal completion and photos."""

    id: str
    user_id: str
    date: datetime | None
    completed_goals: list[CompletedGoal]
    image_urls: list[str]
    notes: str | None = None
    timestamp: datetime | None = None

    @property
    def completed_count(self) -> int:
        return sum(1 for goal in self.completed_goals if goal.completed)


@dataclass(frozen=True)
class GoalItem:
    """A configured daily goal as shown in the check-in composer."""

    goal_id: str
    name: str
    target: str


GOAL_FIELDS = ("calories", "steps", "protein", "training")
GOAL_DISPLAY_NAMES = {
    "calories": "Calories",
    "steps": "Steps",
    "protein": "Protein",
    "training": "Training",
}


@dataclass(frozen=True)
class DailyGoalSet:
    """Free-text daily targets configured for a user."""

    user_id: str
    calories: str | None = None
    steps: str | None = None
    protein: str | None = None
    training: str | None = None

    def items(self) -> list[GoalItem]:
        """Return the non-empty goals in display order."""
        goals = []
        for goal_id in GOAL_FIELDS:
            target = getattr(self, goal_id)
            if target:
                goals.append(
                    GoalItem(
                        goal_id=goal_id,
                        name=GOAL_DISPLAY_NAMES[goal_id],
                        target=target,
                    )
                )
        return goals


VISIBILITY_FIELDS = (
    "show_weekly_goals",
    "show_progress_graph",
    "show_meal_plans",
    "show_training_pdf",
    "show_daily_checkins",
    "show_weekly_checkins",
)


@dataclass(frozen=True)
class VisibilitySettings:
    """Dashboard sections a coach has enabled for a client."""

    client_id: str
    show_weekly_goals: bool = True
    show_progress_graph: bool = True
    show_meal_plans: bool = True
    show_training_pdf: bool = True
    show_daily_checkins: bool = True
    show_weekly_checkins: bool = True
    updated_at: datetime | None = None

    @classmethod
    def default_for(cls, client_id: str) -> "VisibilitySettings":
        return cls(client_id=client_id)

    def toggled(self, field_name: str) -> "VisibilitySettings":
        """Return a copy with one visibility flag flipped."""
        if field_name not in VISIBILITY_FIELDS:
            raise ValueError(f"Unknown visibility setting: {field_name}")
        return replace(self, **{field_name: not getattr(self, field_name)})


@dataclass(frozen=True)
class ImageUpload:
    """Raw image bytes staged for upload."""

    data: bytes
    content_type: str = "image/jpeg"


@dataclass(frozen=True)
class WeeklyStatus:
    """Weekly check-in eligibility as shown on the dashboard."""

    can_submit: bool
    completed_this_week: bool
    countdown: str
    show_reminder: bool



class UserRole(Enum):
    COACH = "coach"
    CLIENT = "client"


@dataclass(frozen=True)
class UserProfile:
    """A coach or client account as stored in the users collection."""

    user_id: str
    first_name: str
    last_name: str
    email: str
    role: UserRole
    group_id: str | None = None
    profile_image_url: str | None = None
    created_at: datetime | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


MEAL_PLAN_DAYS = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)


def normalize_day(day: str) -> str:
    """Return the canonical weekday name used as a meal plan key."""
    cleaned = day.strip().capitalize()
    if cleaned not in MEAL_PLAN_DAYS:
        raise ValueError(f"Unknown meal plan day: {day}")
    return cleaned


@dataclass(frozen=True)
class Ingredient:
    name: str
    amount: str


@dataclass(frozen=True)
class Meal:
    """One meal slot of a daily meal plan."""

    meal_name: str
    ingredients: list[Ingredient] = field(default_factory=list)
    image_url: str | None = None


@dataclass(frozen=True)
class DailyMealPlan:
    """Meals a coach has planned for one client on one weekday."""

    client_id: str
    day: str
    meals: dict[str, Meal] = field(default_factory=dict)
    updated_at: datetime | None = None

    def with_meal(
        self, slot: str, meal: Meal, updated_at: datetime
    ) -> "DailyMealPlan":
        """Return a copy with one slot replaced; other slots are kept."""
        return replace(
            self, meals={**self.meals, slot: meal}, updated_at=updated_at
        )
