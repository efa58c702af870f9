"""Pydantic request and response models for the check-in API."""

from datetime import datetime

from pydantic import AwareDatetime, Base64Bytes, BaseModel, Field

from coach_checkins.domain.aggregation import (
    MonthBucket,
    SeriesPoint,
    WeekGroup,
)
from coach_checkins.domain.models import (
    CheckinRecord,
    CompletedGoal,
    DailyCheckinRecord,
    DailyGoalSet,
    DailyMealPlan,
    GoalItem,
    ImageUpload,
    Ingredient,
    Meal,
    Ratings,
    UserProfile,
    VisibilitySettings,
    WeeklyStatus,
)
from coach_checkins.services.dashboard import DashboardState
from coach_checkins.services.progress import MonthlyProgress


class ImagePayload(BaseModel):
    """Base64-encoded image attached to a check-in."""

    data: Base64Bytes
    content_type: str = "image/jpeg"

    def to_upload(self) -> ImageUpload:
        return ImageUpload(data=self.data, content_type=self.content_type)


class RatingsPayload(BaseModel):
    """Weekly self-ratings; out-of-range values score zero."""

    calories: int
    steps: int
    protein: int
    training: int

    def to_ratings(self) -> Ratings:
        return Ratings(
            calories=self.calories,
            steps=self.steps,
            protein=self.protein,
            training=self.training,
        )


class WeeklyCheckinCreate(BaseModel):
    name: str
    weight: float
    ratings: RatingsPayload
    image: ImagePayload | None = None
    biggest_win: str | None = None
    issues: str | None = None
    extra_coach_request: str | None = None


class WeeklyCheckinUpdate(BaseModel):
    name: str | None = None
    weight: float | None = None
    ratings: RatingsPayload | None = None
    date: AwareDatetime | None = None
    image: ImagePayload | None = None
    biggest_win: str | None = None
    issues: str | None = None
    extra_coach_request: str | None = None


class WeeklyCheckinOut(BaseModel):
    """A stored weekly check-in."""

    id: str
    user_id: str
    date: datetime | None
    name: str
    weight: float
    ratings: RatingsPayload
    final_score: float
    image_url: str | None
    biggest_win: str | None
    issues: str | None
    extra_coach_request: str | None

    @classmethod
    def from_record(cls, record: CheckinRecord) -> "WeeklyCheckinOut":
        return cls(
            id=record.id,
            user_id=record.user_id,
            date=record.date,
            name=record.name,
            weight=record.weight,
            ratings=RatingsPayload(
                calories=record.ratings.calories,
                steps=record.ratings.steps,
                protein=record.ratings.protein,
                training=record.ratings.training,
            ),
            final_score=record.final_score,
            image_url=record.image_url,
            biggest_win=record.biggest_win,
            issues=record.issues,
            extra_coach_request=record.extra_coach_request,
        )


class WeekGroupOut(BaseModel):
    week_start: str
    week_label: str
    checkins: list[WeeklyCheckinOut]

    @classmethod
    def from_group(cls, group: WeekGroup[CheckinRecord]) -> "WeekGroupOut":
        return cls(
            week_start=group.week_start.isoformat(),
            week_label=group.week_label,
            checkins=[WeeklyCheckinOut.from_record(r) for r in group.records],
        )


class WeeklyStatusOut(BaseModel):
    can_submit: bool
    completed_this_week: bool
    countdown: str
    show_reminder: bool

    @classmethod
    def from_status(cls, status: WeeklyStatus) -> "WeeklyStatusOut":
        return cls(
            can_submit=status.can_submit,
            completed_this_week=status.completed_this_week,
            countdown=status.countdown,
            show_reminder=status.show_reminder,
        )


class GoalEntry(BaseModel):
    """A goal ticked (or not) inside a daily check-in."""

    goal_id: str
    name: str
    completed: bool = False
    id: str = ""

    def to_goal(self) -> CompletedGoal:
        return CompletedGoal(
            goal_id=self.goal_id, name=self.name, completed=self.completed, id=self.id
        )

    @classmethod
    def from_goal(cls, goal: CompletedGoal) -> "GoalEntry":
        return cls(
            goal_id=goal.goal_id, name=goal.name, completed=goal.completed, id=goal.id
        )


class DailyCheckinCreate(BaseModel):
    completed_goals: list[GoalEntry]
    notes: str = ""
    image_urls: list[str] = Field(default_factory=list)
    images: list[ImagePayload] = Field(default_factory=list)


class DailyCheckinUpdate(BaseModel):
    completed_goals: list[GoalEntry] = Field(default_factory=list)
    notes: str | None = None
    image_urls: list[str] = Field(default_factory=list)
    images: list[ImagePayload] = Field(default_factory=list)


class DailyCheckinOut(BaseModel):
    id: str
    user_id: str
    date: datetime | None
    completed_goals: list[GoalEntry]
    completed_count: int
    image_urls: list[str]
    notes: str | None
    timestamp: datetime | None

    @classmethod
    def from_record(cls, record: DailyCheckinRecord) -> "DailyCheckinOut":
        return cls(
            id=record.id,
            user_id=record.user_id,
            date=record.date,
            completed_goals=[GoalEntry.from_goal(g) for g in record.completed_goals],
            completed_count=record.completed_count,
            image_urls=list(record.image_urls),
            notes=record.notes,
            timestamp=record.timestamp,
        )


class DailyDraftOut(BaseModel):
    user_id: str
    completed_goals: list[GoalEntry]


class GoalItemOut(BaseModel):
    goal_id: str
    name: str
    target: str

    @classmethod
    def from_item(cls, item: GoalItem) -> "GoalItemOut":
        return cls(goal_id=item.goal_id, name=item.name, target=item.target)


class GoalSetPayload(BaseModel):
    """Free-text daily targets; empty strings clear a goal."""

    calories: str | None = None
    steps: str | None = None
    protein: str | None = None
    training: str | None = None

    def to_goal_set(self, user_id: str) -> DailyGoalSet:
        def cleaned(value: str | None) -> str | None:
            return (value or "").strip() or None

        return DailyGoalSet(
            user_id=user_id,
            calories=cleaned(self.calories),
            steps=cleaned(self.steps),
            protein=cleaned(self.protein),
            training=cleaned(self.training),
        )


class GoalSetOut(GoalSetPayload):
    user_id: str
    items: list[GoalItemOut]

    @classmethod
    def from_goal_set(cls, goal_set: DailyGoalSet) -> "GoalSetOut":
        return cls(
            user_id=goal_set.user_id,
            calories=goal_set.calories,
            steps=goal_set.steps,
            protein=goal_set.protein,
            training=goal_set.training,
            items=[GoalItemOut.from_item(item) for item in goal_set.items()],
        )


class VisibilityPayload(BaseModel):
    show_weekly_goals: bool = True
    show_progress_graph: bool = True
    show_meal_plans: bool = True
    show_training_pdf: bool = True
    show_daily_checkins: bool = True
    show_weekly_checkins: bool = True

    def to_settings(self, client_id: str) -> VisibilitySettings:
        return VisibilitySettings(client_id=client_id, **self.model_dump())


class VisibilityOut(VisibilityPayload):
    client_id: str
    updated_at: datetime | None = None

    @classmethod
    def from_settings(cls, settings: VisibilitySettings) -> "VisibilityOut":
        return cls(
            client_id=settings.client_id,
            show_weekly_goals=settings.show_weekly_goals,
            show_progress_graph=settings.show_progress_graph,
            show_meal_plans=settings.show_meal_plans,
            show_training_pdf=settings.show_training_pdf,
            show_daily_checkins=settings.show_daily_checkins,
            show_weekly_checkins=settings.show_weekly_checkins,
            updated_at=settings.updated_at,
        )


class MonthBucketOut(BaseModel):
    month: str
    label: str
    average: float
    delta: float

    @classmethod
    def from_bucket(cls, bucket: MonthBucket) -> "MonthBucketOut":
        return cls(
            month=bucket.month.isoformat(),
            label=bucket.month_label,
            average=bucket.average,
            delta=bucket.delta,
        )


class MonthlyProgressOut(BaseModel):
    period: str
    buckets: list[MonthBucketOut]
    total_change: float
    average_monthly_change: float
    best_month: str

    @classmethod
    def from_progress(cls, progress: MonthlyProgress) -> "MonthlyProgressOut":
        return cls(
            period=progress.period.value,
            buckets=[MonthBucketOut.from_bucket(b) for b in progress.buckets],
            total_change=progress.summary.total_change,
            average_monthly_change=progress.summary.average_monthly_change,
            best_month=progress.summary.best_month,
        )


class SeriesPointOut(BaseModel):
    date: datetime
    value: float

    @classmethod
    def from_point(cls, point: SeriesPoint) -> "SeriesPointOut":
        return cls(date=point.date, value=point.value)


class DashboardOut(BaseModel):
    """Snapshot of everything the client dashboard shows."""

    user_id: str
    weekly_status: WeeklyStatusOut | None
    can_submit_daily: bool
    goals: list[GoalItemOut]
    visibility: VisibilityOut | None
    weekly_checkins: list[WeeklyCheckinOut]
    daily_checkins: list[DailyCheckinOut]

    @classmethod
    def from_state(cls, state: DashboardState) -> "DashboardOut":
        return cls(
            user_id=state.user_id,
            weekly_status=(
                WeeklyStatusOut.from_status(state.weekly_status)
                if state.weekly_status
                else None
            ),
            can_submit_daily=state.can_submit_daily,
            goals=[GoalItemOut.from_item(item) for item in state.goals],
            visibility=(
                VisibilityOut.from_settings(state.visibility)
                if state.visibility
                else None
            ),
            weekly_checkins=[
                WeeklyCheckinOut.from_record(r) for r in state.weekly_checkins
            ],
            daily_checkins=[
                DailyCheckinOut.from_record(r) for r in state.daily_checkins
            ],
        )


class ClientOut(BaseModel):
    """A client listed on a coach's roster."""

    user_id: str
    first_name: str
    last_name: str
    full_name: str
    email: str
    group_id: str | None
    profile_image_url: str | None

    @classmethod
    def from_profile(cls, profile: UserProfile) -> "ClientOut":
        return cls(
            user_id=profile.user_id,
            first_name=profile.first_name,
            last_name=profile.last_name,
            full_name=profile.full_name,
            email=profile.email,
            group_id=profile.group_id,
            profile_image_url=profile.profile_image_url,
        )


class IngredientPayload(BaseModel):
    name: str
    amount: str = ""

    def to_ingredient(self) -> Ingredient:
        return Ingredient(name=self.name, amount=self.amount)


class MealPayload(BaseModel):
    """Contents of one meal slot; omitting the image clears it."""

    meal_name: str
    ingredients: list[IngredientPayload] = Field(default_factory=list)
    image: ImagePayload | None = None


class MealOut(BaseModel):
    meal_name: str
    ingredients: list[IngredientPayload]
    image_url: str | None

    @classmethod
    def from_meal(cls, meal: Meal) -> "MealOut":
        return cls(
            meal_name=meal.meal_name,
            ingredients=[
                IngredientPayload(name=item.name, amount=item.amount)
                for item in meal.ingredients
            ],
            image_url=meal.image_url,
        )


class MealPlanOut(BaseModel):
    client_id: str
    day: str
    meals: dict[str, MealOut]
    updated_at: datetime | None

    @classmethod
    def from_plan(cls, plan: DailyMealPlan) -> "MealPlanOut":
        return cls(
            client_id=plan.client_id,
            day=plan.day,
            meals={slot: MealOut.from_meal(meal) for slot, meal in plan.meals.items()},
            updated_at=plan.updated_at,
        )
