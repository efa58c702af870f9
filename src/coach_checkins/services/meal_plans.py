"""Daily meal plans written by coaches."""

import logging
from dataclasses import dataclass
from typing import Protocol

from coach_checkins.domain.models import (
    MEAL_PLAN_DAYS,
    DailyMealPlan,
    ImageUpload,
    Ingredient,
    Meal,
    normalize_day,
)
from coach_checkins.services.clock import Clock, utc_now
from coach_checkins.services.store import BlobStore

_logger = logging.getLogger(__name__)


class MealPlanRepository(Protocol):
    """Persistence interface for daily meal plans."""

    def get(self, client_id: str, day: str) -> DailyMealPlan | None:
        """Return the plan for one weekday, if any."""

    def list_for_client(self, client_id: str) -> list[DailyMealPlan]:
        """Return every stored plan of a client."""

    def save(self, plan: DailyMealPlan) -> None:
        """Store a plan."""


@dataclass
class MealPlanService:
    """Service for reading and updating meal plans slot by slot."""

    repository: MealPlanRepository
    blob_store: BlobStore
    clock: Clock = utc_now
    image_folder: str = "daily_meal_plans"

    def get(self, client_id: str, day: str) -> DailyMealPlan:
        """Return a day's plan, empty when nothing is planned."""
        resolved_day = normalize_day(day)
        plan = self.repository.get(client_id, resolved_day)
        return plan or DailyMealPlan(client_id=client_id, day=resolved_day)

    def week(self, client_id: str) -> list[DailyMealPlan]:
        """Return the client's stored plans from Monday to Sunday."""
        plans = [
            plan
            for plan in self.repository.list_for_client(client_id)
            if plan.day in MEAL_PLAN_DAYS
        ]
        return sorted(plans, key=lambda plan: MEAL_PLAN_DAYS.index(plan.day))

    def update_meal(  # noqa: PLR0913
        self,
        client_id: str,
        day: str,
        slot: str,
        meal_name: str,
        ingredients: list[Ingredient],
        image: ImageUpload | None = None,
    ) -> DailyMealPlan:
        """Replace one meal slot, leaving the day's other slots untouched.

        A slot saved without an image loses any image it had before.
        """
        resolved_day = normalize_day(day)
        resolved_slot = slot.strip()
        if not resolved_slot:
            raise ValueError("Meal slot must not be empty")

        image_url = None
        if image is not None:
            folder = f"{self.image_folder}/{client_id}/{resolved_day}/{resolved_slot}"
            image_url = self.blob_store.upload(
                image.data, image.content_type, folder=folder
            )
        current = self.repository.get(client_id, resolved_day) or DailyMealPlan(
            client_id=client_id, day=resolved_day
        )
        plan = current.with_meal(
            resolved_slot,
            Meal(meal_name=meal_name, ingredients=ingredients, image_url=image_url),
            self.clock(),
        )
        self.repository.save(plan)
        _logger.info(
            "Meal plan updated: client=%s day=%s slot=%s",
            client_id,
            resolved_day,
            resolved_slot,
        )
        return plan
