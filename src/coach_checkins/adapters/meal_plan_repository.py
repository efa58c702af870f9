"""Document-store repository for daily meal plans."""

from dataclasses import dataclass

from coach_checkins.adapters.records import decode_meal_plan, encode_meal_plan
from coach_checkins.domain.models import DailyMealPlan
from coach_checkins.services.meal_plans import MealPlanRepository
from coach_checkins.services.store import DocumentStore, Query


@dataclass
class StoreMealPlanRepository(MealPlanRepository):
    """One document per client and weekday, keyed ``<clientId>_<day>``."""

    store: DocumentStore
    collection: str = "daily_meal_plans"

    @staticmethod
    def document_id(client_id: str, day: str) -> str:
        return f"{client_id}_{day}"

    def get(self, client_id: str, day: str) -> DailyMealPlan | None:
        document = self.store.get(self.collection, self.document_id(client_id, day))
        return decode_meal_plan(document) if document else None

    def list_for_client(self, client_id: str) -> list[DailyMealPlan]:
        query = Query(collection=self.collection).where("clientId", "eq", client_id)
        return [decode_meal_plan(document) for document in self.store.query(query)]

    def save(self, plan: DailyMealPlan) -> None:
        """Merge-write the plan; ``meals`` already carries every slot."""
        self.store.write(
            self.collection,
            self.document_id(plan.client_id, plan.day),
            encode_meal_plan(plan),
            merge=True,
        )
