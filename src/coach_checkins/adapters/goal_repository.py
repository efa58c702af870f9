"""Document-store repository for daily goals."""

from collections.abc import Callable
from dataclasses import dataclass

from coach_checkins.adapters.records import decode_goal_set, encode_goal_set
from coach_checkins.domain.models import DailyGoalSet
from coach_checkins.services.goals import GoalRepository
from coach_checkins.services.store import (
    Document,
    DocumentStore,
    Query,
    Subscription,
)


@dataclass
class StoreGoalRepository(GoalRepository):
    """One goal document per user, keyed by the user id."""

    store: DocumentStore
    collection: str = "daily_goals"

    def get(self, user_id: str) -> DailyGoalSet | None:
        document = self.store.get(self.collection, user_id)
        if document is None:
            return None
        return decode_goal_set(user_id, document.fields)

    def save(self, goal_set: DailyGoalSet) -> None:
        """Merge-write every goal field; cleared goals are stored as empty."""
        self.store.write(
            self.collection, goal_set.user_id, encode_goal_set(goal_set), merge=True
        )

    def subscribe(
        self, user_id: str, callback: Callable[[DailyGoalSet | None], None]
    ) -> Subscription:
        def deliver(documents: list[Document]) -> None:
            if not documents:
                callback(None)
                return
            callback(decode_goal_set(user_id, documents[0].fields))

        query = Query(collection=self.collection, limit=1).where("id", "eq", user_id)
        return self.store.subscribe(query, deliver)
