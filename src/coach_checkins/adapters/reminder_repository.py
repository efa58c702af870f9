"""Document-store repository for weekly reminder dismissals."""

from dataclasses import dataclass
from datetime import datetime

from coach_checkins.adapters.records import format_datetime, parse_datetime
from coach_checkins.services.store import DocumentStore
from coach_checkins.services.weekly_checkins import ReminderRepository


@dataclass
class StoreReminderRepository(ReminderRepository):
    """Last dismissal time per user."""

    store: DocumentStore
    collection: str = "reminder_dismissals"

    def get_dismissed_at(self, user_id: str) -> datetime | None:
        document = self.store.get(self.collection, user_id)
        if document is None:
            return None
        return parse_datetime(document.fields.get("dismissedAt"))

    def set_dismissed_at(self, user_id: str, dismissed_at: datetime) -> None:
        self.store.write(
            self.collection,
            user_id,
            {"userId": user_id, "dismissedAt": format_datetime(dismissed_at)},
        )
