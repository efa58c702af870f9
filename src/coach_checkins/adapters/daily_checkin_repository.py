"""Document-store repository for daily check-ins."""

from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime

from coach_checkins.adapters.records import decode_daily_checkin, encode_daily_checkin
from coach_checkins.domain.models import DailyCheckinRecord
from coach_checkins.services.daily_checkins import DailyCheckinRepository
from coach_checkins.services.store import DocumentStore, Query, Subscription


@dataclass
class StoreDailyCheckinRepository(DailyCheckinRepository):
    """Daily check-ins kept in the canonical ``daily_checkins`` collection."""

    store: DocumentStore
    collection: str = "daily_checkins"

    def _user_query(self, user_id: str, limit: int | None = None) -> Query:
        return Query(
            collection=self.collection, order_by="date", descending=True, limit=limit
        ).where("userId", "eq", user_id)

    def list_for_user(
        self, user_id: str, limit: int | None = None
    ) -> list[DailyCheckinRecord]:
        """Return a user's daily check-ins, newest first."""
        documents = self.store.query(self._user_query(user_id, limit))
        return [decode_daily_checkin(document) for document in documents]

    def list_between(
        self, user_id: str, start: datetime, end: datetime
    ) -> list[DailyCheckinRecord]:
        query = (
            self._user_query(user_id)
            .where("date", "gte", start)
            .where("date", "lt", end)
        )
        return [decode_daily_checkin(doc) for doc in self.store.query(query)]

    def get(self, checkin_id: str) -> DailyCheckinRecord | None:
        document = self.store.get(self.collection, checkin_id)
        return decode_daily_checkin(document) if document else None

    def create(self, record: DailyCheckinRecord) -> DailyCheckinRecord:
        new_id = self.store.write(self.collection, None, encode_daily_checkin(record))
        return replace(record, id=new_id)

    def update(self, record: DailyCheckinRecord) -> None:
        self.store.write(self.collection, record.id, encode_daily_checkin(record))

    def delete(self, checkin_id: str) -> None:
        self.store.delete(self.collection, checkin_id)

    def subscribe(
        self, user_id: str, callback: Callable[[list[DailyCheckinRecord]], None]
    ) -> Subscription:
        return self.store.subscribe(
            self._user_query(user_id),
            lambda documents: callback(
                [decode_daily_checkin(doc) for doc in documents]
            ),
        )
