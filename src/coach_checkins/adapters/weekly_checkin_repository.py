"""Document-store repository for weekly check-ins."""

from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime

from coach_checkins.adapters.records import decode_checkin, encode_checkin
from coach_checkins.domain.models import CheckinRecord
from coach_checkins.services.store import DocumentStore, Query, Subscription
from coach_checkins.services.weekly_checkins import WeeklyCheckinRepository


@dataclass
class StoreWeeklyCheckinRepository(WeeklyCheckinRepository):
    """Weekly check-ins kept in the ``updates`` collection."""

    store: DocumentStore
    collection: str = "updates"

    def _user_query(self, user_id: str) -> Query:
        return Query(
            collection=self.collection, order_by="date", descending=True
        ).where("userId", "eq", user_id)

    def list_for_user(self, user_id: str) -> list[CheckinRecord]:
        """Return a user's check-ins, newest first."""
        documents = self.store.query(self._user_query(user_id))
        return [decode_checkin(document) for document in documents]

    def list_between(
        self, user_id: str, start: datetime, end: datetime
    ) -> list[CheckinRecord]:
        """Return a user's check-ins dated in ``[start, end)``."""
        query = (
            self._user_query(user_id)
            .where("date", "gte", start)
            .where("date", "lt", end)
        )
        return [decode_checkin(document) for document in self.store.query(query)]

    def get(self, checkin_id: str) -> CheckinRecord | None:
        document = self.store.get(self.collection, checkin_id)
        return decode_checkin(document) if document else None

    def create(self, record: CheckinRecord) -> CheckinRecord:
        """Write a new check-in and return it with the assigned id."""
        new_id = self.store.write(self.collection, None, encode_checkin(record))
        return replace(record, id=new_id)

    def update(self, record: CheckinRecord) -> None:
        self.store.write(self.collection, record.id, encode_checkin(record))

    def delete(self, checkin_id: str) -> None:
        self.store.delete(self.collection, checkin_id)

    def subscribe(
        self, user_id: str, callback: Callable[[list[CheckinRecord]], None]
    ) -> Subscription:
        """Deliver the user's check-ins now and on every change."""
        return self.store.subscribe(
            self._user_query(user_id),
            lambda documents: callback([decode_checkin(doc) for doc in documents]),
        )
