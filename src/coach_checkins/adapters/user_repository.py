"""Document-store repository for user accounts."""

from collections.abc import Callable
from dataclasses import dataclass

from coach_checkins.adapters.records import decode_user
from coach_checkins.domain.models import UserProfile
from coach_checkins.services.roster import UserRepository
from coach_checkins.services.store import (
    Document,
    DocumentStore,
    Query,
    Subscription,
)


def _decode_all(documents: list[Document]) -> list[UserProfile]:
    return [user for user in map(decode_user, documents) if user is not None]


@dataclass
class StoreUserRepository(UserRepository):
    """Accounts keyed by user id in the ``users`` collection."""

    store: DocumentStore
    collection: str = "users"

    def _group_query(self, group_id: str) -> Query:
        return Query(collection=self.collection, order_by="firstName").where(
            "groupId", "eq", group_id
        )

    def get(self, user_id: str) -> UserProfile | None:
        document = self.store.get(self.collection, user_id)
        return decode_user(document) if document else None

    def list_group(self, group_id: str) -> list[UserProfile]:
        return _decode_all(self.store.query(self._group_query(group_id)))

    def subscribe_group(
        self, group_id: str, callback: Callable[[list[UserProfile]], None]
    ) -> Subscription:
        return self.store.subscribe(
            self._group_query(group_id),
            lambda documents: callback(_decode_all(documents)),
        )
