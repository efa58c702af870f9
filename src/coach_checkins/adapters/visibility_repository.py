"""Document-store repository for client visibility settings."""

from collections.abc import Callable
from dataclasses import dataclass

from coach_checkins.adapters.records import decode_visibility, encode_visibility
from coach_checkins.domain.models import VisibilitySettings
from coach_checkins.services.store import (
    Document,
    DocumentStore,
    Query,
    Subscription,
)
from coach_checkins.services.visibility import VisibilityRepository


@dataclass
class StoreVisibilityRepository(VisibilityRepository):
    """Visibility settings keyed by client id."""

    store: DocumentStore
    collection: str = "client_settings"

    def get(self, client_id: str) -> VisibilitySettings | None:
        document = self.store.get(self.collection, client_id)
        return decode_visibility(document) if document else None

    def save(self, settings: VisibilitySettings) -> None:
        self.store.write(
            self.collection, settings.client_id, encode_visibility(settings)
        )

    def subscribe(
        self, client_id: str, callback: Callable[[VisibilitySettings | None], None]
    ) -> Subscription:
        def deliver(documents: list[Document]) -> None:
            callback(decode_visibility(documents[0]) if documents else None)

        query = Query(collection=self.collection, limit=1).where("id", "eq", client_id)
        return self.store.subscribe(query, deliver)
