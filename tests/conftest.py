"""Shared test fixtures."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

import pytest

from coach_checkins.adapters.records import parse_datetime
from coach_checkins.config import Settings
from coach_checkins.containers import AppContainer, wire_services
from coach_checkins.services.store import (
    BlobStore,
    Document,
    DocumentStore,
    Query,
    SnapshotCallback,
)

FIXED_NOW = datetime(2024, 3, 13, 12, 0, tzinfo=UTC)


@dataclass
class MutableClock:
    """Clock whose time tests can move."""

    now: datetime = FIXED_NOW

    def __call__(self) -> datetime:
        return self.now


def _comparable(value: object) -> object:
    if isinstance(value, datetime):
        return value
    parsed = parse_datetime(value) if isinstance(value, str) else None
    return parsed if parsed is not None else value


_COMPARATORS: dict[str, Callable[[object, object], bool]] = {
    "eq": lambda left, right: left == right,
    "gt": lambda left, right: left is not None and left > right,
    "gte": lambda left, right: left is not None and left >= right,
    "lt": lambda left, right: left is not None and left < right,
}


@dataclass(eq=False)
class _InMemoryLiveQuery:
    store: "InMemoryDocumentStore"
    query: Query
    callback: SnapshotCallback
    active: bool = True

    def cancel(self) -> None:
        self.active = False
        if self in self.store.live:
            self.store.live.remove(self)


@dataclass
class InMemoryDocumentStore(DocumentStore):
    """In-memory document store with live queries for tests."""

    collections: dict[str, dict[str, dict[str, object]]] = field(
        default_factory=dict
    )
    live: list[_InMemoryLiveQuery] = field(default_factory=list)
    writes: list[tuple[str, str, bool]] = field(default_factory=list)

    def seed(self, collection: str, doc_id: str, fields: dict[str, object]) -> None:
        self.collections.setdefault(collection, {})[doc_id] = dict(fields)

    def get(self, collection: str, doc_id: str) -> Document | None:
        fields = self.collections.get(collection, {}).get(doc_id)
        if fields is None:
            return None
        return Document(id=doc_id, fields=dict(fields))

    def query(self, query: Query) -> list[Document]:
        rows = [
            Document(id=doc_id, fields=dict(fields))
            for doc_id, fields in self.collections.get(query.collection, {}).items()
        ]
        for condition in query.filters:
            compare = _COMPARATORS[condition.op]
            expected = _comparable(condition.value)
            rows = [
                row
                for row in rows
                if compare(self._field(row, condition.field), expected)
            ]
        if query.order_by:
            order_by = query.order_by
            present = [row for row in rows if self._field(row, order_by) is not None]
            missing = [row for row in rows if self._field(row, order_by) is None]
            present.sort(
                key=lambda row: self._field(row, order_by),
                reverse=query.descending,
            )
            rows = present + missing
        if query.limit is not None:
            rows = rows[: query.limit]
        return rows

    def subscribe(
        self, query: Query, callback: SnapshotCallback
    ) -> _InMemoryLiveQuery:
        live = _InMemoryLiveQuery(store=self, query=query, callback=callback)
        self.live.append(live)
        callback(self.query(query))
        return live

    def write(
        self,
        collection: str,
        doc_id: str | None,
        fields: dict[str, object],
        merge: bool = False,
    ) -> str:
        resolved_id = doc_id or str(uuid4())
        table = self.collections.setdefault(collection, {})
        if merge and resolved_id in table:
            table[resolved_id] = {**table[resolved_id], **fields}
        else:
            table[resolved_id] = dict(fields)
        self.writes.append((collection, resolved_id, merge))
        self._notify(collection)
        return resolved_id

    def delete(self, collection: str, doc_id: str) -> None:
        self.collections.get(collection, {}).pop(doc_id, None)
        self._notify(collection)

    def _notify(self, collection: str) -> None:
        for live in list(self.live):
            if live.active and live.query.collection == collection:
                live.callback(self.query(live.query))

    @staticmethod
    def _field(row: Document, name: str) -> object:
        if name == "id":
            return row.id
        return _comparable(row.fields.get(name))


@dataclass
class FakeBlobStore(BlobStore):
    """Blob store that keeps uploads in memory."""

    objects: dict[str, bytes] = field(default_factory=dict)
    fail: bool = False

    def upload(
        self, data: bytes, content_type: str, folder: str | None = None
    ) -> str:
        if self.fail:
            raise RuntimeError("Upload failed")
        key = f"{folder or 'checkin_images'}/{len(self.objects) + 1}.jpg"
        self.objects[key] = data
        return f"https://storage.test/{key}"

    async def download(self, url: str) -> bytes:
        return self.objects[url.removeprefix("https://storage.test/")]

    def exists(self, key: str) -> bool:
        return key in self.objects


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="test.service.key",
        admin_token="admin-token",
        default_timezone="Europe/London",
    )


@pytest.fixture
def clock() -> MutableClock:
    return MutableClock()


@pytest.fixture
def document_store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def blob_store() -> FakeBlobStore:
    return FakeBlobStore()


@pytest.fixture
def container(
    settings: Settings,
    document_store: InMemoryDocumentStore,
    blob_store: FakeBlobStore,
    clock: MutableClock,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return wire_services(
        settings, document_store, blob_store, close_resources, clock=clock
    )
