"""Supabase-backed document store with in-process live queries."""

import logging
import threading
from dataclasses import dataclass, field
from datetime import UTC, datetime

from supabase import Client

from coach_checkins.services.store import (
    Document,
    DocumentStore,
    Query,
    SnapshotCallback,
)

_logger = logging.getLogger(__name__)


def _column_value(value: object) -> object:
    if isinstance(value, datetime):
        return value.astimezone(UTC).isoformat()
    return value


def _to_document(row: dict[str, object]) -> Document:
    fields = dict(row)
    doc_id = fields.pop("id", "")
    return Document(id=str(doc_id), fields=fields)


@dataclass(eq=False)
class _LiveQuery:
    store: "SupabaseDocumentStore"
    query: Query
    callback: SnapshotCallback
    active: bool = True

    def cancel(self) -> None:
        if not self.active:
            return
        self.active = False
        self.store._unregister(self)


@dataclass
class SupabaseDocumentStore(DocumentStore):
    """Supabase implementation where each collection is a table.

    Columns carry the document field names and ``id`` is the primary key.
    The sync client has no realtime channel, so live queries are re-run
    after every write or delete made through this store.
    """

    client: Client
    _live: dict[str, list[_LiveQuery]] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def get(self, collection: str, doc_id: str) -> Document | None:
        """Return a single row by id."""
        response = (
            self.client.table(collection)
            .select("*")
            .eq("id", doc_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _to_document(response.data[0])

    def query(self, query: Query) -> list[Document]:
        """Run a filtered, ordered select."""
        builder = self.client.table(query.collection).select("*")
        for condition in query.filters:
            builder = getattr(builder, condition.op)(
                condition.field, _column_value(condition.value)
            )
        if query.order_by:
            builder = builder.order(query.order_by, desc=query.descending)
        if query.limit is not None:
            builder = builder.limit(query.limit)
        response = builder.execute()
        return [_to_document(row) for row in response.data or []]

    def subscribe(self, query: Query, callback: SnapshotCallback) -> _LiveQuery:
        """Deliver the current result and keep the query live."""
        live = _LiveQuery(store=self, query=query, callback=callback)
        with self._lock:
            self._live.setdefault(query.collection, []).append(live)
        _logger.debug("Live query registered on %s", query.collection)
        self._deliver(live)
        return live

    def write(
        self,
        collection: str,
        doc_id: str | None,
        fields: dict[str, object],
        merge: bool = False,
    ) -> str:
        """Insert, merge into, or replace a row and return its id."""
        row = {key: _column_value(value) for key, value in fields.items()}
        table = self.client.table(collection)
        if doc_id is None:
            response = table.insert(row).execute()
            if not response.data:
                raise RuntimeError(f"Failed to create document in {collection}")
            written_id = str(response.data[0]["id"])
        elif merge:
            response = table.update(row).eq("id", doc_id).execute()
            if not response.data:
                table.upsert({"id": doc_id, **row}).execute()
            written_id = doc_id
        else:
            response = table.upsert({"id": doc_id, **row}).execute()
            if not response.data:
                raise RuntimeError(f"Failed to write document {doc_id}")
            written_id = doc_id
        self._notify(collection)
        return written_id

    def delete(self, collection: str, doc_id: str) -> None:
        """Delete a row by id."""
        self.client.table(collection).delete().eq("id", doc_id).execute()
        self._notify(collection)

    def live_count(self, collection: str) -> int:
        with self._lock:
            return len(self._live.get(collection, []))

    def _unregister(self, live: _LiveQuery) -> None:
        with self._lock:
            entries = self._live.get(live.query.collection, [])
            if live in entries:
                entries.remove(live)
        _logger.debug("Live query cancelled on %s", live.query.collection)

    def _notify(self, collection: str) -> None:
        with self._lock:
            entries = list(self._live.get(collection, []))
        for live in entries:
            self._deliver(live)

    def _deliver(self, live: _LiveQuery) -> None:
        if not live.active:
            return
        try:
            live.callback(self.query(live.query))
        except Exception:
            _logger.exception(
                "Live query listener failed for %s", live.query.collection
            )
