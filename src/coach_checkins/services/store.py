"""Remote document and blob store interfaces."""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

FILTER_OPERATORS = frozenset({"eq", "gt", "gte", "lt"})


@dataclass(frozen=True)
class Document:
    """A raw document as stored remotely."""

    id: str
    fields: dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class Filter:
    """A single field comparison."""

    field: str
    op: str
    value: object

    def __post_init__(self) -> None:
        if self.op not in FILTER_OPERATORS:
            raise ValueError(f"Unsupported filter operator: {self.op}")


@dataclass(frozen=True)
class Query:
    """A filtered, ordered read of one collection."""

    collection: str
    filters: tuple[Filter, ...] = ()
    order_by: str | None = None
    descending: bool = False
    limit: int | None = None

    def where(self, field_name: str, op: str, value: object) -> "Query":
        return Query(
            collection=self.collection,
            filters=(*self.filters, Filter(field_name, op, value)),
            order_by=self.order_by,
            descending=self.descending,
            limit=self.limit,
        )


SnapshotCallback = Callable[[list[Document]], None]


class Subscription(Protocol):
    """Handle for a live query."""

    def cancel(self) -> None:
        """Stop delivering snapshots. Safe to call more than once."""


class DocumentStore(Protocol):
    """Persistence interface for collections of documents."""

    def get(self, collection: str, doc_id: str) -> Document | None:
        """Return a single document, if present."""

    def query(self, query: Query) -> list[Document]:
        """Run a one-shot query."""

    def subscribe(self, query: Query, callback: SnapshotCallback) -> Subscription:
        """Deliver the query result now and again whenever it may have changed."""

    def write(
        self,
        collection: str,
        doc_id: str | None,
        fields: dict[str, object],
        merge: bool = False,
    ) -> str:
        """Create, replace or merge a document and return its id."""

    def delete(self, collection: str, doc_id: str) -> None:
        """Delete a document."""


class BlobStore(Protocol):
    """Interface for binary uploads such as check-in photos."""

    def upload(
        self, data: bytes, content_type: str, folder: str | None = None
    ) -> str:
        """Upload bytes, optionally under a folder, and return a download URL."""

    async def download(self, url: str) -> bytes:
        """Fetch the bytes behind a download URL."""

    def exists(self, key: str) -> bool:
        """Return True when an object with this key exists."""
