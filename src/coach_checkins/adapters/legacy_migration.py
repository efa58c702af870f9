"""One-off copy of daily check-ins out of the legacy collection."""

import logging

from coach_checkins.services.store import DocumentStore, Query

_logger = logging.getLogger(__name__)


def migrate_legacy_daily_checkins(
    store: DocumentStore,
    legacy_collection: str = "dailyCheckins",
    canonical_collection: str = "daily_checkins",
) -> int:
    """Copy legacy documents into the canonical collection.

    Documents whose id already exists in the canonical collection are left
    alone, so the migration can be re-run safely. Returns how many documents
    were copied.
    """
    copied = 0
    for document in store.query(Query(collection=legacy_collection)):
        if store.get(canonical_collection, document.id) is not None:
            continue
        store.write(canonical_collection, document.id, dict(document.fields))
        copied += 1
    _logger.info(
        "Migrated %s daily check-ins from %s to %s",
        copied,
        legacy_collection,
        canonical_collection,
    )
    return copied
