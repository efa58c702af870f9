"""Daily check-in lifecycle: draft, submit, edit and delete."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Protocol

from coach_checkins.domain.daily_checkins import (
    DailyCheckinDraft,
    draft_from_goals,
    merge_goals,
    validate_draft,
)
from coach_checkins.domain.eligibility import can_submit_daily, day_window
from coach_checkins.domain.errors import (
    CheckinNotAllowedError,
    DraftIncompleteError,
    NotRecordOwnerError,
    RecordNotFoundError,
)
from coach_checkins.domain.models import (
    CompletedGoal,
    DailyCheckinRecord,
    ImageUpload,
)
from coach_checkins.services.clock import Clock, local_now, utc_now
from coach_checkins.services.goals import DailyGoalService
from coach_checkins.services.store import BlobStore, Subscription

_logger = logging.getLogger(__name__)


class DailyCheckinRepository(Protocol):
    """Persistence interface for daily check-ins."""

    def list_for_user(
        self, user_id: str, limit: int | None = None
    ) -> list[DailyCheckinRecord]:
        """Return a user's daily check-ins, newest first."""

    def list_between(
        self, user_id: str, start: datetime, end: datetime
    ) -> list[DailyCheckinRecord]:
        """Return a user's daily check-ins dated in ``[start, end)``."""

    def get(self, checkin_id: str) -> DailyCheckinRecord | None:
        """Return a daily check-in by id, if present."""

    def create(self, record: DailyCheckinRecord) -> DailyCheckinRecord:
        """Persist a new daily check-in and return it with its id."""

    def update(self, record: DailyCheckinRecord) -> None:
        """Replace a stored daily check-in."""

    def delete(self, checkin_id: str) -> None:
        """Delete a daily check-in."""

    def subscribe(
        self, user_id: str, callback: Callable[[list[DailyCheckinRecord]], None]
    ) -> Subscription:
        """Deliver the user's daily check-ins now and on every change."""


@dataclass
class DailyCheckinService:
    """State machine for daily check-ins.

    A draft starts from the user's current goals, is submitted once per local
    calendar day and afterwards only its author may edit or delete it.
    """

    repository: DailyCheckinRepository
    goal_service: DailyGoalService
    blob_store: BlobStore
    clock: Clock = utc_now

    def can_submit(self, user_id: str, timezone_name: str) -> bool:
        """Return True when the user has not checked in today."""
        now = local_now(self.clock, timezone_name)
        todays = self.repository.list_between(user_id, *day_window(now))
        return can_submit_daily(now, todays)

    def start_draft(self, user_id: str, timezone_name: str) -> DailyCheckinDraft:
        """Open a draft with every configured goal unchecked."""
        if not self.can_submit(user_id, timezone_name):
            raise CheckinNotAllowedError("Daily check-in already submitted today")
        return draft_from_goals(user_id, self.goal_service.goal_items(user_id))

    def submit(
        self, draft: DailyCheckinDraft, timezone_name: str
    ) -> DailyCheckinRecord:
        """Upload staged photos and store the check-in.

        The draft is left untouched when validation, eligibility or an upload
        fails.
        """
        validate_draft(draft)
        if not self.can_submit(draft.user_id, timezone_name):
            _logger.info(
                "Daily check-in rejected: user=%s already submitted", draft.user_id
            )
            raise CheckinNotAllowedError("Daily check-in already submitted today")

        uploaded = self._upload_all(draft.images)
        now = local_now(self.clock, timezone_name)
        record = self.repository.create(
            DailyCheckinRecord(
                id="",
                user_id=draft.user_id,
                date=now,
                completed_goals=list(draft.completed_goals),
                image_urls=[*draft.image_urls, *uploaded],
                notes=draft.notes or None,
                timestamp=now,
            )
        )
        _logger.info(
            "Daily check-in stored: user=%s id=%s goals=%s/%s",
            record.user_id,
            record.id,
            record.completed_count,
            len(record.completed_goals),
        )
        return record

    def edit(  # noqa: PLR0913
        self,
        checkin_id: str,
        editor_id: str,
        completed_goals: list[CompletedGoal],
        notes: str | None,
        existing_image_urls: list[str],
        new_images: list[ImageUpload] | None = None,
    ) -> DailyCheckinRecord:
        """Apply an owner's edits; goal entries are merged, never dropped."""
        current = self._owned(checkin_id, editor_id)
        if not existing_image_urls and not new_images:
            raise DraftIncompleteError("A daily check-in needs at least one photo")
        uploaded = self._upload_all(new_images or [])
        updated = replace(
            current,
            completed_goals=merge_goals(current.completed_goals, completed_goals),
            notes=notes or None,
            image_urls=[*existing_image_urls, *uploaded],
            timestamp=self.clock(),
        )
        self.repository.update(updated)
        _logger.info("Daily check-in edited: id=%s", checkin_id)
        return updated

    def delete(self, checkin_id: str, user_id: str) -> None:
        """Delete an owner's daily check-in."""
        self._owned(checkin_id, user_id)
        self.repository.delete(checkin_id)
        _logger.info("Daily check-in deleted: id=%s", checkin_id)

    def list_for_user(
        self, user_id: str, limit: int | None = None
    ) -> list[DailyCheckinRecord]:
        """Return recent daily check-ins."""
        return self.repository.list_for_user(user_id, limit)

    def _upload_all(self, images: list[ImageUpload]) -> list[str]:
        return [
            self.blob_store.upload(image.data, image.content_type) for image in images
        ]

    def _owned(self, checkin_id: str, user_id: str) -> DailyCheckinRecord:
        record = self.repository.get(checkin_id)
        if record is None:
            raise RecordNotFoundError(f"Daily check-in {checkin_id} not found")
        if record.user_id != user_id:
            _logger.info(
                "Daily check-in change rejected: id=%s user=%s", checkin_id, user_id
            )
            raise NotRecordOwnerError("Only the author can change this check-in")
        return record
