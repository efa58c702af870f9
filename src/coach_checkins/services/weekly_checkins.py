"""Weekly check-in submission, editing and eligibility."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Protocol
from zoneinfo import ZoneInfo

from coach_checkins.domain.aggregation import WeekGroup, group_by_week
from coach_checkins.domain.eligibility import (
    can_submit_weekly,
    has_completed_weekly_this_week,
    should_show_reminder,
    time_until_next_weekly,
    week_window,
)
from coach_checkins.domain.errors import (
    CheckinNotAllowedError,
    NotRecordOwnerError,
    RecordNotFoundError,
)
from coach_checkins.domain.models import (
    CheckinRecord,
    ImageUpload,
    Ratings,
    WeeklyStatus,
)
from coach_checkins.domain.scoring import compute_score
from coach_checkins.services.clock import Clock, local_now, utc_now
from coach_checkins.services.store import BlobStore, Subscription

_logger = logging.getLogger(__name__)


class WeeklyCheckinRepository(Protocol):
    """Persistence interface for weekly check-ins."""

    def list_for_user(self, user_id: str) -> list[CheckinRecord]:
        """Return a user's check-ins, newest first."""

    def list_between(
        self, user_id: str, start: datetime, end: datetime
    ) -> list[CheckinRecord]:
        """Return a user's check-ins dated in ``[start, end)``."""

    def get(self, checkin_id: str) -> CheckinRecord | None:
        """Return a check-in by id, if present."""

    def create(self, record: CheckinRecord) -> CheckinRecord:
        """Persist a new check-in and return it with its id."""

    def update(self, record: CheckinRecord) -> None:
        """Replace a stored check-in."""

    def delete(self, checkin_id: str) -> None:
        """Delete a check-in."""

    def subscribe(
        self, user_id: str, callback: Callable[[list[CheckinRecord]], None]
    ) -> Subscription:
        """Deliver the user's check-ins now and on every change."""


def build_weekly_status(
    now: datetime, history: list[CheckinRecord], dismissed_at: datetime | None
) -> WeeklyStatus:
    """Evaluate every weekly eligibility rule for the dashboard."""
    return WeeklyStatus(
        can_submit=can_submit_weekly(now, history),
        completed_this_week=has_completed_weekly_this_week(now, history),
        countdown=time_until_next_weekly(now),
        show_reminder=should_show_reminder(now, history, dismissed_at),
    )


class ReminderRepository(Protocol):
    """Persistence interface for weekly reminder dismissals."""

    def get_dismissed_at(self, user_id: str) -> datetime | None:
        """Return when the user last dismissed the reminder."""

    def set_dismissed_at(self, user_id: str, dismissed_at: datetime) -> None:
        """Record a reminder dismissal."""


@dataclass
class WeeklyCheckinService:
    """Service for weekly check-ins and their reminder."""

    repository: WeeklyCheckinRepository
    reminder_repository: ReminderRepository
    blob_store: BlobStore
    clock: Clock = utc_now

    def status(self, user_id: str, timezone_name: str) -> WeeklyStatus:
        """Return whether the user may check in this week."""
        now = local_now(self.clock, timezone_name)
        history = self.repository.list_between(user_id, *week_window(now))
        dismissed_at = self.reminder_repository.get_dismissed_at(user_id)
        return build_weekly_status(now, history, dismissed_at)

    def submit(  # noqa: PLR0913
        self,
        user_id: str,
        name: str,
        weight: float,
        ratings: Ratings,
        timezone_name: str,
        image: ImageUpload | None = None,
        biggest_win: str | None = None,
        issues: str | None = None,
        extra_coach_request: str | None = None,
    ) -> CheckinRecord:
        """Score and store a new weekly check-in."""
        now = local_now(self.clock, timezone_name)
        history = self.repository.list_between(user_id, *week_window(now))
        if not can_submit_weekly(now, history):
            _logger.info(
                "Weekly check-in rejected: user=%s already submitted", user_id
            )
            raise CheckinNotAllowedError("Weekly check-in already submitted")

        image_url = None
        if image is not None:
            image_url = self.blob_store.upload(image.data, image.content_type)

        record = self.repository.create(
            CheckinRecord(
                id="",
                user_id=user_id,
                date=now,
                name=name,
                weight=weight,
                ratings=ratings,
                final_score=compute_score(ratings),
                image_url=image_url,
                biggest_win=biggest_win,
                issues=issues,
                extra_coach_request=extra_coach_request,
            )
        )
        _logger.info(
            "Weekly check-in stored: user=%s id=%s score=%s",
            user_id,
            record.id,
            record.final_score,
        )
        return record

    def edit(  # noqa: PLR0913
        self,
        checkin_id: str,
        editor_id: str,
        *,
        name: str | None = None,
        weight: float | None = None,
        ratings: Ratings | None = None,
        date: datetime | None = None,
        image: ImageUpload | None = None,
        biggest_win: str | None = None,
        issues: str | None = None,
        extra_coach_request: str | None = None,
    ) -> CheckinRecord:
        """Apply an owner's changes; the stored date is kept unless given."""
        current = self._owned(checkin_id, editor_id)
        image_url = current.image_url
        if image is not None:
            image_url = self.blob_store.upload(image.data, image.content_type)
        resolved_ratings = ratings or current.ratings
        updated = replace(
            current,
            name=name if name is not None else current.name,
            weight=weight if weight is not None else current.weight,
            ratings=resolved_ratings,
            final_score=(
                compute_score(resolved_ratings)
                if ratings is not None
                else current.final_score
            ),
            date=date or current.date,
            image_url=image_url,
            biggest_win=(
                biggest_win if biggest_win is not None else current.biggest_win
            ),
            issues=issues if issues is not None else current.issues,
            extra_coach_request=(
                extra_coach_request
                if extra_coach_request is not None
                else current.extra_coach_request
            ),
        )
        self.repository.update(updated)
        _logger.info("Weekly check-in edited: id=%s", checkin_id)
        return updated

    def delete(self, checkin_id: str, user_id: str) -> None:
        """Delete an owner's check-in."""
        self._owned(checkin_id, user_id)
        self.repository.delete(checkin_id)
        _logger.info("Weekly check-in deleted: id=%s", checkin_id)

    def list_grouped(
        self, user_id: str, timezone_name: str
    ) -> list[WeekGroup[CheckinRecord]]:
        """Return the user's check-ins grouped by calendar week."""
        records = self.repository.list_for_user(user_id)
        return group_by_week(records, tz=ZoneInfo(timezone_name))

    def dismiss_reminder(self, user_id: str) -> None:
        """Hide the weekly reminder for the rest of the current week."""
        self.reminder_repository.set_dismissed_at(user_id, self.clock())

    def _owned(self, checkin_id: str, user_id: str) -> CheckinRecord:
        record = self.repository.get(checkin_id)
        if record is None:
            raise RecordNotFoundError(f"Weekly check-in {checkin_id} not found")
        if record.user_id != user_id:
            _logger.info(
                "Weekly check-in change rejected: id=%s user=%s", checkin_id, user_id
            )
            raise NotRecordOwnerError("Only the author can change this check-in")
        return record
