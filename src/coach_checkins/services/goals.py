"""Daily goal settings."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from coach_checkins.domain.models import DailyGoalSet, GoalItem
from coach_checkins.services.store import Subscription

_logger = logging.getLogger(__name__)


class GoalRepository(Protocol):
    """Persistence interface for a user's daily goals."""

    def get(self, user_id: str) -> DailyGoalSet | None:
        """Return the stored goal set, if any."""

    def save(self, goal_set: DailyGoalSet) -> None:
        """Store the goal set, replacing every goal field."""

    def subscribe(
        self, user_id: str, callback: Callable[[DailyGoalSet | None], None]
    ) -> Subscription:
        """Deliver the goal set now and on every change."""


@dataclass
class DailyGoalService:
    """Service for reading and saving daily goals."""

    repository: GoalRepository

    def get(self, user_id: str) -> DailyGoalSet:
        """Return the user's goals, empty when never saved."""
        return self.repository.get(user_id) or DailyGoalSet(user_id=user_id)

    def save(self, goal_set: DailyGoalSet) -> DailyGoalSet:
        """Persist a goal set wholesale."""
        self.repository.save(goal_set)
        _logger.info("Daily goals saved: user=%s", goal_set.user_id)
        return goal_set

    def goal_items(self, user_id: str) -> list[GoalItem]:
        """Return the configured goals in display order."""
        return self.get(user_id).items()
