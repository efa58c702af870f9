"""Live client dashboard state."""

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from types import TracebackType

from coach_checkins.domain.eligibility import can_submit_daily
from coach_checkins.domain.models import (
    CheckinRecord,
    DailyCheckinRecord,
    DailyGoalSet,
    GoalItem,
    VisibilitySettings,
    WeeklyStatus,
)
from coach_checkins.services.clock import Clock, local_now, utc_now
from coach_checkins.services.daily_checkins import DailyCheckinRepository
from coach_checkins.services.goals import GoalRepository
from coach_checkins.services.subscriptions import SubscriptionScope
from coach_checkins.services.visibility import VisibilityRepository
from coach_checkins.services.weekly_checkins import (
    ReminderRepository,
    WeeklyCheckinRepository,
    build_weekly_status,
)

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DashboardState:
    """Everything the client dashboard renders, derived from live snapshots."""

    user_id: str
    weekly_checkins: list[CheckinRecord] = field(default_factory=list)
    daily_checkins: list[DailyCheckinRecord] = field(default_factory=list)
    goals: list[GoalItem] = field(default_factory=list)
    visibility: VisibilitySettings | None = None
    weekly_status: WeeklyStatus | None = None
    can_submit_daily: bool = True


@dataclass
class ClientDashboard:
    """Keeps a client's dashboard in sync with the remote store.

    Each source is an independent live query; snapshots arrive in any order
    and the derived fields are recomputed from whatever has loaded so far.
    """

    weekly_repository: WeeklyCheckinRepository
    daily_repository: DailyCheckinRepository
    goal_repository: GoalRepository
    visibility_repository: VisibilityRepository
    reminder_repository: ReminderRepository
    timezone_name: str
    clock: Clock = utc_now
    scope: SubscriptionScope = field(default_factory=SubscriptionScope)
    state: DashboardState | None = field(default=None, init=False)
    _dismissed_at: datetime | None = field(default=None, init=False)

    def open(self, user_id: str) -> DashboardState:
        """Follow a user's data, dropping any listeners from a previous user."""
        if self.scope.closed:
            raise RuntimeError("Dashboard is closed")
        self.scope.reset()
        self.state = DashboardState(
            user_id=user_id,
            visibility=VisibilitySettings.default_for(user_id),
        )
        self._dismissed_at = self.reminder_repository.get_dismissed_at(user_id)
        self._recompute()
        self.scope.listen(
            lambda deliver: self.weekly_repository.subscribe(user_id, deliver),
            self._on_weekly,
        )
        self.scope.listen(
            lambda deliver: self.daily_repository.subscribe(user_id, deliver),
            self._on_daily,
        )
        self.scope.listen(
            lambda deliver: self.goal_repository.subscribe(user_id, deliver),
            self._on_goals,
        )
        self.scope.listen(
            lambda deliver: self.visibility_repository.subscribe(user_id, deliver),
            self._on_visibility,
        )
        _logger.info("Dashboard listening: user=%s", user_id)
        return self.state

    def switch_user(self, user_id: str) -> DashboardState:
        """Follow another user."""
        return self.open(user_id)

    def dismiss_reminder(self) -> None:
        """Hide the weekly reminder for the rest of this week."""
        if self.state is None:
            return
        self._dismissed_at = self.clock()
        self.reminder_repository.set_dismissed_at(
            self.state.user_id, self._dismissed_at
        )
        self._recompute()

    def close(self) -> None:
        self.scope.close()

    def __enter__(self) -> "ClientDashboard":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    def _on_weekly(self, records: list[CheckinRecord]) -> None:
        self._apply(weekly_checkins=list(records))

    def _on_daily(self, records: list[DailyCheckinRecord]) -> None:
        self._apply(daily_checkins=list(records))

    def _on_goals(self, goal_set: DailyGoalSet | None) -> None:
        self._apply(goals=goal_set.items() if goal_set else [])

    def _on_visibility(self, settings: VisibilitySettings | None) -> None:
        if self.state is None:
            return
        self._apply(
            visibility=settings or VisibilitySettings.default_for(self.state.user_id)
        )

    def _apply(self, **changes: object) -> None:
        if self.state is None or self.scope.closed:
            return
        self.state = replace(self.state, **changes)
        self._recompute()

    def _recompute(self) -> None:
        if self.state is None:
            return
        now = local_now(self.clock, self.timezone_name)
        weekly = self.state.weekly_checkins
        self.state = replace(
            self.state,
            weekly_status=build_weekly_status(now, weekly, self._dismissed_at),
            can_submit_daily=can_submit_daily(now, self.state.daily_checkins),
        )
