"""Coach client rosters."""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Protocol

from coach_checkins.domain.errors import RecordNotFoundError
from coach_checkins.domain.models import UserProfile, UserRole
from coach_checkins.services.store import Subscription


class UserRepository(Protocol):
    """Persistence interface for user accounts."""

    def get(self, user_id: str) -> UserProfile | None:
        """Return a user by id, if present."""

    def list_group(self, group_id: str) -> list[UserProfile]:
        """Return every account in a coaching group."""

    def subscribe_group(
        self, group_id: str, callback: Callable[[list[UserProfile]], None]
    ) -> Subscription:
        """Deliver the group's accounts now and on every change."""


def clients_only(users: Iterable[UserProfile]) -> list[UserProfile]:
    return [user for user in users if user.role is UserRole.CLIENT]


@dataclass
class CoachRosterService:
    """Lists the clients that belong to a coach's group."""

    repository: UserRepository

    def clients(self, coach_id: str) -> list[UserProfile]:
        """Return the coach's clients; a coach without a group has none."""
        group_id = self._coach(coach_id).group_id
        if group_id is None:
            return []
        return clients_only(self.repository.list_group(group_id))

    def subscribe(
        self, group_id: str, callback: Callable[[list[UserProfile]], None]
    ) -> Subscription:
        """Follow a group's clients as accounts join or leave."""
        return self.repository.subscribe_group(
            group_id, lambda users: callback(clients_only(users))
        )

    def _coach(self, coach_id: str) -> UserProfile:
        coach = self.repository.get(coach_id)
        if coach is None or coach.role is not UserRole.COACH:
            raise RecordNotFoundError(f"Coach {coach_id} not found")
        return coach
