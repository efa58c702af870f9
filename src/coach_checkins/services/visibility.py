"""Coach-controlled dashboard visibility."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Protocol

from coach_checkins.domain.models import VisibilitySettings
from coach_checkins.services.clock import Clock, utc_now
from coach_checkins.services.store import Subscription

_logger = logging.getLogger(__name__)


class VisibilityRepository(Protocol):
    """Persistence interface for client visibility settings."""

    def get(self, client_id: str) -> VisibilitySettings | None:
        """Return stored settings, if any."""

    def save(self, settings: VisibilitySettings) -> None:
        """Create or replace settings for a client."""

    def subscribe(
        self, client_id: str, callback: Callable[[VisibilitySettings | None], None]
    ) -> Subscription:
        """Deliver the settings now and on every change."""


@dataclass
class VisibilityService:
    """Service for which dashboard sections a client can see."""

    repository: VisibilityRepository
    clock: Clock = utc_now

    def get(self, client_id: str) -> VisibilitySettings:
        """Return the client's settings, all sections visible when unset."""
        return self.repository.get(client_id) or VisibilitySettings.default_for(
            client_id
        )

    def update(self, settings: VisibilitySettings) -> VisibilitySettings:
        """Persist settings written by the coach."""
        stamped = replace(settings, updated_at=self.clock())
        self.repository.save(stamped)
        _logger.info("Visibility settings saved: client=%s", settings.client_id)
        return stamped

    def toggle(self, client_id: str, field_name: str) -> VisibilitySettings:
        """Flip one section on or off."""
        return self.update(self.get(client_id).toggled(field_name))
