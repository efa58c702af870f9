"""Admin API endpoints with simple token auth."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

if TYPE_CHECKING:
    from coach_checkins.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])
_logger = logging.getLogger(__name__)


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/health", dependencies=[Depends(require_admin)])
async def admin_health() -> dict[str, str]:
    """Admin health check endpoint."""
    return {"status": "ok"}


@router.post("/migrations/daily-checkins", dependencies=[Depends(require_admin)])
async def migrate_daily_checkins(request: Request) -> dict[str, object]:
    """Copy daily check-ins still stored in the legacy collection."""
    container: AppContainer = request.app.state.container
    copied = container.migrate_legacy_daily()
    _logger.info("Legacy daily check-in migration copied %s documents", copied)
    return {
        "status": "ok",
        "copied": copied,
        "source": container.settings.legacy_daily_collection,
        "target": container.settings.daily_collection,
    }
