"""Application configuration."""

import os
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    admin_token: str
    storage_bucket: str = "checkin-images"
    default_timezone: str = "UTC"
    weekly_collection: str = "updates"
    daily_collection: str = "daily_checkins"
    legacy_daily_collection: str = "dailyCheckins"
    goals_collection: str = "daily_goals"
    visibility_collection: str = "client_settings"
    reminder_collection: str = "reminder_dismissals"
    users_collection: str = "users"
    meal_plan_collection: str = "daily_meal_plans"
    blob_download_timeout: float = 20
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def resolve_timezone(raw: str | None, default: str = "UTC") -> str:
    """Validate an IANA timezone name, falling back to the default."""
    if raw is None:
        return default
    cleaned = raw.strip()
    if not cleaned:
        return default
    try:
        ZoneInfo(cleaned)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone: {cleaned}") from exc
    return cleaned
