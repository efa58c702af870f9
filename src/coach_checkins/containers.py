"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from coach_checkins.adapters.daily_checkin_repository import (
    StoreDailyCheckinRepository,
)
from coach_checkins.adapters.goal_repository import StoreGoalRepository
from coach_checkins.adapters.legacy_migration import migrate_legacy_daily_checkins
from coach_checkins.adapters.meal_plan_repository import StoreMealPlanRepository
from coach_checkins.adapters.reminder_repository import StoreReminderRepository
from coach_checkins.adapters.supabase_blob_store import SupabaseBlobStore
from coach_checkins.adapters.supabase_document_store import SupabaseDocumentStore
from coach_checkins.adapters.user_repository import StoreUserRepository
from coach_checkins.adapters.visibility_repository import StoreVisibilityRepository
from coach_checkins.adapters.weekly_checkin_repository import (
    StoreWeeklyCheckinRepository,
)
from coach_checkins.config import Settings
from coach_checkins.services.clock import Clock, utc_now
from coach_checkins.services.daily_checkins import DailyCheckinService
from coach_checkins.services.dashboard import ClientDashboard
from coach_checkins.services.goals import DailyGoalService
from coach_checkins.services.meal_plans import MealPlanService
from coach_checkins.services.progress import ProgressService
from coach_checkins.services.roster import CoachRosterService
from coach_checkins.services.store import BlobStore, DocumentStore
from coach_checkins.services.visibility import VisibilityService
from coach_checkins.services.weekly_checkins import WeeklyCheckinService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    document_store: DocumentStore
    blob_store: BlobStore
    weekly_service: WeeklyCheckinService
    daily_service: DailyCheckinService
    goal_service: DailyGoalService
    visibility_service: VisibilityService
    progress_service: ProgressService
    roster_service: CoachRosterService
    meal_plan_service: MealPlanService
    open_dashboard: Callable[[str, str], ClientDashboard]
    migrate_legacy_daily: Callable[[], int]
    close_resources: Callable[[], Awaitable[None]]


def wire_services(  # noqa: PLR0913
    settings: Settings,
    document_store: DocumentStore,
    blob_store: BlobStore,
    close_resources: Callable[[], Awaitable[None]],
    clock: Clock = utc_now,
) -> AppContainer:
    """Build every service on top of the given stores."""
    weekly_repository = StoreWeeklyCheckinRepository(
        document_store, settings.weekly_collection
    )
    daily_repository = StoreDailyCheckinRepository(
        document_store, settings.daily_collection
    )
    goal_repository = StoreGoalRepository(document_store, settings.goals_collection)
    visibility_repository = StoreVisibilityRepository(
        document_store, settings.visibility_collection
    )
    reminder_repository = StoreReminderRepository(
        document_store, settings.reminder_collection
    )
    goal_service = DailyGoalService(goal_repository)

    def open_dashboard(user_id: str, timezone_name: str) -> ClientDashboard:
        dashboard = ClientDashboard(
            weekly_repository=weekly_repository,
            daily_repository=daily_repository,
            goal_repository=goal_repository,
            visibility_repository=visibility_repository,
            reminder_repository=reminder_repository,
            timezone_name=timezone_name,
            clock=clock,
        )
        dashboard.open(user_id)
        return dashboard

    def migrate_legacy_daily() -> int:
        return migrate_legacy_daily_checkins(
            document_store,
            settings.legacy_daily_collection,
            settings.daily_collection,
        )

    return AppContainer(
        settings=settings,
        document_store=document_store,
        blob_store=blob_store,
        weekly_service=WeeklyCheckinService(
            repository=weekly_repository,
            reminder_repository=reminder_repository,
            blob_store=blob_store,
            clock=clock,
        ),
        daily_service=DailyCheckinService(
            repository=daily_repository,
            goal_service=goal_service,
            blob_store=blob_store,
            clock=clock,
        ),
        goal_service=goal_service,
        visibility_service=VisibilityService(visibility_repository, clock),
        progress_service=ProgressService(weekly_repository, clock),
        roster_service=CoachRosterService(
            StoreUserRepository(document_store, settings.users_collection)
        ),
        meal_plan_service=MealPlanService(
            repository=StoreMealPlanRepository(
                document_store, settings.meal_plan_collection
            ),
            blob_store=blob_store,
            clock=clock,
        ),
        open_dashboard=open_dashboard,
        migrate_legacy_daily=migrate_legacy_daily,
        close_resources=close_resources,
    )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    document_store = SupabaseDocumentStore(supabase_client)
    blob_store = SupabaseBlobStore.create(
        supabase_client,
        resolved_settings.storage_bucket,
        timeout=resolved_settings.blob_download_timeout,
    )

    async def close_resources() -> None:
        await blob_store.close()

    return wire_services(
        resolved_settings, document_store, blob_store, close_resources
    )
