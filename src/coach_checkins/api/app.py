"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Literal

from fastapi import FastAPI, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse

from coach_checkins.api.admin import router as admin_router
from coach_checkins.api.schemas import (
    ClientOut,
    DailyCheckinCreate,
    DailyCheckinOut,
    DailyCheckinUpdate,
    DailyDraftOut,
    DashboardOut,
    GoalEntry,
    GoalSetOut,
    GoalSetPayload,
    MealPayload,
    MealPlanOut,
    MonthlyProgressOut,
    SeriesPointOut,
    VisibilityOut,
    VisibilityPayload,
    WeekGroupOut,
    WeeklyCheckinCreate,
    WeeklyCheckinOut,
    WeeklyCheckinUpdate,
    WeeklyStatusOut,
)
from coach_checkins.app_logging import configure_logging
from coach_checkins.config import resolve_timezone
from coach_checkins.containers import AppContainer
from coach_checkins.domain.aggregation import MonthPeriod
from coach_checkins.domain.daily_checkins import DailyCheckinDraft
from coach_checkins.domain.errors import (
    CheckinError,
    CheckinNotAllowedError,
    DraftIncompleteError,
    NotRecordOwnerError,
    RecordNotFoundError,
)

_ERROR_RESPONSES: dict[type[CheckinError], tuple[int, str]] = {
    CheckinNotAllowedError: (status.HTTP_409_CONFLICT, "CHECKIN_NOT_ALLOWED"),
    DraftIncompleteError: (
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "DRAFT_INCOMPLETE",
    ),
    NotRecordOwnerError: (status.HTTP_403_FORBIDDEN, "NOT_RECORD_OWNER"),
    RecordNotFoundError: (status.HTTP_404_NOT_FOUND, "RECORD_NOT_FOUND"),
}


def _container(request: Request) -> AppContainer:
    return request.app.state.container


def _timezone(request: Request, tz: str | None) -> str:
    """Resolve the ``tz`` query parameter or fall back to the default zone."""
    default = _container(request).settings.default_timezone
    try:
        return resolve_timezone(tz, default)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc


def _acting_user(user_id: str, x_user_id: str) -> str:
    """Return the acting user, who must be the user named in the path."""
    if user_id != x_user_id:
        raise NotRecordOwnerError("Only the author can change this check-in")
    return x_user_id


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)

    @app.exception_handler(CheckinError)
    async def checkin_error_handler(
        request: Request, exc: CheckinError
    ) -> JSONResponse:
        status_code, code = _ERROR_RESPONSES.get(
            type(exc), (status.HTTP_400_BAD_REQUEST, "CHECKIN_ERROR")
        )
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=status_code,
            content={"detail": {"message": str(exc), "code": code}},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/users/{user_id}/dashboard")
    async def dashboard(
        user_id: str, request: Request, tz: str | None = None
    ) -> DashboardOut:
        """Return the client's dashboard as of the latest snapshots."""
        timezone_name = _timezone(request, tz)
        with _container(request).open_dashboard(user_id, timezone_name) as board:
            return DashboardOut.from_state(board.state)

    @app.get("/users/{user_id}/weekly/status")
    async def weekly_status(
        user_id: str, request: Request, tz: str | None = None
    ) -> WeeklyStatusOut:
        """Return whether the user may submit a weekly check-in."""
        service = _container(request).weekly_service
        return WeeklyStatusOut.from_status(
            service.status(user_id, _timezone(request, tz))
        )

    @app.get("/users/{user_id}/weekly")
    async def list_weekly(
        user_id: str, request: Request, tz: str | None = None
    ) -> list[WeekGroupOut]:
        """Return weekly check-ins grouped by calendar week."""
        service = _container(request).weekly_service
        groups = service.list_grouped(user_id, _timezone(request, tz))
        return [WeekGroupOut.from_group(group) for group in groups]

    @app.post("/users/{user_id}/weekly", status_code=status.HTTP_201_CREATED)
    async def submit_weekly(
        user_id: str,
        payload: WeeklyCheckinCreate,
        request: Request,
        tz: str | None = None,
    ) -> WeeklyCheckinOut:
        """Score and store this week's check-in."""
        service = _container(request).weekly_service
        record = service.submit(
            user_id=user_id,
            name=payload.name,
            weight=payload.weight,
            ratings=payload.ratings.to_ratings(),
            timezone_name=_timezone(request, tz),
            image=payload.image.to_upload() if payload.image else None,
            biggest_win=payload.biggest_win,
            issues=payload.issues,
            extra_coach_request=payload.extra_coach_request,
        )
        return WeeklyCheckinOut.from_record(record)

    @app.patch("/users/{user_id}/weekly/{checkin_id}")
    async def edit_weekly(
        user_id: str,
        checkin_id: str,
        payload: WeeklyCheckinUpdate,
        request: Request,
        x_user_id: str = Header(),
    ) -> WeeklyCheckinOut:
        """Edit a weekly check-in as its author."""
        service = _container(request).weekly_service
        record = service.edit(
            checkin_id,
            _acting_user(user_id, x_user_id),
            name=payload.name,
            weight=payload.weight,
            ratings=payload.ratings.to_ratings() if payload.ratings else None,
            date=payload.date,
            image=payload.image.to_upload() if payload.image else None,
            biggest_win=payload.biggest_win,
            issues=payload.issues,
            extra_coach_request=payload.extra_coach_request,
        )
        return WeeklyCheckinOut.from_record(record)

    @app.delete(
        "/users/{user_id}/weekly/{checkin_id}",
        status_code=status.HTTP_204_NO_CONTENT,
    )
    async def delete_weekly(
        user_id: str, checkin_id: str, request: Request, x_user_id: str = Header()
    ) -> None:
        """Delete a weekly check-in as its author."""
        service = _container(request).weekly_service
        service.delete(checkin_id, _acting_user(user_id, x_user_id))

    @app.post("/users/{user_id}/weekly/reminder/dismiss")
    async def dismiss_weekly_reminder(
        user_id: str, request: Request
    ) -> dict[str, str]:
        """Hide the weekly reminder until next week."""
        _container(request).weekly_service.dismiss_reminder(user_id)
        return {"status": "ok"}

    @app.get("/users/{user_id}/daily/status")
    async def daily_status(
        user_id: str, request: Request, tz: str | None = None
    ) -> dict[str, bool]:
        """Return whether the user may submit today's check-in."""
        service = _container(request).daily_service
        return {"can_submit": service.can_submit(user_id, _timezone(request, tz))}

    @app.get("/users/{user_id}/daily")
    async def list_daily(
        user_id: str, request: Request, limit: int | None = None
    ) -> list[DailyCheckinOut]:
        """Return recent daily check-ins, newest first."""
        records = _container(request).daily_service.list_for_user(user_id, limit)
        return [DailyCheckinOut.from_record(record) for record in records]

    @app.post("/users/{user_id}/daily/draft")
    async def start_daily_draft(
        user_id: str, request: Request, tz: str | None = None
    ) -> DailyDraftOut:
        """Open a draft holding the user's current goals, all unchecked."""
        service = _container(request).daily_service
        draft = service.start_draft(user_id, _timezone(request, tz))
        return DailyDraftOut(
            user_id=draft.user_id,
            completed_goals=[GoalEntry.from_goal(g) for g in draft.completed_goals],
        )

    @app.post("/users/{user_id}/daily", status_code=status.HTTP_201_CREATED)
    async def submit_daily(
        user_id: str,
        payload: DailyCheckinCreate,
        request: Request,
        tz: str | None = None,
    ) -> DailyCheckinOut:
        """Upload photos and store today's check-in."""
        draft = DailyCheckinDraft(
            user_id=user_id,
            completed_goals=[entry.to_goal() for entry in payload.completed_goals],
            notes=payload.notes,
            images=[image.to_upload() for image in payload.images],
            image_urls=list(payload.image_urls),
        )
        service = _container(request).daily_service
        record = service.submit(draft, _timezone(request, tz))
        return DailyCheckinOut.from_record(record)

    @app.patch("/users/{user_id}/daily/{checkin_id}")
    async def edit_daily(
        user_id: str,
        checkin_id: str,
        payload: DailyCheckinUpdate,
        request: Request,
        x_user_id: str = Header(),
    ) -> DailyCheckinOut:
        """Edit a daily check-in as its author."""
        service = _container(request).daily_service
        record = service.edit(
            checkin_id,
            _acting_user(user_id, x_user_id),
            completed_goals=[entry.to_goal() for entry in payload.completed_goals],
            notes=payload.notes,
            existing_image_urls=list(payload.image_urls),
            new_images=[image.to_upload() for image in payload.images],
        )
        return DailyCheckinOut.from_record(record)

    @app.delete(
        "/users/{user_id}/daily/{checkin_id}",
        status_code=status.HTTP_204_NO_CONTENT,
    )
    async def delete_daily(
        user_id: str, checkin_id: str, request: Request, x_user_id: str = Header()
    ) -> None:
        """Delete a daily check-in as its author."""
        service = _container(request).daily_service
        service.delete(checkin_id, _acting_user(user_id, x_user_id))

    @app.get("/users/{user_id}/goals")
    async def get_goals(user_id: str, request: Request) -> GoalSetOut:
        """Return the user's daily goals."""
        goal_set = _container(request).goal_service.get(user_id)
        return GoalSetOut.from_goal_set(goal_set)

    @app.put("/users/{user_id}/goals")
    async def save_goals(
        user_id: str, payload: GoalSetPayload, request: Request
    ) -> GoalSetOut:
        """Replace the user's daily goals."""
        service = _container(request).goal_service
        goal_set = service.save(payload.to_goal_set(user_id))
        return GoalSetOut.from_goal_set(goal_set)

    @app.get("/clients/{client_id}/visibility")
    async def get_visibility(client_id: str, request: Request) -> VisibilityOut:
        """Return which dashboard sections the client can see."""
        settings = _container(request).visibility_service.get(client_id)
        return VisibilityOut.from_settings(settings)

    @app.put("/clients/{client_id}/visibility")
    async def save_visibility(
        client_id: str, payload: VisibilityPayload, request: Request
    ) -> VisibilityOut:
        """Store the coach's visibility choices for a client."""
        service = _container(request).visibility_service
        settings = service.update(payload.to_settings(client_id))
        return VisibilityOut.from_settings(settings)

    @app.post("/clients/{client_id}/visibility/{field_name}/toggle")
    async def toggle_visibility(
        client_id: str, field_name: str, request: Request
    ) -> VisibilityOut:
        """Flip a single dashboard section on or off."""
        service = _container(request).visibility_service
        try:
            settings = service.toggle(client_id, field_name)
        except ValueError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
            ) from exc
        return VisibilityOut.from_settings(settings)

    @app.get("/users/{user_id}/progress/monthly")
    async def monthly_progress(
        user_id: str,
        request: Request,
        period: MonthPeriod = MonthPeriod.THREE_MONTHS,
        tz: str | None = None,
    ) -> MonthlyProgressOut:
        """Return average weight per month with headline changes."""
        service = _container(request).progress_service
        progress = service.monthly(user_id, period, _timezone(request, tz))
        return MonthlyProgressOut.from_progress(progress)

    @app.get("/users/{user_id}/progress/series")
    async def progress_series(
        user_id: str,
        request: Request,
        metric: Literal["weight", "score"] = "weight",
        year: int | None = None,
        tz: str | None = None,
    ) -> list[SeriesPointOut]:
        """Return weight or score points in date order."""
        service = _container(request).progress_service
        timezone_name = _timezone(request, tz)
        if metric == "score":
            points = service.score_series(user_id, year, timezone_name)
        else:
            points = service.weight_series(user_id, year, timezone_name)
        return [SeriesPointOut.from_point(point) for point in points]

    @app.get("/coaches/{coach_id}/clients")
    async def list_clients(coach_id: str, request: Request) -> list[ClientOut]:
        """Return the clients in the coach's group."""
        clients = _container(request).roster_service.clients(coach_id)
        return [ClientOut.from_profile(client) for client in clients]

    @app.get("/clients/{client_id}/meal-plans")
    async def list_meal_plans(client_id: str, request: Request) -> list[MealPlanOut]:
        """Return the client's meal plans from Monday to Sunday."""
        plans = _container(request).meal_plan_service.week(client_id)
        return [MealPlanOut.from_plan(plan) for plan in plans]

    @app.get("/clients/{client_id}/meal-plans/{day}")
    async def get_meal_plan(client_id: str, day: str, request: Request) -> MealPlanOut:
        """Return the meals planned for one weekday."""
        service = _container(request).meal_plan_service
        try:
            plan = service.get(client_id, day)
        except ValueError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
            ) from exc
        return MealPlanOut.from_plan(plan)

    @app.put("/clients/{client_id}/meal-plans/{day}/{slot}")
    async def update_meal(
        client_id: str, day: str, slot: str, payload: MealPayload, request: Request
    ) -> MealPlanOut:
        """Replace one meal slot of a weekday plan."""
        service = _container(request).meal_plan_service
        try:
            plan = service.update_meal(
                client_id,
                day,
                slot,
                meal_name=payload.meal_name,
                ingredients=[item.to_ingredient() for item in payload.ingredients],
                image=payload.image.to_upload() if payload.image else None,
            )
        except ValueError as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
            ) from exc
        return MealPlanOut.from_plan(plan)

    @app.post("/uploads", status_code=status.HTTP_201_CREATED)
    async def upload_image(request: Request) -> dict[str, str]:
        """Store a raw image body and return its download URL."""
        data = await request.body()
        if not data:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="Empty upload"
            )
        content_type = request.headers.get("content-type", "image/jpeg")
        try:
            url = _container(request).blob_store.upload(data, content_type)
        except Exception:
            logger.exception("Image upload failed")
            raise
        return {"url": url}

    return app
