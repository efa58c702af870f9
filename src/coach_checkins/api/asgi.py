"""ASGI entrypoint for the coach check-in API."""

from coach_checkins.api.app import create_app
from coach_checkins.containers import build_container

app = create_app(build_container())
