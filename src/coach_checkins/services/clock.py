"""Injectable clock helpers."""

from collections.abc import Callable
from datetime import UTC, datetime
from zoneinfo import ZoneInfo

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


def local_now(clock: Clock, timezone_name: str) -> datetime:
    """Return the clock's current instant in the named zone."""
    return clock().astimezone(ZoneInfo(timezone_name))
