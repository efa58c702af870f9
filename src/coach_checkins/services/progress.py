"""Progress charts built from weekly check-ins."""

from dataclasses import dataclass
from zoneinfo import ZoneInfo

from coach_checkins.domain.aggregation import (
    MonthBucket,
    MonthlySummary,
    MonthPeriod,
    SeriesPoint,
    group_by_month,
    summarize,
    to_series,
)
from coach_checkins.domain.models import ScoreObservation
from coach_checkins.services.clock import Clock, local_now, utc_now
from coach_checkins.services.weekly_checkins import WeeklyCheckinRepository


@dataclass
class MonthlyProgress:
    """Month-on-month chart data with headline numbers."""

    period: MonthPeriod
    buckets: list[MonthBucket]
    summary: MonthlySummary


@dataclass
class ProgressService:
    """Service for weight and score charts."""

    repository: WeeklyCheckinRepository
    clock: Clock = utc_now

    def monthly(
        self, user_id: str, period: MonthPeriod, timezone_name: str
    ) -> MonthlyProgress:
        """Return average weight per month over the chosen period."""
        now = local_now(self.clock, timezone_name)
        observations = [
            record.observation() for record in self.repository.list_for_user(user_id)
        ]
        buckets = group_by_month(observations, period.months, now)
        return MonthlyProgress(
            period=period, buckets=buckets, summary=summarize(buckets)
        )

    def weight_series(
        self, user_id: str, year: int | None, timezone_name: str
    ) -> list[SeriesPoint]:
        """Return every weigh-in in date order."""
        records = self.repository.list_for_user(user_id)
        return to_series(
            [record.observation() for record in records],
            year=year,
            tz=ZoneInfo(timezone_name),
        )

    def score_series(
        self, user_id: str, year: int | None, timezone_name: str
    ) -> list[SeriesPoint]:
        """Return every stored weekly score in date order."""
        records = self.repository.list_for_user(user_id)
        return to_series(
            [
                ScoreObservation(date=record.date, score=record.final_score)
                for record in records
            ],
            year=year,
            tz=ZoneInfo(timezone_name),
        )
