"""Composite weekly score from ordinal ratings."""

from coach_checkins.domain.models import Ratings

SEVEN_POINT_TABLE = {
    1: 0.4,
    2: 0.7,
    3: 1.1,
    4: 1.4,
    5: 1.8,
    6: 2.1,
    7: 2.5,
}
TRAINING_POINT = 0.5


def seven_point(rating: int) -> float:
    """Map a 1-7 rating to points; anything else is worth nothing."""
    return SEVEN_POINT_TABLE.get(rating, 0.0)


def five_point(rating: int) -> float:
    """Map a 1-5 training rating linearly to points."""
    return rating * TRAINING_POINT


def compute_score(ratings: Ratings) -> float:
    """Return the 0-10 composite score for a set of ratings.

    Table values carry one decimal and training moves in halves, so rounding
    to one decimal drops only float noise (0.4 + 0.4 + 0.4 + 0.5 == 1.7).
    """
    total = (
        seven_point(ratings.calories)
        + seven_point(ratings.steps)
        + seven_point(ratings.protein)
        + five_point(ratings.training)
    )
    return round(total, 1)
