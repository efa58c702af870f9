"""Tests for the composite weekly score."""

from itertools import product

import pytest

from coach_checkins.domain.models import Ratings
from coach_checkins.domain.scoring import compute_score, five_point, seven_point


def test_score_stays_in_range_for_valid_ratings() -> None:
    for calories, steps, protein, training in product(
        range(1, 8), range(1, 8), range(1, 8), range(1, 6)
    ):
        score = compute_score(Ratings(calories, steps, protein, training))
        assert 0.0 <= score <= 10.0


def test_maximum_ratings_score_exactly_ten() -> None:
    assert compute_score(Ratings(7, 7, 7, 5)) == 10.0


def test_minimum_ratings_score_is_repeatable() -> None:
    ratings = Ratings(1, 1, 1, 1)
    assert compute_score(ratings) == 1.7
    assert compute_score(ratings) == compute_score(ratings)


@pytest.mark.parametrize(
    ("rating", "points"),
    [(1, 0.4), (2, 0.7), (3, 1.1), (4, 1.4), (5, 1.8), (6, 2.1), (7, 2.5)],
)
def test_seven_point_table(rating: int, points: float) -> None:
    assert seven_point(rating) == points


@pytest.mark.parametrize("rating", [0, 8, -3, 100])
def test_out_of_range_seven_point_rating_is_worth_nothing(rating: int) -> None:
    assert seven_point(rating) == 0.0


def test_training_is_linear() -> None:
    assert [five_point(rating) for rating in range(1, 6)] == [0.5, 1.0, 1.5, 2.0, 2.5]


def test_invalid_rating_lowers_score_without_raising() -> None:
    assert compute_score(Ratings(9, 7, 7, 5)) == 7.5
    assert compute_score(Ratings(0, 0, 0, 0)) == 0.0


def test_mixed_ratings() -> None:
    assert compute_score(Ratings(calories=5, steps=3, protein=6, training=4)) == 7.0
