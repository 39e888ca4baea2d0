"""Rating aggregation for a rated user's profile."""

from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class RatingSummary:
    average_rating: float
    total_ratings: int


def summarize_ratings(values: Iterable[int]) -> RatingSummary:
    """Average rounded to one decimal; 0 when the user has no ratings yet."""
    values = list(values)
    if not values:
        return RatingSummary(average_rating=0, total_ratings=0)
    return RatingSummary(
        average_rating=round(sum(values) / len(values), 1),
        total_ratings=len(values),
    )
