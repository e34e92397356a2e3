"""
Review Rating Statistics

Average, count and 1-5 star histogram over product ratings. A rating
outside the star scale means the reviews table holds bad data, so it is
rejected instead of being clamped or skipped.
"""

from dataclasses import dataclass
from decimal import Decimal
from numbers import Integral
from typing import Iterable, List

from storefront_analytics.exceptions import OutOfRangeError

STARS = 5


@dataclass(frozen=True)
class RatingHistogram:
    """
    Rating statistics.

    ``counts[i]`` and ``percentages[i]`` refer to ``i + 1`` stars.
    """
    counts: List[int]
    average: Decimal
    total: int

    @property
    def percentages(self) -> List[Decimal]:
        if self.total == 0:
            return [Decimal("0")] * STARS
        return [Decimal(count) / self.total * 100 for count in self.counts]

    @property
    def rating_sum(self) -> int:
        return sum(stars * count for stars, count in enumerate(self.counts, start=1))


def _validate(rating, index: int) -> int:
    if isinstance(rating, bool) or not isinstance(rating, Integral) or not 1 <= rating <= STARS:
        raise OutOfRangeError(rating, index)
    return int(rating)


def _histogram(counts: List[int]) -> RatingHistogram:
    total = sum(counts)
    rating_sum = sum(stars * count for stars, count in enumerate(counts, start=1))
    average = Decimal(rating_sum) / total if total else Decimal("0")
    return RatingHistogram(counts=counts, average=average, total=total)


def aggregate_ratings(ratings: Iterable[int]) -> RatingHistogram:
    """
    Build rating statistics.

    Raises:
        OutOfRangeError: a rating is not an integer between 1 and 5
    """
    counts = [0] * STARS
    for index, rating in enumerate(ratings):
        counts[_validate(rating, index) - 1] += 1
    return _histogram(counts)


def add_rating(histogram: RatingHistogram, rating: int) -> RatingHistogram:
    """Fold a newly submitted rating into existing statistics"""
    stars = _validate(rating, histogram.total)
    counts = list(histogram.counts)
    counts[stars - 1] += 1
    return _histogram(counts)
