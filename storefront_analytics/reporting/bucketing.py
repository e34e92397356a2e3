"""
Date Bucketing

Splits a date range into ordered, gap-free time buckets and maps timestamps
onto bucket keys. Keys are zero-padded so that, within one granularity,
lexicographic order equals chronological order:

- day:   ``YYYY-MM-DD``
- week:  ``YYYY-Www``
- month: ``YYYY-MM``

Week numbering is NOT ISO-8601. A week number is the day of the year
(Jan 1 = 1) plus the weekday of Jan 1 (Sunday = 0), divided by 7 and
rounded up. Weeks therefore start on Sunday, Jan 1 is always in week 1,
and the first and last weeks of a year are usually partial. Weeks never
span two calendar years.
"""

import calendar
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import List, Union

from storefront_analytics.exceptions import InvalidGranularityError, InvalidRangeError

Timestamp = Union[date, datetime]

ONE_DAY = timedelta(days=1)


class Granularity(str, Enum):
    """Bucket size selector"""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


@dataclass(frozen=True)
class Bucket:
    """Named calendar interval, bounds inclusive"""
    key: str
    start: date
    end: date

    def contains(self, value: Timestamp) -> bool:
        return self.start <= to_date(value) <= self.end


def parse_granularity(value: Union[str, Granularity]) -> Granularity:
    """Coerce a string to a Granularity, rejecting unknown values"""
    if isinstance(value, Granularity):
        return value
    try:
        return Granularity(str(value).lower())
    except ValueError:
        raise InvalidGranularityError(value) from None


def to_date(value: Timestamp) -> date:
    """
    Calendar date of a timestamp.

    Aware datetimes are converted to UTC first; naive datetimes and dates
    are taken as they are.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    return value


def to_naive_utc(value: datetime) -> datetime:
    """Aware datetimes become naive UTC so they compare with naive ones"""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _jan1_offset(year: int) -> int:
    # weekday of Jan 1 with Sunday = 0
    return (date(year, 1, 1).weekday() + 1) % 7


def week_number(value: Timestamp) -> int:
    """Simplified (non-ISO) week of the year, starting at 1"""
    day = to_date(value)
    day_of_year = day.timetuple().tm_yday
    return -(-(day_of_year + _jan1_offset(day.year)) // 7)


def _week_bounds(year: int, week: int) -> tuple:
    offset = _jan1_offset(year)
    days_in_year = 366 if calendar.isleap(year) else 365
    first = max(1, 7 * (week - 1) - offset + 1)
    last = min(days_in_year, 7 * week - offset)
    jan1 = date(year, 1, 1)
    return jan1 + timedelta(days=first - 1), jan1 + timedelta(days=last - 1)


def bucket_key_for(value: Timestamp, granularity: Union[str, Granularity]) -> str:
    """Key of the bucket that ``value`` falls in"""
    granularity = parse_granularity(granularity)
    day = to_date(value)

    if granularity == Granularity.DAY:
        return day.isoformat()
    if granularity == Granularity.WEEK:
        return f"{day.year:04d}-W{week_number(day):02d}"
    return f"{day.year:04d}-{day.month:02d}"


def bucket_for(value: Timestamp, granularity: Union[str, Granularity]) -> Bucket:
    """Full bucket (key and calendar bounds) containing ``value``"""
    granularity = parse_granularity(granularity)
    day = to_date(value)
    key = bucket_key_for(day, granularity)

    if granularity == Granularity.DAY:
        return Bucket(key=key, start=day, end=day)
    if granularity == Granularity.WEEK:
        start, end = _week_bounds(day.year, week_number(day))
        return Bucket(key=key, start=start, end=end)

    last_day = calendar.monthrange(day.year, day.month)[1]
    return Bucket(
        key=key,
        start=date(day.year, day.month, 1),
        end=date(day.year, day.month, last_day),
    )


def bucket_sequence(
    start_date: Timestamp,
    end_date: Timestamp,
    granularity: Union[str, Granularity],
) -> List[Bucket]:
    """
    Every bucket touched by ``[start_date, end_date]``, ascending.

    The first and last buckets keep their full calendar bounds even when the
    range only covers part of them. An inverted range yields an empty list.

    Args:
        start_date: First day of the range (inclusive)
        end_date: Last day of the range (inclusive)
        granularity: day, week or month

    Returns:
        Ordered, contiguous list of buckets
    """
    granularity = parse_granularity(granularity)
    start = to_date(start_date)
    end = to_date(end_date)

    buckets: List[Bucket] = []
    current = start
    while current <= end:
        bucket = bucket_for(current, granularity)
        buckets.append(bucket)
        current = bucket.end + ONE_DAY

    return buckets


def ensure_valid_range(start_date: Timestamp, end_date: Timestamp) -> None:
    """Raise InvalidRangeError for callers that need a non-empty series"""
    if to_date(start_date) > to_date(end_date):
        raise InvalidRangeError(start_date, end_date)


@dataclass(frozen=True)
class BucketingScheme:
    """
    A date range paired with a granularity.

    Example:
        scheme = BucketingScheme(date(2024, 1, 1), date(2024, 3, 31), "month")
        scheme.keys()  # ["2024-01", "2024-02", "2024-03"]
    """
    start_date: date
    end_date: date
    granularity: Granularity = field(default=Granularity.DAY)

    def __post_init__(self):
        object.__setattr__(self, "start_date", to_date(self.start_date))
        object.__setattr__(self, "end_date", to_date(self.end_date))
        object.__setattr__(self, "granularity", parse_granularity(self.granularity))

    def buckets(self) -> List[Bucket]:
        return bucket_sequence(self.start_date, self.end_date, self.granularity)

    def keys(self) -> List[str]:
        return [bucket.key for bucket in self.buckets()]

    def key_for(self, value: Timestamp) -> str:
        return bucket_key_for(value, self.granularity)
