"""
Period Comparison

Percentage change between a current and a previous value, and the
previous-period window used to fetch the comparison baseline.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Union

from storefront_analytics.reporting.bucketing import to_naive_utc

Number = Union[int, float, Decimal]


def to_decimal(value: Number) -> Decimal:
    """
    Exact Decimal for ints and Decimals, shortest repr for floats.

    Raises:
        ValueError: value is infinite or NaN
    """
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, float):
        result = Decimal(repr(value))
    else:
        result = Decimal(value)

    if not result.is_finite():
        raise ValueError(f"Cannot compare non-finite value: {value!r}")
    return result


@dataclass(frozen=True)
class ComparisonResult:
    """Current vs previous value with the rounded percent change"""
    current_value: Decimal
    previous_value: Decimal
    percent_change: int

    @property
    def is_increase(self) -> bool:
        return self.percent_change > 0


def percent_change(current: Number, previous: Number) -> int:
    """
    Whole-number percent change from ``previous`` to ``current``.

    A zero baseline never divides: the change is 100 when the current value
    is positive and 0 otherwise. Halves round away from zero. Precision
    grows with the ratio of the two values, so tiny baselines still give an
    exact integer.
    """
    current = to_decimal(current)
    previous = to_decimal(previous)

    if previous == 0:
        return 100 if current > 0 else 0

    # integer digits of the result, plus room for the fraction that decides rounding
    integer_digits = max(current.adjusted(), previous.adjusted()) - previous.adjusted() + 4
    with localcontext() as ctx:
        ctx.prec = max(28, integer_digits + 28)
        change = (current - previous) / previous * 100
        return int(change.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def compare(current: Number, previous: Number) -> ComparisonResult:
    """Compare two period totals"""
    return ComparisonResult(
        current_value=to_decimal(current),
        previous_value=to_decimal(previous),
        percent_change=percent_change(current, previous),
    )


@dataclass(frozen=True)
class ReportingWindow:
    """
    Time window a report covers.

    The current window includes both bounds. The window returned by
    ``previous()`` has the same length and stops just before the current
    start, so no order is counted in both.
    """
    start: datetime
    end: datetime
    end_inclusive: bool = True

    def __post_init__(self):
        object.__setattr__(self, "start", to_naive_utc(self.start))
        object.__setattr__(self, "end", to_naive_utc(self.end))

    @property
    def length(self):
        return self.end - self.start

    def previous(self) -> "ReportingWindow":
        return ReportingWindow(
            start=self.start - self.length,
            end=self.start,
            end_inclusive=False,
        )

    def contains(self, value: datetime) -> bool:
        value = to_naive_utc(value)
        if value < self.start:
            return False
        return value <= self.end if self.end_inclusive else value < self.end
