"""
Timeframe Presets

Resolves the range selectors of the admin pages into concrete windows.
``now`` is always passed in so results are reproducible.
"""

import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum

from storefront_analytics.exceptions import UnknownTimeframeError
from storefront_analytics.reporting.bucketing import BucketingScheme, Granularity, to_date
from storefront_analytics.reporting.comparison import ReportingWindow


class AnalyticsTimeframe(str, Enum):
    """Analytics page selector"""
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class DashboardTimeframe(str, Enum):
    """Dashboard selector"""
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class ReportTimeframe(str, Enum):
    """Sales report selector"""
    LAST_7_DAYS = "7days"
    LAST_30_DAYS = "30days"
    LAST_90_DAYS = "90days"
    YEAR = "year"


DEFAULT_REPORT_DAYS = 30

REPORT_DAYS = {
    ReportTimeframe.LAST_7_DAYS: 7,
    ReportTimeframe.LAST_30_DAYS: 30,
    ReportTimeframe.LAST_90_DAYS: 90,
}


@dataclass(frozen=True)
class DateRange:
    """Date range with the granularity its chart uses"""
    start_date: date
    end_date: date
    granularity: Granularity

    def scheme(self) -> BucketingScheme:
        return BucketingScheme(self.start_date, self.end_date, self.granularity)


def shift_months(value, months: int):
    """Move a date or datetime by whole months, clamping the day"""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def _parse(enum_cls, preset):
    try:
        return enum_cls(str(preset).lower())
    except ValueError:
        raise UnknownTimeframeError(str(preset), [member.value for member in enum_cls]) from None


def analytics_range(preset: str, now: datetime) -> DateRange:
    """
    Date range and granularity for the analytics charts.

    week and month are charted per day, year per month.
    """
    timeframe = _parse(AnalyticsTimeframe, preset)
    end = to_date(now)

    if timeframe == AnalyticsTimeframe.WEEK:
        return DateRange(end - timedelta(days=7), end, Granularity.DAY)
    if timeframe == AnalyticsTimeframe.MONTH:
        return DateRange(shift_months(end, -1), end, Granularity.DAY)
    return DateRange(shift_months(end, -12), end, Granularity.MONTH)


def _window_start(timeframe: DashboardTimeframe, now: datetime) -> datetime:
    if timeframe == DashboardTimeframe.TODAY:
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if timeframe == DashboardTimeframe.WEEK:
        return now - timedelta(days=7)
    if timeframe == DashboardTimeframe.MONTH:
        return shift_months(now, -1)
    return shift_months(now, -12)


def dashboard_window(preset: str, now: datetime) -> ReportingWindow:
    """Reporting window from the dashboard range selector up to ``now``"""
    timeframe = _parse(DashboardTimeframe, preset)
    return ReportingWindow(start=_window_start(timeframe, now), end=now)


def report_window(preset: str, now: datetime) -> ReportingWindow:
    """Reporting window for the sales report selector; unknown presets cover the last 30 days"""
    try:
        timeframe = ReportTimeframe(str(preset).lower())
    except ValueError:
        return ReportingWindow(start=now - timedelta(days=DEFAULT_REPORT_DAYS), end=now)

    if timeframe == ReportTimeframe.YEAR:
        return ReportingWindow(start=shift_months(now, -12), end=now)
    return ReportingWindow(start=now - timedelta(days=REPORT_DAYS[timeframe]), end=now)


def report_months(preset: str) -> int:
    """Trailing months charted in the sales report"""
    return 12 if str(preset).lower() == ReportTimeframe.YEAR.value else 6
