"""
Metric Aggregation

Reduces fetched storefront rows into chart-ready summaries:
- revenue and order counts per time bucket
- product counts per category with chart colors
- new vs returning customers per time bucket
- headline metrics (revenue, average order value, repeat purchase rate)

Every time series is pre-seeded from the bucketing scheme, so a period
without data is an explicit zero rather than a missing point.
"""

from collections import Counter, defaultdict
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from operator import attrgetter
from typing import Any, Callable, Dict, Hashable, Iterable, List, Optional, Sequence

import structlog

from storefront_analytics.config import get_settings
from storefront_analytics.models.records import (
    CategoryRecord,
    OrderRecord,
    ProductRecord,
    ProfileRecord,
)
from storefront_analytics.reporting.bucketing import BucketingScheme, Granularity, to_date
from storefront_analytics.reporting.comparison import Number, to_decimal

logger = structlog.get_logger(__name__)

CENT = Decimal("0.01")


@dataclass
class MetricSummary:
    """Revenue and order count for one bucket"""
    bucket_key: str
    revenue: Decimal = Decimal("0")
    order_count: int = 0


@dataclass
class SalesTrend:
    """Sales time series plus its totals"""
    data: List[MetricSummary]
    granularity: Granularity
    period_start: date
    period_end: date
    total_revenue: Decimal
    total_orders: int


@dataclass
class CategorySlice:
    """One slice of the category distribution chart"""
    category_id: Optional[Hashable]
    name: str
    count: int
    color: str


@dataclass
class CustomerAcquisition:
    """
    Customers gained per bucket.

    ``returning_customers`` is None when no order history was supplied;
    it is never estimated from the new-customer count.
    """
    bucket_key: str
    new_customers: int = 0
    returning_customers: Optional[int] = None


@dataclass
class KeyMetrics:
    """Headline analytics numbers; None marks a metric with no data source"""
    total_revenue: Decimal
    order_count: int
    average_order_value: Decimal
    repeat_purchase_rate: Optional[Decimal] = None
    conversion_rate: Optional[Decimal] = None
    unavailable: List[str] = field(default_factory=list)


def order_amount(order: OrderRecord) -> Decimal:
    return order.total_amount


def aggregate(
    records: Iterable[Any],
    bucketing: BucketingScheme,
    value_extractor: Callable[[Any], Number],
    count_predicate: Optional[Callable[[Any], bool]] = None,
    timestamp_of: Callable[[Any], Any] = attrgetter("created_at"),
) -> List[MetricSummary]:
    """
    Accumulate records into the buckets of ``bucketing``.

    Records whose bucket is not part of the scheme are dropped; they never
    create extra buckets.

    Args:
        records: Rows to aggregate
        bucketing: Date range and granularity
        value_extractor: Amount a record adds to its bucket's revenue
        count_predicate: When given, only records it accepts add to the
            order count (revenue is accumulated regardless)
        timestamp_of: Timestamp used to place a record in a bucket

    Returns:
        One MetricSummary per bucket, ascending by key
    """
    summaries: Dict[str, MetricSummary] = {
        key: MetricSummary(bucket_key=key) for key in bucketing.keys()
    }

    dropped = 0
    for record in records:
        key = bucketing.key_for(timestamp_of(record))
        summary = summaries.get(key)
        if summary is None:
            dropped += 1
            continue

        summary.revenue += to_decimal(value_extractor(record))
        if count_predicate is None or count_predicate(record):
            summary.order_count += 1

    if dropped:
        logger.debug(
            "Dropped records outside bucket range",
            dropped=dropped,
            granularity=bucketing.granularity.value,
        )

    return sorted(summaries.values(), key=attrgetter("bucket_key"))


def sales_trend(
    orders: Iterable[OrderRecord],
    bucketing: BucketingScheme,
    count_predicate: Optional[Callable[[OrderRecord], bool]] = None,
) -> SalesTrend:
    """Revenue and orders per bucket for the order amount"""
    data = aggregate(orders, bucketing, order_amount, count_predicate)

    return SalesTrend(
        data=data,
        granularity=bucketing.granularity,
        period_start=bucketing.start_date,
        period_end=bucketing.end_date,
        total_revenue=sum((s.revenue for s in data), Decimal("0")),
        total_orders=sum(s.order_count for s in data),
    )


def _is_uncategorized(category_id: Any) -> bool:
    return category_id is None or category_id == ""


def category_distribution(
    products: Iterable[ProductRecord],
    categories: Iterable[CategoryRecord] = (),
    palette: Optional[Sequence[str]] = None,
    uncategorized_label: Optional[str] = None,
) -> List[CategorySlice]:
    """
    Count products per category.

    Slices appear in the order their category is first seen; colors cycle
    through ``palette`` in the same order. Products without a category are
    grouped under the uncategorized label, as are categories missing from
    ``categories`` (each keeping its own slice).
    """
    analytics = get_settings().analytics
    palette = list(palette or analytics.chart_palette)
    uncategorized_label = uncategorized_label or analytics.uncategorized_label

    names = {str(category.id): category.name for category in categories}

    counts: Dict[Optional[Hashable], int] = {}
    joined_names: Dict[Optional[Hashable], Optional[str]] = {}
    for product in products:
        category_id = None if _is_uncategorized(product.category_id) else product.category_id
        if category_id not in counts:
            counts[category_id] = 0
            joined_names[category_id] = product.category_name
        counts[category_id] += 1

    slices = []
    for index, (category_id, count) in enumerate(counts.items()):
        if category_id is None:
            name = uncategorized_label
        else:
            name = names.get(str(category_id)) or joined_names[category_id] or uncategorized_label

        slices.append(
            CategorySlice(
                category_id=category_id,
                name=name,
                count=count,
                color=palette[index % len(palette)],
            )
        )

    return slices


def distribution_counts(slices: Iterable[CategorySlice]) -> Dict[Hashable, int]:
    """Flatten slices to ``{category_id: count}``, uncategorized under its label"""
    return {
        (s.name if s.category_id is None else s.category_id): s.count
        for s in slices
    }


def _first_order_dates(orders: Iterable[OrderRecord]) -> Dict[Hashable, date]:
    first: Dict[Hashable, date] = {}
    for order in orders:
        if order.customer_id is None:
            continue
        ordered_on = to_date(order.created_at)
        if order.customer_id not in first or ordered_on < first[order.customer_id]:
            first[order.customer_id] = ordered_on
    return first


def customer_acquisition(
    profiles: Iterable[ProfileRecord],
    bucketing: BucketingScheme,
    orders: Optional[Sequence[OrderRecord]] = None,
) -> List[CustomerAcquisition]:
    """
    New customers (by signup date) and returning customers per bucket.

    A customer is returning in a bucket when they ordered in it and their
    first order in ``orders`` falls before the bucket starts. Without
    ``orders`` the returning count stays None.
    """
    buckets = {bucket.key: bucket for bucket in bucketing.buckets()}
    rows = {
        key: CustomerAcquisition(
            bucket_key=key,
            returning_customers=None if orders is None else 0,
        )
        for key in buckets
    }

    for profile in profiles:
        row = rows.get(bucketing.key_for(profile.created_at))
        if row is not None:
            row.new_customers += 1

    if orders is not None:
        first_orders = _first_order_dates(orders)
        returning = defaultdict(set)
        for order in orders:
            if order.customer_id is None:
                continue
            key = bucketing.key_for(order.created_at)
            bucket = buckets.get(key)
            if bucket is not None and first_orders[order.customer_id] < bucket.start:
                returning[key].add(order.customer_id)

        for key, customers in returning.items():
            rows[key].returning_customers = len(customers)

    return sorted(rows.values(), key=attrgetter("bucket_key"))


def average_order_value(total_revenue: Decimal, order_count: int) -> Decimal:
    """Revenue per order rounded to cents; zero without orders"""
    if order_count == 0:
        return Decimal("0.00")
    return (to_decimal(total_revenue) / order_count).quantize(CENT, rounding=ROUND_HALF_UP)


def key_metrics(orders: Sequence[OrderRecord]) -> KeyMetrics:
    """
    Headline metrics over all supplied orders.

    The repeat purchase rate is the share of ordering customers with two or
    more orders; it is None when no order names its customer. Conversion
    rate needs visit data this layer never receives and is always None.
    """
    total_revenue = sum((order.total_amount for order in orders), Decimal("0"))
    order_count = len(orders)

    orders_per_customer = Counter(
        order.customer_id for order in orders if order.customer_id is not None
    )
    unavailable = ["conversion_rate"]
    if orders_per_customer:
        repeaters = sum(1 for count in orders_per_customer.values() if count >= 2)
        repeat_rate = (Decimal(repeaters) / len(orders_per_customer) * 100).quantize(
            CENT, rounding=ROUND_HALF_UP
        )
    else:
        repeat_rate = None
        unavailable.append("repeat_purchase_rate")

    return KeyMetrics(
        total_revenue=total_revenue,
        order_count=order_count,
        average_order_value=average_order_value(total_revenue, order_count),
        repeat_purchase_rate=repeat_rate,
        conversion_rate=None,
        unavailable=unavailable,
    )
