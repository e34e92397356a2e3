"""
Dashboard and Report Builders

Composes the aggregation primitives into the payloads of the admin
dashboard, the sales report and the analytics page. Callers pass every row
the page fetched; windows decide which rows count for which figure.
"""

from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Dict, Hashable, List, Optional, Sequence

import structlog

from storefront_analytics.config import get_settings
from storefront_analytics.models.records import (
    CategoryRecord,
    OrderItemRecord,
    OrderRecord,
    OrderStatus,
    ProductRecord,
    ProfileRecord,
)
from storefront_analytics.reporting.aggregators import (
    CategorySlice,
    CustomerAcquisition,
    KeyMetrics,
    MetricSummary,
    SalesTrend,
    aggregate,
    average_order_value,
    category_distribution,
    customer_acquisition,
    key_metrics,
    order_amount,
    sales_trend,
)
from storefront_analytics.reporting.bucketing import BucketingScheme, Granularity, to_date, to_naive_utc
from storefront_analytics.reporting.comparison import ComparisonResult, ReportingWindow, compare
from storefront_analytics.reporting.timeframes import DateRange, shift_months

logger = structlog.get_logger(__name__)

GUEST_NAME = "Guest"
UNKNOWN_CATEGORY = "Unknown"
UNKNOWN_PRODUCT = "Unknown Product"


@dataclass(frozen=True)
class LowStockProduct:
    id: Hashable
    name: Optional[str]
    stock: int
    min_stock_threshold: Optional[int]
    category: str


@dataclass(frozen=True)
class RecentOrder:
    id: Hashable
    order_number: str
    customer_name: str
    total: Decimal
    status: OrderStatus
    created_at: datetime


@dataclass(frozen=True)
class StatusCount:
    status: OrderStatus
    count: int


@dataclass(frozen=True)
class TopProduct:
    product_id: Hashable
    name: str
    total: Decimal
    quantity: int


@dataclass(frozen=True)
class DashboardSummary:
    """Figures shown on the admin dashboard"""
    window: ReportingWindow
    total_revenue: Decimal
    total_orders: int
    average_order_value: Decimal
    revenue: ComparisonResult
    orders: ComparisonResult
    total_customers: int
    pending_orders: int
    low_stock_products: List[LowStockProduct]
    recent_orders: List[RecentOrder]


@dataclass(frozen=True)
class SalesReport:
    """Figures shown on the sales report page"""
    window: ReportingWindow
    total_sales: Decimal
    total_orders: int
    average_order_value: Decimal
    total_customers: int
    orders_by_status: List[StatusCount]
    monthly_sales: List[MetricSummary]
    top_products: List[TopProduct]
    recent_orders: List[RecentOrder]


@dataclass(frozen=True)
class AnalyticsReport:
    """Charts and headline numbers of the analytics page"""
    date_range: DateRange
    sales: SalesTrend
    categories: List[CategorySlice]
    customers: List[CustomerAcquisition]
    metrics: KeyMetrics


def _revenue(orders: Sequence[OrderRecord]) -> Decimal:
    return sum((order.total_amount for order in orders), Decimal("0"))


def order_number(order: OrderRecord) -> str:
    """Stored order number, or one derived from the order id"""
    if order.order_number:
        return order.order_number
    return f"ORD-{str(order.id)[:8].upper()}"


def customer_name(order: OrderRecord, profiles: Dict[str, ProfileRecord]) -> str:
    """Name on the order, else the ordering profile's name, else Guest"""
    if order.customer_name and order.customer_name.strip():
        return order.customer_name.strip()

    profile = profiles.get(str(order.customer_id)) if order.customer_id is not None else None
    if profile is not None:
        name = f"{profile.first_name or ''} {profile.last_name or ''}".strip()
        if name:
            return name
    return GUEST_NAME


def recent_orders(
    orders: Sequence[OrderRecord],
    profiles: Sequence[ProfileRecord] = (),
    limit: Optional[int] = None,
) -> List[RecentOrder]:
    """Newest orders first"""
    limit = limit if limit is not None else get_settings().analytics.recent_orders_limit
    by_id = {str(profile.id): profile for profile in profiles}
    newest = sorted(orders, key=lambda o: to_naive_utc(o.created_at), reverse=True)[:limit]

    return [
        RecentOrder(
            id=order.id,
            order_number=order_number(order),
            customer_name=customer_name(order, by_id),
            total=order.total_amount,
            status=order.status,
            created_at=order.created_at,
        )
        for order in newest
    ]


def low_stock_products(
    products: Sequence[ProductRecord],
    threshold: Optional[int] = None,
    limit: Optional[int] = None,
) -> List[LowStockProduct]:
    """In-stock products below ``threshold``, scarcest first"""
    analytics = get_settings().analytics
    threshold = threshold if threshold is not None else analytics.low_stock_threshold
    limit = limit if limit is not None else analytics.low_stock_limit

    scarce = [p for p in products if p.stock is not None and 0 < p.stock < threshold]
    scarce.sort(key=lambda p: p.stock)

    return [
        LowStockProduct(
            id=product.id,
            name=product.name,
            stock=product.stock,
            min_stock_threshold=product.min_stock_threshold,
            category=product.category_name or UNKNOWN_CATEGORY,
        )
        for product in scarce[:limit]
    ]


def build_dashboard(
    orders: Sequence[OrderRecord],
    profiles: Sequence[ProfileRecord],
    products: Sequence[ProductRecord],
    window: ReportingWindow,
) -> DashboardSummary:
    """
    Dashboard figures for ``window``.

    Revenue and order counts are compared with the preceding window of the
    same length. Pending orders and recent orders look at every supplied
    order regardless of the window.
    """
    previous_window = window.previous()
    current = [o for o in orders if window.contains(o.created_at)]
    previous = [o for o in orders if previous_window.contains(o.created_at)]

    total_revenue = _revenue(current)
    summary = DashboardSummary(
        window=window,
        total_revenue=total_revenue,
        total_orders=len(current),
        average_order_value=average_order_value(total_revenue, len(current)),
        revenue=compare(total_revenue, _revenue(previous)),
        orders=compare(len(current), len(previous)),
        total_customers=len(profiles),
        pending_orders=sum(1 for o in orders if o.status == OrderStatus.PENDING),
        low_stock_products=low_stock_products(products),
        recent_orders=recent_orders(orders, profiles),
    )

    logger.info(
        "Dashboard built",
        orders=summary.total_orders,
        previous_orders=len(previous),
        revenue_change=summary.revenue.percent_change,
    )
    return summary


def orders_by_status(orders: Sequence[OrderRecord]) -> List[StatusCount]:
    """Order counts per status, most frequent first"""
    counts = Counter(order.status for order in orders)
    return [StatusCount(status=status, count=count) for status, count in counts.most_common()]


def top_products(
    items: Sequence[OrderItemRecord],
    limit: Optional[int] = None,
) -> List[TopProduct]:
    """Products ranked by line revenue; lines without a product are skipped"""
    limit = limit if limit is not None else get_settings().analytics.top_products_limit

    totals: Dict[Hashable, Dict] = {}
    for item in items:
        if item.product_id is None:
            continue
        entry = totals.setdefault(
            item.product_id,
            {"name": item.product_name or UNKNOWN_PRODUCT, "total": Decimal("0"), "quantity": 0},
        )
        entry["total"] += item.price * item.quantity
        entry["quantity"] += item.quantity

    ranked = sorted(totals.items(), key=lambda kv: kv[1]["total"], reverse=True)
    return [
        TopProduct(product_id=product_id, name=entry["name"], total=entry["total"], quantity=entry["quantity"])
        for product_id, entry in ranked[:limit]
    ]


def monthly_sales(
    orders: Sequence[OrderRecord],
    months: int,
    now: datetime,
) -> List[MetricSummary]:
    """Revenue for the ``months`` calendar months ending with the current one"""
    first_of_month = to_date(now).replace(day=1)
    scheme = BucketingScheme(shift_months(first_of_month, -(months - 1)), to_date(now), Granularity.MONTH)
    return aggregate(orders, scheme, order_amount)


def build_sales_report(
    orders: Sequence[OrderRecord],
    profiles: Sequence[ProfileRecord],
    order_items: Sequence[OrderItemRecord],
    window: ReportingWindow,
    months: int,
    now: datetime,
) -> SalesReport:
    """
    Sales report for ``window``.

    Cancelled orders are left out of every sales figure. Admin profiles are
    not counted as customers.
    """
    sold = [
        o for o in orders
        if window.contains(o.created_at) and o.status != OrderStatus.CANCELLED
    ]
    window_items = [
        item for item in order_items
        if item.created_at is None or window.contains(item.created_at)
    ]
    total_sales = _revenue(sold)

    return SalesReport(
        window=window,
        total_sales=total_sales,
        total_orders=len(sold),
        average_order_value=average_order_value(total_sales, len(sold)),
        total_customers=sum(1 for p in profiles if not p.is_admin),
        orders_by_status=orders_by_status(sold),
        monthly_sales=monthly_sales(sold, months, now),
        top_products=top_products(window_items),
        recent_orders=recent_orders(orders, profiles),
    )


def build_analytics(
    orders: Sequence[OrderRecord],
    profiles: Sequence[ProfileRecord],
    products: Sequence[ProductRecord],
    categories: Sequence[CategoryRecord],
    date_range: DateRange,
) -> AnalyticsReport:
    """All analytics page charts over ``date_range``"""
    scheme = date_range.scheme()
    return AnalyticsReport(
        date_range=date_range,
        sales=sales_trend(orders, scheme),
        categories=category_distribution(products, categories),
        customers=customer_acquisition(profiles, scheme, orders),
        metrics=key_metrics(orders),
    )
