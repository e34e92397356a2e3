"""
Analytics API Endpoints

Time-series, category and customer charts computed from posted rows.
"""

from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter
import structlog

from storefront_analytics.reporting.aggregators import (
    category_distribution,
    customer_acquisition,
    key_metrics,
    sales_trend,
)
from storefront_analytics.reporting.bucketing import BucketingScheme, bucket_sequence, ensure_valid_range
from storefront_analytics.reporting.comparison import compare
from storefront_analytics.reporting.dashboard import build_analytics
from storefront_analytics.reporting.timeframes import analytics_range
from storefront_analytics.serving.api.schemas import (
    AnalyticsOverviewOut,
    AnalyticsOverviewRequest,
    BucketOut,
    CategoryDistributionRequest,
    CategorySliceOut,
    CompareRequest,
    ComparisonOut,
    CustomerAcquisitionOut,
    CustomerAcquisitionRequest,
    DateRangeOut,
    KeyMetricsOut,
    OrdersRequest,
    RangeRequest,
    SalesTrendOut,
    SalesTrendRequest,
)

router = APIRouter()
logger = structlog.get_logger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@router.post("/buckets", response_model=List[BucketOut])
async def get_buckets(request: RangeRequest) -> List[BucketOut]:
    """Bucket sequence for a range; an inverted range yields no buckets."""
    buckets = bucket_sequence(request.start_date, request.end_date, request.granularity)
    return [BucketOut.model_validate(bucket) for bucket in buckets]


@router.post("/sales-trend", response_model=SalesTrendOut)
async def get_sales_trend(request: SalesTrendRequest) -> SalesTrendOut:
    """
    Revenue and order counts per bucket.

    Every bucket in the range is returned, zero-filled when it has no orders.
    """
    logger.info(
        "get_sales_trend called",
        start_date=str(request.start_date),
        end_date=str(request.end_date),
        granularity=request.granularity,
        orders=len(request.orders),
    )
    ensure_valid_range(request.start_date, request.end_date)

    scheme = BucketingScheme(request.start_date, request.end_date, request.granularity)
    trend = sales_trend(request.orders, scheme)

    logger.info("Sales trend computed", data_points=len(trend.data))
    return SalesTrendOut.model_validate(trend)


@router.post("/category-distribution", response_model=List[CategorySliceOut])
async def get_category_distribution(request: CategoryDistributionRequest) -> List[CategorySliceOut]:
    """Product counts per category with chart colors."""
    slices = category_distribution(request.products, request.categories)
    return [CategorySliceOut.model_validate(s) for s in slices]


@router.post("/customer-acquisition", response_model=List[CustomerAcquisitionOut])
async def get_customer_acquisition(request: CustomerAcquisitionRequest) -> List[CustomerAcquisitionOut]:
    """New and returning customers per bucket."""
    ensure_valid_range(request.start_date, request.end_date)

    scheme = BucketingScheme(request.start_date, request.end_date, request.granularity)
    rows = customer_acquisition(request.profiles, scheme, request.orders)
    return [CustomerAcquisitionOut.model_validate(row) for row in rows]


@router.post("/key-metrics", response_model=KeyMetricsOut)
async def get_key_metrics(request: OrdersRequest) -> KeyMetricsOut:
    """Revenue, average order value and repeat purchase rate."""
    return KeyMetricsOut.model_validate(key_metrics(request.orders))


@router.post("/compare", response_model=ComparisonOut)
async def compare_periods(request: CompareRequest) -> ComparisonOut:
    """Percent change between a current and previous period value."""
    return ComparisonOut.model_validate(compare(request.current, request.previous))


@router.get("/timeframes/{preset}", response_model=DateRangeOut)
async def get_timeframe(preset: str, now: Optional[datetime] = None) -> DateRangeOut:
    """Date range and granularity behind an analytics range selector."""
    return DateRangeOut.model_validate(analytics_range(preset, now or utc_now()))


@router.post("/overview", response_model=AnalyticsOverviewOut)
async def get_analytics_overview(request: AnalyticsOverviewRequest) -> AnalyticsOverviewOut:
    """All analytics page charts for a range selector."""
    date_range = analytics_range(request.timeframe, request.now or utc_now())
    logger.info(
        "get_analytics_overview called",
        timeframe=request.timeframe,
        start_date=str(date_range.start_date),
        end_date=str(date_range.end_date),
    )

    report = build_analytics(
        request.orders,
        request.profiles,
        request.products,
        request.categories,
        date_range,
    )
    return AnalyticsOverviewOut.model_validate(report)
