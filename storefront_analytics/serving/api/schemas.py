"""
API Schemas

Request bodies carry the rows a page already fetched; responses mirror the
reporting results with money as floats for chart libraries.
"""

from datetime import date, datetime
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from storefront_analytics.models.records import (
    CategoryRecord,
    OrderItemRecord,
    OrderRecord,
    OrderStatus,
    ProductRecord,
    ProfileRecord,
    PromotionRecord,
)
from storefront_analytics.reporting.bucketing import Granularity
from storefront_analytics.reporting.promotions import PromotionStatus


class ApiModel(BaseModel):
    """Response base: built straight from reporting dataclasses"""

    model_config = ConfigDict(from_attributes=True)


# =============================================================================
# REQUESTS
# =============================================================================

class RangeRequest(BaseModel):
    start_date: date
    end_date: date
    granularity: str = "day"


class SalesTrendRequest(RangeRequest):
    orders: List[OrderRecord] = Field(default_factory=list)


class CustomerAcquisitionRequest(RangeRequest):
    profiles: List[ProfileRecord] = Field(default_factory=list)
    orders: Optional[List[OrderRecord]] = Field(
        default=None,
        description="Order history; without it returning customers are not computed",
    )


class CategoryDistributionRequest(BaseModel):
    products: List[ProductRecord] = Field(default_factory=list)
    categories: List[CategoryRecord] = Field(default_factory=list)


class OrdersRequest(BaseModel):
    orders: List[OrderRecord] = Field(default_factory=list)


class CompareRequest(BaseModel):
    current: float = Field(allow_inf_nan=False)
    previous: float = Field(allow_inf_nan=False)


class AnalyticsOverviewRequest(BaseModel):
    timeframe: str = "month"
    now: Optional[datetime] = None
    orders: List[OrderRecord] = Field(default_factory=list)
    profiles: List[ProfileRecord] = Field(default_factory=list)
    products: List[ProductRecord] = Field(default_factory=list)
    categories: List[CategoryRecord] = Field(default_factory=list)


class DashboardRequest(BaseModel):
    timeframe: str = "week"
    now: Optional[datetime] = None
    orders: List[OrderRecord] = Field(default_factory=list)
    profiles: List[ProfileRecord] = Field(default_factory=list)
    products: List[ProductRecord] = Field(default_factory=list)


class SalesReportRequest(BaseModel):
    timeframe: str = "30days"
    now: Optional[datetime] = None
    orders: List[OrderRecord] = Field(default_factory=list)
    profiles: List[ProfileRecord] = Field(default_factory=list)
    order_items: List[OrderItemRecord] = Field(default_factory=list)


class PromotionsRequest(BaseModel):
    now: Optional[datetime] = None
    promotions: List[PromotionRecord] = Field(default_factory=list)


class RatingsRequest(BaseModel):
    ratings: List[int] = Field(default_factory=list)


# =============================================================================
# RESPONSES
# =============================================================================

class BucketOut(ApiModel):
    key: str
    start: date
    end: date


class MetricSummaryOut(ApiModel):
    bucket_key: str
    revenue: float
    order_count: int


class SalesTrendOut(ApiModel):
    data: List[MetricSummaryOut]
    granularity: Granularity
    period_start: date
    period_end: date
    total_revenue: float
    total_orders: int


class CategorySliceOut(ApiModel):
    category_id: Optional[Union[int, str]]
    name: str
    count: int
    color: str


class CustomerAcquisitionOut(ApiModel):
    bucket_key: str
    new_customers: int
    returning_customers: Optional[int]


class KeyMetricsOut(ApiModel):
    total_revenue: float
    order_count: int
    average_order_value: float
    repeat_purchase_rate: Optional[float]
    conversion_rate: Optional[float]
    unavailable: List[str]


class ComparisonOut(ApiModel):
    current_value: float
    previous_value: float
    percent_change: int


class DateRangeOut(ApiModel):
    start_date: date
    end_date: date
    granularity: Granularity


class WindowOut(ApiModel):
    start: datetime
    end: datetime


class AnalyticsOverviewOut(ApiModel):
    date_range: DateRangeOut
    sales: SalesTrendOut
    categories: List[CategorySliceOut]
    customers: List[CustomerAcquisitionOut]
    metrics: KeyMetricsOut


class LowStockProductOut(ApiModel):
    id: Union[int, str]
    name: Optional[str]
    stock: int
    min_stock_threshold: Optional[int]
    category: str


class RecentOrderOut(ApiModel):
    id: Union[int, str]
    order_number: str
    customer_name: str
    total: float
    status: OrderStatus
    created_at: datetime


class DashboardOut(ApiModel):
    window: WindowOut
    total_revenue: float
    total_orders: int
    average_order_value: float
    revenue: ComparisonOut
    orders: ComparisonOut
    total_customers: int
    pending_orders: int
    low_stock_products: List[LowStockProductOut]
    recent_orders: List[RecentOrderOut]


class StatusCountOut(ApiModel):
    status: OrderStatus
    count: int


class TopProductOut(ApiModel):
    product_id: Union[int, str]
    name: str
    total: float
    quantity: int


class SalesReportOut(ApiModel):
    window: WindowOut
    total_sales: float
    total_orders: int
    average_order_value: float
    total_customers: int
    orders_by_status: List[StatusCountOut]
    monthly_sales: List[MetricSummaryOut]
    top_products: List[TopProductOut]
    recent_orders: List[RecentOrderOut]


class PromotionViewOut(ApiModel):
    code: str
    status: PromotionStatus
    usage_exhausted: bool
    usage_count: int
    usage_limit: Optional[int]


class PromotionSummaryOut(ApiModel):
    total: int
    by_status: Dict[str, int]
    exhausted: int


class RatingHistogramOut(ApiModel):
    counts: List[int]
    percentages: List[float]
    average: float
    total: int
