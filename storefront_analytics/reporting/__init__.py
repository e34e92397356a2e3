"""
Reporting Module

Pure aggregation over fetched storefront rows. Nothing here performs I/O.
"""
from .bucketing import Bucket, BucketingScheme, Granularity, bucket_key_for, bucket_sequence
from .aggregators import (
    MetricSummary,
    aggregate,
    category_distribution,
    customer_acquisition,
    key_metrics,
    sales_trend,
)
from .comparison import ComparisonResult, ReportingWindow, compare
from .promotions import PromotionStatus, is_usage_exhausted, resolve_status
from .reviews import RatingHistogram, aggregate_ratings

__all__ = [
    "Bucket",
    "BucketingScheme",
    "Granularity",
    "bucket_key_for",
    "bucket_sequence",
    "MetricSummary",
    "aggregate",
    "category_distribution",
    "customer_acquisition",
    "key_metrics",
    "sales_trend",
    "ComparisonResult",
    "ReportingWindow",
    "compare",
    "PromotionStatus",
    "is_usage_exhausted",
    "resolve_status",
    "RatingHistogram",
    "aggregate_ratings",
]
