"""
Promotion State Resolution

Derives the display status of a promotion code from its active flag and
validity window at a given moment, and whether its usage cap is used up.
The two signals are independent: an active promotion can be exhausted.
Status is never stored; it changes as time passes and must be resolved on
every read.
"""

from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, Iterable, List, Optional

from storefront_analytics.models.records import PromotionRecord
from storefront_analytics.reporting.bucketing import to_naive_utc


class PromotionStatus(str, Enum):
    """Derived promotion state"""
    ACTIVE = "active"
    INACTIVE = "inactive"
    EXPIRED = "expired"
    SCHEDULED = "scheduled"


def resolve_status(promotion: PromotionRecord, now: datetime) -> PromotionStatus:
    """
    Status of ``promotion`` at ``now``.

    First match wins:
    1. inactive flag            -> inactive
    2. end date passed          -> expired   (end == now is still active)
    3. start date in the future -> scheduled (start == now is active)
    4. otherwise                -> active
    """
    if not promotion.is_active:
        return PromotionStatus.INACTIVE

    now = to_naive_utc(now)
    if promotion.end_date is not None and now > to_naive_utc(promotion.end_date):
        return PromotionStatus.EXPIRED
    if now < to_naive_utc(promotion.start_date):
        return PromotionStatus.SCHEDULED
    return PromotionStatus.ACTIVE


def is_usage_exhausted(promotion: PromotionRecord) -> bool:
    """True once a capped promotion has been used ``usage_limit`` times"""
    return promotion.usage_limit is not None and promotion.usage_count >= promotion.usage_limit


@dataclass(frozen=True)
class PromotionView:
    """Promotion with its derived signals, as listed in the admin table"""
    code: str
    status: PromotionStatus
    usage_exhausted: bool
    usage_count: int
    usage_limit: Optional[int]


@dataclass(frozen=True)
class PromotionSummary:
    total: int
    by_status: Dict[PromotionStatus, int]
    exhausted: int


def describe_promotion(promotion: PromotionRecord, now: datetime) -> PromotionView:
    return PromotionView(
        code=promotion.code,
        status=resolve_status(promotion, now),
        usage_exhausted=is_usage_exhausted(promotion),
        usage_count=promotion.usage_count,
        usage_limit=promotion.usage_limit,
    )


def summarize_promotions(promotions: Iterable[PromotionRecord], now: datetime) -> PromotionSummary:
    """Count promotions per status; every status is present, possibly zero"""
    views: List[PromotionView] = [describe_promotion(p, now) for p in promotions]
    counts = Counter(view.status for view in views)

    return PromotionSummary(
        total=len(views),
        by_status={status: counts.get(status, 0) for status in PromotionStatus},
        exhausted=sum(1 for view in views if view.usage_exhausted),
    )
