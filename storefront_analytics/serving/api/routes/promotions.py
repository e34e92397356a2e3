"""
Promotion API Endpoints

Status is resolved on every request; nothing is cached.
"""

from typing import List

from fastapi import APIRouter

from storefront_analytics.reporting.promotions import describe_promotion, summarize_promotions
from storefront_analytics.serving.api.routes.analytics import utc_now
from storefront_analytics.serving.api.schemas import (
    PromotionSummaryOut,
    PromotionViewOut,
    PromotionsRequest,
)

router = APIRouter()


@router.post("/status", response_model=List[PromotionViewOut])
async def get_promotion_status(request: PromotionsRequest) -> List[PromotionViewOut]:
    """Status and usage exhaustion of each promotion, in request order."""
    now = request.now or utc_now()
    return [
        PromotionViewOut.model_validate(describe_promotion(promotion, now))
        for promotion in request.promotions
    ]


@router.post("/summary", response_model=PromotionSummaryOut)
async def get_promotion_summary(request: PromotionsRequest) -> PromotionSummaryOut:
    """Promotion counts per status."""
    summary = summarize_promotions(request.promotions, request.now or utc_now())
    return PromotionSummaryOut(
        total=summary.total,
        by_status={status.value: count for status, count in summary.by_status.items()},
        exhausted=summary.exhausted,
    )
