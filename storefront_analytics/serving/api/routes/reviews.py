"""
Review API Endpoints
"""

from fastapi import APIRouter
import structlog

from storefront_analytics.reporting.reviews import aggregate_ratings
from storefront_analytics.serving.api.schemas import RatingHistogramOut, RatingsRequest

router = APIRouter()
logger = structlog.get_logger(__name__)


@router.post("/stats", response_model=RatingHistogramOut)
async def get_review_stats(request: RatingsRequest) -> RatingHistogramOut:
    """
    Average rating, total and star histogram.

    A rating outside 1..5 is rejected with 422 rather than skipped.
    """
    histogram = aggregate_ratings(request.ratings)
    logger.debug("Review stats computed", total=histogram.total)
    return RatingHistogramOut.model_validate(histogram)
