"""
API Routes Module
"""
from .health import router as health_router
from .analytics import router as analytics_router
from .dashboard import router as dashboard_router
from .promotions import router as promotions_router
from .reviews import router as reviews_router

__all__ = [
    "health_router",
    "analytics_router",
    "dashboard_router",
    "promotions_router",
    "reviews_router",
]
