"""
Record Models Module
"""
from .records import (
    CategoryRecord,
    OrderItemRecord,
    OrderRecord,
    OrderStatus,
    ProductRecord,
    ProfileRecord,
    PromotionRecord,
    PromotionType,
    ReviewRecord,
)

__all__ = [
    "CategoryRecord",
    "OrderItemRecord",
    "OrderRecord",
    "OrderStatus",
    "ProductRecord",
    "ProfileRecord",
    "PromotionRecord",
    "PromotionType",
    "ReviewRecord",
]
