"""
Storefront Record Models

Typed, read-only views over the rows the storefront data store returns.
Rows may carry extra columns (join results, audit fields); they are ignored.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


RecordId = Union[int, str]


class OrderStatus(str, Enum):
    """Order lifecycle states"""
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class PromotionType(str, Enum):
    """Discount kinds offered by a promotion code"""
    PERCENTAGE = "percentage"
    FIXED = "fixed"
    FREE_SHIPPING = "free_shipping"


class StorefrontRecord(BaseModel):
    """Base for all records: immutable, tolerant of extra columns"""

    model_config = ConfigDict(frozen=True, extra="ignore")


class OrderRecord(StorefrontRecord):
    """Order row as read from the orders table"""
    id: RecordId
    created_at: datetime
    total_amount: Decimal = Decimal("0")
    status: OrderStatus = OrderStatus.PENDING
    customer_id: Optional[RecordId] = None
    order_number: Optional[str] = None
    customer_name: Optional[str] = None

    @field_validator("total_amount", mode="before")
    @classmethod
    def default_missing_amount(cls, v):
        # Orders without a total count as zero revenue
        return Decimal("0") if v is None or v == "" else v


class ProfileRecord(StorefrontRecord):
    """Customer profile; only the signup timestamp matters for bucketing"""
    id: RecordId
    created_at: datetime
    role: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class CategoryRecord(StorefrontRecord):
    id: RecordId
    name: str


class ProductRecord(StorefrontRecord):
    """Product row, optionally joined with its category name"""
    id: RecordId
    category_id: Optional[RecordId] = None
    name: Optional[str] = None
    stock: Optional[int] = None
    min_stock_threshold: Optional[int] = None
    category_name: Optional[str] = None


class OrderItemRecord(StorefrontRecord):
    """Order line joined with its product"""
    product_id: Optional[RecordId] = None
    product_name: Optional[str] = None
    quantity: int = 0
    price: Decimal = Decimal("0")
    created_at: Optional[datetime] = None

    @field_validator("price", mode="before")
    @classmethod
    def default_missing_price(cls, v):
        return Decimal("0") if v is None or v == "" else v

    @field_validator("quantity", mode="before")
    @classmethod
    def default_missing_quantity(cls, v):
        return 0 if v is None else v


class PromotionRecord(StorefrontRecord):
    """Discount code with a validity window and an optional usage cap"""
    code: str
    is_active: bool = True
    start_date: datetime
    end_date: Optional[datetime] = None
    usage_count: int = Field(default=0, ge=0)
    usage_limit: Optional[int] = None
    id: Optional[RecordId] = None
    type: Optional[PromotionType] = None
    value: Optional[Decimal] = None
    description: Optional[str] = None


class ReviewRecord(StorefrontRecord):
    """Product review; rating is validated when aggregated, not here"""
    id: RecordId
    rating: int
    product_id: Optional[RecordId] = None
    is_approved: bool = False
    created_at: Optional[datetime] = None
