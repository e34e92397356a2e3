"""
Test Suite Configuration
"""
from datetime import datetime
from decimal import Decimal
from typing import List

import pytest
from fastapi.testclient import TestClient

from storefront_analytics.config import Settings
from storefront_analytics.main import create_app
from storefront_analytics.models.records import (
    CategoryRecord,
    OrderItemRecord,
    OrderRecord,
    ProductRecord,
    ProfileRecord,
    PromotionRecord,
)


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Create test settings"""
    return Settings(
        APP_ENV="testing",
        DEBUG=True,
    )


@pytest.fixture
def client() -> TestClient:
    """API client on a fresh app, so rate limit state never leaks between tests"""
    with TestClient(create_app()) as test_client:
        yield test_client


@pytest.fixture
def now() -> datetime:
    """Fixed clock: Friday 2025-01-31 12:00"""
    return datetime(2025, 1, 31, 12, 0, 0)


@pytest.fixture
def sample_orders() -> List[OrderRecord]:
    """Orders spread over January 2025 plus one from December 2024"""
    return [
        OrderRecord(
            id="a1b2c3d4-0001", created_at=datetime(2024, 12, 20, 9, 0),
            total_amount=Decimal("80.00"), status="delivered", customer_id="cust-1",
        ),
        OrderRecord(
            id="a1b2c3d4-0002", created_at=datetime(2025, 1, 5, 10, 0),
            total_amount=Decimal("150.00"), status="delivered", customer_id="cust-1",
            order_number="ORD-2025-002", customer_name="John Doe",
        ),
        OrderRecord(
            id="a1b2c3d4-0003", created_at=datetime(2025, 1, 15, 14, 30),
            total_amount=Decimal("200.50"), status="shipped", customer_id="cust-2",
        ),
        OrderRecord(
            id="a1b2c3d4-0004", created_at=datetime(2025, 1, 28, 9, 15),
            total_amount=Decimal("75.25"), status="pending", customer_id="cust-1",
        ),
        OrderRecord(
            id="a1b2c3d4-0005", created_at=datetime(2025, 1, 30, 18, 45),
            total_amount=Decimal("40.00"), status="cancelled", customer_id="cust-3",
        ),
    ]


@pytest.fixture
def sample_profiles() -> List[ProfileRecord]:
    """Customer profiles, one of them an admin"""
    return [
        ProfileRecord(id="cust-1", created_at=datetime(2024, 12, 1, 8, 0), first_name="John", last_name="Doe"),
        ProfileRecord(id="cust-2", created_at=datetime(2025, 1, 10, 12, 0), first_name="Jane", last_name="Smith"),
        ProfileRecord(id="cust-3", created_at=datetime(2025, 1, 29, 16, 0)),
        ProfileRecord(id="admin-1", created_at=datetime(2025, 1, 2, 7, 0), role="admin"),
    ]


@pytest.fixture
def sample_categories() -> List[CategoryRecord]:
    """Catalog categories"""
    return [
        CategoryRecord(id=1, name="Perfumes"),
        CategoryRecord(id=2, name="Skincare"),
    ]


@pytest.fixture
def sample_products() -> List[ProductRecord]:
    """Products with stock levels, some uncategorized"""
    return [
        ProductRecord(id=101, category_id=1, name="Oud Classic", stock=3, category_name="Perfumes"),
        ProductRecord(id=102, category_id=None, name="Gift Card", stock=50),
        ProductRecord(id=103, category_id=1, name="Rose Mist", stock=0, category_name="Perfumes"),
        ProductRecord(id=104, category_id=2, name="Night Cream", stock=7, category_name="Skincare"),
        ProductRecord(id=105, category_id=2, name="Day Cream", stock=1),
    ]


@pytest.fixture
def sample_order_items() -> List[OrderItemRecord]:
    """Order lines joined with products"""
    return [
        OrderItemRecord(product_id=101, product_name="Oud Classic", quantity=2, price=Decimal("50.00"),
                        created_at=datetime(2025, 1, 5, 10, 0)),
        OrderItemRecord(product_id=104, product_name="Night Cream", quantity=1, price=Decimal("200.50"),
                        created_at=datetime(2025, 1, 15, 14, 30)),
        OrderItemRecord(product_id=101, product_name="Oud Classic", quantity=1, price=Decimal("50.00"),
                        created_at=datetime(2025, 1, 28, 9, 15)),
        OrderItemRecord(product_id=None, product_name="Deleted", quantity=5, price=Decimal("999.00"),
                        created_at=datetime(2025, 1, 28, 9, 15)),
    ]


@pytest.fixture
def make_promotion():
    """Factory for promotions with sensible defaults"""
    def factory(**overrides) -> PromotionRecord:
        fields = {
            "code": "WINTER25",
            "is_active": True,
            "start_date": datetime(2025, 1, 1),
            "end_date": datetime(2025, 2, 28),
            "usage_count": 0,
            "usage_limit": None,
        }
        fields.update(overrides)
        return PromotionRecord(**fields)

    return factory
