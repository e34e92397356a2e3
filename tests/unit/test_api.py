"""
Unit Tests - API Endpoints
"""
from fastapi import FastAPI
from fastapi.testclient import TestClient

from storefront_analytics.serving.api.middleware import RateLimitMiddleware

NOW = "2025-01-31T12:00:00"

ORDERS = [
    {"id": "o-1", "created_at": "2024-12-20T09:00:00", "total_amount": "80.00",
     "status": "delivered", "customer_id": "cust-1"},
    {"id": "o-2", "created_at": "2025-01-05T10:00:00", "total_amount": "150.00",
     "status": "delivered", "customer_id": "cust-1", "customer_name": "John Doe"},
    {"id": "o-3", "created_at": "2025-01-28T09:15:00", "total_amount": 75.25,
     "status": "pending", "customer_id": "cust-2"},
    {"id": "o-4", "created_at": "2025-01-30T18:45:00", "total_amount": "40.00",
     "status": "cancelled", "customer_id": "cust-2"},
]

PROFILES = [
    {"id": "cust-1", "created_at": "2024-12-01T08:00:00", "first_name": "John", "last_name": "Doe"},
    {"id": "cust-2", "created_at": "2025-01-10T12:00:00"},
]


class TestHealth:
    """Tests for health endpoints"""

    def test_health(self, client):
        """Test health check reports configuration"""
        response = client.get("/api/v1/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["checks"]["configuration"]["status"] == "healthy"

    def test_liveness(self, client):
        """Test liveness probe"""
        assert client.get("/api/v1/health/live").json() == {"status": "alive"}

    def test_request_id_echoed(self, client):
        """Test the request id header round-trips"""
        response = client.get("/api/v1/health/live", headers={"X-Request-ID": "req-42"})
        assert response.headers["X-Request-ID"] == "req-42"
        assert "X-Response-Time" in response.headers


class TestAnalyticsEndpoints:
    """Tests for analytics endpoints"""

    def test_buckets(self, client):
        """Test bucket sequence across a year boundary"""
        response = client.post(
            "/api/v1/analytics/buckets",
            json={"start_date": "2023-11-15", "end_date": "2024-01-10", "granularity": "month"},
        )

        assert response.status_code == 200
        assert [b["key"] for b in response.json()] == ["2023-11", "2023-12", "2024-01"]
        assert response.json()[0]["start"] == "2023-11-01"

    def test_buckets_inverted_range_empty(self, client):
        """Test an inverted range yields no buckets"""
        response = client.post(
            "/api/v1/analytics/buckets",
            json={"start_date": "2024-02-01", "end_date": "2024-01-01"},
        )
        assert response.json() == []

    def test_sales_trend(self, client):
        """Test sales trend totals and zero-filled buckets"""
        response = client.post(
            "/api/v1/analytics/sales-trend",
            json={
                "start_date": "2025-01-01",
                "end_date": "2025-01-31",
                "granularity": "week",
                "orders": ORDERS,
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["granularity"] == "week"
        assert [p["bucket_key"] for p in body["data"]][:2] == ["2025-W01", "2025-W02"]
        assert body["total_revenue"] == 265.25
        assert body["total_orders"] == 3
        assert body["data"][0]["revenue"] == 0

    def test_sales_trend_inverted_range(self, client):
        """Test an inverted range is rejected for a series"""
        response = client.post(
            "/api/v1/analytics/sales-trend",
            json={"start_date": "2025-02-01", "end_date": "2025-01-01"},
        )

        assert response.status_code == 422
        assert response.json()["error"] == "InvalidRangeError"

    def test_sales_trend_invalid_granularity(self, client):
        """Test an unknown granularity is rejected"""
        response = client.post(
            "/api/v1/analytics/sales-trend",
            json={"start_date": "2025-01-01", "end_date": "2025-01-31", "granularity": "quarter"},
        )

        assert response.status_code == 422
        assert response.json()["error"] == "InvalidGranularityError"

    def test_category_distribution(self, client):
        """Test uncategorized products share one slice"""
        response = client.post(
            "/api/v1/analytics/category-distribution",
            json={
                "products": [
                    {"id": 1, "category_id": 1},
                    {"id": 2, "category_id": None},
                    {"id": 3, "category_id": 1},
                ],
                "categories": [{"id": 1, "name": "Perfumes"}],
            },
        )

        slices = response.json()
        assert [(s["name"], s["count"]) for s in slices] == [("Perfumes", 2), ("Uncategorized", 1)]
        assert slices[1]["category_id"] is None
        assert slices[0]["color"] != slices[1]["color"]

    def test_customer_acquisition_without_orders(self, client):
        """Test returning customers are null without order history"""
        response = client.post(
            "/api/v1/analytics/customer-acquisition",
            json={
                "start_date": "2025-01-01",
                "end_date": "2025-01-31",
                "granularity": "month",
                "profiles": PROFILES,
            },
        )

        assert response.json() == [
            {"bucket_key": "2025-01", "new_customers": 1, "returning_customers": None}
        ]

    def test_customer_acquisition_with_orders(self, client):
        """Test returning customers are counted from order history"""
        response = client.post(
            "/api/v1/analytics/customer-acquisition",
            json={
                "start_date": "2025-01-01",
                "end_date": "2025-01-31",
                "granularity": "month",
                "profiles": PROFILES,
                "orders": ORDERS,
            },
        )
        assert response.json()[0]["returning_customers"] == 1

    def test_key_metrics(self, client):
        """Test conversion rate is reported as unavailable"""
        body = client.post("/api/v1/analytics/key-metrics", json={"orders": ORDERS}).json()

        assert body["order_count"] == 4
        assert body["total_revenue"] == 345.25
        assert body["repeat_purchase_rate"] == 100.0
        assert body["conversion_rate"] is None
        assert "conversion_rate" in body["unavailable"]

    def test_compare(self, client):
        """Test zero baseline comparison"""
        body = client.post("/api/v1/analytics/compare", json={"current": 5, "previous": 0}).json()
        assert body["percent_change"] == 100

    def test_compare_tiny_baseline(self, client):
        """Test comparisons beyond default decimal precision succeed"""
        response = client.post("/api/v1/analytics/compare", json={"current": 1, "previous": 1e-27})

        assert response.status_code == 200
        assert response.json()["percent_change"] == 99999999999999999999999999900

    def test_compare_non_finite_rejected(self, client):
        """Test infinite values are rejected at the request boundary"""
        response = client.post("/api/v1/analytics/compare", json={"current": "inf", "previous": 1})
        assert response.status_code == 422

    def test_timeframe(self, client):
        """Test timeframe preset resolution"""
        response = client.get("/api/v1/analytics/timeframes/week", params={"now": NOW})

        assert response.json() == {
            "start_date": "2025-01-24",
            "end_date": "2025-01-31",
            "granularity": "day",
        }

    def test_unknown_timeframe(self, client):
        """Test unknown presets are rejected"""
        response = client.get("/api/v1/analytics/timeframes/decade", params={"now": NOW})

        assert response.status_code == 422
        assert response.json()["error"] == "UnknownTimeframeError"

    def test_overview(self, client):
        """Test the analytics overview payload"""
        response = client.post(
            "/api/v1/analytics/overview",
            json={"timeframe": "year", "now": NOW, "orders": ORDERS, "profiles": PROFILES},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["date_range"]["granularity"] == "month"
        assert len(body["sales"]["data"]) == 13
        assert body["sales"]["total_revenue"] == 345.25
        assert body["categories"] == []


class TestDashboardEndpoints:
    """Tests for dashboard endpoints"""

    def test_summary(self, client):
        """Test dashboard summary for the last week"""
        response = client.post(
            "/api/v1/dashboard/summary",
            json={"timeframe": "week", "now": NOW, "orders": ORDERS, "profiles": PROFILES},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["total_orders"] == 2
        assert body["total_revenue"] == 115.25
        assert body["orders"]["percent_change"] == 100
        assert body["pending_orders"] == 1
        assert body["recent_orders"][0]["order_number"] == "ORD-O-4"
        assert body["recent_orders"][0]["customer_name"] == "Guest"

    def test_summary_unknown_timeframe(self, client):
        """Test the dashboard rejects unknown presets"""
        response = client.post("/api/v1/dashboard/summary", json={"timeframe": "decade", "now": NOW})
        assert response.status_code == 422

    def test_sales_report_fallback_window(self, client):
        """Test unknown presets fall back to the last 30 days"""
        response = client.post(
            "/api/v1/dashboard/sales-report",
            json={
                "timeframe": "decade",
                "now": NOW,
                "orders": ORDERS,
                "profiles": PROFILES,
                "order_items": [
                    {"product_id": 7, "product_name": "Oud Classic", "quantity": 2, "price": "50.00"},
                ],
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["window"]["start"] == "2025-01-01T12:00:00"
        assert body["total_orders"] == 2
        assert body["total_sales"] == 225.25
        assert len(body["monthly_sales"]) == 6
        assert body["top_products"] == [
            {"product_id": 7, "name": "Oud Classic", "total": 100.0, "quantity": 2}
        ]

    def test_sales_report_ninety_days(self, client):
        """Test the 90-day preset reaches back 90 days"""
        response = client.post(
            "/api/v1/dashboard/sales-report",
            json={"timeframe": "90days", "now": NOW, "orders": ORDERS},
        )

        body = response.json()
        assert body["window"]["start"] == "2024-11-02T12:00:00"
        assert body["total_orders"] == 3
        assert body["total_sales"] == 305.25


class TestPromotionEndpoints:
    """Tests for promotion endpoints"""

    PROMOTIONS = [
        {"code": "LIVE", "start_date": "2025-01-01T00:00:00", "end_date": "2025-02-01T00:00:00"},
        {"code": "OLD", "is_active": False, "start_date": "2024-01-01T00:00:00",
         "end_date": "2024-02-01T00:00:00"},
        {"code": "SOON", "start_date": "2025-03-01T00:00:00", "usage_count": 5, "usage_limit": 5},
    ]

    def test_status(self, client):
        """Test per-promotion status in request order"""
        response = client.post(
            "/api/v1/promotions/status",
            json={"now": NOW, "promotions": self.PROMOTIONS},
        )

        body = response.json()
        assert [(p["code"], p["status"]) for p in body] == [
            ("LIVE", "active"),
            ("OLD", "inactive"),
            ("SOON", "scheduled"),
        ]
        assert body[2]["usage_exhausted"] is True

    def test_summary(self, client):
        """Test status counts include zero entries"""
        body = client.post(
            "/api/v1/promotions/summary",
            json={"now": NOW, "promotions": self.PROMOTIONS},
        ).json()

        assert body == {
            "total": 3,
            "by_status": {"active": 1, "inactive": 1, "expired": 0, "scheduled": 1},
            "exhausted": 1,
        }


class TestReviewEndpoints:
    """Tests for review endpoints"""

    def test_stats(self, client):
        """Test rating histogram"""
        body = client.post("/api/v1/reviews/stats", json={"ratings": [5, 5, 4, 3, 5]}).json()

        assert body["average"] == 4.4
        assert body["total"] == 5
        assert body["counts"] == [0, 0, 1, 1, 3]
        assert body["percentages"] == [0.0, 0.0, 20.0, 20.0, 60.0]

    def test_out_of_range_rating(self, client):
        """Test an out-of-range rating is rejected"""
        response = client.post("/api/v1/reviews/stats", json={"ratings": [4, 6]})

        assert response.status_code == 422
        assert response.json() == {
            "error": "OutOfRangeError",
            "message": "Rating 6 at position 1 is outside 1..5",
        }


class TestRateLimit:
    """Tests for RateLimitMiddleware"""

    def test_blocks_after_limit(self):
        """Test requests beyond the limit get 429"""
        app = FastAPI()
        app.add_middleware(RateLimitMiddleware, max_requests=2, window_seconds=60)

        @app.get("/ping")
        async def ping():
            return {"ok": True}

        client = TestClient(app)
        assert client.get("/ping").headers["X-RateLimit-Remaining"] == "1"
        assert client.get("/ping").status_code == 200

        blocked = client.get("/ping")
        assert blocked.status_code == 429
        assert blocked.json()["error"] == "RateLimitExceeded"
        assert blocked.headers["Retry-After"] == "60"

    def test_idle_clients_evicted(self):
        """Test clients without requests inside the window are forgotten"""
        limiter = RateLimitMiddleware(FastAPI(), max_requests=5, window_seconds=60)
        limiter._requests = {"10.0.0.1": [0.0], "10.0.0.2": [100.0], "10.0.0.3": []}

        limiter._evict_idle(130.0)

        assert list(limiter._requests) == ["10.0.0.2"]
