"""
Unit Tests - Export Loader
"""
import json
from datetime import datetime
from decimal import Decimal

import polars as pl
import pytest
from pydantic import ValidationError

from storefront_analytics.exceptions import UnsupportedFormatError
from storefront_analytics.ingestion.loader import (
    FileFormat,
    detect_format,
    load_records,
    records_from_frame,
)
from storefront_analytics.models.records import (
    CategoryRecord,
    OrderRecord,
    OrderStatus,
    ProductRecord,
    ReviewRecord,
)


@pytest.fixture
def orders_csv(tmp_path):
    path = tmp_path / "orders.csv"
    path.write_text(
        "id,created_at,total_amount,status,customer_id\n"
        "1,2025-01-05T10:00:00,150.00,delivered,cust-1\n"
        "2,2025-01-15T14:30:00,,pending,\n"
        ",,,,\n"
    )
    return path


@pytest.fixture
def reviews_ndjson(tmp_path):
    path = tmp_path / "reviews.ndjson"
    rows = [
        {"id": 1, "rating": 5, "product_id": 101, "created_at": "2025-01-05T10:00:00"},
        {"id": 2, "rating": 4, "product_id": 101, "created_at": "not a timestamp"},
        {"id": 3, "rating": 3, "product_id": 102, "created_at": "2025-01-07T09:00:00"},
    ]
    path.write_text("\n".join(json.dumps(row) for row in rows) + "\n")
    return path


class TestDetectFormat:
    """Tests for detect_format"""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("orders.csv", FileFormat.CSV),
            ("orders.JSON", FileFormat.JSON),
            ("orders.jsonl", FileFormat.JSONL),
            ("orders.ndjson", FileFormat.JSONL),
            ("orders.parquet", FileFormat.PARQUET),
        ],
    )
    def test_known_suffixes(self, name, expected):
        """Test supported suffixes"""
        assert detect_format(name) == expected

    def test_unsupported_suffix(self):
        """Test unknown suffixes are rejected"""
        with pytest.raises(UnsupportedFormatError):
            detect_format("orders.xlsx")


class TestLoadRecords:
    """Tests for load_records"""

    def test_csv(self, orders_csv):
        """Test CSV rows become typed orders and blank rows are dropped"""
        result = load_records(orders_csv, OrderRecord)

        assert len(result.records) == 2
        first, second = result.records
        assert first.created_at == datetime(2025, 1, 5, 10, 0)
        assert first.total_amount == Decimal("150")
        assert first.status == OrderStatus.DELIVERED
        assert second.total_amount == 0
        assert second.customer_id is None

    def test_missing_file(self, tmp_path):
        """Test a missing file raises"""
        with pytest.raises(FileNotFoundError):
            load_records(tmp_path / "nope.csv", OrderRecord)

    def test_strict_raises_on_invalid_row(self, reviews_ndjson):
        """Test strict loading stops at the first invalid row"""
        with pytest.raises(ValidationError):
            load_records(reviews_ndjson, ReviewRecord)

    def test_non_strict_skips_invalid_rows(self, reviews_ndjson):
        """Test lenient loading keeps valid rows and reports rejects"""
        result = load_records(reviews_ndjson, ReviewRecord, strict=False)

        assert [r.id for r in result.records] == [1, 3]
        assert result.rejected_rows == 1
        assert result.errors[0].startswith("row 1:")

    def test_parquet(self, tmp_path):
        """Test Parquet exports"""
        path = tmp_path / "products.parquet"
        pl.DataFrame(
            {
                "id": [101, 102],
                "category_id": [1, None],
                "name": ["Oud Classic", "Gift Card"],
                "stock": [3, 50],
                "created_by": ["seed", "seed"],
            }
        ).write_parquet(path)

        result = load_records(path, ProductRecord)

        assert [p.category_id for p in result.records] == [1, None]
        assert result.records[0].stock == 3


class TestRecordsFromFrame:
    """Tests for records_from_frame"""

    def test_extra_columns_ignored(self):
        """Test join columns not on the model are ignored"""
        df = pl.DataFrame({"id": [1], "name": ["Perfumes"], "slug": ["perfumes"]})
        result = records_from_frame(df, CategoryRecord)
        assert result.records[0].name == "Perfumes"
        assert result.file_path == "<frame>"
