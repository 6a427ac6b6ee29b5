"""Tests for stock history records and visitor period boundaries."""

from datetime import UTC, datetime

import pytest
from marketplace.inventory.stock_history import StockHistory
from marketplace.stats.visit import period_starts
from protean.exceptions import ValidationError


class TestStockHistoryRecord:
    def test_record_defaults_variant(self):
        entry = StockHistory.record(
            product_id="prod-001",
            change_type="penambahan",
            quantity_change=5,
            stock_after_change=5,
        )
        assert entry.size == "default"
        assert entry.color == "default"
        assert entry.note == ""

    def test_sale_record_links_order(self):
        entry = StockHistory.record(
            product_id="prod-001",
            change_type="penjualan",
            quantity_change=-2,
            stock_after_change=8,
            related_order_id="order-001",
        )
        assert entry.quantity_change == -2
        assert str(entry.related_order_id) == "order-001"

    def test_unknown_change_type_rejected(self):
        with pytest.raises(ValueError):
            StockHistory.record(
                product_id="prod-001",
                change_type="hilang",
                quantity_change=1,
                stock_after_change=1,
            )

    def test_negative_resulting_stock_rejected(self):
        with pytest.raises(ValidationError):
            StockHistory.record(
                product_id="prod-001",
                change_type="koreksi",
                quantity_change=-1,
                stock_after_change=-1,
            )


class TestPeriodStarts:
    def test_week_starts_on_sunday(self):
        # 2026-10-14 is a Wednesday
        starts = period_starts(datetime(2026, 10, 14, 15, 30, tzinfo=UTC))
        assert starts["this_week"] == datetime(2026, 10, 11, tzinfo=UTC)

    def test_sunday_is_its_own_week_start(self):
        starts = period_starts(datetime(2026, 10, 11, 8, 0, tzinfo=UTC))
        assert starts["this_week"] == datetime(2026, 10, 11, tzinfo=UTC)

    def test_calendar_boundaries(self):
        starts = period_starts(datetime(2026, 3, 1, 0, 5, tzinfo=UTC))
        assert starts["today"] == datetime(2026, 3, 1, tzinfo=UTC)
        assert starts["yesterday"] == datetime(2026, 2, 28, tzinfo=UTC)
        assert starts["this_month"] == datetime(2026, 3, 1, tzinfo=UTC)
        assert starts["this_year"] == datetime(2026, 1, 1, tzinfo=UTC)
