"""Application tests for page view tracking and visitor statistics."""

from datetime import UTC, datetime, timedelta

import pytest
from marketplace.stats.visit import TrackPageView, Visit, visitor_stats
from protean import current_domain
from protean.exceptions import ValidationError

# Wednesday
NOW = datetime(2026, 10, 14, 12, 0, tzinfo=UTC)


def _visit_at(moment):
    current_domain.repository_for(Visit).add(Visit(path="/", timestamp=moment))


class TestTrackPageView:
    def test_records_visit(self):
        current_domain.process(
            TrackPageView(path="/products", ip_address="10.0.0.1", user_agent="pytest"),
            asynchronous=False,
        )
        assert visitor_stats()["total"] == 1
        assert visitor_stats()["today"] == 1

    def test_path_required(self):
        with pytest.raises(ValidationError):
            current_domain.process(TrackPageView(ip_address="10.0.0.1"), asynchronous=False)


class TestVisitorStats:
    def test_counts_per_period(self):
        _visit_at(NOW - timedelta(hours=1))  # today
        _visit_at(NOW - timedelta(days=1))  # yesterday, this week
        _visit_at(NOW - timedelta(days=3))  # Sunday, this week
        _visit_at(NOW - timedelta(days=4))  # Saturday, last week
        _visit_at(datetime(2026, 9, 30, tzinfo=UTC))  # last month
        _visit_at(datetime(2025, 12, 31, tzinfo=UTC))  # last year

        stats = visitor_stats(NOW)
        assert stats == {
            "today": 1,
            "yesterday": 1,
            "this_week": 3,
            "this_month": 4,
            "this_year": 5,
            "total": 6,
        }

    def test_no_visits(self):
        assert visitor_stats(NOW)["total"] == 0
