"""Tests for the on-demand dashboard aggregations over the seeded repository."""
import asyncio

import pytest

from app.core.exceptions import ValidationException
from app.services.aggregation_engine import AggregationEngine

from conftest import NOW, at


def run(coro):
    return asyncio.run(coro)


@pytest.fixture()
def engine(repository):
    return AggregationEngine(repository)


class TestRevenueLeaderboard:

    def test_brand_revenue_excludes_pending_payments(self, engine):
        entries = run(engine.revenue_leaderboard("brand"))

        assert [(e.subject_id, e.value) for e in entries] == [("b1", 150.0), ("b2", 120.0)]
        assert entries[0].subject_name == "Acme"
        assert entries[0].rank == 1

    def test_campaign_leaderboard_uses_titles(self, engine):
        entries = run(engine.revenue_leaderboard("campaign"))

        assert entries[0].subject_id == "c1"
        assert entries[0].subject_name == "Spring Launch"

    def test_window_is_half_open(self, engine):
        entries = run(engine.revenue_leaderboard("brand", since=at(2026, 2, 1), until=at(2026, 3, 2)))

        assert [(e.subject_id, e.value) for e in entries] == [("b1", 50.0)]

    def test_limit(self, engine):
        assert len(run(engine.revenue_leaderboard("brand", limit=1))) == 1

    def test_unknown_dimension_is_rejected(self, engine):
        with pytest.raises(ValidationException):
            run(engine.revenue_leaderboard("influencer"))

    def test_empty_system_yields_empty_list(self, empty_repository):
        engine = AggregationEngine(empty_repository)
        assert run(engine.revenue_leaderboard("campaign")) == []
        assert run(engine.revenue_leaderboard("brand")) == []


class TestRoi:

    def test_influencer_roi(self, engine):
        metrics = run(engine.influencer_roi())
        by_id = {m.subject_id: m for m in metrics}

        assert [m.subject_id for m in metrics] == ["i1", "i2", "i3", "i4"]
        assert by_id["i1"].total_revenue == 500.0
        assert by_id["i1"].total_spend == 150.0
        assert by_id["i1"].roi == pytest.approx(2.3333)
        assert by_id["i2"].roi == pytest.approx(-0.1667)
        assert by_id["i4"].insufficient_data is True
        assert by_id["i4"].roi == 0.0

    def test_brand_roi(self, engine):
        by_id = {m.subject_id: m for m in run(engine.brand_roi())}

        assert by_id["b1"].total_revenue == 500.0
        assert by_id["b1"].total_spend == 150.0
        assert by_id["b1"].assignment_count == 3
        assert by_id["b2"].total_spend == 120.0


class TestDashboards:

    def test_brand_analytics(self, engine):
        result = run(engine.brand_analytics(NOW))

        assert result.total_brands == 2
        assert result.active_brands == 1
        assert result.new_brands == 1
        assert result.highest_revenue_brand.subject_id == "b1"
        assert result.highest_revenue_brand.value == 150.0
        assert result.most_active_brand.subject_id == "b1"
        assert [s.name for s in result.category_distribution] == ["Fashion", "tech"]
        assert result.revenue_trend.values == [0.0, 0.0, 0.0, 120.0, 50.0, 100.0]
        assert result.revenue_trend.labels[-1] == "Mar 2026"

    def test_influencer_analytics(self, engine):
        result = run(engine.influencer_analytics(NOW))

        assert result.total_influencers == 4
        assert result.active_influencers == 1
        assert result.new_influencers == 2
        assert result.average_engagement == 3.0
        assert result.top_influencer.subject_id == "i1"
        assert result.top_influencer.value == 6.0
        assert [s.subject_id for s in result.top_influencers] == ["i1", "i2", "i3", "i4"]

    def test_campaign_analytics(self, engine):
        result = run(engine.campaign_analytics(NOW))

        assert result.total_campaigns == 3
        assert result.active_campaigns == 1
        assert result.success_rate == 100.0
        assert result.status_distribution.draft == 1
        assert [c.campaign_id for c in result.top_campaigns] == ["c1", "c2", "c3"]
        top = result.top_campaigns[0]
        assert top.brand_name == "Acme"
        assert top.start_date == "2026-02-01"
        assert top.engagement_rate == 4.0
        assert top.revenue == 150.0

    def test_dashboard_overview(self, engine):
        result = run(engine.dashboard_overview(NOW))

        assert (result.brand_count, result.influencer_count, result.customer_count) == (2, 4, 1)
        assert result.collaborations.pending == 1
        assert result.collaborations.completed == 2
        assert result.total_revenue == 270.0
        assert result.avg_deal_size == 90.0
        assert result.revenue_growth == 100.0
        assert [t.payment_id for t in result.recent_transactions] == ["p1", "p2", "p4"]
        assert result.recent_transactions[0].campaign_title == "Spring Launch"

    def test_dashboards_on_empty_system_are_zeroed(self, empty_repository):
        engine = AggregationEngine(empty_repository)
        brands = run(engine.brand_analytics(NOW))
        overview = run(engine.dashboard_overview(NOW))

        assert brands.total_brands == 0
        assert brands.highest_revenue_brand.subject_id == ""
        assert brands.top_brands == []
        assert overview.total_revenue == 0.0
        assert overview.avg_deal_size == 0.0
        assert overview.revenue_trend.values == [0.0] * 6
