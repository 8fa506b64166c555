"""
Admin Analytics Routes - dashboards, leaderboards, ROI, graph and matchmaking

Every endpoint computes on demand and answers with the uniform
{success, ...} envelope.
"""
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query

from app.api.admin.dependencies import (
    get_aggregation_engine, get_graph_service, get_matchmaking_service
)
from app.core.analytics_config import AnalyticsConstants
from app.services.aggregation_engine import AggregationEngine
from app.services.ecosystem_graph_service import EcosystemGraphService
from app.services.matchmaking_service import MatchmakingService
from app.utils.response_assembler import assemble

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin - Analytics"])


# =============================================================================
# DASHBOARDS
# =============================================================================

@router.get("/dashboard")
async def get_dashboard(engine: AggregationEngine = Depends(get_aggregation_engine)):
    """Platform overview: account counts, collaboration funnel, revenue"""
    return await assemble(
        "dashboard_overview",
        engine.dashboard_overview(),
        failure_error="Failed to load dashboard data"
    )


@router.get("/brand-analytics")
async def get_brand_analytics(engine: AggregationEngine = Depends(get_aggregation_engine)):
    return await assemble(
        "brand_analytics",
        engine.brand_analytics(),
        failure_error="Failed to load brand analytics"
    )


@router.get("/influencer-analytics")
async def get_influencer_analytics(engine: AggregationEngine = Depends(get_aggregation_engine)):
    return await assemble(
        "influencer_analytics",
        engine.influencer_analytics(),
        failure_error="Failed to load influencer analytics"
    )


@router.get("/campaign-analytics")
async def get_campaign_analytics(engine: AggregationEngine = Depends(get_aggregation_engine)):
    return await assemble(
        "campaign_analytics",
        engine.campaign_analytics(),
        failure_error="Failed to load campaign analytics"
    )


# =============================================================================
# ROI & LEADERBOARDS
# =============================================================================

@router.get("/influencer-roi")
async def get_influencer_roi(engine: AggregationEngine = Depends(get_aggregation_engine)):
    return await assemble(
        "influencer_roi",
        engine.influencer_roi(),
        key="data",
        failure_error="Failed to load influencer ROI"
    )


@router.get("/brand-roi")
async def get_brand_roi(engine: AggregationEngine = Depends(get_aggregation_engine)):
    return await assemble(
        "brand_roi",
        engine.brand_roi(),
        key="data",
        failure_error="Failed to load brand ROI"
    )


@router.get("/campaign-revenue-leaderboard")
async def get_campaign_revenue_leaderboard(
    limit: Optional[int] = Query(None, ge=1, le=100, description="Number of entries (default from settings)"),
    since: Optional[datetime] = Query(None, description="Include payments on or after this moment"),
    until: Optional[datetime] = Query(None, description="Include payments before this moment"),
    engine: AggregationEngine = Depends(get_aggregation_engine)
):
    """Campaigns ranked by completed payment revenue"""
    return await assemble(
        "campaign_revenue_leaderboard",
        engine.revenue_leaderboard("campaign", since=since, until=until, limit=limit),
        key="data",
        failure_error="Failed to load revenue leaderboard"
    )


@router.get("/brand-revenue-leaderboard")
async def get_brand_revenue_leaderboard(
    limit: Optional[int] = Query(None, ge=1, le=100),
    since: Optional[datetime] = Query(None),
    until: Optional[datetime] = Query(None),
    engine: AggregationEngine = Depends(get_aggregation_engine)
):
    """Brands ranked by completed payment revenue"""
    return await assemble(
        "brand_revenue_leaderboard",
        engine.revenue_leaderboard("brand", since=since, until=until, limit=limit),
        key="data",
        failure_error="Failed to load revenue leaderboard"
    )


# =============================================================================
# ECOSYSTEM GRAPH & MATCHMAKING
# =============================================================================

@router.get("/ecosystem-graph")
async def get_ecosystem_graph(
    weight_by: str = Query(
        AnalyticsConstants.WEIGHT_BY_ASSIGNMENTS,
        description="Edge weight: 'assignments' (count) or 'revenue' (completed payments)"
    ),
    service: EcosystemGraphService = Depends(get_graph_service)
):
    return await assemble(
        "ecosystem_graph",
        service.get_graph(weight_by),
        key="data",
        failure_error="Failed to build ecosystem graph"
    )


@router.get("/matchmaking/{brand_id}")
async def get_matchmaking(
    brand_id: str = Path(..., description="Brand account id"),
    top_n: Optional[int] = Query(None, ge=1, le=100, description="Number of suggestions"),
    service: MatchmakingService = Depends(get_matchmaking_service)
):
    """Influencers the brand has not worked with, best match first"""
    return await assemble(
        "matchmaking",
        service.recommend(brand_id, top_n=top_n),
        key="data",
        failure_error="Failed to compute matchmaking"
    )
