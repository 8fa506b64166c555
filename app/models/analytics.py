"""
Pydantic result models for the analytics API

Every field carries a zero-value default so consumers never have to guard
against missing keys.
"""
from pydantic import BaseModel
from typing import List
from datetime import datetime

from app.models.entities import PaymentStatus

# =============================================================================
# LEADERBOARDS & ROI
# =============================================================================

class LeaderboardEntry(BaseModel):
    """One ranked subject of a revenue leaderboard"""
    subject_id: str
    subject_name: str = ""
    value: float = 0.0
    payment_count: int = 0
    rank: int = 0


class RoiMetrics(BaseModel):
    """Return-on-investment and performance figures for one influencer or brand"""
    subject_id: str
    subject_name: str = ""
    total_revenue: float = 0.0
    total_spend: float = 0.0
    roi: float = 0.0
    insufficient_data: bool = False
    assignment_count: int = 0
    completed_payment_count: int = 0
    avg_engagement_rate: float = 0.0
    avg_conversion_rate: float = 0.0
    avg_progress: float = 0.0
    total_reach: int = 0
    total_clicks: int = 0
    total_conversions: int = 0


# =============================================================================
# BREAKDOWNS & TRENDS
# =============================================================================

class CategoryShare(BaseModel):
    name: str
    count: int = 0
    percentage: float = 0.0


class TrendSeries(BaseModel):
    """Values per calendar month, oldest first"""
    labels: List[str] = []
    values: List[float] = []


class HighlightedSubject(BaseModel):
    subject_id: str = ""
    name: str = ""
    value: float = 0.0


# =============================================================================
# DASHBOARD PAYLOADS
# =============================================================================

class BrandAnalytics(BaseModel):
    total_brands: int = 0
    active_brands: int = 0
    new_brands: int = 0
    brand_growth: float = 0.0
    highest_revenue_brand: HighlightedSubject = HighlightedSubject()
    most_active_brand: HighlightedSubject = HighlightedSubject()
    top_brands: List[LeaderboardEntry] = []
    category_distribution: List[CategoryShare] = []
    brand_growth_trend: TrendSeries = TrendSeries()
    revenue_trend: TrendSeries = TrendSeries()


class InfluencerAnalytics(BaseModel):
    total_influencers: int = 0
    active_influencers: int = 0
    new_influencers: int = 0
    influencer_growth: float = 0.0
    average_engagement: float = 0.0
    top_influencer: HighlightedSubject = HighlightedSubject()
    top_influencers: List[HighlightedSubject] = []
    category_breakdown: List[CategoryShare] = []
    engagement_trend: TrendSeries = TrendSeries()
    collaboration_trend: TrendSeries = TrendSeries()


class CampaignSummary(BaseModel):
    campaign_id: str
    title: str = ""
    brand_name: str = ""
    start_date: str = ""
    end_date: str = ""
    status: str = ""
    engagement_rate: float = 0.0
    revenue: float = 0.0


class CampaignStatusCounts(BaseModel):
    draft: int = 0
    active: int = 0
    completed: int = 0
    cancelled: int = 0


class CampaignAnalytics(BaseModel):
    total_campaigns: int = 0
    active_campaigns: int = 0
    campaign_growth: float = 0.0
    success_rate: float = 0.0
    status_distribution: CampaignStatusCounts = CampaignStatusCounts()
    top_campaigns: List[CampaignSummary] = []
    engagement_trend: TrendSeries = TrendSeries()
    reach_trend: TrendSeries = TrendSeries()


class CollaborationStatusCounts(BaseModel):
    pending: int = 0
    active: int = 0
    completed: int = 0
    declined: int = 0


class RecentTransaction(BaseModel):
    payment_id: str
    date: str = ""
    campaign_title: str = ""
    amount: float = 0.0


class DashboardOverview(BaseModel):
    brand_count: int = 0
    influencer_count: int = 0
    customer_count: int = 0
    collaborations: CollaborationStatusCounts = CollaborationStatusCounts()
    total_revenue: float = 0.0
    revenue_growth: float = 0.0
    avg_deal_size: float = 0.0
    recent_transactions: List[RecentTransaction] = []
    revenue_trend: TrendSeries = TrendSeries()
    top_brands: List[LeaderboardEntry] = []


# =============================================================================
# ECOSYSTEM GRAPH
# =============================================================================

class GraphNode(BaseModel):
    id: str
    group: str
    label: str = ""
    value: int = 0


class GraphEdge(BaseModel):
    source: str
    target: str
    weight: float = 0.0
    assignment_count: int = 0
    revenue: float = 0.0


class EcosystemGraph(BaseModel):
    nodes: List[GraphNode] = []
    edges: List[GraphEdge] = []


# =============================================================================
# MATCHMAKING
# =============================================================================

class MatchCandidate(BaseModel):
    """Ranked influencer suggestion with transparent sub-scores (0-100 each)"""
    influencer_id: str
    influencer_name: str = ""
    categories: List[str] = []
    audience_size: int = 0
    score: float = 0.0
    category_score: float = 0.0
    audience_score: float = 0.0
    performance_score: float = 0.0
    match_reasons: List[str] = []


# =============================================================================
# NOTIFICATIONS & PAYMENTS
# =============================================================================

class NotificationCounts(BaseModel):
    pending_assignments: int = 0
    pending_payments: int = 0
    new_accounts_in_window: int = 0


class Notification(BaseModel):
    id: int
    type: str
    title: str
    message: str
    timestamp: datetime
    read: bool = False
    priority: str = "low"


class PaymentRow(BaseModel):
    payment_id: str
    date: str = ""
    campaign_title: str = ""
    brand: str = ""
    influencer: str = ""
    amount: float = 0.0
    status: str = ""
    payment_method: str = ""


class PaymentStatusUpdate(BaseModel):
    """Request body for a conditional payment status transition"""
    status: PaymentStatus
    expected_status: PaymentStatus = PaymentStatus.PENDING
