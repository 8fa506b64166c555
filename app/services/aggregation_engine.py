"""
Aggregation Engine - on-demand dashboard metrics

Decides which repository queries each named metric needs, runs them
concurrently through the QueryExecutor and hands the joined results to the
pure Metric Definitions. Nothing is cached between calls.
"""
import logging
import math
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from app.core.analytics_config import AnalyticsSettings, LeaderboardConfig, analytics_settings
from app.core.exceptions import ValidationException
from app.models.analytics import (
    BrandAnalytics, CampaignAnalytics, CampaignStatusCounts, CampaignSummary,
    CollaborationStatusCounts, DashboardOverview, HighlightedSubject,
    InfluencerAnalytics, LeaderboardEntry, RecentTransaction, RoiMetrics
)
from app.models.entities import (
    Account, AccountType, Assignment, AssignmentStatus,
    Campaign, CampaignStatus, Payment, PaymentStatus
)
from app.repositories.entity_repository import EntityRepository
from app.services.metric_definitions import (
    as_utc, category_breakdown, clamp_percentage, completed_only, latest_growth,
    mean, monthly_series, revenue_leaderboard, roi_metrics, safe_divide
)
from app.services.query_executor import QueryExecutor

logger = logging.getLogger(__name__)

LEADERBOARD_DIMENSIONS = ("brand", "campaign")


def _names(accounts: List[Account]) -> Dict[str, str]:
    return {account.id: account.display_name for account in accounts}


def _date_only(moment: Optional[datetime]) -> str:
    return moment.date().isoformat() if moment else ""


class AggregationEngine:
    """Computes the admin dashboard metrics from the entity repository"""

    def __init__(
        self,
        repository: EntityRepository,
        settings: AnalyticsSettings = analytics_settings,
        executor: Optional[QueryExecutor] = None
    ):
        self.repository = repository
        self.settings = settings
        self.leaderboard = LeaderboardConfig.from_settings(settings)
        self.executor = executor or QueryExecutor(settings.QUERY_TIMEOUT_SECONDS)

    @staticmethod
    def _now(now: Optional[datetime]) -> datetime:
        return as_utc(now) if now else datetime.now(timezone.utc)

    # =========================================================================
    # LEADERBOARDS
    # =========================================================================

    async def revenue_leaderboard(
        self,
        dimension: str = "campaign",
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
        limit: Optional[int] = None
    ) -> List[LeaderboardEntry]:
        """Rank brands or campaigns by completed payment revenue"""
        if dimension not in LEADERBOARD_DIMENSIONS:
            raise ValidationException(f"Unknown leaderboard dimension '{dimension}'")

        subjects = (
            self.repository.list_accounts(AccountType.BRAND)
            if dimension == "brand" else self.repository.list_campaigns()
        )
        results = await self.executor.gather(f"{dimension}_revenue_leaderboard", {
            "payments": self.repository.list_payments(since=as_utc(since), until=as_utc(until)),
            "subjects": subjects,
        })

        if dimension == "brand":
            names = _names(results["subjects"])
            subject_of = lambda payment: payment.brand_id
        else:
            names = {campaign.id: campaign.title for campaign in results["subjects"]}
            subject_of = lambda payment: payment.campaign_id

        entries = revenue_leaderboard(
            results["payments"],
            subject_of,
            names,
            limit=limit or self.leaderboard.limit
        )
        logger.info(f"Computed {dimension} revenue leaderboard: {len(entries)} entries")
        return entries

    # =========================================================================
    # ROI
    # =========================================================================

    async def influencer_roi(self) -> List[RoiMetrics]:
        """ROI per influencer: assignment revenue against completed payments received"""
        results = await self.executor.gather("influencer_roi", {
            "influencers": self.repository.list_accounts(AccountType.INFLUENCER),
            "assignments": self.repository.list_assignments(),
            "payments": self.repository.list_payments(status=PaymentStatus.COMPLETED),
        })

        assignments_by_subject: Dict[str, List[Assignment]] = defaultdict(list)
        for assignment in results["assignments"]:
            if assignment.influencer_id:
                assignments_by_subject[assignment.influencer_id].append(assignment)

        payments_by_subject: Dict[str, List[Payment]] = defaultdict(list)
        for payment in results["payments"]:
            if payment.influencer_id:
                payments_by_subject[payment.influencer_id].append(payment)

        return self._rank_roi(
            _names(results["influencers"]),
            assignments_by_subject,
            payments_by_subject
        )

    async def brand_roi(self) -> List[RoiMetrics]:
        """ROI per brand: revenue of its campaigns' assignments against completed payments made"""
        results = await self.executor.gather("brand_roi", {
            "brands": self.repository.list_accounts(AccountType.BRAND),
            "campaigns": self.repository.list_campaigns(),
            "assignments": self.repository.list_assignments(),
            "payments": self.repository.list_payments(status=PaymentStatus.COMPLETED),
        })

        brand_of_campaign = {campaign.id: campaign.brand_id for campaign in results["campaigns"]}
        assignments_by_subject: Dict[str, List[Assignment]] = defaultdict(list)
        for assignment in results["assignments"]:
            brand_id = brand_of_campaign.get(assignment.campaign_id)
            if brand_id:
                assignments_by_subject[brand_id].append(assignment)

        payments_by_subject: Dict[str, List[Payment]] = defaultdict(list)
        for payment in results["payments"]:
            if payment.brand_id:
                payments_by_subject[payment.brand_id].append(payment)

        return self._rank_roi(_names(results["brands"]), assignments_by_subject, payments_by_subject)

    @staticmethod
    def _rank_roi(
        names: Dict[str, str],
        assignments_by_subject: Dict[str, List[Assignment]],
        payments_by_subject: Dict[str, List[Payment]]
    ) -> List[RoiMetrics]:
        subject_ids = set(assignments_by_subject) | set(payments_by_subject)
        metrics = [
            roi_metrics(
                subject_id,
                names.get(subject_id, ""),
                assignments_by_subject.get(subject_id, []),
                payments_by_subject.get(subject_id, [])
            )
            for subject_id in subject_ids
        ]
        metrics.sort(key=lambda m: (-m.total_revenue, m.subject_id))
        return metrics

    # =========================================================================
    # BRAND / INFLUENCER / CAMPAIGN DASHBOARDS
    # =========================================================================

    async def brand_analytics(self, now: Optional[datetime] = None) -> BrandAnalytics:
        now = self._now(now)
        window_start = now - timedelta(days=self.settings.NOTIFICATION_WINDOW_DAYS)
        results = await self.executor.gather("brand_analytics", {
            "brands": self.repository.list_accounts(AccountType.BRAND),
            "verified": self.repository.count_accounts([AccountType.BRAND], verified=True),
            "campaigns": self.repository.list_campaigns(),
            "assignments": self.repository.list_assignments([AssignmentStatus.COMPLETED]),
            "payments": self.repository.list_payments(status=PaymentStatus.COMPLETED),
        })
        brands: List[Account] = results["brands"]
        names = _names(brands)
        months = self.settings.TREND_MONTHS

        top_brands = revenue_leaderboard(
            results["payments"], lambda p: p.brand_id, names, limit=self.leaderboard.top_list_size
        )
        highest = top_brands[0] if top_brands else None

        # Most active = most completed collaborations across the brand's campaigns
        brand_of_campaign = {campaign.id: campaign.brand_id for campaign in results["campaigns"]}
        collaborations: Dict[str, int] = defaultdict(int)
        for assignment in results["assignments"]:
            brand_id = brand_of_campaign.get(assignment.campaign_id)
            if brand_id:
                collaborations[brand_id] += 1
        most_active = min(collaborations.items(), key=lambda item: (-item[1], item[0]), default=None)

        growth_trend = monthly_series(brands, lambda a: a.created_at, now, months, aggregate="count")

        return BrandAnalytics(
            total_brands=len(brands),
            active_brands=results["verified"],
            new_brands=sum(1 for b in brands if as_utc(b.created_at) >= window_start),
            brand_growth=latest_growth(growth_trend),
            highest_revenue_brand=HighlightedSubject(
                subject_id=highest.subject_id, name=highest.subject_name, value=highest.value
            ) if highest else HighlightedSubject(),
            most_active_brand=HighlightedSubject(
                subject_id=most_active[0], name=names.get(most_active[0], ""), value=most_active[1]
            ) if most_active else HighlightedSubject(),
            top_brands=top_brands,
            category_distribution=category_breakdown(brands),
            brand_growth_trend=growth_trend,
            revenue_trend=monthly_series(
                results["payments"], lambda p: p.payment_date, now, months, value_of=lambda p: p.amount
            )
        )

    async def influencer_analytics(self, now: Optional[datetime] = None) -> InfluencerAnalytics:
        now = self._now(now)
        window_start = now - timedelta(days=self.settings.NOTIFICATION_WINDOW_DAYS)
        results = await self.executor.gather("influencer_analytics", {
            "influencers": self.repository.list_accounts(AccountType.INFLUENCER),
            "verified": self.repository.count_accounts([AccountType.INFLUENCER], verified=True),
            "assignments": self.repository.list_assignments(),
        })
        influencers: List[Account] = results["influencers"]
        assignments: List[Assignment] = results["assignments"]
        names = _names(influencers)
        months = self.settings.TREND_MONTHS

        engagement_by_influencer: Dict[str, List[float]] = defaultdict(list)
        for assignment in assignments:
            if assignment.influencer_id:
                engagement_by_influencer[assignment.influencer_id].append(
                    clamp_percentage(assignment.engagement_rate)
                )
        ranked = sorted(
            (
                HighlightedSubject(subject_id=influencer_id, name=names.get(influencer_id, ""), value=mean(rates))
                for influencer_id, rates in engagement_by_influencer.items()
            ),
            key=lambda subject: (-subject.value, subject.subject_id)
        )
        top_influencers = ranked[:self.leaderboard.top_list_size]

        growth_trend = monthly_series(influencers, lambda a: a.created_at, now, months, aggregate="count")

        return InfluencerAnalytics(
            total_influencers=len(influencers),
            active_influencers=results["verified"],
            new_influencers=sum(1 for i in influencers if as_utc(i.created_at) >= window_start),
            influencer_growth=latest_growth(growth_trend),
            average_engagement=clamp_percentage(
                mean(clamp_percentage(a.engagement_rate) for a in assignments)
            ),
            top_influencer=top_influencers[0] if top_influencers else HighlightedSubject(),
            top_influencers=top_influencers,
            category_breakdown=category_breakdown(influencers),
            engagement_trend=monthly_series(
                assignments, lambda a: a.created_at, now, months,
                value_of=lambda a: clamp_percentage(a.engagement_rate), aggregate="mean"
            ),
            collaboration_trend=monthly_series(
                assignments, lambda a: a.created_at, now, months, aggregate="count"
            )
        )

    async def campaign_analytics(self, now: Optional[datetime] = None) -> CampaignAnalytics:
        now = self._now(now)
        results = await self.executor.gather("campaign_analytics", {
            "campaigns": self.repository.list_campaigns(),
            "brands": self.repository.list_accounts(AccountType.BRAND),
            "assignments": self.repository.list_assignments(),
            "payments": self.repository.list_payments(status=PaymentStatus.COMPLETED),
        })
        campaigns: List[Campaign] = results["campaigns"]
        assignments: List[Assignment] = results["assignments"]
        brand_names = _names(results["brands"])
        months = self.settings.TREND_MONTHS

        status_counts = CampaignStatusCounts(**{
            status.value: sum(1 for c in campaigns if c.status == status)
            for status in CampaignStatus
        })
        finished = status_counts.completed + status_counts.cancelled
        success_rate = round(clamp_percentage(safe_divide(status_counts.completed, finished) * 100), 1)

        engagement_by_campaign: Dict[str, List[float]] = defaultdict(list)
        for assignment in assignments:
            engagement_by_campaign[assignment.campaign_id].append(clamp_percentage(assignment.engagement_rate))
        revenue_by_campaign: Dict[str, List[float]] = defaultdict(list)
        for payment in completed_only(results["payments"]):
            revenue_by_campaign[payment.campaign_id].append(payment.amount)

        summaries = [
            CampaignSummary(
                campaign_id=campaign.id,
                title=campaign.title,
                brand_name=brand_names.get(campaign.brand_id, ""),
                start_date=_date_only(campaign.start_date),
                end_date=_date_only(campaign.end_date),
                status=campaign.status.value,
                engagement_rate=mean(engagement_by_campaign.get(campaign.id, [])),
                revenue=round(math.fsum(revenue_by_campaign.get(campaign.id, [])), 2)
            )
            for campaign in campaigns
        ]
        summaries.sort(key=lambda s: (-s.revenue, -s.engagement_rate, s.campaign_id))

        created_trend = monthly_series(campaigns, lambda c: c.created_at, now, months, aggregate="count")

        return CampaignAnalytics(
            total_campaigns=len(campaigns),
            active_campaigns=status_counts.active,
            campaign_growth=latest_growth(created_trend),
            success_rate=success_rate,
            status_distribution=status_counts,
            top_campaigns=summaries[:self.leaderboard.limit],
            engagement_trend=monthly_series(
                assignments, lambda a: a.created_at, now, months,
                value_of=lambda a: clamp_percentage(a.engagement_rate), aggregate="mean"
            ),
            reach_trend=monthly_series(
                assignments, lambda a: a.created_at, now, months, value_of=lambda a: a.reach
            )
        )

    # =========================================================================
    # PLATFORM OVERVIEW
    # =========================================================================

    async def dashboard_overview(self, now: Optional[datetime] = None) -> DashboardOverview:
        now = self._now(now)
        results = await self.executor.gather("dashboard_overview", {
            "brand_count": self.repository.count_accounts([AccountType.BRAND]),
            "influencer_count": self.repository.count_accounts([AccountType.INFLUENCER]),
            "customer_count": self.repository.count_accounts([AccountType.CUSTOMER]),
            "pending": self.repository.count_assignments(AssignmentStatus.PENDING),
            "active": self.repository.count_assignments(AssignmentStatus.ACTIVE),
            "completed": self.repository.count_assignments(AssignmentStatus.COMPLETED),
            "declined": self.repository.count_assignments(AssignmentStatus.DECLINED),
            "revenue": self.repository.sum_payments(PaymentStatus.COMPLETED),
            "payments": self.repository.list_payments(status=PaymentStatus.COMPLETED),
            "campaigns": self.repository.list_campaigns(),
            "brands": self.repository.list_accounts(AccountType.BRAND),
        })
        payments = completed_only(results["payments"])
        titles = {campaign.id: campaign.title for campaign in results["campaigns"]}

        revenue_trend = monthly_series(
            payments, lambda p: p.payment_date, now, self.settings.TREND_MONTHS, value_of=lambda p: p.amount
        )

        recent = [
            RecentTransaction(
                payment_id=payment.id,
                date=_date_only(payment.payment_date),
                campaign_title=titles.get(payment.campaign_id, ""),
                amount=payment.amount
            )
            for payment in payments[:self.settings.RECENT_TRANSACTIONS_LIMIT]
        ]

        return DashboardOverview(
            brand_count=results["brand_count"],
            influencer_count=results["influencer_count"],
            customer_count=results["customer_count"],
            collaborations=CollaborationStatusCounts(
                pending=results["pending"],
                active=results["active"],
                completed=results["completed"],
                declined=results["declined"]
            ),
            total_revenue=round(results["revenue"], 2),
            revenue_growth=latest_growth(revenue_trend),
            avg_deal_size=mean((p.amount for p in payments), digits=2),
            recent_transactions=recent,
            revenue_trend=revenue_trend,
            top_brands=revenue_leaderboard(
                payments, lambda p: p.brand_id, _names(results["brands"]), limit=self.leaderboard.top_list_size
            )
        )
