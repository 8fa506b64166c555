"""
Matchmaking Service - influencer suggestions for a brand

Candidates are influencers the brand has never assigned to any of its
campaigns. Each is scored as a weighted sum of three sub-scores in [0, 1]:
- category overlap between brand tags and influencer tags (primary weight)
- audience-size proximity to the brand's past collaborators
- the candidate's average historical engagement rate
"""
import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence, Set

from app.core.analytics_config import MatchmakingConfig, analytics_settings
from app.core.exceptions import NotFoundError
from app.models.analytics import MatchCandidate
from app.models.entities import Account, AccountType, Assignment, AssignmentStatus
from app.repositories.entity_repository import EntityRepository
from app.services.metric_definitions import clamp_percentage, mean
from app.services.query_executor import QueryExecutor

logger = logging.getLogger(__name__)

# Assignments that count as performance history
HISTORY_STATUSES = (AssignmentStatus.ACTIVE, AssignmentStatus.COMPLETED)

STRONG_AUDIENCE_FIT = 0.75


def _tags(account: Account) -> Set[str]:
    tags = {category.strip().lower() for category in account.categories if category and category.strip()}
    if account.industry and account.industry.strip():
        tags.add(account.industry.strip().lower())
    return tags


def category_overlap(brand_tags: Set[str], influencer_tags: Set[str]) -> float:
    if not brand_tags:
        return 0.0
    return len(brand_tags & influencer_tags) / len(brand_tags)


def audience_proximity(audience_size: int, target_size: float) -> float:
    if audience_size <= 0 or target_size <= 0:
        return 0.0
    return min(audience_size, target_size) / max(audience_size, target_size)


def target_audience_size(brand: Account, collaborator_sizes: Iterable[int]) -> float:
    """Mean audience of past collaborators, falling back to the brand's own audience"""
    sizes = [size for size in collaborator_sizes if size > 0]
    if sizes:
        return sum(sizes) / len(sizes)
    return float(brand.audience_size)


def score_candidates(
    brand: Account,
    influencers: Sequence[Account],
    assignments: Sequence[Assignment],
    engaged_ids: Set[str],
    config: MatchmakingConfig,
    collaborator_ids: Optional[Set[str]] = None
) -> List[MatchCandidate]:
    """
    Rank every non-engaged influencer, best first (ties by influencer id).

    engaged_ids are excluded from the result; collaborator_ids (the brand's
    active or completed collaborations) set the audience-size target.
    """
    weights = config.weights
    brand_tags = _tags(brand)
    collaborator_ids = collaborator_ids or set()
    target = target_audience_size(
        brand, (i.audience_size for i in influencers if i.id in collaborator_ids)
    )

    engagement: Dict[str, List[float]] = defaultdict(list)
    for assignment in assignments:
        if assignment.status in HISTORY_STATUSES:
            engagement[assignment.influencer_id].append(clamp_percentage(assignment.engagement_rate))

    candidates = []
    for influencer in influencers:
        if influencer.id in engaged_ids:
            continue

        influencer_tags = _tags(influencer)
        matched = sorted(brand_tags & influencer_tags)
        category_score = category_overlap(brand_tags, influencer_tags)
        audience_score = audience_proximity(influencer.audience_size, target)
        avg_engagement = mean(engagement.get(influencer.id, []))
        performance_score = avg_engagement / 100

        weighted = (
            weights.category * category_score
            + weights.audience * audience_score
            + weights.performance * performance_score
        )
        score = weighted / weights.total * 100 if weights.total > 0 else 0.0

        reasons = []
        if matched:
            reasons.append(f"Category Match: {matched[0]}{' +' + str(len(matched) - 1) if len(matched) > 1 else ''}")
        if audience_score >= STRONG_AUDIENCE_FIT:
            reasons.append("Audience Size Fit")
        if avg_engagement > 0:
            reasons.append(f"Avg Engagement: {avg_engagement}%")

        candidates.append(MatchCandidate(
            influencer_id=influencer.id,
            influencer_name=influencer.display_name,
            categories=influencer.categories,
            audience_size=influencer.audience_size,
            score=round(clamp_percentage(score), 2),
            category_score=round(category_score * 100, 2),
            audience_score=round(audience_score * 100, 2),
            performance_score=round(clamp_percentage(avg_engagement), 2),
            match_reasons=reasons
        ))

    candidates.sort(key=lambda c: (-c.score, c.influencer_id))
    return candidates


class MatchmakingService:
    """Suggests influencers a brand has not worked with yet"""

    def __init__(
        self,
        repository: EntityRepository,
        config: Optional[MatchmakingConfig] = None,
        executor: Optional[QueryExecutor] = None
    ):
        self.repository = repository
        self.config = config or MatchmakingConfig.from_settings()
        self.executor = executor or QueryExecutor(analytics_settings.QUERY_TIMEOUT_SECONDS)

    async def recommend(self, brand_id: str, top_n: Optional[int] = None) -> List[MatchCandidate]:
        records = await self.executor.gather("matchmaking", {
            "brand": self.repository.get_account(brand_id),
            "campaigns": self.repository.list_campaigns(brand_id=brand_id),
            "influencers": self.repository.list_accounts(AccountType.INFLUENCER),
            "assignments": self.repository.list_assignments(),
        })

        brand = records["brand"]
        if brand is None or brand.account_type != AccountType.BRAND:
            logger.warning(f"⚠️ Matchmaking requested for unknown brand {brand_id}")
            raise NotFoundError("Brand not found")

        campaign_ids = {campaign.id for campaign in records["campaigns"]}
        engaged_ids = {
            a.influencer_id for a in records["assignments"]
            if a.campaign_id in campaign_ids and a.influencer_id
        }
        # Declined or pending requests are not collaborations
        collaborator_ids = {
            a.influencer_id for a in records["assignments"]
            if a.campaign_id in campaign_ids and a.influencer_id and a.status in HISTORY_STATUSES
        }

        candidates = score_candidates(
            brand,
            records["influencers"],
            records["assignments"],
            engaged_ids,
            self.config,
            collaborator_ids=collaborator_ids
        )
        limit = top_n or self.config.top_n
        logger.info(
            f"Matchmaking for brand {brand_id}: {len(candidates)} candidates, "
            f"{len(engaged_ids)} already engaged, returning top {limit}"
        )
        return candidates[:limit]
