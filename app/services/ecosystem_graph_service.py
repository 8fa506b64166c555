"""
Ecosystem Graph Service - brand/influencer collaboration network

Builds a weighted bipartite graph of realized collaborations: one node per
brand and influencer with at least one qualifying assignment, one edge per
(brand, influencer) pair. Repeated assignments accumulate onto the same edge.
"""
import logging
import math
from collections import defaultdict
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from app.core.analytics_config import AnalyticsConstants, analytics_settings
from app.core.exceptions import ValidationException
from app.models.analytics import EcosystemGraph, GraphEdge, GraphNode
from app.models.entities import Account, Assignment, AssignmentStatus, Campaign, Payment, PaymentStatus
from app.repositories.entity_repository import EntityRepository
from app.services.query_executor import QueryExecutor

logger = logging.getLogger(__name__)

# Collaborations that actually happened (pending requests and declines excluded)
GRAPH_ASSIGNMENT_STATUSES = (AssignmentStatus.ACTIVE, AssignmentStatus.COMPLETED)

WEIGHT_OPTIONS = (AnalyticsConstants.WEIGHT_BY_ASSIGNMENTS, AnalyticsConstants.WEIGHT_BY_REVENUE)


def build_ecosystem_graph(
    assignments: Iterable[Assignment],
    campaigns: Mapping[str, Campaign],
    accounts: Mapping[str, Account],
    payments: Iterable[Payment],
    weight_by: str = AnalyticsConstants.WEIGHT_BY_ASSIGNMENTS
) -> EcosystemGraph:
    """
    Pure graph construction.

    Assignments whose campaign is unknown cannot be attributed to a brand and
    are skipped. Unknown accounts still produce nodes, labelled "".
    """
    if weight_by not in WEIGHT_OPTIONS:
        raise ValidationException(f"weight_by must be one of {', '.join(WEIGHT_OPTIONS)}")

    pair_counts: Dict[Tuple[str, str], int] = defaultdict(int)
    for assignment in assignments:
        campaign = campaigns.get(assignment.campaign_id)
        if campaign is None or not campaign.brand_id or not assignment.influencer_id:
            continue
        pair_counts[(campaign.brand_id, assignment.influencer_id)] += 1

    pair_revenue: Dict[Tuple[str, str], List[float]] = defaultdict(list)
    for payment in payments:
        pair = (payment.brand_id, payment.influencer_id)
        if payment.status == PaymentStatus.COMPLETED and pair in pair_counts:
            pair_revenue[pair].append(payment.amount)

    edges = []
    brand_degree: Dict[str, int] = defaultdict(int)
    influencer_degree: Dict[str, int] = defaultdict(int)
    for (brand_id, influencer_id), count in sorted(pair_counts.items()):
        revenue = round(math.fsum(pair_revenue.get((brand_id, influencer_id), [])), 2)
        edges.append(GraphEdge(
            source=brand_id,
            target=influencer_id,
            weight=revenue if weight_by == AnalyticsConstants.WEIGHT_BY_REVENUE else float(count),
            assignment_count=count,
            revenue=revenue
        ))
        brand_degree[brand_id] += count
        influencer_degree[influencer_id] += count

    def label(account_id: str) -> str:
        account = accounts.get(account_id)
        return account.display_name if account else ""

    nodes = [
        GraphNode(id=brand_id, group="brand", label=label(brand_id), value=degree)
        for brand_id, degree in sorted(brand_degree.items())
    ] + [
        GraphNode(id=influencer_id, group="influencer", label=label(influencer_id), value=degree)
        for influencer_id, degree in sorted(influencer_degree.items())
    ]

    return EcosystemGraph(nodes=nodes, edges=edges)


class EcosystemGraphService:
    """Loads collaboration records and builds the ecosystem graph"""

    def __init__(self, repository: EntityRepository, executor: Optional[QueryExecutor] = None):
        self.repository = repository
        self.executor = executor or QueryExecutor(analytics_settings.QUERY_TIMEOUT_SECONDS)

    async def get_graph(self, weight_by: str = AnalyticsConstants.WEIGHT_BY_ASSIGNMENTS) -> EcosystemGraph:
        if weight_by not in WEIGHT_OPTIONS:
            raise ValidationException(f"weight_by must be one of {', '.join(WEIGHT_OPTIONS)}")

        records = await self.executor.gather("ecosystem_graph", {
            "assignments": self.repository.list_assignments(GRAPH_ASSIGNMENT_STATUSES),
            "campaigns": self.repository.list_campaigns(),
            "payments": self.repository.list_payments(status=PaymentStatus.COMPLETED),
        })
        campaigns = {campaign.id: campaign for campaign in records["campaigns"]}

        account_ids = {a.influencer_id for a in records["assignments"] if a.influencer_id}
        account_ids |= {
            campaigns[a.campaign_id].brand_id
            for a in records["assignments"] if a.campaign_id in campaigns
        }
        accounts = await self.executor.gather("ecosystem_graph_accounts", {
            "accounts": self.repository.accounts_by_ids(sorted(account_ids)),
        })

        graph = build_ecosystem_graph(
            records["assignments"],
            campaigns,
            {account.id: account for account in accounts["accounts"]},
            records["payments"],
            weight_by=weight_by
        )
        logger.info(f"Built ecosystem graph: {len(graph.nodes)} nodes, {len(graph.edges)} edges (weight_by={weight_by})")
        return graph
