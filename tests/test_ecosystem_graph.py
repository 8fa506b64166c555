"""Tests for the brand/influencer ecosystem graph."""
import asyncio
from collections import Counter

import pytest

from app.core.exceptions import ValidationException
from app.models.entities import Assignment, AssignmentStatus
from app.services.ecosystem_graph_service import EcosystemGraphService, build_ecosystem_graph

from conftest import NOW, seed_accounts, seed_campaigns


def assignment(aid, campaign_id, influencer_id, status=AssignmentStatus.ACTIVE):
    return Assignment(id=aid, campaign_id=campaign_id, influencer_id=influencer_id,
                      status=status, created_at=NOW)


@pytest.fixture()
def campaigns():
    return {c.id: c for c in seed_campaigns()}


@pytest.fixture()
def accounts():
    return {a.id: a for a in seed_accounts()}


def test_repeated_assignments_accumulate_on_one_edge(campaigns, accounts):
    assignments = [
        assignment("a1", "c1", "i1"),
        assignment("a2", "c3", "i1"),
        assignment("a3", "c1", "i1", AssignmentStatus.COMPLETED),
        assignment("a4", "c2", "i2"),
    ]
    graph = build_ecosystem_graph(assignments, campaigns, accounts, [])

    pairs = [(e.source, e.target) for e in graph.edges]
    assert len(pairs) == len(set(pairs))
    assert {(e.source, e.target): e.weight for e in graph.edges} == {("b1", "i1"): 3.0, ("b2", "i2"): 1.0}


def test_edge_count_never_exceeds_distinct_pairs(campaigns, accounts):
    assignments = [assignment(f"a{n}", "c1" if n % 2 else "c2", f"i{n % 3}") for n in range(12)]
    graph = build_ecosystem_graph(assignments, campaigns, accounts, [])

    distinct = {(campaigns[a.campaign_id].brand_id, a.influencer_id) for a in assignments}
    assert len(graph.edges) == len(distinct)
    counts = Counter((campaigns[a.campaign_id].brand_id, a.influencer_id) for a in assignments)
    for edge in graph.edges:
        assert edge.weight == counts[(edge.source, edge.target)]


def test_revenue_weighting_uses_completed_payments(campaigns, accounts, repository):
    payments = asyncio.run(repository.list_payments())
    assignments = [assignment("a1", "c1", "i1"), assignment("a2", "c2", "i2")]
    graph = build_ecosystem_graph(assignments, campaigns, accounts, payments, weight_by="revenue")

    weights = {(e.source, e.target): e.weight for e in graph.edges}
    assert weights == {("b1", "i1"): 150.0, ("b2", "i2"): 120.0}
    assert all(e.assignment_count == 1 for e in graph.edges)


def test_nodes_are_only_connected_accounts(campaigns, accounts):
    graph = build_ecosystem_graph([assignment("a1", "c1", "i3")], campaigns, accounts, [])

    assert [(n.id, n.group, n.label) for n in graph.nodes] == [
        ("b1", "brand", "Acme"),
        ("i3", "influencer", "Cara"),
    ]


def test_unknown_campaign_skipped_and_unknown_account_unlabelled(campaigns, accounts):
    assignments = [assignment("a1", "missing", "i1"), assignment("a2", "c1", "ghost")]
    graph = build_ecosystem_graph(assignments, campaigns, accounts, [])

    assert [(e.source, e.target) for e in graph.edges] == [("b1", "ghost")]
    assert graph.nodes[-1].label == ""


def test_invalid_weight_option(campaigns, accounts):
    with pytest.raises(ValidationException):
        build_ecosystem_graph([], campaigns, accounts, [], weight_by="followers")


def test_service_ignores_pending_and_declined(repository):
    graph = asyncio.run(EcosystemGraphService(repository).get_graph())

    assert [(e.source, e.target, e.weight) for e in graph.edges] == [("b1", "i1", 2.0), ("b2", "i2", 1.0)]
    assert [n.id for n in graph.nodes] == ["b1", "b2", "i1", "i2"]
    assert graph.nodes[0].value == 2


def test_service_on_empty_system(empty_repository):
    graph = asyncio.run(EcosystemGraphService(empty_repository).get_graph("revenue"))

    assert graph.model_dump() == {"nodes": [], "edges": []}
