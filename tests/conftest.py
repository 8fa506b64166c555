"""Shared pytest fixtures for the collaboration analytics tests.

Provides a seeded in-memory entity repository, an empty one, and a FastAPI
test client whose repository dependency is swapped for the seeded data.
"""
import os
from datetime import datetime, timezone

import pytest

# ---------------------------------------------------------------------------
# Environment overrides (must be set BEFORE app import)
# ---------------------------------------------------------------------------

os.environ.setdefault("DATABASE_URL", "")
os.environ.setdefault("LOG_DIR", "")

from fastapi.testclient import TestClient  # noqa: E402

from app.database.connection import get_entity_repository  # noqa: E402
from app.models.entities import (  # noqa: E402
    Account, AccountType, Assignment, AssignmentStatus,
    Campaign, CampaignStatus, Payment, PaymentStatus
)
from app.repositories.memory_repository import InMemoryEntityRepository  # noqa: E402

NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


def at(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, 9, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Seed data
# ---------------------------------------------------------------------------

def seed_accounts():
    return [
        Account(id="b1", account_type=AccountType.BRAND, display_name="Acme",
                categories=["Fashion", "beauty"], industry="retail", verified=True,
                created_at=at(2026, 3, 1)),
        Account(id="b2", account_type=AccountType.BRAND, display_name="Globex",
                categories=["tech"], created_at=at(2025, 12, 10)),
        Account(id="i1", account_type=AccountType.INFLUENCER, display_name="Ana",
                categories=["fashion"], audience_size=10000, verified=True,
                created_at=at(2026, 3, 5)),
        Account(id="i2", account_type=AccountType.INFLUENCER, display_name="Ben",
                categories=["tech"], audience_size=50000, created_at=at(2025, 11, 1)),
        Account(id="i3", account_type=AccountType.INFLUENCER, display_name="Cara",
                categories=["fashion", "beauty"], audience_size=12000,
                created_at=at(2026, 2, 20)),
        Account(id="i4", account_type=AccountType.INFLUENCER, display_name="Dan",
                categories=[], audience_size=1000, created_at=at(2025, 10, 1)),
        Account(id="u1", account_type=AccountType.CUSTOMER, display_name="Customer",
                created_at=at(2026, 3, 10)),
    ]


def seed_campaigns():
    return [
        Campaign(id="c1", brand_id="b1", title="Spring Launch", budget=5000,
                 status=CampaignStatus.ACTIVE, start_date=at(2026, 2, 1),
                 end_date=at(2026, 4, 1), created_at=at(2026, 1, 10)),
        Campaign(id="c2", brand_id="b2", title="Gadget Week", budget=2000,
                 status=CampaignStatus.COMPLETED, created_at=at(2025, 12, 15)),
        Campaign(id="c3", brand_id="b1", title="Summer Teaser",
                 status=CampaignStatus.DRAFT, created_at=at(2026, 3, 1)),
    ]


def seed_assignments():
    return [
        Assignment(id="a1", campaign_id="c1", influencer_id="i1", status=AssignmentStatus.ACTIVE,
                   engagement_rate=5.0, progress=40, reach=1000, clicks=100, conversions=10,
                   revenue=300, created_at=at(2026, 1, 15)),
        Assignment(id="a2", campaign_id="c1", influencer_id="i1", status=AssignmentStatus.COMPLETED,
                   engagement_rate=7.0, progress=100, reach=500, clicks=50, conversions=5,
                   revenue=200, created_at=at(2026, 2, 15)),
        Assignment(id="a3", campaign_id="c2", influencer_id="i2", status=AssignmentStatus.COMPLETED,
                   engagement_rate=3.0, progress=100, reach=2000, revenue=100,
                   created_at=at(2025, 12, 20)),
        Assignment(id="a4", campaign_id="c1", influencer_id="i4", status=AssignmentStatus.PENDING,
                   created_at=at(2026, 3, 10)),
        Assignment(id="a5", campaign_id="c2", influencer_id="i3", status=AssignmentStatus.DECLINED,
                   created_at=at(2026, 1, 1)),
    ]


def seed_payments():
    return [
        Payment(id="p1", campaign_id="c1", brand_id="b1", influencer_id="i1", amount=100,
                status=PaymentStatus.COMPLETED, payment_method="card", payment_date=at(2026, 3, 2)),
        Payment(id="p2", campaign_id="c1", brand_id="b1", influencer_id="i1", amount=50,
                status=PaymentStatus.COMPLETED, payment_method="card", payment_date=at(2026, 2, 10)),
        Payment(id="p3", campaign_id="c1", brand_id="b1", influencer_id="i1", amount=1000,
                status=PaymentStatus.PENDING, payment_method="bank", payment_date=at(2026, 3, 5)),
        Payment(id="p4", campaign_id="c2", brand_id="b2", influencer_id="i2", amount=120,
                status=PaymentStatus.COMPLETED, payment_method="card", payment_date=at(2026, 1, 20)),
        Payment(id="p5", campaign_id="c2", brand_id="b2", influencer_id="i2", amount=80,
                status=PaymentStatus.FAILED, payment_method="card", payment_date=at(2026, 1, 21)),
    ]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def repository() -> InMemoryEntityRepository:
    return InMemoryEntityRepository(
        accounts=seed_accounts(),
        campaigns=seed_campaigns(),
        assignments=seed_assignments(),
        payments=seed_payments(),
    )


@pytest.fixture()
def empty_repository() -> InMemoryEntityRepository:
    return InMemoryEntityRepository()


@pytest.fixture()
def app():
    from main import app as fastapi_app

    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture()
def client(app, repository):
    app.dependency_overrides[get_entity_repository] = lambda: repository
    return TestClient(app)
