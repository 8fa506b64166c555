"""Tests for the SQLAlchemy repository's row mapping and conditional update.

No database is needed: rows are plain ORM instances and the session factory
is a stub that records what it was asked to execute.
"""
import asyncio
from decimal import Decimal

import pytest

from app.database.unified_models import Assignment as AssignmentRow, Payment as PaymentRow
from app.models.entities import AssignmentStatus, PaymentStatus
from app.repositories.sqlalchemy_repository import (
    SqlAlchemyEntityRepository, _to_assignment, _to_payment
)

from conftest import NOW


class StubResult:

    def __init__(self, rowcount=0, scalar=None):
        self.rowcount = rowcount
        self._scalar = scalar

    def scalar(self):
        return self._scalar


class StubSession:

    def __init__(self, result=None, error=None):
        self.result = result or StubResult()
        self.error = error
        self.executed = []
        self.committed = False
        self.rolled_back = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def execute(self, statement):
        self.executed.append(statement)
        if self.error:
            raise self.error
        return self.result

    async def commit(self):
        self.committed = True

    async def rollback(self):
        self.rolled_back = True


def test_missing_joined_ids_degrade_to_empty_strings():
    row = PaymentRow(id="p1", campaign_id=None, brand_id=None, influencer_id=None,
                     amount=Decimal("12.50"), status="completed", payment_method=None, payment_date=None)
    payment = _to_payment(row)

    assert (payment.campaign_id, payment.brand_id, payment.influencer_id) == ("", "", "")
    assert payment.amount == 12.5
    assert payment.status == PaymentStatus.COMPLETED
    assert payment.payment_method == ""


def test_assignment_counters_default_to_zero():
    row = AssignmentRow(id="a1", campaign_id="c1", influencer_id=None, status="active",
                        engagement_rate=None, revenue=None, created_at=NOW)
    assignment = _to_assignment(row)

    assert assignment.influencer_id == ""
    assert assignment.status == AssignmentStatus.ACTIVE
    assert (assignment.engagement_rate, assignment.revenue, assignment.clicks) == (0.0, 0.0, 0)


@pytest.mark.parametrize("rowcount, expected", [(1, True), (0, False)])
def test_conditional_update_reports_match(rowcount, expected):
    session = StubSession(StubResult(rowcount=rowcount))
    repository = SqlAlchemyEntityRepository(lambda: session)

    updated = asyncio.run(repository.update_payment_status("p1", PaymentStatus.PENDING, PaymentStatus.COMPLETED))

    assert updated is expected
    assert session.committed is True
    assert len(session.executed) == 1


def test_conditional_update_rolls_back_on_error():
    session = StubSession(error=RuntimeError("deadlock"))
    repository = SqlAlchemyEntityRepository(lambda: session)

    with pytest.raises(RuntimeError):
        asyncio.run(repository.update_payment_status("p1", PaymentStatus.PENDING, PaymentStatus.FAILED))
    assert session.rolled_back is True


def test_each_query_opens_its_own_session():
    sessions = []

    def factory():
        session = StubSession(StubResult(scalar=3))
        sessions.append(session)
        return session

    repository = SqlAlchemyEntityRepository(factory)

    async def scenario():
        return await asyncio.gather(
            repository.count_payments(PaymentStatus.PENDING),
            repository.count_assignments(AssignmentStatus.PENDING),
        )

    assert asyncio.run(scenario()) == [3, 3]
    assert len(sessions) == 2
