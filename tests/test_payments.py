"""Tests for the payment listing and conditional status transitions."""
import asyncio

import pytest

from app.core.exceptions import InvalidStatusTransition, NotFoundError, QueryTimeoutError
from app.models.entities import Payment, PaymentStatus
from app.repositories.memory_repository import InMemoryEntityRepository
from app.services.payment_service import PaymentService
from app.services.query_executor import QueryExecutor

from conftest import NOW


def test_list_payments_joins_names_newest_first(repository):
    rows = asyncio.run(PaymentService(repository).list_payments())

    assert [r.payment_id for r in rows] == ["p3", "p1", "p2", "p5", "p4"]
    first = rows[0]
    assert (first.campaign_title, first.brand, first.influencer) == ("Spring Launch", "Acme", "Ana")
    assert first.date == "2026-03-05"
    assert first.status == "pending"


def test_list_payments_filters_status_and_tolerates_missing_joins(repository):
    repository.payments.append(Payment(id="p9", campaign_id="gone", brand_id="gone", influencer_id="gone",
                                       amount=10, status=PaymentStatus.FAILED, payment_date=NOW))
    rows = asyncio.run(PaymentService(repository).list_payments(PaymentStatus.FAILED))

    assert [r.payment_id for r in rows] == ["p9", "p5"]
    assert (rows[0].campaign_title, rows[0].brand, rows[0].influencer) == ("", "", "")


def test_pending_payment_can_be_completed_once(repository):
    service = PaymentService(repository)
    result = asyncio.run(service.update_status("p3", PaymentStatus.COMPLETED))

    assert result["success"] is True
    assert asyncio.run(repository.get_payment("p3")).status == PaymentStatus.COMPLETED

    with pytest.raises(InvalidStatusTransition):
        asyncio.run(service.update_status("p3", PaymentStatus.FAILED))


def test_completed_payment_is_terminal(repository):
    with pytest.raises(InvalidStatusTransition):
        asyncio.run(PaymentService(repository).update_status(
            "p1", PaymentStatus.PENDING, expected_status=PaymentStatus.COMPLETED
        ))


def test_unknown_payment(repository):
    with pytest.raises(NotFoundError):
        asyncio.run(PaymentService(repository).update_status("missing", PaymentStatus.COMPLETED))


def test_concurrent_verifications_only_one_wins(repository):
    service = PaymentService(repository)

    async def race():
        return await asyncio.gather(
            service.update_status("p3", PaymentStatus.COMPLETED),
            service.update_status("p3", PaymentStatus.FAILED),
            return_exceptions=True
        )

    outcomes = asyncio.run(race())
    assert sum(isinstance(o, dict) for o in outcomes) == 1
    assert sum(isinstance(o, InvalidStatusTransition) for o in outcomes) == 1


class HangingRepository(InMemoryEntityRepository):

    async def update_payment_status(self, payment_id, expected_status, new_status):
        await asyncio.sleep(3600)
        return True


def test_hanging_status_update_times_out():
    service = PaymentService(HangingRepository(), executor=QueryExecutor(0.05))

    with pytest.raises(QueryTimeoutError) as exc_info:
        asyncio.run(service.update_status("p3", PaymentStatus.COMPLETED))

    assert exc_info.value.retryable is True
    assert exc_info.value.query == "updated"
