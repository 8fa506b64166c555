"""
SQLAlchemy-backed entity repository

Each query opens its own session so the aggregation engine can run several
of them concurrently without sharing an AsyncSession.
"""
import logging
from datetime import datetime
from typing import Any, Callable, Iterable, List, Optional

from sqlalchemy import select, func, update, and_
from sqlalchemy.ext.asyncio import AsyncSession

from app.database.unified_models import (
    Account as AccountRow,
    Campaign as CampaignRow,
    Assignment as AssignmentRow,
    Payment as PaymentRow
)
from app.models.entities import (
    Account, AccountType, Assignment, AssignmentStatus,
    Campaign, CampaignStatus, Payment, PaymentStatus
)
from app.repositories.entity_repository import EntityRepository

logger = logging.getLogger(__name__)


def _to_account(row: AccountRow) -> Account:
    return Account(
        id=row.id,
        account_type=row.account_type,
        display_name=row.display_name or "",
        categories=list(row.categories or []),
        industry=row.industry or "",
        audience_size=row.audience_size or 0,
        verified=bool(row.verified),
        created_at=row.created_at
    )


def _to_campaign(row: CampaignRow) -> Campaign:
    return Campaign(
        id=row.id,
        brand_id=row.brand_id or "",
        title=row.title or "",
        budget=float(row.budget or 0),
        status=row.status,
        start_date=row.start_date,
        end_date=row.end_date,
        created_at=row.created_at
    )


def _to_assignment(row: AssignmentRow) -> Assignment:
    return Assignment(
        id=row.id,
        campaign_id=row.campaign_id or "",
        influencer_id=row.influencer_id or "",
        status=row.status,
        engagement_rate=row.engagement_rate or 0.0,
        progress=row.progress or 0.0,
        reach=row.reach or 0,
        clicks=row.clicks or 0,
        conversions=row.conversions or 0,
        revenue=float(row.revenue or 0),
        created_at=row.created_at
    )


def _to_payment(row: PaymentRow) -> Payment:
    return Payment(
        id=row.id,
        campaign_id=row.campaign_id or "",
        brand_id=row.brand_id or "",
        influencer_id=row.influencer_id or "",
        amount=float(row.amount or 0),
        status=row.status,
        payment_method=row.payment_method or "",
        payment_date=row.payment_date
    )


def _values(items: Optional[Iterable[Any]]) -> Optional[List[str]]:
    if items is None:
        return None
    return [getattr(item, "value", item) for item in items]


class SqlAlchemyEntityRepository(EntityRepository):

    def __init__(self, session_factory: Callable[[], AsyncSession]):
        self._session_factory = session_factory

    async def _scalars(self, query) -> list:
        async with self._session_factory() as session:
            result = await session.execute(query)
            return list(result.scalars().all())

    async def _scalar(self, query):
        async with self._session_factory() as session:
            result = await session.execute(query)
            return result.scalar()

    # -- accounts -----------------------------------------------------------

    async def get_account(self, account_id: str) -> Optional[Account]:
        rows = await self._scalars(select(AccountRow).where(AccountRow.id == account_id))
        return _to_account(rows[0]) if rows else None

    async def accounts_by_ids(self, account_ids: Iterable[str]) -> List[Account]:
        ids = list(account_ids)
        if not ids:
            return []
        rows = await self._scalars(select(AccountRow).where(AccountRow.id.in_(ids)))
        return [_to_account(row) for row in rows]

    async def list_accounts(
        self,
        account_type: Optional[AccountType] = None,
        created_since: Optional[datetime] = None
    ) -> List[Account]:
        query = select(AccountRow)
        if account_type is not None:
            query = query.where(AccountRow.account_type == account_type.value)
        if created_since is not None:
            query = query.where(AccountRow.created_at >= created_since)
        rows = await self._scalars(query.order_by(AccountRow.id))
        return [_to_account(row) for row in rows]

    async def count_accounts(
        self,
        account_types: Optional[Iterable[AccountType]] = None,
        created_since: Optional[datetime] = None,
        verified: Optional[bool] = None
    ) -> int:
        query = select(func.count(AccountRow.id))
        types = _values(account_types)
        if types is not None:
            query = query.where(AccountRow.account_type.in_(types))
        if created_since is not None:
            query = query.where(AccountRow.created_at >= created_since)
        if verified is not None:
            query = query.where(AccountRow.verified == verified)
        return int(await self._scalar(query) or 0)

    # -- campaigns ----------------------------------------------------------

    async def campaigns_by_ids(self, campaign_ids: Iterable[str]) -> List[Campaign]:
        ids = list(campaign_ids)
        if not ids:
            return []
        rows = await self._scalars(select(CampaignRow).where(CampaignRow.id.in_(ids)))
        return [_to_campaign(row) for row in rows]

    async def list_campaigns(
        self,
        brand_id: Optional[str] = None,
        status: Optional[CampaignStatus] = None
    ) -> List[Campaign]:
        query = select(CampaignRow)
        if brand_id is not None:
            query = query.where(CampaignRow.brand_id == brand_id)
        if status is not None:
            query = query.where(CampaignRow.status == status.value)
        rows = await self._scalars(query.order_by(CampaignRow.id))
        return [_to_campaign(row) for row in rows]

    # -- assignments --------------------------------------------------------

    async def list_assignments(
        self,
        statuses: Optional[Iterable[AssignmentStatus]] = None
    ) -> List[Assignment]:
        query = select(AssignmentRow)
        wanted = _values(statuses)
        if wanted is not None:
            query = query.where(AssignmentRow.status.in_(wanted))
        rows = await self._scalars(query.order_by(AssignmentRow.id))
        return [_to_assignment(row) for row in rows]

    async def count_assignments(self, status: Optional[AssignmentStatus] = None) -> int:
        query = select(func.count(AssignmentRow.id))
        if status is not None:
            query = query.where(AssignmentRow.status == status.value)
        return int(await self._scalar(query) or 0)

    # -- payments -----------------------------------------------------------

    def _payment_filters(
        self,
        status: Optional[PaymentStatus],
        since: Optional[datetime],
        until: Optional[datetime]
    ) -> list:
        filters = []
        if status is not None:
            filters.append(PaymentRow.status == status.value)
        if since is not None:
            filters.append(PaymentRow.payment_date >= since)
        if until is not None:
            filters.append(PaymentRow.payment_date < until)
        return filters

    async def list_payments(
        self,
        status: Optional[PaymentStatus] = None,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None
    ) -> List[Payment]:
        query = select(PaymentRow).where(*self._payment_filters(status, since, until))
        query = query.order_by(PaymentRow.payment_date.desc().nulls_last(), PaymentRow.id)
        rows = await self._scalars(query)
        return [_to_payment(row) for row in rows]

    async def count_payments(self, status: Optional[PaymentStatus] = None) -> int:
        query = select(func.count(PaymentRow.id))
        if status is not None:
            query = query.where(PaymentRow.status == status.value)
        return int(await self._scalar(query) or 0)

    async def sum_payments(
        self,
        status: PaymentStatus = PaymentStatus.COMPLETED,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None
    ) -> float:
        query = select(func.coalesce(func.sum(PaymentRow.amount), 0)).where(
            *self._payment_filters(status, since, until)
        )
        return float(await self._scalar(query) or 0)

    async def get_payment(self, payment_id: str) -> Optional[Payment]:
        rows = await self._scalars(select(PaymentRow).where(PaymentRow.id == payment_id))
        return _to_payment(rows[0]) if rows else None

    # -- status transitions -------------------------------------------------

    async def update_payment_status(
        self,
        payment_id: str,
        expected_status: PaymentStatus,
        new_status: PaymentStatus
    ) -> bool:
        async with self._session_factory() as session:
            try:
                result = await session.execute(
                    update(PaymentRow)
                    .where(and_(
                        PaymentRow.id == payment_id,
                        PaymentRow.status == expected_status.value
                    ))
                    .values(status=new_status.value)
                )
                await session.commit()
            except Exception:
                await session.rollback()
                raise

        updated = result.rowcount == 1
        logger.info(
            f"Payment {payment_id} status {expected_status.value} -> {new_status.value}: "
            f"{'updated' if updated else 'no matching row'}"
        )
        return updated
