"""
In-memory entity repository

Holds plain record lists. Used for tests, local demos and as the reference
behaviour for the SQL implementation.
"""
from datetime import datetime
from typing import Iterable, List, Optional

from app.models.entities import (
    Account, AccountType, Assignment, AssignmentStatus,
    Campaign, CampaignStatus, Payment, PaymentStatus
)
from app.repositories.entity_repository import EntityRepository


def _in_window(moment: Optional[datetime], since: Optional[datetime], until: Optional[datetime]) -> bool:
    if since is None and until is None:
        return True
    if moment is None:
        return False
    if since is not None and moment < since:
        return False
    if until is not None and moment >= until:
        return False
    return True


class InMemoryEntityRepository(EntityRepository):

    def __init__(
        self,
        accounts: Optional[Iterable[Account]] = None,
        campaigns: Optional[Iterable[Campaign]] = None,
        assignments: Optional[Iterable[Assignment]] = None,
        payments: Optional[Iterable[Payment]] = None
    ):
        self.accounts: List[Account] = list(accounts or [])
        self.campaigns: List[Campaign] = list(campaigns or [])
        self.assignments: List[Assignment] = list(assignments or [])
        self.payments: List[Payment] = list(payments or [])

    async def get_account(self, account_id: str) -> Optional[Account]:
        return next((a for a in self.accounts if a.id == account_id), None)

    async def accounts_by_ids(self, account_ids: Iterable[str]) -> List[Account]:
        wanted = set(account_ids)
        return [a for a in self.accounts if a.id in wanted]

    async def list_accounts(
        self,
        account_type: Optional[AccountType] = None,
        created_since: Optional[datetime] = None
    ) -> List[Account]:
        return [
            a for a in self.accounts
            if (account_type is None or a.account_type == account_type)
            and (created_since is None or a.created_at >= created_since)
        ]

    async def count_accounts(
        self,
        account_types: Optional[Iterable[AccountType]] = None,
        created_since: Optional[datetime] = None,
        verified: Optional[bool] = None
    ) -> int:
        types = set(account_types) if account_types is not None else None
        return sum(
            1 for a in self.accounts
            if (types is None or a.account_type in types)
            and (created_since is None or a.created_at >= created_since)
            and (verified is None or a.verified == verified)
        )

    async def campaigns_by_ids(self, campaign_ids: Iterable[str]) -> List[Campaign]:
        wanted = set(campaign_ids)
        return [c for c in self.campaigns if c.id in wanted]

    async def list_campaigns(
        self,
        brand_id: Optional[str] = None,
        status: Optional[CampaignStatus] = None
    ) -> List[Campaign]:
        return [
            c for c in self.campaigns
            if (brand_id is None or c.brand_id == brand_id)
            and (status is None or c.status == status)
        ]

    async def list_assignments(
        self,
        statuses: Optional[Iterable[AssignmentStatus]] = None
    ) -> List[Assignment]:
        wanted = set(statuses) if statuses is not None else None
        return [a for a in self.assignments if wanted is None or a.status in wanted]

    async def count_assignments(self, status: Optional[AssignmentStatus] = None) -> int:
        return sum(1 for a in self.assignments if status is None or a.status == status)

    async def list_payments(
        self,
        status: Optional[PaymentStatus] = None,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None
    ) -> List[Payment]:
        matched = [
            p for p in self.payments
            if (status is None or p.status == status) and _in_window(p.payment_date, since, until)
        ]
        dated = sorted((p for p in matched if p.payment_date), key=lambda p: p.payment_date, reverse=True)
        return dated + [p for p in matched if not p.payment_date]

    async def count_payments(self, status: Optional[PaymentStatus] = None) -> int:
        return sum(1 for p in self.payments if status is None or p.status == status)

    async def sum_payments(
        self,
        status: PaymentStatus = PaymentStatus.COMPLETED,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None
    ) -> float:
        return float(sum(
            p.amount for p in self.payments
            if p.status == status and _in_window(p.payment_date, since, until)
        ))

    async def get_payment(self, payment_id: str) -> Optional[Payment]:
        return next((p for p in self.payments if p.id == payment_id), None)

    async def update_payment_status(
        self,
        payment_id: str,
        expected_status: PaymentStatus,
        new_status: PaymentStatus
    ) -> bool:
        # No await between the check and the write, so this is atomic on the event loop
        for index, payment in enumerate(self.payments):
            if payment.id == payment_id and payment.status == expected_status:
                self.payments[index] = payment.model_copy(update={"status": new_status})
                return True
        return False
