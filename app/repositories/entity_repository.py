"""
Entity Repository interface

The analytics layer depends only on these typed read queries plus one
conditional status update. Implementations must be safe to call
concurrently: every method is an independent unit of work.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, List, Optional

from app.models.entities import (
    Account, AccountType, Assignment, AssignmentStatus,
    Campaign, CampaignStatus, Payment, PaymentStatus
)


class EntityRepository(ABC):

    # -- accounts -----------------------------------------------------------

    @abstractmethod
    async def get_account(self, account_id: str) -> Optional[Account]:
        ...

    @abstractmethod
    async def accounts_by_ids(self, account_ids: Iterable[str]) -> List[Account]:
        ...

    @abstractmethod
    async def list_accounts(
        self,
        account_type: Optional[AccountType] = None,
        created_since: Optional[datetime] = None
    ) -> List[Account]:
        ...

    @abstractmethod
    async def count_accounts(
        self,
        account_types: Optional[Iterable[AccountType]] = None,
        created_since: Optional[datetime] = None,
        verified: Optional[bool] = None
    ) -> int:
        ...

    # -- campaigns ----------------------------------------------------------

    @abstractmethod
    async def campaigns_by_ids(self, campaign_ids: Iterable[str]) -> List[Campaign]:
        ...

    @abstractmethod
    async def list_campaigns(
        self,
        brand_id: Optional[str] = None,
        status: Optional[CampaignStatus] = None
    ) -> List[Campaign]:
        ...

    # -- assignments --------------------------------------------------------

    @abstractmethod
    async def list_assignments(
        self,
        statuses: Optional[Iterable[AssignmentStatus]] = None
    ) -> List[Assignment]:
        ...

    @abstractmethod
    async def count_assignments(self, status: Optional[AssignmentStatus] = None) -> int:
        ...

    # -- payments -----------------------------------------------------------

    @abstractmethod
    async def list_payments(
        self,
        status: Optional[PaymentStatus] = None,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None
    ) -> List[Payment]:
        """
        Payments ordered by payment_date descending (undated last).
        since is inclusive, until exclusive; undated payments never match
        a bounded window.
        """
        ...

    @abstractmethod
    async def count_payments(self, status: Optional[PaymentStatus] = None) -> int:
        ...

    @abstractmethod
    async def sum_payments(
        self,
        status: PaymentStatus = PaymentStatus.COMPLETED,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None
    ) -> float:
        ...

    # -- status transitions -------------------------------------------------

    @abstractmethod
    async def update_payment_status(
        self,
        payment_id: str,
        expected_status: PaymentStatus,
        new_status: PaymentStatus
    ) -> bool:
        """
        Atomically set the payment status if it currently equals
        expected_status. Returns False when no row matched.
        """
        ...

    @abstractmethod
    async def get_payment(self, payment_id: str) -> Optional[Payment]:
        ...
