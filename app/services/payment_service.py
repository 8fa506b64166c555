"""
Payment Service - admin payment listing and status verification
"""
import logging
from typing import Dict, List, Optional, Set, Tuple

from app.core.analytics_config import analytics_settings
from app.core.exceptions import InvalidStatusTransition, NotFoundError
from app.models.analytics import PaymentRow
from app.models.entities import PaymentStatus
from app.repositories.entity_repository import EntityRepository
from app.services.query_executor import QueryExecutor

logger = logging.getLogger(__name__)

# Admins verify pending payments; completed and failed are terminal
ALLOWED_TRANSITIONS: Set[Tuple[PaymentStatus, PaymentStatus]] = {
    (PaymentStatus.PENDING, PaymentStatus.COMPLETED),
    (PaymentStatus.PENDING, PaymentStatus.FAILED),
}


class PaymentService:

    def __init__(self, repository: EntityRepository, executor: Optional[QueryExecutor] = None):
        self.repository = repository
        self.executor = executor or QueryExecutor(analytics_settings.QUERY_TIMEOUT_SECONDS)

    async def list_payments(self, status: Optional[PaymentStatus] = None) -> List[PaymentRow]:
        """All payments newest first, joined with campaign and account names"""
        payments = (await self.executor.gather("payment_list", {
            "payments": self.repository.list_payments(status=status),
        }))["payments"]

        joined = await self.executor.gather("payment_list_names", {
            "campaigns": self.repository.campaigns_by_ids({p.campaign_id for p in payments}),
            "accounts": self.repository.accounts_by_ids(
                {p.brand_id for p in payments} | {p.influencer_id for p in payments}
            ),
        })
        titles: Dict[str, str] = {c.id: c.title for c in joined["campaigns"]}
        names: Dict[str, str] = {a.id: a.display_name for a in joined["accounts"]}

        return [
            PaymentRow(
                payment_id=payment.id,
                date=payment.payment_date.date().isoformat() if payment.payment_date else "",
                campaign_title=titles.get(payment.campaign_id, ""),
                brand=names.get(payment.brand_id, ""),
                influencer=names.get(payment.influencer_id, ""),
                amount=payment.amount,
                status=payment.status.value,
                payment_method=payment.payment_method
            )
            for payment in payments
        ]

    async def update_status(
        self,
        payment_id: str,
        new_status: PaymentStatus,
        expected_status: PaymentStatus = PaymentStatus.PENDING
    ) -> Dict[str, object]:
        """
        Conditionally move a payment from expected_status to new_status.

        The repository performs the compare-and-set, so two admins verifying
        the same payment cannot both succeed.
        """
        if (expected_status, new_status) not in ALLOWED_TRANSITIONS:
            raise InvalidStatusTransition(
                f"Cannot change payment status from {expected_status.value} to {new_status.value}"
            )

        updated = (await self.executor.gather("payment_status_update", {
            "updated": self.repository.update_payment_status(payment_id, expected_status, new_status),
        }))["updated"]
        if not updated:
            current = (await self.executor.gather("payment_status_lookup", {
                "payment": self.repository.get_payment(payment_id),
            }))["payment"]
            if current is None:
                logger.warning(f"⚠️ Status update for unknown payment {payment_id}")
                raise NotFoundError("Payment not found")
            logger.warning(
                f"⚠️ Payment {payment_id} is {current.status.value}, expected {expected_status.value}"
            )
            raise InvalidStatusTransition(
                f"Payment is {current.status.value}, expected {expected_status.value}"
            )

        logger.info(f"✅ Payment {payment_id}: {expected_status.value} -> {new_status.value}")
        return {"success": True, "message": f"Payment marked as {new_status.value}"}
