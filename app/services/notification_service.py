"""
Notification Service - admin system notification feed

evaluate() is a pure rule evaluator over three counts. Rules are independent
and emitted in declaration order; each rule keeps its own id so the feed is
stable between refreshes.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from app.core.analytics_config import AnalyticsConstants, analytics_settings
from app.models.analytics import Notification, NotificationCounts
from app.models.entities import AccountType, AssignmentStatus, PaymentStatus
from app.repositories.entity_repository import EntityRepository
from app.services.query_executor import QueryExecutor

logger = logging.getLogger(__name__)


def _plural(count: int, singular: str, plural: str) -> str:
    return singular if count == 1 else plural


def evaluate(counts: NotificationCounts, now: Optional[datetime] = None) -> List[Notification]:
    now = now or datetime.now(timezone.utc)
    notifications = []

    pending_assignments = counts.pending_assignments
    if pending_assignments > 0:
        notifications.append(Notification(
            id=1,
            type="collaboration",
            title="New Collaboration Request",
            message=(
                f"{pending_assignments} collaboration "
                f"{_plural(pending_assignments, 'request is', 'requests are')} pending approval"
            ),
            timestamp=now,
            read=False,
            priority=AnalyticsConstants.PRIORITY_HIGH
        ))

    pending_payments = counts.pending_payments
    if pending_payments > 0:
        notifications.append(Notification(
            id=2,
            type="payment",
            title="Payment Verification Needed",
            message=(
                f"{pending_payments} "
                f"{_plural(pending_payments, 'payment requires', 'payments require')} verification"
            ),
            timestamp=now - timedelta(hours=1),
            read=False,
            priority=AnalyticsConstants.PRIORITY_MEDIUM
        ))

    new_accounts = counts.new_accounts_in_window
    if new_accounts > 0:
        notifications.append(Notification(
            id=3,
            type="user",
            title="New User Registrations",
            message=f"{new_accounts} new {_plural(new_accounts, 'user', 'users')} registered this month",
            timestamp=now - timedelta(hours=2),
            read=False,
            priority=AnalyticsConstants.PRIORITY_LOW
        ))

    if not notifications:
        notifications.append(Notification(
            id=4,
            type="info",
            title="All caught up!",
            message="No pending actions required",
            timestamp=now,
            read=True,
            priority=AnalyticsConstants.PRIORITY_LOW
        ))

    return notifications


class NotificationService:
    """Collects the counts behind the notification feed"""

    def __init__(self, repository: EntityRepository, executor: Optional[QueryExecutor] = None):
        self.repository = repository
        self.executor = executor or QueryExecutor(analytics_settings.QUERY_TIMEOUT_SECONDS)
        self.window = timedelta(days=analytics_settings.NOTIFICATION_WINDOW_DAYS)

    async def collect_counts(self, now: datetime) -> NotificationCounts:
        counts = await self.executor.gather("notifications", {
            "pending_assignments": self.repository.count_assignments(AssignmentStatus.PENDING),
            "pending_payments": self.repository.count_payments(PaymentStatus.PENDING),
            "new_accounts": self.repository.count_accounts(
                [AccountType.BRAND, AccountType.INFLUENCER],
                created_since=now - self.window
            ),
        })
        return NotificationCounts(
            pending_assignments=counts["pending_assignments"],
            pending_payments=counts["pending_payments"],
            new_accounts_in_window=counts["new_accounts"]
        )

    async def generate(self, now: Optional[datetime] = None) -> List[Notification]:
        now = now or datetime.now(timezone.utc)
        counts = await self.collect_counts(now)
        notifications = evaluate(counts, now)
        logger.info(
            f"Generated {len(notifications)} notifications "
            f"(assignments={counts.pending_assignments}, payments={counts.pending_payments}, "
            f"new_accounts={counts.new_accounts_in_window})"
        )
        return notifications

    async def mark_all_as_read(self) -> Dict[str, Any]:
        # No read-state store yet: fetches after this still report unread items
        logger.info("Mark-all-as-read acknowledged")
        return {"success": True, "message": "All notifications marked as read"}
