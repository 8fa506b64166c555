"""
Metric Definitions - pure computation units for the analytics dashboards

Each function takes repository records and returns a fixed result shape.
Nothing here touches the repository, so every rule is testable in isolation:
- only completed payments count toward revenue and ROI
- divisions by zero yield 0, never NaN or Infinity
- percentages are clamped to [0, 100] on output
- leaderboard ordering is fully deterministic
"""
import math
from collections import Counter, defaultdict
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from app.core.analytics_config import AnalyticsConstants
from app.models.analytics import CategoryShare, LeaderboardEntry, RoiMetrics, TrendSeries
from app.models.entities import Account, Assignment, Payment, PaymentStatus


# =============================================================================
# NUMERIC HELPERS
# =============================================================================

def clamp_percentage(value: Optional[float]) -> float:
    if value is None or not math.isfinite(value):
        return 0.0
    return min(max(float(value), 0.0), 100.0)


def safe_divide(numerator: float, denominator: float) -> float:
    if not denominator:
        return 0.0
    result = numerator / denominator
    return result if math.isfinite(result) else 0.0


def mean(values: Iterable[float], digits: int = 1) -> float:
    values = list(values)
    if not values:
        return 0.0
    return round(math.fsum(values) / len(values), digits)


def percentage_delta(current: float, previous: float) -> float:
    """Growth of current over previous in percent; 0 when there is no baseline"""
    if previous <= 0:
        return 0.0
    return round((current - previous) / previous * 100, 2)


def as_utc(moment: Optional[datetime]) -> Optional[datetime]:
    if moment is None:
        return None
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def completed_only(payments: Iterable[Payment]) -> List[Payment]:
    return [p for p in payments if p.status == PaymentStatus.COMPLETED]


# =============================================================================
# REVENUE LEADERBOARD
# =============================================================================

def revenue_leaderboard(
    payments: Iterable[Payment],
    subject_of: Callable[[Payment], str],
    names: Mapping[str, str],
    limit: Optional[int] = None
) -> List[LeaderboardEntry]:
    """
    Rank subjects by the sum of their completed payments.

    Every subject referenced by at least one payment appears; subjects whose
    payments are all pending or failed get a zero total. Ties are broken by
    the number of completed payments (more ranks higher), then by subject id.
    Payments without a subject id cannot be attributed and are skipped.
    """
    amounts: Dict[str, List[float]] = defaultdict(list)
    for payment in payments:
        subject_id = subject_of(payment)
        if not subject_id:
            continue
        bucket = amounts[subject_id]
        if payment.status == PaymentStatus.COMPLETED:
            bucket.append(payment.amount)

    totals = [
        (subject_id, round(math.fsum(values), 2), len(values))
        for subject_id, values in amounts.items()
    ]
    totals.sort(key=lambda item: (-item[1], -item[2], item[0]))

    entries = [
        LeaderboardEntry(
            subject_id=subject_id,
            subject_name=names.get(subject_id, ""),
            value=total,
            payment_count=count,
            rank=rank
        )
        for rank, (subject_id, total, count) in enumerate(totals, start=1)
    ]
    return entries[:limit] if limit else entries


# =============================================================================
# ROI / PERFORMANCE
# =============================================================================

def compute_roi(revenue: float, spend: float) -> Tuple[float, bool]:
    """Returns (roi, insufficient_data); roi is 0 whenever spend is 0"""
    if spend <= 0:
        return 0.0, True
    roi = (revenue - spend) / spend
    if not math.isfinite(roi):
        return 0.0, True
    return round(roi, 4), False


def conversion_rate(assignment: Assignment) -> float:
    return clamp_percentage(safe_divide(assignment.conversions, assignment.clicks) * 100)


def roi_metrics(
    subject_id: str,
    subject_name: str,
    assignments: Sequence[Assignment],
    payments: Iterable[Payment]
) -> RoiMetrics:
    """ROI and mean performance of one influencer or brand"""
    paid = completed_only(payments)
    revenue = round(math.fsum(a.revenue for a in assignments), 2)
    spend = round(math.fsum(p.amount for p in paid), 2)
    roi, insufficient = compute_roi(revenue, spend)

    return RoiMetrics(
        subject_id=subject_id,
        subject_name=subject_name,
        total_revenue=revenue,
        total_spend=spend,
        roi=roi,
        insufficient_data=insufficient,
        assignment_count=len(assignments),
        completed_payment_count=len(paid),
        avg_engagement_rate=clamp_percentage(mean(clamp_percentage(a.engagement_rate) for a in assignments)),
        avg_conversion_rate=clamp_percentage(mean(conversion_rate(a) for a in assignments)),
        avg_progress=clamp_percentage(mean(clamp_percentage(a.progress) for a in assignments)),
        total_reach=sum(a.reach for a in assignments),
        total_clicks=sum(a.clicks for a in assignments),
        total_conversions=sum(a.conversions for a in assignments)
    )


# =============================================================================
# CATEGORY BREAKDOWN
# =============================================================================

def primary_category(account: Account) -> str:
    for category in account.categories:
        if category and category.strip():
            return category.strip()
    return AnalyticsConstants.UNCATEGORIZED


def category_breakdown(accounts: Sequence[Account]) -> List[CategoryShare]:
    """Share of accounts per primary category, largest first"""
    total = len(accounts)
    counts = Counter(primary_category(account) for account in accounts)
    shares = [
        CategoryShare(
            name=name,
            count=count,
            percentage=round(clamp_percentage(safe_divide(count, total) * 100), 2)
        )
        for name, count in counts.items()
    ]
    shares.sort(key=lambda share: (-share.count, share.name))
    return shares


# =============================================================================
# MONTHLY TRENDS
# =============================================================================

def month_windows(now: datetime, months: int) -> List[Tuple[datetime, datetime]]:
    """[start, end) of the trailing calendar months, oldest first, current month last"""
    now = as_utc(now)
    year, month = now.year, now.month
    windows = []
    for _ in range(months):
        start = datetime(year, month, 1, tzinfo=timezone.utc)
        end = datetime(year + 1, 1, 1, tzinfo=timezone.utc) if month == 12 else datetime(year, month + 1, 1, tzinfo=timezone.utc)
        windows.append((start, end))
        year, month = (year - 1, 12) if month == 1 else (year, month - 1)
    windows.reverse()
    return windows


def monthly_series(
    items: Iterable,
    moment_of: Callable[[object], Optional[datetime]],
    now: datetime,
    months: int,
    value_of: Optional[Callable[[object], float]] = None,
    aggregate: str = "sum"
) -> TrendSeries:
    """
    Bucket items by calendar month of moment_of(item).

    aggregate is "count", "sum" (of value_of) or "mean" (of value_of,
    one decimal). Items without a moment are ignored; empty months are 0.
    """
    windows = month_windows(now, months)
    buckets: List[List[float]] = [[] for _ in windows]
    for item in items:
        moment = as_utc(moment_of(item))
        if moment is None:
            continue
        for index, (start, end) in enumerate(windows):
            if start <= moment < end:
                buckets[index].append(value_of(item) if value_of else 1.0)
                break

    values = []
    for bucket in buckets:
        if aggregate == "count":
            values.append(float(len(bucket)))
        elif aggregate == "mean":
            values.append(mean(bucket))
        else:
            values.append(round(math.fsum(bucket), 2))

    return TrendSeries(
        labels=[start.strftime("%b %Y") for start, _ in windows],
        values=values
    )


def latest_growth(series: TrendSeries) -> float:
    """Percentage delta of the current month over the previous one"""
    if len(series.values) < 2:
        return 0.0
    return percentage_delta(series.values[-1], series.values[-2])
