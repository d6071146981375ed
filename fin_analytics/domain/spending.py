"""Spending-pattern analysis per category"""

from collections import defaultdict
from datetime import datetime, timedelta
from typing import Dict, List, Mapping, Optional, Sequence

from fin_analytics.domain.models import SpendingPattern, Transaction, Trend
from fin_analytics.domain.thresholds import DEFAULT_THRESHOLDS, HeuristicThresholds
from fin_analytics.utils.date_utils import as_utc, days_between, utc_now


def classify_trend(
    last_month_spend: float,
    average_monthly_spend: float,
    thresholds: HeuristicThresholds = DEFAULT_THRESHOLDS,
) -> Trend:
    """Compare the trailing month against the long-run monthly average"""
    if last_month_spend > average_monthly_spend * thresholds.trend_up_factor:
        return "increasing"
    elif last_month_spend < average_monthly_spend * thresholds.trend_down_factor:
        return "decreasing"
    return "stable"


def analyze_spending(
    transactions: Sequence[Transaction],
    categories: Mapping[int, str],
    now: Optional[datetime] = None,
    thresholds: HeuristicThresholds = DEFAULT_THRESHOLDS,
) -> List[SpendingPattern]:
    """
    Analyze spending patterns by category.

    Only categorised expenses (amount < 0) count. The monthly average divides
    by the observed date span in 30-day months, floored at one month so a
    single-day burst is not inflated. The trailing month is measured from
    ``now`` (wall clock), not from the last transaction.
    """
    now = as_utc(now) if now is not None else utc_now()
    last_month_start = now - timedelta(days=thresholds.last_month_days)

    expenses_by_category: Dict[int, List[Transaction]] = defaultdict(list)
    for txn in transactions:
        if txn.category_id is None or txn.amount >= 0:
            continue
        expenses_by_category[txn.category_id].append(txn)

    patterns = []
    for category_id, expenses in expenses_by_category.items():
        total_spent = sum(abs(t.amount) for t in expenses)

        dates = [t.posted_at for t in expenses]
        span_days = days_between(max(dates), min(dates))
        months = max(1.0, span_days / thresholds.days_per_month)
        average_monthly_spend = total_spent / months

        last_month_spend = sum(abs(t.amount) for t in expenses if t.posted_at >= last_month_start)

        patterns.append(
            SpendingPattern(
                category_id=category_id,
                category_name=categories.get(category_id, "Unknown"),
                average_monthly_spend=average_monthly_spend,
                trend=classify_trend(last_month_spend, average_monthly_spend, thresholds),
                volatility=thresholds.placeholder_volatility,
                last_month_spend=last_month_spend,
            )
        )

    return patterns
