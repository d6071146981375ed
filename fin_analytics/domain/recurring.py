"""Recurring-transaction detection - bills, subscriptions and income streams"""

import logging
import re
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence

from fin_analytics.domain.models import Frequency, RecurringTransaction, RecurringType, Transaction
from fin_analytics.domain.thresholds import (
    BILL_KEYWORDS,
    DEFAULT_THRESHOLDS,
    SUBSCRIPTION_KEYWORDS,
    HeuristicThresholds,
)
from fin_analytics.utils.date_utils import add_months, add_years, days_between

logger = logging.getLogger(__name__)

_DIGITS_AND_HASH = re.compile(r"[0-9#]")
_COMMON_SUFFIXES = re.compile(r"\s+(store|branch|inc|llc|ltd)\b")
_WHITESPACE = re.compile(r"\s+")


def normalize_merchant_name(name: str) -> str:
    """Fuzzy grouping key: "TESCO Store #123" and "Tesco store 456" both become "tesco" """
    key = _DIGITS_AND_HASH.sub("", name.lower())
    key = _COMMON_SUFFIXES.sub("", key)
    return _WHITESPACE.sub(" ", key).strip()


def is_stable_amount(
    amounts: Sequence[float],
    avg_amount: float,
    thresholds: HeuristicThresholds = DEFAULT_THRESHOLDS,
) -> bool:
    """Every amount within the relative tolerance of the average. A zero average is never stable."""
    if avg_amount == 0:
        return False
    return all(abs(a - avg_amount) / abs(avg_amount) < thresholds.amount_tolerance for a in amounts)


def classify_frequency(
    avg_interval: float,
    thresholds: HeuristicThresholds = DEFAULT_THRESHOLDS,
) -> Frequency:
    """Map an average gap in days to the nearest cadence band"""
    if abs(avg_interval - thresholds.weekly_days) < thresholds.weekly_band:
        return "weekly"
    elif abs(avg_interval - thresholds.monthly_days) < thresholds.monthly_band:
        return "monthly"
    elif abs(avg_interval - thresholds.yearly_days) < thresholds.yearly_band:
        return "yearly"
    return "irregular"


def next_expected_date(
    last_posted: datetime,
    frequency: Frequency,
    thresholds: HeuristicThresholds = DEFAULT_THRESHOLDS,
) -> datetime:
    """Advance the most recent posting by one cadence step"""
    if frequency == "weekly":
        return last_posted + timedelta(days=7)
    elif frequency == "monthly":
        return add_months(last_posted, 1)
    elif frequency == "yearly":
        return add_years(last_posted, 1)
    return last_posted + timedelta(days=thresholds.irregular_fallback_days)


def classify_recurring_type(avg_amount: float, category_name: Optional[str]) -> Optional[RecurringType]:
    """
    Income for net inflows; bill or subscription for outflows in a bill-like
    category. Returns None for regular variable spending (groceries, transport)
    which must not be reported as recurring.
    """
    if avg_amount > 0:
        return "income"

    category = (category_name or "").lower()
    if not any(keyword in category for keyword in BILL_KEYWORDS):
        return None

    if any(keyword in category for keyword in SUBSCRIPTION_KEYWORDS):
        return "subscription"
    return "bill"


def _analyze_group(
    txns: List[Transaction],
    thresholds: HeuristicThresholds,
) -> Optional[RecurringTransaction]:
    # Newest first; interval and next-date logic rely on this order
    ordered = sorted(txns, key=lambda t: t.posted_at, reverse=True)
    # At least one interval is needed for the average below
    if len(ordered) < 2:
        return None

    amounts = [t.amount for t in ordered]
    avg_amount = sum(amounts) / len(amounts)
    stable = is_stable_amount(amounts, avg_amount, thresholds)

    intervals = [days_between(ordered[i].posted_at, ordered[i + 1].posted_at) for i in range(len(ordered) - 1)]
    avg_interval = sum(intervals) / len(intervals)
    frequency = classify_frequency(avg_interval, thresholds)

    if frequency == "irregular" and not (stable and len(ordered) >= thresholds.min_stable_occurrences):
        return None

    latest = ordered[0]
    recurring_type = classify_recurring_type(avg_amount, latest.category_name)
    if recurring_type is None:
        return None

    return RecurringTransaction(
        merchant_name=latest.counterparty,
        amount=avg_amount,
        frequency=frequency,
        next_expected_date=next_expected_date(latest.posted_at, frequency, thresholds),
        confidence=thresholds.stable_confidence if stable else thresholds.unstable_confidence,
        type=recurring_type,
    )


def detect_recurring(
    transactions: Sequence[Transaction],
    thresholds: HeuristicThresholds = DEFAULT_THRESHOLDS,
    normalize_names: bool = False,
) -> List[RecurringTransaction]:
    """
    Detect recurring transactions (bills, subscriptions, income).

    Heuristic: same counterparty, regular intervals or a stable amount.
    - Group by merchant name (description when absent), discard singletons
    - Cadence from the mean gap between consecutive postings
    - Irregular groups qualify only with a stable amount and 3+ postings
    - Outflows must sit in a bill-like category to be reported at all

    Output order follows first appearance of each counterparty; callers
    should not rely on it.
    """
    groups: Dict[str, List[Transaction]] = defaultdict(list)
    for txn in transactions:
        key = normalize_merchant_name(txn.counterparty) if normalize_names else txn.counterparty
        groups[key].append(txn)

    recurring = []
    for txns in groups.values():
        if len(txns) < thresholds.min_occurrences:
            continue

        item = _analyze_group(txns, thresholds)
        if item is not None:
            recurring.append(item)

    logger.debug(
        "Recurring detection finished",
        extra={"groups": len(groups), "recurring": len(recurring)},
    )
    return recurring
