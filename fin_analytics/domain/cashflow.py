"""Cash-flow statistics and the daily spend distribution feeding the forecaster"""

import statistics
from datetime import datetime
from typing import Optional, Sequence

from fin_analytics.domain.exceptions import AnalyticsInputError
from fin_analytics.domain.models import CashFlowStats, DailySpendStats, Transaction
from fin_analytics.domain.thresholds import DEFAULT_THRESHOLDS, HeuristicThresholds
from fin_analytics.utils.date_utils import add_months, as_utc, utc_now


def analyze_cash_flow(
    transactions: Sequence[Transaction],
    now: Optional[datetime] = None,
    thresholds: HeuristicThresholds = DEFAULT_THRESHOLDS,
) -> CashFlowStats:
    """
    Analyze cash flow (income vs expenses, savings rate) over the trailing quarter.

    The divisor is the fixed window length in months, not the elapsed span,
    so a user with two weeks of history reports a diluted monthly average.
    """
    now = as_utc(now) if now is not None else utc_now()
    window_start = add_months(now, -thresholds.cash_flow_months)

    recent = [t for t in transactions if t.posted_at >= window_start]

    income = sum(t.amount for t in recent if t.amount > 0)
    expenses = sum(abs(t.amount) for t in recent if t.amount < 0)

    months = thresholds.cash_flow_months
    return CashFlowStats(
        average_monthly_income=income / months,
        average_monthly_expenses=expenses / months,
        savings_rate=(income - expenses) / income if income > 0 else 0.0,
    )


def daily_spend_stats(
    transactions: Sequence[Transaction],
    now: Optional[datetime] = None,
    window_days: int = DEFAULT_THRESHOLDS.spend_window_days,
) -> DailySpendStats:
    """
    Mean and sample standard deviation of daily expenses over the last
    ``window_days`` calendar days (today inclusive). Days without spending
    count as zero so the mean equals total spend / window length.
    """
    if window_days <= 0:
        raise AnalyticsInputError(f"window_days must be positive, got {window_days}")

    today = (as_utc(now) if now is not None else utc_now()).date()

    daily_totals = [0.0] * window_days
    for txn in transactions:
        if txn.amount >= 0:
            continue
        offset = (today - txn.posted_at.date()).days
        if 0 <= offset < window_days:
            daily_totals[offset] += abs(txn.amount)

    mean = sum(daily_totals) / window_days
    std_dev = statistics.stdev(daily_totals) if window_days > 1 else 0.0
    return DailySpendStats(mean=mean, std_dev=std_dev)
