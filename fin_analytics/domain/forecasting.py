"""Balance forecasting with optimistic / pessimistic bands"""

import math
from datetime import date, timedelta
from typing import List, Optional, Sequence

from fin_analytics.domain.exceptions import AnalyticsInputError
from fin_analytics.domain.models import DailySpendStats, ForecastPoint, RecurringTransaction
from fin_analytics.domain.thresholds import DEFAULT_THRESHOLDS
from fin_analytics.utils.date_utils import as_utc, utc_now


def _validate_inputs(current_balance: float, daily_spend: DailySpendStats) -> None:
    for name, value in (
        ("current_balance", current_balance),
        ("daily_spend.mean", daily_spend.mean),
        ("daily_spend.std_dev", daily_spend.std_dev),
    ):
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise AnalyticsInputError(f"{name} must be a finite number, got {value!r}")

    if daily_spend.mean < 0:
        raise AnalyticsInputError(f"daily_spend.mean must not be negative, got {daily_spend.mean}")
    if daily_spend.std_dev < 0:
        raise AnalyticsInputError(f"daily_spend.std_dev must not be negative, got {daily_spend.std_dev}")


def recurring_effect(item: RecurringTransaction) -> float:
    """Signed balance change of one occurrence: income adds, bills and subscriptions subtract"""
    if item.type == "income":
        return item.amount
    return -abs(item.amount)


def project_balance(
    current_balance: float,
    recurring: Sequence[RecurringTransaction],
    daily_spend: DailySpendStats,
    horizon_days: int = DEFAULT_THRESHOLDS.forecast_horizon_days,
    today: Optional[date] = None,
) -> List[ForecastPoint]:
    """
    Project balance for the next ``horizon_days`` days, today being day 0.

    Each day subtracts the variable-spend estimate from three running balances:
    - expected:    mean
    - optimistic:  max(0, mean - std_dev), never negative spending
    - pessimistic: mean + std_dev

    A recurring item is applied once, on the calendar day of its stored
    ``next_expected_date``. Later occurrences inside the horizon (a weekly bill
    recurs ~4 times in 30 days) are not expanded.
    """
    _validate_inputs(current_balance, daily_spend)

    if today is None:
        today = utc_now().date()

    due_by_day: dict[date, float] = {}
    for item in recurring:
        due = as_utc(item.next_expected_date).date()
        due_by_day[due] = due_by_day.get(due, 0.0) + recurring_effect(item)

    optimistic_spend = max(0.0, daily_spend.mean - daily_spend.std_dev)
    pessimistic_spend = daily_spend.mean + daily_spend.std_dev

    expected = optimistic = pessimistic = float(current_balance)
    projection = []
    for i in range(horizon_days):
        day = today + timedelta(days=i)

        expected -= daily_spend.mean
        optimistic -= optimistic_spend
        pessimistic -= pessimistic_spend

        effect = due_by_day.get(day, 0.0)
        expected += effect
        optimistic += effect
        pessimistic += effect

        projection.append(
            ForecastPoint(
                date=day,
                expected_balance=round(expected, 2),
                optimistic_balance=round(optimistic, 2),
                pessimistic_balance=round(pessimistic, 2),
            )
        )

    return projection
