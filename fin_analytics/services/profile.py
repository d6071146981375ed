"""Financial profile assembly - runs every analytics component over one transaction window"""

import logging
import time
from datetime import datetime
from typing import List, Mapping, Optional, Sequence

from fin_analytics.config import Settings, settings as default_settings
from fin_analytics.domain.cashflow import analyze_cash_flow, daily_spend_stats
from fin_analytics.domain.exceptions import AnalyticsInputError
from fin_analytics.domain.forecasting import project_balance
from fin_analytics.domain.insights import (
    cash_flow_insights,
    detect_anomalies,
    forecast_insights,
    get_goal_insights,
)
from fin_analytics.domain.models import (
    FinancialProfile,
    Goal,
    Insight,
    ProfileTraits,
    RecurringTransaction,
    Transaction,
)
from fin_analytics.domain.recurring import detect_recurring
from fin_analytics.domain.spending import analyze_spending
from fin_analytics.infrastructure.observability.logging import log_profile
from fin_analytics.infrastructure.observability.metrics import record_profile, record_validation_failure
from fin_analytics.utils.date_utils import as_utc, utc_now

logger = logging.getLogger(__name__)


def derive_traits(recurring: Sequence[RecurringTransaction]) -> ProfileTraits:
    """Income stability from detected income streams; the other traits are not modelled yet"""
    return ProfileTraits(
        planner_type="balanced",
        income_stability="stable" if any(r.type == "income" for r in recurring) else "irregular",
        spend_velocity="steady",
    )


def build_financial_profile(
    user_id: str,
    transactions: Sequence[Transaction],
    categories: Mapping[int, str],
    current_balance: float,
    now: Optional[datetime] = None,
    goals: Sequence[Goal] = (),
    settings: Optional[Settings] = None,
) -> FinancialProfile:
    """
    Build the comprehensive financial snapshot for a user.

    Flow:
    1. Recurring detection, spending patterns and cash flow over the same window
    2. Daily spend distribution from the raw expenses
    3. Balance projection from current balance, recurring set and spend stats
    4. Insights (cash flow, forecast, anomalies, goals) and traits

    Raises:
        AnalyticsInputError: Malformed input; nothing is returned for partial data
    """
    start_time = time.time()
    settings = settings or default_settings
    thresholds = settings.heuristic_thresholds()
    now = as_utc(now) if now is not None else utc_now()

    try:
        recurring = detect_recurring(
            transactions,
            thresholds=thresholds,
            normalize_names=settings.normalize_merchant_names,
        )
        spending_patterns = analyze_spending(transactions, categories, now=now, thresholds=thresholds)
        cash_flow = analyze_cash_flow(transactions, now=now, thresholds=thresholds)

        spend_stats = daily_spend_stats(transactions, now=now, window_days=thresholds.spend_window_days)
        forecast = project_balance(
            current_balance,
            recurring,
            spend_stats,
            horizon_days=thresholds.forecast_horizon_days,
            today=now.date(),
        )

        insights: List[Insight] = []
        insights.extend(cash_flow_insights(cash_flow))
        insights.extend(forecast_insights(forecast))
        insights.extend(detect_anomalies(transactions, categories, now=now, thresholds=thresholds))
        for goal in goals:
            insights.extend(get_goal_insights(goal, now=now))

    except AnalyticsInputError as e:
        record_validation_failure()
        logger.warning(f"Invalid analytics input: {e}", extra={"user_id": user_id})
        raise

    profile = FinancialProfile(
        user_id=user_id,
        traits=derive_traits(recurring),
        cash_flow=cash_flow,
        generated_at=now,
        recurring=recurring,
        spending_patterns=spending_patterns,
        insights=insights,
        forecast=forecast,
    )

    duration = time.time() - start_time
    record_profile(profile, duration)
    log_profile(user_id, len(transactions), len(recurring), len(insights), duration * 1000)

    return profile
