"""Rule-based insight and conversation-suggestion generation"""

import statistics
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Dict, List, Mapping, Optional, Sequence

from fin_analytics.domain.models import (
    Budget,
    CashFlowStats,
    ConversationSuggestion,
    ForecastPoint,
    Goal,
    Insight,
    Transaction,
)
from fin_analytics.domain.thresholds import DEFAULT_THRESHOLDS, HeuristicThresholds
from fin_analytics.utils.date_utils import SECONDS_PER_DAY, as_utc, utc_now

BUDGET_EXCEEDED_PCT = 100
BUDGET_NEAR_LIMIT_PCT = 85
HIGH_SAVINGS_RATE = 0.2


def get_budget_insights(budget: Budget, spending: Sequence[Transaction]) -> List[Insight]:
    """
    Generate insights for a specific budget.

    ``spending`` is the set of transactions the caller attributes to the
    budget period; every amount counts by magnitude.
    """
    total_spent = sum(abs(t.amount) for t in spending)
    percentage = total_spent / budget.limit_amount * 100 if budget.limit_amount > 0 else 0.0

    if percentage > BUDGET_EXCEEDED_PCT:
        return [
            Insight(
                type="budget",
                severity="warning",
                message=f"You've exceeded your {budget.name} budget by {percentage - 100:.0f}%.",
                actionable="Check your recent transactions to see where you overspent.",
                related_id=budget.budget_id,
            )
        ]
    elif percentage > BUDGET_NEAR_LIMIT_PCT:
        return [
            Insight(
                type="budget",
                severity="info",
                message=f"You're close to the limit on your {budget.name} budget ({percentage:.0f}%).",
                actionable="Try to limit discretionary spending for the rest of the period.",
                related_id=budget.budget_id,
            )
        ]
    return []


def get_goal_insights(goal: Goal, now: Optional[datetime] = None) -> List[Insight]:
    """Generate insights for a specific savings goal"""
    now = as_utc(now) if now is not None else utc_now()
    percentage = goal.current_amount / goal.target_amount * 100 if goal.target_amount > 0 else 0.0

    if percentage >= 100:
        return [
            Insight(
                type="goal",
                severity="info",
                message=f"Congratulations! You've reached your goal: {goal.name}.",
                actionable="Consider setting a new goal or moving these funds to savings.",
                related_id=goal.goal_id,
            )
        ]

    if goal.target_date is None:
        return []

    target = as_utc(goal.target_date)
    months_left = (target - now).total_seconds() / SECONDS_PER_DAY / 30
    if months_left <= 0:
        return []

    needed_per_month = (goal.target_amount - goal.current_amount) / months_left
    return [
        Insight(
            type="goal",
            severity="info",
            message=(
                f"To reach {goal.name} by {goal.target_date.strftime('%d/%m/%Y')}, "
                f"save €{needed_per_month:.0f}/month."
            ),
            related_id=goal.goal_id,
        )
    ]


def detect_anomalies(
    transactions: Sequence[Transaction],
    categories: Mapping[int, str],
    now: Optional[datetime] = None,
    thresholds: HeuristicThresholds = DEFAULT_THRESHOLDS,
) -> List[Insight]:
    """
    Flag unusually large recent expenses using a per-category z-score.

    The baseline is every expense of the category in the anomaly window;
    only postings from the last few days are checked against it.
    """
    now = as_utc(now) if now is not None else utc_now()
    window_start = now - timedelta(days=thresholds.anomaly_window_days)
    recent_start = now - timedelta(days=thresholds.anomaly_recent_days)

    expenses_by_category: Dict[int, List[Transaction]] = defaultdict(list)
    for txn in transactions:
        if txn.category_id is None or txn.amount >= 0 or txn.posted_at < window_start:
            continue
        expenses_by_category[txn.category_id].append(txn)

    insights = []
    for category_id, expenses in expenses_by_category.items():
        if len(expenses) < thresholds.anomaly_min_samples:
            continue

        values = [abs(t.amount) for t in expenses]
        mean = sum(values) / len(values)
        std_dev = statistics.stdev(values)
        if std_dev == 0:
            continue

        category_name = categories.get(category_id, "Unknown")
        for txn in expenses:
            if txn.posted_at < recent_start:
                continue

            amount = abs(txn.amount)
            if (amount - mean) / std_dev > thresholds.anomaly_z_score:
                insights.append(
                    Insight(
                        type="spending",
                        severity="warning",
                        message=f"Unusual spending detected in {category_name}",
                        actionable=(
                            f"Transaction of €{amount:.2f} at {txn.merchant_name or 'Merchant'} "
                            f"is significantly higher than your average (€{mean:.2f})."
                        ),
                        related_id=txn.transaction_id,
                    )
                )

    return insights


def cash_flow_insights(cash_flow: CashFlowStats) -> List[Insight]:
    """Overspending warning or praise for a high savings rate"""
    if cash_flow.savings_rate < 0:
        return [
            Insight(
                type="balance",
                severity="warning",
                message="You are spending more than you earn on average.",
                actionable="Review your recurring subscriptions.",
            )
        ]
    elif cash_flow.savings_rate > HIGH_SAVINGS_RATE:
        return [
            Insight(
                type="balance",
                severity="info",
                message="Congratulations on a high savings rate this month!",
            )
        ]
    return []


def forecast_insights(forecast: Sequence[ForecastPoint]) -> List[Insight]:
    """Critical when the expected trajectory goes negative, warning when only the pessimistic one does"""
    overdrawn = next((p for p in forecast if p.expected_balance < 0), None)
    if overdrawn is not None:
        return [
            Insight(
                type="balance",
                severity="critical",
                message=f"Your balance is projected to go negative on {overdrawn.date.isoformat()}.",
                actionable="Postpone non-essential purchases until your next income arrives.",
            )
        ]

    at_risk = next((p for p in forecast if p.pessimistic_balance < 0), None)
    if at_risk is not None:
        return [
            Insight(
                type="balance",
                severity="warning",
                message=f"Your balance could drop below zero by {at_risk.date.isoformat()}.",
                actionable="Keep a buffer for upcoming bills.",
            )
        ]
    return []


def generate_suggestions(insights: Sequence[Insight], user_name: str) -> List[ConversationSuggestion]:
    """Generate conversation starters for the AI assistant"""
    suggestions = []

    # Warnings first
    warnings = [i for i in insights if i.severity in ("warning", "critical")]
    if warnings:
        suggestions.append(
            ConversationSuggestion(
                topic="Financial Warning",
                message=f"I noticed some issues that need attention: {warnings[0].message}",
                context="warning",
            )
        )

    achievements = [i for i in insights if "Congratulations" in i.message]
    if achievements:
        suggestions.append(
            ConversationSuggestion(
                topic="Goal Achievement",
                message=f"Great news, {user_name}! {achievements[0].message}",
                context="praise",
            )
        )

    if not suggestions:
        suggestions.append(
            ConversationSuggestion(
                topic="Financial Check-in",
                message=f"Hi {user_name}, everything looks stable. Would you like to review your upcoming bills?",
                context="advice",
            )
        )

    return suggestions
