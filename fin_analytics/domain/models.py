"""Domain models - pure Python dataclasses representing analytics inputs and results"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from numbers import Real
from typing import List, Literal, Optional

from fin_analytics.domain.exceptions import InvalidTransactionDataError
from fin_analytics.utils.date_utils import as_utc

Frequency = Literal["weekly", "monthly", "yearly", "irregular"]
RecurringType = Literal["bill", "subscription", "income"]
Trend = Literal["increasing", "decreasing", "stable"]
InsightType = Literal["budget", "goal", "spending", "balance"]
Severity = Literal["info", "warning", "critical"]


@dataclass
class Transaction:
    """Normalized bank transaction supplied by the data-access layer.

    The sign of ``amount`` is the single source of truth for income vs expense:
    positive = inflow (credit), negative = outflow (debit).
    """

    transaction_id: str
    posted_at: datetime
    description: str
    amount: float
    merchant_name: Optional[str] = None
    category_id: Optional[int] = None
    category_name: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.posted_at, date):
            raise InvalidTransactionDataError(
                f"Transaction {self.transaction_id}: posted_at must be a datetime, got {self.posted_at!r}"
            )
        self.posted_at = as_utc(self.posted_at)

        # bool is a Real subclass but never a valid amount; NUMERIC columns arrive as Decimal
        if isinstance(self.amount, bool) or not isinstance(self.amount, (Real, Decimal)):
            raise InvalidTransactionDataError(
                f"Transaction {self.transaction_id}: amount must be numeric, got {self.amount!r}"
            )
        finite = self.amount.is_finite() if isinstance(self.amount, Decimal) else math.isfinite(self.amount)
        if not finite:
            raise InvalidTransactionDataError(
                f"Transaction {self.transaction_id}: amount must be finite, got {self.amount!r}"
            )
        self.amount = float(self.amount)

    @property
    def counterparty(self) -> str:
        """Merchant label, falling back to the free-text description"""
        return self.merchant_name or self.description


@dataclass
class RecurringTransaction:
    """Detected recurring bill, subscription or income stream"""

    merchant_name: str
    amount: float  # signed average
    frequency: Frequency
    next_expected_date: datetime
    confidence: float  # 0-1, binary heuristic
    type: RecurringType


@dataclass
class SpendingPattern:
    """Per-category spending summary (expenses only, unsigned)"""

    category_id: int
    category_name: str
    average_monthly_spend: float
    trend: Trend
    volatility: float
    last_month_spend: float


@dataclass
class CashFlowStats:
    """Trailing-quarter cash flow summary"""

    average_monthly_income: float
    average_monthly_expenses: float
    savings_rate: float
    # Both need a balance-history series this engine never sees
    days_until_broke: Optional[float] = None
    typical_low_balance: Optional[float] = None


@dataclass
class DailySpendStats:
    """Distribution of daily variable spending used by the forecaster"""

    mean: float
    std_dev: float = 0.0


@dataclass
class ForecastPoint:
    """Projected balances for a single day"""

    date: date
    expected_balance: float
    optimistic_balance: float
    pessimistic_balance: float


@dataclass
class Insight:
    """Rule-based observation surfaced to the user"""

    type: InsightType
    severity: Severity
    message: str
    actionable: Optional[str] = None
    related_id: Optional[str] = None


@dataclass
class ConversationSuggestion:
    """Conversation starter for the AI assistant"""

    topic: str
    message: str
    context: Literal["warning", "praise", "advice"]


@dataclass
class Budget:
    """Spending budget owned by the budgets feature"""

    budget_id: str
    name: str
    limit_amount: float


@dataclass
class Goal:
    """Savings goal owned by the goals feature"""

    goal_id: str
    name: str
    target_amount: float
    current_amount: float = 0.0
    target_date: Optional[date] = None
    priority: Optional[Literal["high", "medium", "low"]] = None


@dataclass
class ProfileTraits:
    """Coarse behavioural traits of the user"""

    planner_type: Literal["reactive", "proactive", "balanced"]
    income_stability: Literal["stable", "irregular"]
    spend_velocity: Literal["fast", "slow", "steady"]


@dataclass
class FinancialProfile:
    """Merged output of every analytics component for one user"""

    user_id: str
    traits: ProfileTraits
    cash_flow: CashFlowStats
    generated_at: datetime
    recurring: List[RecurringTransaction] = field(default_factory=list)
    spending_patterns: List[SpendingPattern] = field(default_factory=list)
    insights: List[Insight] = field(default_factory=list)
    forecast: List[ForecastPoint] = field(default_factory=list)
