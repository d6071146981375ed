"""Pydantic schemas turning analytics results into the camelCase JSON contract"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from fin_analytics.domain.models import FinancialProfile


class CamelModel(BaseModel):
    """Reads domain dataclasses by attribute, dumps camelCase keys"""

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)


class RecurringTransactionSchema(CamelModel):
    """Single recurring bill, subscription or income stream"""

    merchant_name: str
    amount: float
    frequency: str
    next_expected_date: datetime
    confidence: float
    type: str


class SpendingPatternSchema(CamelModel):
    """Monthly spending summary for a category"""

    category_id: int
    category_name: str
    average_monthly_spend: float
    trend: str
    volatility: float
    last_month_spend: float


class CashFlowStatsSchema(CamelModel):
    """Trailing-quarter cash flow"""

    average_monthly_income: float
    average_monthly_expenses: float
    savings_rate: float
    days_until_broke: Optional[float] = None
    typical_low_balance: Optional[float] = None


class ForecastPointSchema(CamelModel):
    """Projected balances for one day"""

    date: date
    expected_balance: float
    optimistic_balance: float
    pessimistic_balance: float


class InsightSchema(CamelModel):
    type: str
    severity: str
    message: str
    actionable: Optional[str] = None
    related_id: Optional[str] = None


class TraitsSchema(CamelModel):
    planner_type: str
    income_stability: str
    spend_velocity: str


class FinancialProfileSchema(CamelModel):
    """Snapshot returned to dashboard and assistant consumers"""

    user_id: str
    generated_at: datetime
    traits: TraitsSchema
    cash_flow: CashFlowStatsSchema
    recurring: List[RecurringTransactionSchema]
    spending_patterns: List[SpendingPatternSchema]
    insights: List[InsightSchema]
    forecast: List[ForecastPointSchema]


def profile_to_dict(profile: FinancialProfile) -> Dict[str, Any]:
    """JSON-ready dict of a profile (ISO dates, camelCase keys)"""
    return FinancialProfileSchema.model_validate(profile).model_dump(mode="json", by_alias=True)
