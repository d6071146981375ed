"""Tunable heuristic thresholds shared by the analytics components"""

from dataclasses import dataclass

# Lower-cased category fragments that mark a recurring outflow as a bill.
# Matching is substring-based, so "app" also matches "Apps & Software".
BILL_KEYWORDS = frozenset(
    {
        "rent",
        "mortgage",
        "electricity",
        "gas",
        "heating",
        "water",
        "waste",
        "internet",
        "mobile",
        "phone",
        "insurance",
        "streaming",
        "subscription",
        "gym",
        "membership",
        "software",
        "app",
    }
)

# Subset of BILL_KEYWORDS that turns a bill into a subscription
SUBSCRIPTION_KEYWORDS = frozenset({"streaming", "subscription"})


@dataclass(frozen=True)
class HeuristicThresholds:
    """
    Magic numbers of the analytics engine, named so they can be tuned and
    boundary-tested.

    Interval bands are half-widths compared with strict ``<``: a 9-day average
    interval is outside the weekly band (|9 - 7| = 2), 25.5 days is monthly.
    """

    # Recurring detection
    amount_tolerance: float = 0.10
    weekly_days: float = 7
    weekly_band: float = 2
    monthly_days: float = 30
    monthly_band: float = 5
    yearly_days: float = 365
    yearly_band: float = 10
    irregular_fallback_days: int = 30
    min_occurrences: int = 2
    min_stable_occurrences: int = 3
    stable_confidence: float = 0.9
    unstable_confidence: float = 0.7

    # Spending patterns
    trend_up_factor: float = 1.1
    trend_down_factor: float = 0.9
    days_per_month: float = 30
    last_month_days: int = 30
    placeholder_volatility: float = 0.5

    # Cash flow and forecasting
    cash_flow_months: int = 3
    spend_window_days: int = 90
    forecast_horizon_days: int = 30

    # Anomaly detection
    anomaly_window_days: int = 90
    anomaly_recent_days: int = 7
    anomaly_min_samples: int = 5
    anomaly_z_score: float = 2.0


DEFAULT_THRESHOLDS = HeuristicThresholds()
