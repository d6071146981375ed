"""Prometheus metrics for monitoring profile builds and detection output"""

from prometheus_client import Counter, Histogram

from fin_analytics.domain.models import FinancialProfile

# Profile metrics
profile_counter = Counter(
    "analytics_profile_total",
    "Total financial profiles built",
    ["outcome"],  # success | invalid_input
)

profile_duration_histogram = Histogram(
    "analytics_profile_duration_seconds",
    "Time spent building a financial profile",
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0],
)

# Detection output
recurring_detected_counter = Counter(
    "analytics_recurring_detected_total",
    "Recurring items detected",
    ["type"],  # bill | subscription | income
)

insight_counter = Counter(
    "analytics_insights_total",
    "Insights generated",
    ["severity"],  # info | warning | critical
)

# Input quality
validation_failure_counter = Counter(
    "analytics_validation_failures_total",
    "Analysis calls rejected because of malformed input",
)


def record_profile(profile: FinancialProfile, duration_seconds: float) -> None:
    """Record metrics for a successfully built profile"""
    profile_counter.labels(outcome="success").inc()
    profile_duration_histogram.observe(duration_seconds)

    for item in profile.recurring:
        recurring_detected_counter.labels(type=item.type).inc()

    for insight in profile.insights:
        insight_counter.labels(severity=insight.severity).inc()


def record_validation_failure() -> None:
    """Record a rejected analysis call"""
    profile_counter.labels(outcome="invalid_input").inc()
    validation_failure_counter.inc()
