"""Integration tests for profile assembly, serialization and the assistant context"""

import json
import logging
from datetime import date, timedelta

import pytest
from prometheus_client import REGISTRY

from fin_analytics.config import Settings
from fin_analytics.domain.exceptions import AnalyticsInputError
from fin_analytics.domain.models import Goal
from fin_analytics.infrastructure.observability.logging import CustomJsonFormatter, setup_logging
from fin_analytics.schemas import profile_to_dict
from fin_analytics.services.context import format_financial_context
from fin_analytics.services.profile import build_financial_profile


def _sample(name: str, **labels) -> float:
    return REGISTRY.get_sample_value(name, labels or None) or 0.0


@pytest.fixture
def profile(sample_transactions, categories, now):
    return build_financial_profile(
        "user_1",
        sample_transactions,
        categories,
        current_balance=2500.0,
        now=now,
        settings=Settings(),
    )


def test_profile_recurring_set(profile):
    by_name = {r.merchant_name: r for r in profile.recurring}

    assert set(by_name) == {"ACME Payroll", "Landlord Ltd", "Netflix"}
    assert by_name["ACME Payroll"].type == "income"
    assert by_name["Landlord Ltd"].type == "bill"
    assert by_name["Netflix"].type == "subscription"
    assert all(r.frequency == "monthly" for r in profile.recurring)
    assert profile.traits.income_stability == "stable"


def test_profile_cash_flow_and_spending(profile):
    expenses = 3 * 1200.0 + 3 * 15.99 + 8 * 45.5

    assert profile.cash_flow.average_monthly_income == pytest.approx(3000.0)
    assert profile.cash_flow.average_monthly_expenses == pytest.approx(expenses / 3)
    assert profile.cash_flow.savings_rate == pytest.approx((9000.0 - expenses) / 9000.0)
    assert {p.category_id for p in profile.spending_patterns} == {1, 3, 7}


def test_profile_forecast_applies_recurring_on_due_dates(profile, now):
    expenses = 3 * 1200.0 + 3 * 15.99 + 8 * 45.5
    mean = expenses / 90
    forecast = profile.forecast

    assert len(forecast) == 30
    assert forecast[0].date == now.date()
    assert forecast[0].expected_balance == pytest.approx(2500.0 - mean, abs=0.01)

    # Netflix on Dec 20, salary on Dec 25, rent on Dec 28
    def step(i):
        return forecast[i].expected_balance - forecast[i - 1].expected_balance

    assert forecast[20].date == date(2025, 12, 20)
    assert step(20) == pytest.approx(-mean - 15.99, abs=0.011)
    assert step(25) == pytest.approx(3000.0 - mean, abs=0.011)
    assert step(28) == pytest.approx(-mean - 1200.0, abs=0.011)
    assert step(10) == pytest.approx(-mean, abs=0.011)


def test_profile_insights_include_goals(sample_transactions, categories, now):
    goal = Goal(goal_id="g1", name="Car", target_amount=500.0, current_amount=600.0)

    profile = build_financial_profile(
        "user_1", sample_transactions, categories, 2500.0, now=now, goals=[goal], settings=Settings()
    )

    assert any(i.related_id == "g1" for i in profile.insights)
    # Savings rate above 20%
    assert any(i.type == "balance" and i.severity == "info" for i in profile.insights)


def test_profile_low_balance_produces_forecast_alert(sample_transactions, categories, now):
    profile = build_financial_profile("user_1", sample_transactions, categories, 100.0, now=now, settings=Settings())

    alerts = [i for i in profile.insights if i.type == "balance" and i.severity in ("warning", "critical")]
    assert alerts


def test_profile_respects_settings(sample_transactions, categories, now):
    profile = build_financial_profile(
        "user_1",
        sample_transactions,
        categories,
        2500.0,
        now=now,
        settings=Settings(forecast_horizon_days=7),
    )

    assert len(profile.forecast) == 7


def test_profile_empty_history(categories, now):
    profile = build_financial_profile("user_2", [], categories, 0.0, now=now, settings=Settings())

    assert profile.recurring == []
    assert profile.spending_patterns == []
    assert profile.cash_flow.savings_rate == 0
    assert profile.traits.income_stability == "irregular"
    assert all(p.expected_balance == 0 for p in profile.forecast)


def test_profile_is_deterministic(sample_transactions, categories, now):
    snapshot = list(sample_transactions)

    first = build_financial_profile("user_1", sample_transactions, categories, 2500.0, now=now, settings=Settings())
    second = build_financial_profile("user_1", sample_transactions, categories, 2500.0, now=now, settings=Settings())

    assert sample_transactions == snapshot
    assert json.dumps(profile_to_dict(first)) == json.dumps(profile_to_dict(second))


def test_profile_invalid_input_is_counted_and_raised(sample_transactions, categories, now):
    before = _sample("analytics_validation_failures_total")

    with pytest.raises(AnalyticsInputError):
        build_financial_profile(
            "user_1", sample_transactions, categories, float("nan"), now=now, settings=Settings()
        )

    assert _sample("analytics_validation_failures_total") == before + 1


def test_profile_records_metrics(sample_transactions, categories, now):
    before = _sample("analytics_recurring_detected_total", type="income")

    build_financial_profile("user_1", sample_transactions, categories, 2500.0, now=now, settings=Settings())

    assert _sample("analytics_recurring_detected_total", type="income") == before + 1
    assert _sample("analytics_profile_total", outcome="success") >= 1


def test_profile_logs_summary(sample_transactions, categories, now, caplog):
    caplog.set_level(logging.INFO, logger="fin_analytics.profile")

    build_financial_profile("user_1", sample_transactions, categories, 2500.0, now=now, settings=Settings())

    records = [r for r in caplog.records if r.getMessage() == "Profile built"]
    assert len(records) == 1
    assert records[0].user_id == "user_1"
    assert records[0].recurring_count == 3


def test_profile_to_dict_uses_camel_case(profile):
    data = profile_to_dict(profile)

    assert data["userId"] == "user_1"
    assert set(data["cashFlow"]) == {
        "averageMonthlyIncome",
        "averageMonthlyExpenses",
        "savingsRate",
        "daysUntilBroke",
        "typicalLowBalance",
    }
    assert data["cashFlow"]["daysUntilBroke"] is None
    assert data["traits"]["incomeStability"] == "stable"
    assert {"merchantName", "nextExpectedDate", "confidence", "type"} <= set(data["recurring"][0])
    assert data["forecast"][0]["date"] == "2025-11-30"
    assert "expectedBalance" in data["forecast"][0]
    assert "lastMonthSpend" in data["spendingPatterns"][0]


def test_format_financial_context(profile):
    original_order = [p.category_id for p in profile.spending_patterns]

    text = format_financial_context(profile)

    assert text.startswith("## Financial Overview")
    assert "- Income Stability: stable" in text
    assert "- Income: €3000.00" in text
    assert "💳 Netflix: -€15.99 (monthly, next: 20/12/2025)" in text
    assert "💰 ACME Payroll: +€3000.00 (monthly, next: 25/12/2025)" in text
    # Rent is the largest category and is listed first
    lines = text.splitlines()
    category_lines = lines[lines.index("## Spending by Category (Monthly)") + 1 :]
    assert "Rent" in category_lines[0]
    assert [p.category_id for p in profile.spending_patterns] == original_order


def test_format_financial_context_minimal(categories, now):
    profile = build_financial_profile("user_2", [], categories, 1000.0, now=now, settings=Settings())

    text = format_financial_context(profile)

    assert "## Upcoming Bills & Income" not in text
    assert "## Spending by Category (Monthly)" not in text
    assert "- Savings Rate: 0.0%" in text


def test_json_formatter_adds_service_metadata():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        setup_logging("DEBUG")
        handler = root.handlers[0]
        assert isinstance(handler.formatter, CustomJsonFormatter)
        assert root.level == logging.DEBUG

        record = logging.LogRecord("fin_analytics.test", logging.INFO, __file__, 1, "hello", None, None)
        payload = json.loads(handler.formatter.format(record))
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)

    assert payload["message"] == "hello"
    assert payload["level"] == "INFO"
    assert payload["service"] == "fin-analytics"
    assert "timestamp" in payload
