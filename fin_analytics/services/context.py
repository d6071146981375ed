"""Plain-text financial context handed to the AI assistant"""

from fin_analytics.domain.models import FinancialProfile

MAX_RECURRING_ITEMS = 5
MAX_CATEGORIES = 5

_TREND_MARKERS = {"increasing": "📈", "decreasing": "📉", "stable": "➡️"}
_SEVERITY_MARKERS = {"info": "ℹ️", "warning": "⚠️", "critical": "🚨"}


def _money(amount: float) -> str:
    return f"+€{amount:.2f}" if amount > 0 else f"-€{abs(amount):.2f}"


def format_financial_context(profile: FinancialProfile) -> str:
    """Render overview, cash flow, upcoming bills, top categories and alerts as markdown sections"""
    sections = [
        "## Financial Overview",
        f"- Income Stability: {profile.traits.income_stability}",
        f"- Planner Type: {profile.traits.planner_type}",
        f"- Spend Velocity: {profile.traits.spend_velocity}",
        "\n## Cash Flow (Monthly Averages)",
        f"- Income: €{profile.cash_flow.average_monthly_income:.2f}",
        f"- Expenses: €{profile.cash_flow.average_monthly_expenses:.2f}",
        f"- Savings Rate: {profile.cash_flow.savings_rate * 100:.1f}%",
    ]

    if profile.recurring:
        sections.append("\n## Upcoming Bills & Income")
        for item in profile.recurring[:MAX_RECURRING_ITEMS]:
            marker = "💰" if item.type == "income" else "💳"
            sections.append(
                f"{marker} {item.merchant_name}: {_money(item.amount)} "
                f"({item.frequency}, next: {item.next_expected_date.strftime('%d/%m/%Y')})"
            )

    if profile.spending_patterns:
        sections.append("\n## Spending by Category (Monthly)")
        top = sorted(profile.spending_patterns, key=lambda p: p.average_monthly_spend, reverse=True)
        for pattern in top[:MAX_CATEGORIES]:
            sections.append(
                f"{_TREND_MARKERS[pattern.trend]} {pattern.category_name}: €{pattern.average_monthly_spend:.2f}"
            )

    if profile.insights:
        sections.append("\n## Current Alerts")
        for insight in profile.insights:
            sections.append(f"{_SEVERITY_MARKERS[insight.severity]} {insight.message}")

    return "\n".join(sections)
