"""Pytest fixtures for testing"""

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import pytest

from fin_analytics.domain.models import Transaction

# Fixed reference clock so trailing windows are deterministic
NOW = datetime(2025, 11, 30, 12, 0, tzinfo=timezone.utc)

CATEGORIES = {
    1: "Groceries",
    3: "Rent",
    7: "Streaming Services",
    9: "Gym Membership",
}


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def categories() -> dict[int, str]:
    return dict(CATEGORIES)


@pytest.fixture
def make_txn() -> Callable[..., Transaction]:
    """Factory building a transaction posted ``days_ago`` days before NOW"""
    counter = iter(range(1, 1_000_000))

    def _make(
        days_ago: float,
        amount: float,
        merchant: Optional[str] = "Merchant",
        category_id: Optional[int] = None,
        category_name: Optional[str] = None,
        description: str = "Card payment",
    ) -> Transaction:
        if category_name is None and category_id is not None:
            category_name = CATEGORIES.get(category_id)
        return Transaction(
            transaction_id=f"tx_{next(counter)}",
            posted_at=NOW - timedelta(days=days_ago),
            description=description,
            amount=amount,
            merchant_name=merchant,
            category_id=category_id,
            category_name=category_name,
        )

    return _make


@pytest.fixture
def sample_transactions(make_txn) -> list[Transaction]:
    """Ninety days of history: salary, rent, a streaming subscription and groceries"""
    transactions = []

    # Monthly salary deposits
    for days_ago in (5, 35, 65):
        transactions.append(make_txn(days_ago, 3000.0, merchant="ACME Payroll", description="Salary"))

    # Rent and streaming, same amount every month
    for days_ago in (2, 32, 62):
        transactions.append(make_txn(days_ago, -1200.0, merchant="Landlord Ltd", category_id=3))
    for days_ago in (10, 40, 70):
        transactions.append(make_txn(days_ago, -15.99, merchant="Netflix", category_id=7))

    # Groceries at irregular intervals
    for days_ago in (1, 4, 12, 19, 27, 33, 48, 61):
        transactions.append(make_txn(days_ago, -45.5, merchant="Tesco Ireland", category_id=1))

    return transactions
