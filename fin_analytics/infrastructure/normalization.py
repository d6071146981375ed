"""Row normalization at the boundary with the data-access layer"""

from datetime import datetime
from typing import Any, Iterable, List, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from fin_analytics.domain.exceptions import InvalidTransactionDataError
from fin_analytics.domain.models import Transaction


class TransactionRow(BaseModel):
    """Raw transaction row as returned by the transactions query"""

    model_config = ConfigDict(extra="ignore")

    id: str
    posted_at: datetime
    description: str = ""
    merchant_name: Optional[str] = None
    # Postgres NUMERIC columns arrive as strings; lax mode parses "12.50"
    amount: float = Field(allow_inf_nan=False)
    category_id: Optional[int] = None
    category_name: Optional[str] = None
    direction: Optional[Literal["debit", "credit"]] = None

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value

    @field_validator("direction", mode="before")
    @classmethod
    def lower_direction(cls, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value

    def signed_amount(self) -> float:
        """Credit positive, debit negative; rows without a direction are already signed"""
        if self.direction == "debit":
            return -abs(self.amount)
        elif self.direction == "credit":
            return abs(self.amount)
        return self.amount

    def to_domain(self) -> Transaction:
        return Transaction(
            transaction_id=self.id,
            posted_at=self.posted_at,
            description=self.description,
            amount=self.signed_amount(),
            merchant_name=self.merchant_name or None,
            category_id=self.category_id,
            category_name=self.category_name,
        )


def normalize_transactions(rows: Iterable[Mapping[str, Any]]) -> List[Transaction]:
    """
    Validate raw rows and convert them into sign-normalized domain transactions.

    Raises:
        InvalidTransactionDataError: On the first malformed row; no partial list is returned
    """
    transactions = []
    for index, row in enumerate(rows):
        try:
            transactions.append(TransactionRow.model_validate(dict(row)).to_domain())
        except (ValidationError, TypeError, ValueError) as e:
            raise InvalidTransactionDataError(f"Invalid transaction row {index}: {e}") from e
    return transactions
