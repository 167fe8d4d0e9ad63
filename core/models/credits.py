# =============================================================================
# core/models/credits.py - Credit Ledger Schemas
# =============================================================================
# - CreditBalance: the user_credits row
# - CreditTransaction: one row of credit_transactions (history display)
# - TransactionType: why the balance changed
# =============================================================================

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class TransactionType(str, Enum):
    """Reasons recorded in credit_transactions.transaction_type."""
    MONTHLY_RESET = "monthly_reset"
    PURCHASE = "purchase"
    CONSUMPTION = "consumption"
    SUBSCRIPTION_GRANT = "subscription_grant"


class CreditBalance(BaseModel):
    """
    Current credit state of a user.

    Example:
        {
            "credits_remaining": 7,
            "credits_purchased": 0,
            "last_reset_date": "2024-01-01T00:00:00Z"
        }
    """

    credits_remaining: int = Field(..., ge=0)
    credits_purchased: int = Field(default=0, ge=0)
    last_reset_date: datetime | None = None

    @property
    def has_credits(self) -> bool:
        return self.credits_remaining > 0


class CreditTransaction(BaseModel):
    """One ledger movement. Negative amounts are debits."""
    id: str
    amount: int
    transaction_type: TransactionType
    description: str | None = None
    game_url: str | None = None
    template_info: str | None = None
    created_at: datetime

    @classmethod
    def from_db_row(cls, row: dict[str, Any]) -> "CreditTransaction":
        return cls(
            id=str(row["id"]),
            amount=row["amount"],
            transaction_type=row["transaction_type"],
            description=row.get("description"),
            game_url=row.get("game_url"),
            template_info=row.get("template_info"),
            created_at=row["created_at"],
        )


class ConsumeCreditRequest(BaseModel):
    """Context stored with a consumption transaction."""
    game_url: str | None = Field(default=None, max_length=2048)
    template_info: str | None = Field(default=None, max_length=500)


class ConsumeCreditResponse(BaseModel):
    """Result of a successful debit with the re-fetched balance."""
    consumed: bool
    balance: CreditBalance | None = None


class PurchaseCreditsRequest(BaseModel):
    """Admin grant of purchased credits."""
    user_id: str
    amount: int = Field(..., gt=0, le=10000)
