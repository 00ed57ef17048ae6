"""
Ledger Models

These models describe what the persistence collaborator hands to the
forecast engine: recorded transactions and the accounts/cards they are
booked against.

DESIGN DECISION: Every model here is frozen. The engine only ever reads a
snapshot; edits happen elsewhere and simply change what the next
projection sees.

All monetary amounts are integers in the smallest currency unit.
"""

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionKind(str, Enum):
    """
    Direction of a ledger entry.

    REPAYMENT is money leaving an asset account to pay down a loan.
    """
    EXPENSE = "expense"
    INCOME = "income"
    REPAYMENT = "repayment"


class PaymentSourceKind(str, Enum):
    """
    Where money is held or charged.

    Bank, wallet and QR-wallet balances are money on hand.
    A card is a liability settled later on its payment day.
    """
    BANK = "bank"
    WALLET = "wallet"
    WALLET_QR = "wallet_qr"
    CARD = "card"


ASSET_KINDS = frozenset({
    PaymentSourceKind.BANK,
    PaymentSourceKind.WALLET,
    PaymentSourceKind.WALLET_QR,
})

# Closing day stored for cards that close on the last day of each month
END_OF_MONTH_CLOSING = 99


# =============================================================================
# CORE LEDGER MODELS
# =============================================================================

class LedgerTransaction(BaseModel):
    """
    A single recorded income/expense/repayment entry.

    `amount` is always a positive magnitude; `kind` carries the sign.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str = Field(
        ...,
        min_length=1,
        description="Unique transaction ID"
    )
    date: date
    amount: int = Field(
        ...,
        ge=0,
        description="Positive magnitude in the smallest currency unit"
    )
    kind: TransactionKind
    category_id: Optional[str] = None
    payment_source_id: Optional[str] = Field(
        default=None,
        description="Account or card this entry was booked against"
    )
    loan_id: Optional[str] = Field(
        default=None,
        description="Loan this repayment pays down"
    )
    memo: Optional[str] = Field(
        default=None,
        max_length=500
    )

    @property
    def signed_amount(self) -> int:
        """Income adds to cash on hand; everything else takes away."""
        if self.kind == TransactionKind.INCOME:
            return self.amount
        return -self.amount


class PaymentSource(BaseModel):
    """
    An account (bank, wallet, QR wallet) or a card.

    Cards need both closing_day and payment_day to take part in billing.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str = Field(..., min_length=1)
    name: str = Field(
        ...,
        min_length=1,
        max_length=200
    )
    kind: PaymentSourceKind
    balance: int = Field(
        default=0,
        description="Seed balance for asset accounts (signed)"
    )
    closing_day: Optional[int] = Field(
        default=None,
        ge=1,
        description="Card statement closing day; 99 closes on the month's last day"
    )
    payment_day: Optional[int] = Field(
        default=None,
        ge=1,
        le=31,
        description="Card bill debit day"
    )

    @property
    def is_asset(self) -> bool:
        return self.kind in ASSET_KINDS

    @property
    def is_card(self) -> bool:
        return self.kind == PaymentSourceKind.CARD

    @property
    def has_billing_cycle(self) -> bool:
        """True for cards with both closing and payment days configured."""
        return (
            self.is_card
            and self.closing_day is not None
            and self.payment_day is not None
        )

    @model_validator(mode='before')
    @classmethod
    def drop_cycle_days_off_cards(cls, data):
        """Cycle days only mean something on cards; elsewhere they are ignored."""
        if isinstance(data, dict) and data.get("kind") != PaymentSourceKind.CARD:
            data = {**data, "closing_day": None, "payment_day": None}
        return data

    @field_validator('closing_day')
    @classmethod
    def validate_closing_day(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v > 31 and v != END_OF_MONTH_CLOSING:
            raise ValueError(
                f"Closing day must be 1-31 or {END_OF_MONTH_CLOSING} for month end"
            )
        return v
