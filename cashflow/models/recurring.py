"""
Recurring Definition Models

A recurring definition is a user-configured rule that describes cash
moving on a schedule: salary, subscriptions, loans and manual fixed items.

DESIGN DECISION: The stored data has grown several shapes over time (two
loan layouts, two ways of anchoring a subscription date). Those shapes
are accepted only as raw records (`RecurringRecords`) and are normalized
once per fetch into the canonical models below. The engine never sees a
legacy shape.
"""

from datetime import date
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# =============================================================================
# ENUMS
# =============================================================================

class SubscriptionFrequency(str, Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"


class RepaymentRule(str, Enum):
    """
    How a loan is paid down.

    CUSTOM loans have irregular schedules that cannot be forecast.
    """
    MONTHLY = "monthly"
    SEMIANNUAL = "semiannual"  # monthly plus bonus-month payments
    CUSTOM = "custom"


class LoanStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


class FixedDirection(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class FixedCategory(str, Enum):
    SALARY = "salary"
    RENT = "rent"
    SUBSCRIPTION = "subscription"
    LOAN = "loan"
    OTHER = "other"


# =============================================================================
# CANONICAL DEFINITIONS
# =============================================================================

class Salary(BaseModel):
    """Monthly take-home pay."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["salary"] = "salary"
    id: str = "salary"
    amount: int = Field(..., gt=0)
    pay_day: int = Field(
        default=25,
        ge=1,
        le=31,
        description="Day of month salary lands (clamped in short months)"
    )
    start_date: Optional[date] = Field(
        default=None,
        description="First month salary is expected; defaults to as-of"
    )


class Subscription(BaseModel):
    """A monthly or yearly charge anchored on a known next payment date."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    kind: Literal["subscription"] = "subscription"
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    amount: int = Field(..., gt=0)
    frequency: SubscriptionFrequency = SubscriptionFrequency.MONTHLY
    next_payment_date: date

    @property
    def interval_months(self) -> int:
        return 12 if self.frequency == SubscriptionFrequency.YEARLY else 1


class Loan(BaseModel):
    """
    A loan in either of its two schedule modes.

    Flat schedule: `number_of_payments` is set, installments start at
    `first_payment_date` and repeat every `interval_months`.

    Ledger-linked: `principal` is set and the remaining balance is the
    principal minus recorded repayment transactions.

    `interest_rate` is informational only; no interest is accrued.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    kind: Literal["loan"] = "loan"
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    status: LoanStatus = LoanStatus.ACTIVE
    repayment_rule: RepaymentRule = RepaymentRule.MONTHLY
    payment_day: Optional[int] = Field(default=None, ge=1, le=31)
    monthly_amount: Optional[int] = Field(
        default=None,
        ge=0,
        description="Amount paid per installment"
    )
    bonus_months: tuple[int, ...] = Field(
        default=(),
        description="Months (1-12) with an extra bonus payment"
    )
    bonus_amount: Optional[int] = Field(default=None, ge=0)
    principal: Optional[int] = Field(default=None, ge=0)
    interest_rate: float = Field(default=0.0, ge=0.0)

    interval_months: Literal[1, 6, 12] = 1
    first_payment_date: Optional[date] = None
    number_of_payments: Optional[int] = Field(default=None, ge=0)

    @field_validator('bonus_months')
    @classmethod
    def validate_bonus_months(cls, v: tuple[int, ...]) -> tuple[int, ...]:
        for month in v:
            if not 1 <= month <= 12:
                raise ValueError(f"Bonus month out of range: {month}")
        return v

    @model_validator(mode='after')
    def validate_flat_schedule(self) -> 'Loan':
        """A flat schedule needs a start and a day to land on."""
        if self.number_of_payments is not None:
            if self.first_payment_date is None:
                raise ValueError("Flat loan schedule requires a first payment date")
            if self.payment_day is None:
                raise ValueError("Flat loan schedule requires a payment day")
        elif self.first_payment_date is not None:
            raise ValueError("A first payment date needs a number of payments")
        return self

    @property
    def is_flat_schedule(self) -> bool:
        return self.number_of_payments is not None

    @property
    def has_bonus_schedule(self) -> bool:
        return (
            self.repayment_rule == RepaymentRule.SEMIANNUAL
            and len(self.bonus_months) > 0
            and (self.bonus_amount or 0) > 0
        )


class FixedItem(BaseModel):
    """A manually entered monthly item such as rent."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    kind: Literal["fixed"] = "fixed"
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    amount: int = Field(..., gt=0)
    direction: FixedDirection = FixedDirection.EXPENSE
    day: int = Field(..., ge=1, le=31)
    category: FixedCategory = FixedCategory.OTHER


RecurringDefinition = Annotated[
    Union[Salary, Subscription, Loan, FixedItem],
    Field(discriminator="kind"),
]


class RecurringDefinitions(BaseModel):
    """All canonical definitions belonging to one user."""
    model_config = ConfigDict(frozen=True)

    salary: Optional[Salary] = None
    subscriptions: tuple[Subscription, ...] = ()
    loans: tuple[Loan, ...] = ()
    fixed_items: tuple[FixedItem, ...] = ()

    def as_list(self) -> list[RecurringDefinition]:
        """Every definition, salary first, in stored order."""
        items: list[RecurringDefinition] = []
        if self.salary is not None:
            items.append(self.salary)
        items.extend(self.subscriptions)
        items.extend(self.loans)
        items.extend(self.fixed_items)
        return items


# =============================================================================
# RAW RECORDS (persistence boundary)
# =============================================================================

class RecurringRecords(BaseModel):
    """
    Recurring definitions exactly as stored.

    Each record is a plain mapping in whatever shape it was saved in.
    Use `cashflow.validation.normalize_definitions` to turn these into
    `RecurringDefinitions`.
    """

    salary: Optional[dict[str, Any]] = None
    subscriptions: list[dict[str, Any]] = Field(default_factory=list)
    loans: list[dict[str, Any]] = Field(default_factory=list)
    fixed_items: list[dict[str, Any]] = Field(default_factory=list)


class NormalizationIssue(BaseModel):
    """A stored record that could not be turned into a definition."""

    record_type: str = Field(
        ...,
        description="Which collection the record came from (e.g. 'subscription')"
    )
    record_id: Optional[str] = Field(
        default=None,
        description="The record's id, if it had one"
    )
    message: str = Field(
        ...,
        description="Human-readable reason the record was skipped"
    )
