"""
Forecast Models

Everything the engine produces: dated events, the running balance,
loan schedules, billing lists, budget figures and the risk insight.

CRITICAL: These are computed fresh on every projection and never
persisted. They carry no identity beyond the call that produced them.
"""

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from cashflow.models.ledger import LedgerTransaction, PaymentSource
from cashflow.models.recurring import (
    Loan,
    NormalizationIssue,
    RecurringDefinitions,
)


# =============================================================================
# ENUMS
# =============================================================================

class EventSourceKind(str, Enum):
    """Where a forecast event came from."""
    LEDGER = "ledger"
    SALARY = "salary"
    SUBSCRIPTION = "subscription"
    LOAN = "loan"
    CARD_BILL = "card_bill"
    FIXED = "fixed"


class EventStatus(str, Enum):
    CONFIRMED = "confirmed"  # recorded in the ledger
    FORECAST = "forecast"    # derived from a rule


class RiskLevel(str, Enum):
    SAFE = "safe"
    CAUTION = "caution"
    DANGER = "danger"


class ActionKind(str, Enum):
    """Next steps the insight can recommend."""
    LOG_ENTRY = "log_entry"
    REVIEW_CARD_USAGE = "review_card_usage"
    REVIEW_FIXED_COSTS = "review_fixed_costs"
    REVIEW_SPENDING = "review_spending"


class HomeInsightType(str, Enum):
    SETUP = "setup"
    UPCOMING_PAYMENT = "upcoming_payment"
    NEUTRAL = "neutral"


# =============================================================================
# SNAPSHOT (engine input)
# =============================================================================

class LedgerSnapshot(BaseModel):
    """
    One consistent read of a user's data.

    Fetched as a single batch and treated as immutable for the whole
    projection.
    """
    model_config = ConfigDict(frozen=True)

    user_id: str
    transactions: tuple[LedgerTransaction, ...] = ()
    payment_sources: tuple[PaymentSource, ...] = ()
    definitions: RecurringDefinitions = Field(default_factory=RecurringDefinitions)
    issues: tuple[NormalizationIssue, ...] = Field(
        default=(),
        description="Stored records skipped while normalizing"
    )


# =============================================================================
# TIMELINE
# =============================================================================

class ForecastEvent(BaseModel):
    """
    A single dated cash movement on the timeline.

    `amount` is signed: positive for income, negative for outflow.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    date: date
    amount: int
    label: str
    source_kind: EventSourceKind
    status: EventStatus = EventStatus.FORECAST
    source_ids: tuple[str, ...] = Field(
        default=(),
        description="Ledger transactions behind an aggregated event"
    )


class BalancePoint(BaseModel):
    """Balance right after one event."""
    model_config = ConfigDict(frozen=True)

    date: date
    balance: int


class AssetBalance(BaseModel):
    """Current balance of one asset account."""
    model_config = ConfigDict(frozen=True)

    source_id: str
    name: str
    kind: str
    amount: int


class Projection(BaseModel):
    """
    The merged, ordered timeline and its running balance.

    `events[i]` and `balance_points[i]` always line up.
    """
    model_config = ConfigDict(frozen=True)

    as_of: date
    horizon_end: date
    start_balance: int
    asset_breakdown: tuple[AssetBalance, ...] = ()
    events: tuple[ForecastEvent, ...] = ()
    balance_points: tuple[BalancePoint, ...] = ()
    balance_today: int
    upcoming_payments: tuple[ForecastEvent, ...] = ()

    @property
    def final_balance(self) -> int:
        if self.balance_points:
            return self.balance_points[-1].balance
        return self.start_balance

    @property
    def next_payment(self) -> Optional[ForecastEvent]:
        return self.upcoming_payments[0] if self.upcoming_payments else None


# =============================================================================
# LOANS
# =============================================================================

class LoanSchedule(BaseModel):
    """
    Result of the amortization simulation.

    None means "cannot determine" (custom rule, no payment day,
    payment too small to ever close the loan).
    """
    model_config = ConfigDict(frozen=True)

    next_due_date: Optional[date] = None
    payoff_date: Optional[date] = None
    remaining_installment_count: Optional[int] = None

    @property
    def is_indeterminate(self) -> bool:
        return self.remaining_installment_count is None


class LoanProgress(BaseModel):
    """A ledger-linked loan with its repayment status."""
    model_config = ConfigDict(frozen=True)

    loan: Loan
    total_repaid: int
    remaining_balance: int = Field(..., ge=0)
    progress: float = Field(
        ...,
        ge=0.0,
        le=100.0,
        description="Percent of principal repaid"
    )
    schedule: LoanSchedule


# =============================================================================
# CARD BILLING
# =============================================================================

class CardBillTotal(BaseModel):
    """One card's bill for one payment date."""
    model_config = ConfigDict(frozen=True)

    card_id: str
    card_name: str
    due_date: date
    amount: int = Field(..., ge=0)
    transaction_ids: tuple[str, ...] = ()


class MonthlyCardBills(BaseModel):
    """Card bills due this calendar month and next."""
    model_config = ConfigDict(frozen=True)

    this_month: tuple[CardBillTotal, ...] = ()
    next_month: tuple[CardBillTotal, ...] = ()

    @property
    def this_month_total(self) -> int:
        return sum(bill.amount for bill in self.this_month)

    @property
    def next_month_total(self) -> int:
        return sum(bill.amount for bill in self.next_month)


# =============================================================================
# BUDGET
# =============================================================================

class FixedCostLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    monthly_amount: int


class BudgetSummary(BaseModel):
    """Monthly budget on an accrual basis."""
    model_config = ConfigDict(frozen=True)

    income: int
    fixed_costs_total: int
    fixed_cost_breakdown: tuple[FixedCostLine, ...] = ()
    disposable_budget: int
    current_month_spent: int
    remaining: int
    daily_allowance: int


# =============================================================================
# INSIGHT
# =============================================================================

class EvidenceBucket(BaseModel):
    count: int = 0
    total: int = 0


class ForecastEvidence(BaseModel):
    """Event counts and totals backing the insight."""

    income: EvidenceBucket = Field(default_factory=EvidenceBucket)
    fixed: EvidenceBucket = Field(default_factory=EvidenceBucket)
    card: EvidenceBucket = Field(default_factory=EvidenceBucket)


class RecommendedAction(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: ActionKind
    label: str
    link: str


class ForecastInsight(BaseModel):
    """Risk level plus the explanation shown to the user."""

    risk_level: RiskLevel
    summary: str
    evidence: ForecastEvidence
    recommended_action: RecommendedAction
    danger_date: Optional[date] = None


class HomeInsight(BaseModel):
    """The single most useful message for the home screen."""

    type: HomeInsightType
    message: str
    action_label: Optional[str] = None
    action_link: Optional[str] = None
    priority: int = Field(..., ge=1, description="1 = highest")


# =============================================================================
# REPORT
# =============================================================================

class ForecastReport(BaseModel):
    """Everything the presentation layer needs from one projection call."""

    user_id: str
    projection: Projection
    insight: ForecastInsight
    loans: list[LoanProgress] = Field(default_factory=list)
    card_bills: MonthlyCardBills
    budget: BudgetSummary
    home: HomeInsight
    issues: list[NormalizationIssue] = Field(
        default_factory=list,
        description="Definitions left out of this forecast"
    )
