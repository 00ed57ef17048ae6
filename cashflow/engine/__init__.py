"""
Forecast Engine Package

Pure, synchronous computation over a `LedgerSnapshot`. Nothing in here
reads storage, looks up today's date, or logs.
"""

from cashflow.engine.billing import (
    aggregate_card_bills,
    billing_date,
    card_bill_events,
    monthly_card_bills,
)
from cashflow.engine.budget import budget_summary, monthly_fixed_costs
from cashflow.engine.dates import add_months, next_occurrence, safe_date
from cashflow.engine.loans import (
    MAX_INSTALLMENTS,
    calculate_loan_schedule,
    loan_progress,
    remaining_balance_for,
    total_repaid,
)
from cashflow.engine.recurring import generate_recurring_events, horizon_end
from cashflow.engine.risk import (
    build_insight,
    classify_risk,
    home_insight,
    recommend_action,
    summarize_evidence,
)
from cashflow.engine.timeline import (
    asset_breakdown,
    build_projection,
    start_balance,
)

__all__ = [
    # Calendar
    "add_months",
    "next_occurrence",
    "safe_date",
    # Loans
    "MAX_INSTALLMENTS",
    "calculate_loan_schedule",
    "loan_progress",
    "remaining_balance_for",
    "total_repaid",
    # Events
    "card_bill_events",
    "generate_recurring_events",
    "horizon_end",
    # Card billing
    "aggregate_card_bills",
    "billing_date",
    "monthly_card_bills",
    # Projection
    "asset_breakdown",
    "build_projection",
    "start_balance",
    # Insight
    "build_insight",
    "classify_risk",
    "home_insight",
    "recommend_action",
    "summarize_evidence",
    # Budget
    "budget_summary",
    "monthly_fixed_costs",
]
