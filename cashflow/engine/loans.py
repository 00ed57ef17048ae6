"""
Loan Amortization Calculator

Works out when a loan's next installment is due, when it will be paid
off, and how many installments remain, by simulating repayments month by
month from the current remaining balance.

DESIGN DECISION: The simulation is capped at MAX_INSTALLMENTS iterations.
A misconfigured loan (zero or tiny payment) produces an "indeterminate"
schedule instead of looping forever.
"""

from datetime import date
from typing import Iterable

from cashflow.engine.dates import next_occurrence, safe_date
from cashflow.models.forecast import LoanProgress, LoanSchedule
from cashflow.models.ledger import LedgerTransaction, TransactionKind
from cashflow.models.recurring import Loan, LoanStatus, RepaymentRule


# 100 years of monthly payments
MAX_INSTALLMENTS = 1200


def calculate_loan_schedule(
    loan: Loan,
    remaining_balance: int,
    as_of: date,
) -> LoanSchedule:
    """
    Derive next due date, payoff date and remaining installment count.

    Rules:
    - Settled (not active, or nothing left to pay): no dates, zero count.
    - Custom rule or no payment day: everything None (cannot forecast).
    - No monthly amount and no usable bonus schedule: next due date only.
    - Otherwise simulate until the balance is cleared or the cap is hit.
    """
    if loan.status != LoanStatus.ACTIVE or remaining_balance <= 0:
        return LoanSchedule(
            next_due_date=None,
            payoff_date=None,
            remaining_installment_count=0,
        )

    if loan.repayment_rule == RepaymentRule.CUSTOM or not loan.payment_day:
        return LoanSchedule()

    payment_day = loan.payment_day
    next_due = next_occurrence(payment_day, as_of)

    monthly = loan.monthly_amount or 0
    bonus = loan.bonus_amount or 0
    has_bonus = loan.has_bonus_schedule

    if monthly <= 0 and not has_bonus:
        return LoanSchedule(next_due_date=next_due)

    balance = remaining_balance
    count = 0
    sim_date = next_due

    while balance > 0 and count < MAX_INSTALLMENTS:
        count += 1
        balance -= monthly
        if has_bonus and sim_date.month in loan.bonus_months:
            balance -= bonus

        if balance > 0:
            sim_date = safe_date(sim_date.year, sim_date.month + 1, payment_day)

    if balance > 0:
        # Cap hit: the payment never closes the loan
        return LoanSchedule(next_due_date=next_due)

    return LoanSchedule(
        next_due_date=next_due,
        payoff_date=sim_date,
        remaining_installment_count=count,
    )


def total_repaid(loan: Loan, transactions: Iterable[LedgerTransaction]) -> int:
    """Sum of positive repayment transactions linked to this loan."""
    return sum(
        tx.amount
        for tx in transactions
        if tx.loan_id == loan.id
        and tx.kind == TransactionKind.REPAYMENT
        and tx.amount > 0
    )


def remaining_balance_for(loan: Loan, transactions: Iterable[LedgerTransaction]) -> int:
    """
    Principal minus recorded repayments.

    May go negative when a loan has been overpaid; callers that display
    the value should floor it at zero.
    """
    return (loan.principal or 0) - total_repaid(loan, transactions)


def loan_progress(
    loan: Loan,
    transactions: Iterable[LedgerTransaction],
    as_of: date,
) -> LoanProgress:
    """Repayment status and schedule for a ledger-linked loan."""
    transactions = list(transactions)
    repaid = total_repaid(loan, transactions)
    principal = loan.principal or 0
    remaining = principal - repaid
    progress = (repaid / principal) * 100 if principal > 0 else 0.0

    return LoanProgress(
        loan=loan,
        total_repaid=repaid,
        remaining_balance=max(0, remaining),
        progress=min(progress, 100.0),
        schedule=calculate_loan_schedule(loan, remaining, as_of),
    )
