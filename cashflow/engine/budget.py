"""
Budget Summary

Monthly budget on an accrual basis: what is left of the salary once
fixed costs are set aside, how much of it has been spent this month, and
what that leaves per remaining day.

Yearly and half-yearly costs are spread evenly over the months they
cover, so a yearly subscription weighs 1/12 of its price every month.
"""

from datetime import date

from cashflow.engine.dates import last_day_of_month, same_month
from cashflow.models.forecast import BudgetSummary, FixedCostLine, LedgerSnapshot
from cashflow.models.ledger import TransactionKind
from cashflow.models.recurring import (
    FixedDirection,
    LoanStatus,
    RecurringDefinitions,
)


def round_half_up(numerator: int, denominator: int) -> int:
    """Integer division rounded half up (non-negative numerators)."""
    return (2 * numerator + denominator) // (2 * denominator)


def monthly_fixed_costs(definitions: RecurringDefinitions) -> list[FixedCostLine]:
    lines = []

    for sub in definitions.subscriptions:
        lines.append(FixedCostLine(
            name=sub.name,
            monthly_amount=round_half_up(sub.amount, sub.interval_months),
        ))

    for loan in definitions.loans:
        if loan.status != LoanStatus.ACTIVE:
            continue
        amount = loan.monthly_amount or 0
        if amount <= 0:
            continue
        months = loan.interval_months if loan.is_flat_schedule else 1
        lines.append(FixedCostLine(
            name=loan.name,
            monthly_amount=round_half_up(amount, months),
        ))

    for item in definitions.fixed_items:
        if item.direction == FixedDirection.EXPENSE:
            lines.append(FixedCostLine(name=item.name, monthly_amount=item.amount))

    return lines


def current_month_spending(snapshot: LedgerSnapshot, as_of: date) -> int:
    """Expense entries dated in the as-of month, card purchases included."""
    return sum(
        tx.amount
        for tx in snapshot.transactions
        if tx.kind == TransactionKind.EXPENSE and same_month(tx.date, as_of)
    )


def budget_summary(snapshot: LedgerSnapshot, as_of: date) -> BudgetSummary:
    definitions = snapshot.definitions
    income = definitions.salary.amount if definitions.salary is not None else 0

    lines = monthly_fixed_costs(definitions)
    fixed_total = sum(line.monthly_amount for line in lines)

    disposable = max(0, income - fixed_total)
    spent = current_month_spending(snapshot, as_of)
    remaining = disposable - spent

    days_left = last_day_of_month(as_of.year, as_of.month) - as_of.day + 1
    daily = max(0, remaining) // days_left

    return BudgetSummary(
        income=income,
        fixed_costs_total=fixed_total,
        fixed_cost_breakdown=tuple(lines),
        disposable_budget=disposable,
        current_month_spent=spent,
        remaining=remaining,
        daily_allowance=daily,
    )
