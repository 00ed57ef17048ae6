"""
Recurring Event Generator

Expands canonical recurring definitions into concrete dated forecast
events inside the window [as_of, as_of + horizon_months].

Event ids are built from the definition id and the occurrence date, so
the same inputs always produce the same event set.

Occurrences are always computed from the first occurrence and the
configured day of month, never chained from the previous (possibly
clamped) date. A pay day of 31 lands on Feb 28 and then back on Mar 31.
"""

from datetime import date
from typing import Iterator, Mapping, Optional

from cashflow.engine.dates import add_months, next_occurrence, safe_date
from cashflow.engine.loans import calculate_loan_schedule
from cashflow.models.forecast import EventSourceKind, ForecastEvent
from cashflow.models.recurring import (
    FixedDirection,
    FixedItem,
    Loan,
    LoanStatus,
    RecurringDefinitions,
    RepaymentRule,
    Salary,
    Subscription,
)


DEFAULT_HORIZON_MONTHS = 6


def horizon_end(as_of: date, horizon_months: int = DEFAULT_HORIZON_MONTHS) -> date:
    """Last date (inclusive) covered by a forecast."""
    return add_months(as_of, horizon_months)


def _occurrences(first: date, day: int, step_months: int, end: date) -> Iterator[date]:
    """Dates on `day` every `step_months` from `first` through `end`."""
    k = 0
    while True:
        current = safe_date(first.year, first.month + k * step_months, day)
        if current > end:
            return
        yield current
        k += 1


def _event_id(prefix: str, definition_id: str, when: date) -> str:
    return f"{prefix}:{definition_id}:{when.isoformat()}"


def salary_events(salary: Salary, as_of: date, end: date) -> list[ForecastEvent]:
    """Monthly income on pay day, starting no earlier than start_date."""
    anchor = as_of
    if salary.start_date is not None and salary.start_date > as_of:
        anchor = salary.start_date
    first = next_occurrence(salary.pay_day, anchor)

    return [
        ForecastEvent(
            id=_event_id("salary", salary.id, when),
            date=when,
            amount=salary.amount,
            label="Salary",
            source_kind=EventSourceKind.SALARY,
        )
        for when in _occurrences(first, salary.pay_day, 1, end)
    ]


def subscription_events(sub: Subscription, as_of: date, end: date) -> list[ForecastEvent]:
    """Charges from next_payment_date, monthly or yearly."""
    anchor = sub.next_payment_date
    return [
        ForecastEvent(
            id=_event_id("subscription", sub.id, when),
            date=when,
            amount=-sub.amount,
            label=f"Subscription: {sub.name}",
            source_kind=EventSourceKind.SUBSCRIPTION,
        )
        for when in _occurrences(anchor, anchor.day, sub.interval_months, end)
        if when >= as_of
    ]


def _flat_loan_events(loan: Loan, as_of: date, end: date) -> list[ForecastEvent]:
    """
    Fixed number of installments from the loan's first payment date.

    Past installments are not backfilled; the ledger already holds them.
    """
    amount = loan.monthly_amount or 0
    if amount <= 0 or not loan.number_of_payments:
        return []

    first = safe_date(
        loan.first_payment_date.year,
        loan.first_payment_date.month,
        loan.payment_day,
    )
    events = []
    for index, when in enumerate(_occurrences(first, loan.payment_day, loan.interval_months, end)):
        if index >= loan.number_of_payments:
            break
        if when < as_of:
            continue
        events.append(ForecastEvent(
            id=_event_id("loan", loan.id, when),
            date=when,
            amount=-amount,
            label=f"Loan repayment: {loan.name}",
            source_kind=EventSourceKind.LOAN,
        ))
    return events


def _ledger_loan_events(
    loan: Loan,
    as_of: date,
    end: date,
    remaining_balance: Optional[int],
) -> list[ForecastEvent]:
    """
    Monthly (and bonus-month) installments for a ledger-linked loan.

    Stops after the simulated payoff when the remaining balance is known.
    """
    if loan.repayment_rule == RepaymentRule.CUSTOM or not loan.payment_day:
        return []

    limit = None
    if remaining_balance is not None:
        schedule = calculate_loan_schedule(loan, remaining_balance, as_of)
        if schedule.remaining_installment_count == 0:
            return []
        limit = schedule.remaining_installment_count

    monthly = loan.monthly_amount or 0
    first = next_occurrence(loan.payment_day, as_of)
    events = []
    for index, when in enumerate(_occurrences(first, loan.payment_day, 1, end)):
        if limit is not None and index >= limit:
            break
        if monthly > 0:
            events.append(ForecastEvent(
                id=_event_id("loan", loan.id, when),
                date=when,
                amount=-monthly,
                label=f"Loan repayment: {loan.name}",
                source_kind=EventSourceKind.LOAN,
            ))
        if loan.has_bonus_schedule and when.month in loan.bonus_months:
            events.append(ForecastEvent(
                id=f"loan:{loan.id}:bonus:{when.isoformat()}",
                date=when,
                amount=-(loan.bonus_amount or 0),
                label=f"Loan bonus repayment: {loan.name}",
                source_kind=EventSourceKind.LOAN,
            ))
    return events


def loan_events(
    loan: Loan,
    as_of: date,
    end: date,
    remaining_balance: Optional[int] = None,
) -> list[ForecastEvent]:
    if loan.status != LoanStatus.ACTIVE:
        return []
    if loan.is_flat_schedule:
        return _flat_loan_events(loan, as_of, end)
    return _ledger_loan_events(loan, as_of, end, remaining_balance)


def fixed_item_events(item: FixedItem, as_of: date, end: date) -> list[ForecastEvent]:
    sign = 1 if item.direction == FixedDirection.INCOME else -1
    first = next_occurrence(item.day, as_of)
    return [
        ForecastEvent(
            id=_event_id("fixed", item.id, when),
            date=when,
            amount=sign * item.amount,
            label=item.name,
            source_kind=EventSourceKind.FIXED,
        )
        for when in _occurrences(first, item.day, 1, end)
    ]


def generate_recurring_events(
    definitions: RecurringDefinitions,
    as_of: date,
    horizon_months: int = DEFAULT_HORIZON_MONTHS,
    loan_balances: Optional[Mapping[str, int]] = None,
) -> list[ForecastEvent]:
    """
    Expand every definition into forecast events.

    Output order is salary, subscriptions, loans, fixed items; each in
    stored order. `loan_balances` maps ledger-linked loan ids to their
    remaining balance.
    """
    end = horizon_end(as_of, horizon_months)
    loan_balances = loan_balances or {}
    events: list[ForecastEvent] = []

    if definitions.salary is not None:
        events.extend(salary_events(definitions.salary, as_of, end))
    for sub in definitions.subscriptions:
        events.extend(subscription_events(sub, as_of, end))
    for loan in definitions.loans:
        events.extend(loan_events(loan, as_of, end, loan_balances.get(loan.id)))
    for item in definitions.fixed_items:
        events.extend(fixed_item_events(item, as_of, end))

    return events
