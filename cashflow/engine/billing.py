"""
Card Billing Aggregator

Turns individual card purchases into one debit per card per billing
cycle, dated on the card's payment day.

Attribution rule (closing day 15, payment day 10):
    purchase on the 14th -> cycle closes the 15th -> paid next month on the 10th
    purchase on the 16th -> cycle closes next month -> paid the month after on the 10th

A closing day of 99 closes on the last day of every month, so each
purchase is paid the following month.

Cards without both a closing day and a payment day are left out
entirely; their purchases never reach the forecast.
"""

from datetime import date
from typing import Iterable, Optional

from cashflow.engine.dates import add_months, same_month, safe_date
from cashflow.models.forecast import (
    CardBillTotal,
    EventSourceKind,
    EventStatus,
    ForecastEvent,
    MonthlyCardBills,
)
from cashflow.models.ledger import LedgerTransaction, PaymentSource, TransactionKind


def billing_date(purchase_date: date, closing_day: int, payment_day: int) -> date:
    """Payment date of the bill a purchase on `purchase_date` lands on."""
    offset = 1 if purchase_date.day <= closing_day else 2
    return safe_date(purchase_date.year, purchase_date.month + offset, payment_day)


def aggregate_card_bills(
    transactions: Iterable[LedgerTransaction],
    payment_sources: Iterable[PaymentSource],
) -> list[CardBillTotal]:
    """
    Sum card expenses per (card, payment date).

    Bills come out in the order their first purchase was seen.
    """
    cards = {
        source.id: source
        for source in payment_sources
        if source.has_billing_cycle
    }

    totals: dict[tuple[str, date], int] = {}
    members: dict[tuple[str, date], list[str]] = {}

    for tx in transactions:
        if tx.kind != TransactionKind.EXPENSE or not tx.payment_source_id:
            continue
        card = cards.get(tx.payment_source_id)
        if card is None:
            continue

        key = (card.id, billing_date(tx.date, card.closing_day, card.payment_day))
        totals[key] = totals.get(key, 0) + tx.amount
        members.setdefault(key, []).append(tx.id)

    return [
        CardBillTotal(
            card_id=card_id,
            card_name=cards[card_id].name,
            due_date=due,
            amount=amount,
            transaction_ids=tuple(members[(card_id, due)]),
        )
        for (card_id, due), amount in totals.items()
    ]


def bill_to_event(bill: CardBillTotal) -> ForecastEvent:
    return ForecastEvent(
        id=f"card:{bill.card_id}:{bill.due_date.isoformat()}",
        date=bill.due_date,
        amount=-bill.amount,
        label=f"Card bill: {bill.card_name}",
        source_kind=EventSourceKind.CARD_BILL,
        status=EventStatus.FORECAST,
        source_ids=bill.transaction_ids,
    )


def card_bill_events(
    transactions: Iterable[LedgerTransaction],
    payment_sources: Iterable[PaymentSource],
    window_start: Optional[date] = None,
    window_end: Optional[date] = None,
) -> list[ForecastEvent]:
    """Card bill events, optionally limited to an inclusive date window."""
    events = []
    for bill in aggregate_card_bills(transactions, payment_sources):
        if window_start is not None and bill.due_date < window_start:
            continue
        if window_end is not None and bill.due_date > window_end:
            continue
        events.append(bill_to_event(bill))
    return events


def monthly_card_bills(
    transactions: Iterable[LedgerTransaction],
    payment_sources: Iterable[PaymentSource],
    as_of: date,
) -> MonthlyCardBills:
    """Bills due this calendar month and next calendar month."""
    next_month = add_months(as_of.replace(day=1), 1)
    this_month_bills = []
    next_month_bills = []

    for bill in aggregate_card_bills(transactions, payment_sources):
        if same_month(bill.due_date, as_of):
            this_month_bills.append(bill)
        elif same_month(bill.due_date, next_month):
            next_month_bills.append(bill)

    return MonthlyCardBills(
        this_month=tuple(this_month_bills),
        next_month=tuple(next_month_bills),
    )
