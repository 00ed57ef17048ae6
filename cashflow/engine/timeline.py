"""
Timeline Builder / Balance Projector

Merges the three event sources into one ordered timeline and walks a
running balance across it:

1. Forward-dated ledger entries on asset accounts (confirmed)
2. Card bill debits (derived from card purchases)
3. Recurring events (salary, subscriptions, loans, fixed items)

DESIGN DECISION: `build_projection` is the only way the engine projects
the future. Every screen that needs a forecast (home, timeline, forecast
detail) calls it with its own horizon instead of re-deriving events.

Same-day events keep their arrival order (ledger, card bills, recurring).
The order changes no totals, only the intra-day balance sequence.
"""

from datetime import date
from typing import Iterable, Optional, Sequence

from cashflow.engine.billing import card_bill_events
from cashflow.engine.loans import remaining_balance_for
from cashflow.engine.recurring import (
    DEFAULT_HORIZON_MONTHS,
    generate_recurring_events,
    horizon_end,
)
from cashflow.models.forecast import (
    AssetBalance,
    BalancePoint,
    EventSourceKind,
    EventStatus,
    ForecastEvent,
    LedgerSnapshot,
    Projection,
)
from cashflow.models.ledger import LedgerTransaction, PaymentSource


DEFAULT_UPCOMING_COUNT = 3


def asset_breakdown(
    transactions: Iterable[LedgerTransaction],
    payment_sources: Iterable[PaymentSource],
    as_of: date,
) -> list[AssetBalance]:
    """
    Per-account balance as of `as_of`.

    Seed balance plus every ledger entry on/before `as_of` booked against
    the account. Card entries never touch these balances; only their
    aggregated bill does, later, on the timeline.
    """
    assets = [source for source in payment_sources if source.is_asset]
    balances = {source.id: source.balance for source in assets}

    for tx in transactions:
        if tx.date > as_of or tx.payment_source_id not in balances:
            continue
        balances[tx.payment_source_id] += tx.signed_amount

    return [
        AssetBalance(
            source_id=source.id,
            name=source.name,
            kind=source.kind.value,
            amount=balances[source.id],
        )
        for source in assets
    ]


def start_balance(
    transactions: Iterable[LedgerTransaction],
    payment_sources: Iterable[PaymentSource],
    as_of: date,
) -> int:
    """Money on hand across all asset accounts as of `as_of`."""
    return sum(row.amount for row in asset_breakdown(transactions, payment_sources, as_of))


def ledger_events(
    transactions: Iterable[LedgerTransaction],
    payment_sources: Iterable[PaymentSource],
    as_of: date,
    end: date,
) -> list[ForecastEvent]:
    """
    Forward-dated asset-account entries inside (as_of, end].

    Entries dated on/before `as_of` are already in the start balance.
    """
    asset_ids = {source.id for source in payment_sources if source.is_asset}
    return [
        ForecastEvent(
            id=f"ledger:{tx.id}",
            date=tx.date,
            amount=tx.signed_amount,
            label=tx.memo or tx.kind.value.capitalize(),
            source_kind=EventSourceKind.LEDGER,
            status=EventStatus.CONFIRMED,
            source_ids=(tx.id,),
        )
        for tx in transactions
        if tx.payment_source_id in asset_ids and as_of < tx.date <= end
    ]


def order_events(events: Iterable[ForecastEvent]) -> list[ForecastEvent]:
    """Ascending by date; ties keep arrival order (sorted() is stable)."""
    return sorted(events, key=lambda event: event.date)


def running_balance(start: int, events: Sequence[ForecastEvent]) -> list[BalancePoint]:
    points = []
    balance = start
    for event in events:
        balance += event.amount
        points.append(BalancePoint(date=event.date, balance=balance))
    return points


def balance_on(points: Sequence[BalancePoint], start: int, when: date) -> int:
    """Balance after the last event dated on/before `when`, else `start`."""
    for point in reversed(points):
        if point.date <= when:
            return point.balance
    return start


def upcoming_payments(
    events: Iterable[ForecastEvent],
    as_of: date,
    count: int = DEFAULT_UPCOMING_COUNT,
) -> list[ForecastEvent]:
    """The next `count` outflows dated on/after `as_of`."""
    outflows = [event for event in events if event.amount < 0 and event.date >= as_of]
    return outflows[:count]


def loan_balances(snapshot: LedgerSnapshot) -> dict[str, int]:
    """Remaining balance for every ledger-linked loan with a principal."""
    return {
        loan.id: remaining_balance_for(loan, snapshot.transactions)
        for loan in snapshot.definitions.loans
        if not loan.is_flat_schedule and loan.principal is not None
    }


def build_projection(
    snapshot: LedgerSnapshot,
    as_of: date,
    horizon_months: int = DEFAULT_HORIZON_MONTHS,
    upcoming_count: Optional[int] = None,
) -> Projection:
    """
    Project the future from one snapshot.

    Pure: the same snapshot, as-of date and horizon always give the same
    projection.
    """
    end = horizon_end(as_of, horizon_months)
    transactions = snapshot.transactions
    sources = snapshot.payment_sources

    breakdown = asset_breakdown(transactions, sources, as_of)
    start = sum(row.amount for row in breakdown)

    merged: list[ForecastEvent] = []
    merged.extend(ledger_events(transactions, sources, as_of, end))
    merged.extend(card_bill_events(transactions, sources, window_start=as_of, window_end=end))
    merged.extend(generate_recurring_events(
        snapshot.definitions,
        as_of,
        horizon_months,
        loan_balances=loan_balances(snapshot),
    ))

    events = order_events(merged)
    points = running_balance(start, events)

    return Projection(
        as_of=as_of,
        horizon_end=end,
        start_balance=start,
        asset_breakdown=tuple(breakdown),
        events=tuple(events),
        balance_points=tuple(points),
        balance_today=balance_on(points, start, as_of),
        upcoming_payments=tuple(upcoming_payments(
            events,
            as_of,
            DEFAULT_UPCOMING_COUNT if upcoming_count is None else upcoming_count,
        )),
    )
