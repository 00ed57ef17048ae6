"""
Risk Classifier & Insight Generator

Reads a projection and answers three questions for the user:
1. Will I run out of money? (risk level, first danger date)
2. Why? (event counts and totals by category)
3. What should I do next? (a fixed decision table, not a model)
"""

import calendar
from datetime import date
from typing import Iterable, Optional, Sequence

from cashflow.models.forecast import (
    ActionKind,
    BalancePoint,
    EventSourceKind,
    ForecastEvent,
    ForecastEvidence,
    ForecastInsight,
    HomeInsight,
    HomeInsightType,
    Projection,
    RecommendedAction,
    RiskLevel,
)


DEFAULT_CAUTION_THRESHOLD = 10000
DEFAULT_URGENT_DAYS = 3

# Card bills above this share of income suggest reviewing card usage
CARD_SHARE_LIMIT = 0.5
# Fixed costs above this share of income suggest reviewing fixed costs
FIXED_SHARE_LIMIT = 0.4

ACTIONS = {
    ActionKind.LOG_ENTRY: RecommendedAction(
        kind=ActionKind.LOG_ENTRY,
        label="Log your latest income and expenses",
        link="/input",
    ),
    ActionKind.REVIEW_CARD_USAGE: RecommendedAction(
        kind=ActionKind.REVIEW_CARD_USAGE,
        label="Check your card usage",
        link="/balances",
    ),
    ActionKind.REVIEW_FIXED_COSTS: RecommendedAction(
        kind=ActionKind.REVIEW_FIXED_COSTS,
        label="Review your fixed costs",
        link="/settings",
    ),
    ActionKind.REVIEW_SPENDING: RecommendedAction(
        kind=ActionKind.REVIEW_SPENDING,
        label="Check this month's spending",
        link="/history",
    ),
}


def classify_risk(
    points: Sequence[BalancePoint],
    caution_threshold: int = DEFAULT_CAUTION_THRESHOLD,
) -> tuple[RiskLevel, Optional[date]]:
    """
    Scan balances chronologically.

    The first negative balance is danger and ends the scan; a later
    recovery does not matter. Otherwise a minimum below the threshold is
    caution.
    """
    minimum = None
    for point in points:
        if point.balance < 0:
            return RiskLevel.DANGER, point.date
        if minimum is None or point.balance < minimum:
            minimum = point.balance

    if minimum is not None and minimum < caution_threshold:
        return RiskLevel.CAUTION, None
    return RiskLevel.SAFE, None


def summarize_evidence(events: Iterable[ForecastEvent]) -> ForecastEvidence:
    """
    Count and total events by category.

    income: salary and incoming fixed items
    fixed:  subscriptions, loans and outgoing fixed items
    card:   card bills
    Ledger entries are not counted.
    """
    evidence = ForecastEvidence()

    for event in events:
        amount = abs(event.amount)
        if event.source_kind == EventSourceKind.SALARY:
            bucket = evidence.income
        elif event.source_kind == EventSourceKind.FIXED:
            bucket = evidence.income if event.amount > 0 else evidence.fixed
        elif event.source_kind in (EventSourceKind.SUBSCRIPTION, EventSourceKind.LOAN):
            bucket = evidence.fixed
        elif event.source_kind == EventSourceKind.CARD_BILL:
            bucket = evidence.card
        else:
            continue
        bucket.count += 1
        bucket.total += amount

    return evidence


def recommend_action(risk: RiskLevel, evidence: ForecastEvidence) -> RecommendedAction:
    """
    Decision table:

    safe                          -> log an entry
    card  > 50% of income         -> review card usage
    fixed > 40% of income         -> review fixed costs
    otherwise                     -> review this month's spending
    """
    if risk == RiskLevel.SAFE:
        return ACTIONS[ActionKind.LOG_ENTRY]

    income = evidence.income.total
    if evidence.card.total > income * CARD_SHARE_LIMIT:
        return ACTIONS[ActionKind.REVIEW_CARD_USAGE]
    if evidence.fixed.total > income * FIXED_SHARE_LIMIT:
        return ACTIONS[ActionKind.REVIEW_FIXED_COSTS]
    return ACTIONS[ActionKind.REVIEW_SPENDING]


def summary_text(
    risk: RiskLevel,
    danger_date: Optional[date],
    horizon_months: int,
) -> str:
    if risk == RiskLevel.DANGER:
        if danger_date is None:
            return "At this pace your balance may run short."
        month = calendar.month_name[danger_date.month]
        return f"At this pace your balance may run short in {month} {danger_date.year}."
    if risk == RiskLevel.CAUTION:
        return "You should stay in the black, but some periods have little margin."
    return f"You look set to stay in the black for the next {horizon_months} months."


def build_insight(
    projection: Projection,
    horizon_months: int,
    caution_threshold: int = DEFAULT_CAUTION_THRESHOLD,
) -> ForecastInsight:
    risk, danger_date = classify_risk(projection.balance_points, caution_threshold)
    evidence = summarize_evidence(projection.events)

    return ForecastInsight(
        risk_level=risk,
        summary=summary_text(risk, danger_date, horizon_months),
        evidence=evidence,
        recommended_action=recommend_action(risk, evidence),
        danger_date=danger_date,
    )


def home_insight(
    projection: Projection,
    setup_complete: bool,
    urgent_days: int = DEFAULT_URGENT_DAYS,
    currency_symbol: str = "¥",
) -> HomeInsight:
    """
    Pick the single best message for the home screen.

    Priority: finish setup > a payment due within `urgent_days` > a nudge
    to keep logging.
    """
    if not setup_complete:
        return HomeInsight(
            type=HomeInsightType.SETUP,
            message="Start by setting your take-home pay, pay day and accounts.",
            action_label="Set up",
            action_link="/settings",
            priority=1,
        )

    for payment in projection.upcoming_payments:
        days = (payment.date - projection.as_of).days
        if payment.amount < 0 and 0 <= days <= urgent_days:
            when = "today" if days == 0 else f"in {days} days"
            return HomeInsight(
                type=HomeInsightType.UPCOMING_PAYMENT,
                message=(
                    f"{payment.label} ({currency_symbol}{abs(payment.amount):,}) "
                    f"will be debited {when}."
                ),
                action_label="Check balances",
                action_link="/balances",
                priority=2,
            )

    return HomeInsight(
        type=HomeInsightType.NEUTRAL,
        message="How is this week's spending going? Logging often keeps you on track.",
        action_label="Log an expense",
        action_link="/input",
        priority=4,
    )
