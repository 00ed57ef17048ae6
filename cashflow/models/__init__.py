"""
Data Models Package

This package contains all Pydantic models used by the forecast engine.
All data flowing through the engine must conform to these schemas.
"""

from cashflow.models.ledger import (
    ASSET_KINDS,
    LedgerTransaction,
    PaymentSource,
    PaymentSourceKind,
    TransactionKind,
)
from cashflow.models.recurring import (
    FixedCategory,
    FixedDirection,
    FixedItem,
    Loan,
    LoanStatus,
    NormalizationIssue,
    RecurringDefinition,
    RecurringDefinitions,
    RecurringRecords,
    RepaymentRule,
    Salary,
    Subscription,
    SubscriptionFrequency,
)
from cashflow.models.forecast import (
    ActionKind,
    AssetBalance,
    BalancePoint,
    BudgetSummary,
    CardBillTotal,
    EventSourceKind,
    EventStatus,
    EvidenceBucket,
    FixedCostLine,
    ForecastEvent,
    ForecastEvidence,
    ForecastInsight,
    ForecastReport,
    HomeInsight,
    HomeInsightType,
    LedgerSnapshot,
    LoanProgress,
    LoanSchedule,
    MonthlyCardBills,
    Projection,
    RecommendedAction,
    RiskLevel,
)
from cashflow.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "ASSET_KINDS",
    "LedgerTransaction",
    "PaymentSource",
    "PaymentSourceKind",
    "TransactionKind",
    # Recurring models
    "FixedCategory",
    "FixedDirection",
    "FixedItem",
    "Loan",
    "LoanStatus",
    "NormalizationIssue",
    "RecurringDefinition",
    "RecurringDefinitions",
    "RecurringRecords",
    "RepaymentRule",
    "Salary",
    "Subscription",
    "SubscriptionFrequency",
    # Forecast models
    "ActionKind",
    "AssetBalance",
    "BalancePoint",
    "BudgetSummary",
    "CardBillTotal",
    "EventSourceKind",
    "EventStatus",
    "EvidenceBucket",
    "FixedCostLine",
    "ForecastEvent",
    "ForecastEvidence",
    "ForecastInsight",
    "ForecastReport",
    "HomeInsight",
    "HomeInsightType",
    "LedgerSnapshot",
    "LoanProgress",
    "LoanSchedule",
    "MonthlyCardBills",
    "Projection",
    "RecommendedAction",
    "RiskLevel",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
