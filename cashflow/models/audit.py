"""
Audit Models for the Cash-Flow Forecast

Every projection leaves a structured trail:
1. Which snapshot was read, and how big it was
2. Which stored definitions were skipped and why
3. What the projection concluded
4. What failed, if anything

DESIGN DECISION: Audit events are emitted as structured log records only.
The engine is read-only and never writes back to the ledger store.
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Every stage of a projection has its own event type.
    """
    # Snapshot
    SNAPSHOT_FETCHED = "snapshot_fetched"
    SNAPSHOT_FETCH_FAILED = "snapshot_fetch_failed"

    # Normalization
    DEFINITION_SKIPPED = "definition_skipped"

    # Projection
    PROJECTION_COMPLETED = "projection_completed"
    RISK_CLASSIFIED = "risk_classified"
    LOAN_SCHEDULE_INDETERMINATE = "loan_schedule_indeterminate"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'user', 'loan', 'subscription')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., all events in one projection)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_code: Optional[str] = None
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.snapshot_fetched(user_id, 120, 3, correlation_id)
        event = AuditEventBuilder.definition_skipped("loan", "l1", reason, correlation_id)
    """

    @staticmethod
    def snapshot_fetched(
        user_id: str,
        transaction_count: int,
        source_count: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_FETCHED,
            entity_type="user",
            entity_id=user_id,
            correlation_id=correlation_id,
            description=f"Snapshot fetched: {transaction_count} transactions, {source_count} sources",
            details={
                "transaction_count": transaction_count,
                "payment_source_count": source_count,
            },
        )

    @staticmethod
    def snapshot_fetch_failed(
        user_id: str,
        error_message: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_FETCH_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="user",
            entity_id=user_id,
            correlation_id=correlation_id,
            description="Snapshot fetch failed; no forecast produced",
            error_message=error_message,
        )

    @staticmethod
    def definition_skipped(
        record_type: str,
        record_id: Optional[str],
        reason: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DEFINITION_SKIPPED,
            severity=AuditSeverity.WARNING,
            entity_type=record_type,
            entity_id=record_id,
            correlation_id=correlation_id,
            description=f"Skipped malformed {record_type} definition",
            details={
                "reason": reason,
            },
        )

    @staticmethod
    def projection_completed(
        user_id: str,
        event_count: int,
        start_balance: int,
        final_balance: int,
        horizon_end: date,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PROJECTION_COMPLETED,
            entity_type="user",
            entity_id=user_id,
            correlation_id=correlation_id,
            description=f"Projection built with {event_count} events",
            details={
                "event_count": event_count,
                "start_balance": start_balance,
                "final_balance": final_balance,
                "horizon_end": horizon_end.isoformat(),
            },
        )

    @staticmethod
    def risk_classified(
        user_id: str,
        risk_level: str,
        danger_date: Optional[date],
        correlation_id: UUID
    ) -> AuditEvent:
        severity = AuditSeverity.WARNING if risk_level == "danger" else AuditSeverity.INFO
        return AuditEvent(
            event_type=AuditEventType.RISK_CLASSIFIED,
            severity=severity,
            entity_type="user",
            entity_id=user_id,
            correlation_id=correlation_id,
            description=f"Risk classified as {risk_level}",
            details={
                "risk_level": risk_level,
                "danger_date": danger_date.isoformat() if danger_date else None,
            },
        )

    @staticmethod
    def loan_schedule_indeterminate(
        loan_id: str,
        loan_name: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOAN_SCHEDULE_INDETERMINATE,
            entity_type="loan",
            entity_id=loan_id,
            correlation_id=correlation_id,
            description=f"Cannot forecast payoff for loan: {loan_name}",
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
