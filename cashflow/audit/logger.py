"""
Audit Logger

DESIGN DECISION: Every projection step is logged.
This provides:
1. Traceability from a displayed forecast back to the snapshot it used
2. Visibility into definitions that were silently left out
3. Debugging capability when a forecast looks wrong

The audit logger:
- Writes structured JSON records through structlog
- Never raises; a logging failure must not break a forecast
- Supports correlation IDs to trace all events of one projection
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from cashflow.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Keeps the events it emitted during its lifetime in `events` so a
    caller (or a test) can inspect the trail of one projection.
    """

    def __init__(self, logger=None):
        self._logger = logger or structlog.get_logger("cashflow.audit")
        self.events: list[AuditEvent] = []

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns False if the local log write failed.
        """
        self.events.append(event)
        log_dict = event.to_log_dict()

        try:
            if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception:
            return False

        return True

    def log_snapshot_fetched(
        self,
        user_id: str,
        transaction_count: int,
        source_count: int,
        correlation_id: UUID,
    ) -> None:
        """Log a successful snapshot read."""
        self.log(AuditEventBuilder.snapshot_fetched(
            user_id=user_id,
            transaction_count=transaction_count,
            source_count=source_count,
            correlation_id=correlation_id,
        ))

    def log_snapshot_fetch_failed(
        self,
        user_id: str,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        """Log an upstream fetch failure."""
        self.log(AuditEventBuilder.snapshot_fetch_failed(
            user_id=user_id,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_definition_skipped(
        self,
        record_type: str,
        record_id: Optional[str],
        reason: str,
        correlation_id: UUID,
    ) -> None:
        """Log a stored definition left out of the forecast."""
        self.log(AuditEventBuilder.definition_skipped(
            record_type=record_type,
            record_id=record_id,
            reason=reason,
            correlation_id=correlation_id,
        ))

    def log_projection_completed(
        self,
        user_id: str,
        event_count: int,
        start_balance: int,
        final_balance: int,
        horizon_end,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.projection_completed(
            user_id=user_id,
            event_count=event_count,
            start_balance=start_balance,
            final_balance=final_balance,
            horizon_end=horizon_end,
            correlation_id=correlation_id,
        ))

    def log_risk_classified(
        self,
        user_id: str,
        risk_level: str,
        danger_date,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.risk_classified(
            user_id=user_id,
            risk_level=risk_level,
            danger_date=danger_date,
            correlation_id=correlation_id,
        ))

    def log_loan_schedule_indeterminate(
        self,
        loan_id: str,
        loan_name: str,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.loan_schedule_indeterminate(
            loan_id=loan_id,
            loan_name=loan_name,
            correlation_id=correlation_id,
        ))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a projection and pass it through every
    audit call made for it.
    """
    return uuid4()
