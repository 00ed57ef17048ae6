"""
Main Orchestrator for the Cash-Flow Forecast

This module ties together all the components and defines the
end-to-end projection flow:

    fetch (one batch) → normalize → project → classify → report

DESIGN DECISION: The orchestrator enforces the boundaries:
- All three reads for one projection happen together, so the engine
  always sees one consistent snapshot
- A failed read produces no forecast at all, never a partial one
- "Today" is decided here and passed down; nothing below looks it up
- Every step is audited

This is the "glue" that keeps the pure engine pure.
"""

import asyncio
from datetime import date
from typing import Optional
from uuid import UUID

from cashflow.audit import AuditLogger, create_correlation_id
from cashflow.config import AppSettings, ForecastSettings, get_settings
from cashflow.engine.billing import monthly_card_bills
from cashflow.engine.budget import budget_summary
from cashflow.engine.loans import loan_progress
from cashflow.engine.risk import build_insight, home_insight
from cashflow.engine.timeline import build_projection
from cashflow.models.forecast import ForecastReport, LedgerSnapshot, LoanProgress
from cashflow.models.recurring import LoanStatus
from cashflow.services.storage import (
    GoogleSheetsLedgerSource,
    InMemoryLedgerSource,
    LedgerSourceInterface,
)
from cashflow.validation import normalize_definitions


class ProjectionError(Exception):
    """The snapshot could not be fetched; no forecast was produced."""
    pass


def is_setup_complete(snapshot: LedgerSnapshot) -> bool:
    """A forecast means something once there is a salary and an account."""
    has_salary = snapshot.definitions.salary is not None
    has_asset = any(source.is_asset for source in snapshot.payment_sources)
    return has_salary and has_asset


class ForecastOrchestrator:
    """
    Orchestrates the projection flow.

    Flow:
    1. Fetch → transactions, payment sources, recurring records (one batch)
    2. Normalize → canonical definitions, skipped records reported
    3. Project → merged timeline with running balance
    4. Classify → risk level, evidence, next action
    5. Report → loans, card bills, budget, home message

    Steps 2-5 are pure; only step 1 touches storage.
    """

    def __init__(
        self,
        source: LedgerSourceInterface,
        settings: Optional[ForecastSettings] = None,
        app_settings: Optional[AppSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._source = source
        self._settings = settings or get_settings().forecast
        self._app_settings = app_settings or get_settings().app
        self._audit_logger = audit_logger

    async def fetch_snapshot(
        self,
        user_id: str,
        as_of: date,
        correlation_id: Optional[UUID] = None,
    ) -> LedgerSnapshot:
        """
        Read one consistent snapshot of a user's data.

        Raises:
            ProjectionError: If any of the reads fails
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            transactions, sources, records = await asyncio.gather(
                self._source.list_ledger_transactions(user_id),
                self._source.list_payment_sources(user_id),
                self._source.list_recurring_definitions(user_id),
            )
        except Exception as e:
            if self._audit_logger:
                self._audit_logger.log_snapshot_fetch_failed(
                    user_id=user_id,
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            raise ProjectionError(f"Failed to fetch ledger for {user_id}: {e}") from e

        definitions, issues = normalize_definitions(records, as_of)

        if self._audit_logger:
            self._audit_logger.log_snapshot_fetched(
                user_id=user_id,
                transaction_count=len(transactions),
                source_count=len(sources),
                correlation_id=correlation_id,
            )
            for issue in issues:
                self._audit_logger.log_definition_skipped(
                    record_type=issue.record_type,
                    record_id=issue.record_id,
                    reason=issue.message,
                    correlation_id=correlation_id,
                )

        return LedgerSnapshot(
            user_id=user_id,
            transactions=tuple(transactions),
            payment_sources=tuple(sources),
            definitions=definitions,
            issues=tuple(issues),
        )

    def _loan_statuses(
        self,
        snapshot: LedgerSnapshot,
        as_of: date,
        correlation_id: UUID,
    ) -> list[LoanProgress]:
        """Progress for every ledger-linked loan."""
        statuses = []
        for loan in snapshot.definitions.loans:
            if loan.is_flat_schedule:
                continue
            progress = loan_progress(loan, snapshot.transactions, as_of)
            if (
                self._audit_logger
                and loan.status == LoanStatus.ACTIVE
                and progress.schedule.is_indeterminate
            ):
                self._audit_logger.log_loan_schedule_indeterminate(
                    loan_id=loan.id,
                    loan_name=loan.name,
                    correlation_id=correlation_id,
                )
            statuses.append(progress)
        return statuses

    def build_report(
        self,
        snapshot: LedgerSnapshot,
        as_of: date,
        horizon_months: Optional[int] = None,
        correlation_id: Optional[UUID] = None,
    ) -> ForecastReport:
        """Compute everything from an already-fetched snapshot."""
        correlation_id = correlation_id or create_correlation_id()
        horizon = self._settings.horizon_months if horizon_months is None else horizon_months

        projection = build_projection(
            snapshot,
            as_of,
            horizon,
            upcoming_count=self._settings.upcoming_payment_count,
        )
        insight = build_insight(
            projection,
            horizon,
            caution_threshold=self._settings.caution_threshold,
        )

        if self._audit_logger:
            self._audit_logger.log_projection_completed(
                user_id=snapshot.user_id,
                event_count=len(projection.events),
                start_balance=projection.start_balance,
                final_balance=projection.final_balance,
                horizon_end=projection.horizon_end,
                correlation_id=correlation_id,
            )
            self._audit_logger.log_risk_classified(
                user_id=snapshot.user_id,
                risk_level=insight.risk_level.value,
                danger_date=insight.danger_date,
                correlation_id=correlation_id,
            )

        return ForecastReport(
            user_id=snapshot.user_id,
            projection=projection,
            insight=insight,
            loans=self._loan_statuses(snapshot, as_of, correlation_id),
            card_bills=monthly_card_bills(
                snapshot.transactions,
                snapshot.payment_sources,
                as_of,
            ),
            budget=budget_summary(snapshot, as_of),
            home=home_insight(
                projection,
                is_setup_complete(snapshot),
                urgent_days=self._settings.urgent_payment_days,
                currency_symbol=self._app_settings.currency_symbol,
            ),
            issues=list(snapshot.issues),
        )

    async def project(
        self,
        user_id: str,
        as_of: Optional[date] = None,
        horizon_months: Optional[int] = None,
    ) -> ForecastReport:
        """
        Run the full flow for one user.

        Args:
            user_id: Whose ledger to project
            as_of: The "today" of the forecast; defaults to the current date
            horizon_months: Overrides the configured horizon

        Returns:
            ForecastReport with the projection and everything derived from it

        Raises:
            ProjectionError: If the snapshot could not be fetched
        """
        as_of = as_of or date.today()
        correlation_id = create_correlation_id()

        snapshot = await self.fetch_snapshot(user_id, as_of, correlation_id)
        return self.build_report(snapshot, as_of, horizon_months, correlation_id)


def create_forecast_orchestrator(
    use_storage: bool = True,
) -> ForecastOrchestrator:
    """
    Factory function to create a ready-to-use orchestrator.

    Args:
        use_storage: Whether to read from Google Sheets.
                    Set to False to start from an empty in-memory source.

    Returns:
        ForecastOrchestrator with local audit logging
    """
    audit_logger = AuditLogger()
    source: LedgerSourceInterface

    if use_storage:
        try:
            source = GoogleSheetsLedgerSource()
        except Exception as e:
            # Storage not configured - continue without it
            audit_logger.log_error(
                error_type="storage_not_configured",
                error_message=str(e),
            )
            source = InMemoryLedgerSource()
    else:
        source = InMemoryLedgerSource()

    return ForecastOrchestrator(source=source, audit_logger=audit_logger)
