"""
Tests for the Cash-Flow Forecast models

Test strategy:
1. Unit tests for individual components (models, engine functions)
2. Integration tests for flows (with in-memory and fake storage)
3. No real API calls in tests (use fakes)
"""

import pytest
from datetime import date
from uuid import uuid4

from cashflow.models.ledger import (
    LedgerTransaction,
    PaymentSource,
    PaymentSourceKind,
    TransactionKind,
)
from cashflow.models.recurring import (
    FixedItem,
    Loan,
    RecurringDefinitions,
    RepaymentRule,
    Salary,
    Subscription,
    SubscriptionFrequency,
)
from cashflow.models.forecast import (
    BalancePoint,
    EventSourceKind,
    ForecastEvent,
    LoanSchedule,
    Projection,
)
from cashflow.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


class TestLedgerModels:
    """Tests for ledger Pydantic models."""

    def test_transaction_creation(self):
        """Test LedgerTransaction model creation."""
        tx = LedgerTransaction(
            id="t1",
            date=date(2025, 3, 4),
            amount=1200,
            kind=TransactionKind.EXPENSE,
            payment_source_id="bank",
        )
        assert tx.amount == 1200
        assert tx.kind == TransactionKind.EXPENSE

    def test_transaction_rejects_negative_amount(self):
        """Test that negative amounts are rejected."""
        with pytest.raises(ValueError):
            LedgerTransaction(
                id="t1",
                date=date(2025, 3, 4),
                amount=-5,
                kind=TransactionKind.EXPENSE,
            )

    def test_signed_amount(self):
        """Test that only income adds to cash on hand."""
        income = LedgerTransaction(id="a", date=date(2025, 1, 1), amount=100, kind="income")
        expense = LedgerTransaction(id="b", date=date(2025, 1, 1), amount=100, kind="expense")
        repayment = LedgerTransaction(id="c", date=date(2025, 1, 1), amount=100, kind="repayment")
        assert income.signed_amount == 100
        assert expense.signed_amount == -100
        assert repayment.signed_amount == -100

    def test_transaction_is_frozen(self):
        """Test that transactions cannot be edited in place."""
        tx = LedgerTransaction(id="a", date=date(2025, 1, 1), amount=100, kind="income")
        with pytest.raises(ValueError):
            tx.amount = 5

    def test_payment_source_kinds(self):
        """Test asset and card classification."""
        bank = PaymentSource(id="b", name="Bank", kind=PaymentSourceKind.BANK)
        qr = PaymentSource(id="q", name="QR Pay", kind=PaymentSourceKind.WALLET_QR)
        card = PaymentSource(id="c", name="Card", kind=PaymentSourceKind.CARD)
        assert bank.is_asset and qr.is_asset
        assert not card.is_asset
        assert card.is_card

    def test_card_billing_cycle_requires_both_days(self):
        """Test has_billing_cycle needs closing and payment day."""
        half = PaymentSource(id="c", name="Card", kind="card", closing_day=15)
        full = PaymentSource(id="c", name="Card", kind="card", closing_day=15, payment_day=10)
        assert half.has_billing_cycle is False
        assert full.has_billing_cycle is True

    def test_cycle_days_ignored_off_cards(self):
        """Test that stray cycle days on a bank account are dropped, not fatal."""
        bank = PaymentSource(id="b", name="Bank", kind="bank", balance=100000, closing_day=15, payment_day=10)
        assert bank.balance == 100000
        assert bank.closing_day is None
        assert bank.payment_day is None

    def test_month_end_closing_day(self):
        """Test that 99 is accepted as a month-end closing day."""
        card = PaymentSource(id="c", name="Card", kind="card", closing_day=99, payment_day=27)
        assert card.has_billing_cycle
        with pytest.raises(ValueError, match="month end"):
            PaymentSource(id="c", name="Card", kind="card", closing_day=40, payment_day=27)


class TestRecurringModels:
    """Tests for canonical recurring definitions."""

    def test_salary_defaults(self):
        """Test Salary default pay day."""
        salary = Salary(amount=250000)
        assert salary.pay_day == 25
        assert salary.kind == "salary"

    def test_salary_rejects_zero(self):
        """Test that a salary must be positive."""
        with pytest.raises(ValueError):
            Salary(amount=0)

    def test_subscription_interval(self):
        """Test monthly vs yearly interval."""
        monthly = Subscription(id="s1", name="Music", amount=980, next_payment_date=date(2025, 1, 5))
        yearly = Subscription(
            id="s2",
            name="Cloud",
            amount=12000,
            frequency=SubscriptionFrequency.YEARLY,
            next_payment_date=date(2025, 6, 1),
        )
        assert monthly.interval_months == 1
        assert yearly.interval_months == 12

    def test_loan_bonus_months_range(self):
        """Test that bonus months must be calendar months."""
        with pytest.raises(ValueError, match="Bonus month out of range"):
            Loan(id="l1", name="Car", bonus_months=(6, 13))

    def test_first_payment_date_needs_count(self):
        """Test that a start date without a payment count is rejected."""
        with pytest.raises(ValueError, match="number of payments"):
            Loan(id="l1", name="Car", payment_day=10, first_payment_date=date(2025, 9, 10))

    def test_flat_loan_requires_start(self):
        """Test that a flat schedule needs a first payment date."""
        with pytest.raises(ValueError, match="first payment date"):
            Loan(id="l1", name="Phone", payment_day=27, number_of_payments=24)

    def test_bonus_schedule_needs_semiannual_rule(self):
        """Test has_bonus_schedule only for semiannual loans with an amount."""
        monthly = Loan(id="l1", name="Car", bonus_months=(6, 12), bonus_amount=50000)
        semi = Loan(
            id="l2",
            name="Car",
            repayment_rule=RepaymentRule.SEMIANNUAL,
            bonus_months=(6, 12),
            bonus_amount=50000,
        )
        assert monthly.has_bonus_schedule is False
        assert semi.has_bonus_schedule is True

    def test_definitions_as_list_order(self):
        """Test that salary comes first, then stored order by type."""
        definitions = RecurringDefinitions(
            salary=Salary(amount=1000),
            subscriptions=(Subscription(id="s1", name="A", amount=1, next_payment_date=date(2025, 1, 1)),),
            fixed_items=(FixedItem(id="f1", name="Rent", amount=80000, day=27),),
        )
        kinds = [item.kind for item in definitions.as_list()]
        assert kinds == ["salary", "subscription", "fixed"]


class TestForecastModels:
    """Tests for forecast output models."""

    def test_projection_final_balance(self):
        """Test final balance falls back to the start balance."""
        empty = Projection(
            as_of=date(2025, 1, 1),
            horizon_end=date(2025, 7, 1),
            start_balance=5000,
            balance_today=5000,
        )
        assert empty.final_balance == 5000
        assert empty.next_payment is None

        event = ForecastEvent(
            id="x",
            date=date(2025, 1, 2),
            amount=-1000,
            label="Rent",
            source_kind=EventSourceKind.FIXED,
        )
        filled = empty.model_copy(update={
            "events": (event,),
            "balance_points": (BalancePoint(date=date(2025, 1, 2), balance=4000),),
            "upcoming_payments": (event,),
        })
        assert filled.final_balance == 4000
        assert filled.next_payment == event

    def test_loan_schedule_indeterminate(self):
        """Test that an unknown count means indeterminate."""
        assert LoanSchedule().is_indeterminate is True
        assert LoanSchedule(remaining_installment_count=0).is_indeterminate is False


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.SNAPSHOT_FETCHED,
            description="Snapshot fetched",
        )
        assert event.event_type == AuditEventType.SNAPSHOT_FETCHED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.PROJECTION_COMPLETED,
            description="Projection built",
            details={"event_count": 12},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "projection_completed"
        assert log_dict["details"]["event_count"] == 12

    def test_builder_definition_skipped(self):
        """Test AuditEventBuilder.definition_skipped."""
        correlation_id = uuid4()
        event = AuditEventBuilder.definition_skipped(
            record_type="subscription",
            record_id="s9",
            reason="no next payment date",
            correlation_id=correlation_id,
        )
        assert event.event_type == AuditEventType.DEFINITION_SKIPPED
        assert event.severity == AuditSeverity.WARNING
        assert event.entity_id == "s9"
        assert event.correlation_id == correlation_id

    def test_builder_risk_classified_danger_is_warning(self):
        """Test that a danger classification is logged as a warning."""
        event = AuditEventBuilder.risk_classified(
            user_id="u1",
            risk_level="danger",
            danger_date=date(2025, 4, 10),
            correlation_id=uuid4(),
        )
        assert event.severity == AuditSeverity.WARNING
        assert event.details["danger_date"] == "2025-04-10"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
