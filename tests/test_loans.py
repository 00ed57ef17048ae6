"""
Tests for the loan amortization calculator

Covers the schedule simulation (payoff, settled, indeterminate, capped)
and repayment aggregation from ledger transactions.
"""

import pytest
from datetime import date

from cashflow.engine.loans import (
    MAX_INSTALLMENTS,
    calculate_loan_schedule,
    loan_progress,
    remaining_balance_for,
    total_repaid,
)
from cashflow.models.ledger import LedgerTransaction, TransactionKind
from cashflow.models.recurring import Loan, LoanStatus, RepaymentRule


AS_OF = date(2025, 1, 5)


def make_loan(**overrides) -> Loan:
    fields = {
        "id": "car",
        "name": "Car loan",
        "payment_day": 10,
        "monthly_amount": 10000,
        "principal": 120000,
    }
    fields.update(overrides)
    return Loan(**fields)


def repayment(tx_id: str, amount: int, loan_id: str = "car", kind=TransactionKind.REPAYMENT):
    return LedgerTransaction(
        id=tx_id,
        date=date(2024, 12, 10),
        amount=amount,
        kind=kind,
        payment_source_id="bank",
        loan_id=loan_id,
    )


class TestLoanSchedule:
    """Tests for calculate_loan_schedule."""

    def test_monthly_payoff(self):
        """Test 120000 at 10000/month takes 12 installments from next due."""
        schedule = calculate_loan_schedule(make_loan(), 120000, AS_OF)
        assert schedule.next_due_date == date(2025, 1, 10)
        assert schedule.remaining_installment_count == 12
        assert schedule.payoff_date == date(2025, 12, 10)

    def test_partial_last_installment(self):
        """Test that a remainder still needs one more installment."""
        schedule = calculate_loan_schedule(make_loan(), 125000, AS_OF)
        assert schedule.remaining_installment_count == 13
        assert schedule.payoff_date == date(2026, 1, 10)

    def test_completed_loan_is_settled(self):
        """Test that a completed loan returns (None, None, 0)."""
        loan = make_loan(status=LoanStatus.COMPLETED)
        schedule = calculate_loan_schedule(loan, 50000, AS_OF)
        assert schedule.next_due_date is None
        assert schedule.payoff_date is None
        assert schedule.remaining_installment_count == 0

    def test_nothing_left_is_settled(self):
        """Test that a non-positive remaining balance is settled."""
        for remaining in (0, -500):
            schedule = calculate_loan_schedule(make_loan(), remaining, AS_OF)
            assert schedule.remaining_installment_count == 0
            assert schedule.next_due_date is None

    def test_custom_rule_is_indeterminate(self):
        """Test that a custom rule yields all None."""
        loan = make_loan(repayment_rule=RepaymentRule.CUSTOM)
        schedule = calculate_loan_schedule(loan, 120000, AS_OF)
        assert schedule.next_due_date is None
        assert schedule.payoff_date is None
        assert schedule.remaining_installment_count is None

    def test_missing_payment_day_is_indeterminate(self):
        """Test that a loan without a payment day cannot be forecast."""
        schedule = calculate_loan_schedule(make_loan(payment_day=None), 120000, AS_OF)
        assert schedule.is_indeterminate
        assert schedule.next_due_date is None

    def test_no_amount_gives_next_due_only(self):
        """Test that a zero payment keeps the due date but no payoff."""
        schedule = calculate_loan_schedule(make_loan(monthly_amount=0), 120000, AS_OF)
        assert schedule.next_due_date == date(2025, 1, 10)
        assert schedule.payoff_date is None
        assert schedule.remaining_installment_count is None

    def test_tiny_payment_hits_cap(self):
        """Test that a payment that never closes the loan is bounded."""
        schedule = calculate_loan_schedule(make_loan(monthly_amount=1), 10 * MAX_INSTALLMENTS, AS_OF)
        assert schedule.next_due_date == date(2025, 1, 10)
        assert schedule.payoff_date is None
        assert schedule.remaining_installment_count is None

    def test_bonus_months_shorten_schedule(self):
        """Test that bonus payments count in their months."""
        loan = make_loan(
            repayment_rule=RepaymentRule.SEMIANNUAL,
            bonus_months=(6, 12),
            bonus_amount=20000,
        )
        # Jan..Jun: 6 * 10000 + 20000 bonus in June = 80000 -> 40000 left
        # Jul..Oct: 4 * 10000 = 40000 -> paid off in October
        schedule = calculate_loan_schedule(loan, 120000, AS_OF)
        assert schedule.remaining_installment_count == 10
        assert schedule.payoff_date == date(2025, 10, 10)

    def test_bonus_only_loan(self):
        """Test a loan paid only through bonus months."""
        loan = make_loan(
            monthly_amount=0,
            repayment_rule=RepaymentRule.SEMIANNUAL,
            bonus_months=(6,),
            bonus_amount=60000,
        )
        schedule = calculate_loan_schedule(loan, 120000, AS_OF)
        assert schedule.payoff_date == date(2026, 6, 10)

    def test_payment_day_31_does_not_drift(self):
        """Test that a day-31 loan returns to the 31st after February."""
        loan = make_loan(payment_day=31, monthly_amount=40000)
        schedule = calculate_loan_schedule(loan, 120000, date(2025, 2, 1))
        assert schedule.next_due_date == date(2025, 2, 28)
        assert schedule.payoff_date == date(2025, 4, 30)

    def test_deterministic(self):
        """Test that the same inputs give the same schedule."""
        first = calculate_loan_schedule(make_loan(), 120000, AS_OF)
        second = calculate_loan_schedule(make_loan(), 120000, AS_OF)
        assert first == second


class TestRepayments:
    """Tests for repayment aggregation."""

    def test_total_repaid_counts_only_repayments(self):
        """Test that expenses tagged with the loan are ignored."""
        loan = make_loan()
        txs = [
            repayment("r1", 10000),
            repayment("r2", 10000),
            repayment("x", 5000, kind=TransactionKind.EXPENSE),
            repayment("other", 7000, loan_id="mortgage"),
        ]
        assert total_repaid(loan, txs) == 20000
        assert remaining_balance_for(loan, txs) == 100000

    def test_loan_progress(self):
        """Test progress percentage and schedule from ledger repayments."""
        progress = loan_progress(make_loan(), [repayment("r1", 30000)], AS_OF)
        assert progress.total_repaid == 30000
        assert progress.remaining_balance == 90000
        assert progress.progress == pytest.approx(25.0)
        assert progress.schedule.remaining_installment_count == 9

    def test_overpaid_loan_floors_at_zero(self):
        """Test that an overpaid loan shows zero remaining and 100%."""
        progress = loan_progress(make_loan(), [repayment("r1", 130000)], AS_OF)
        assert progress.remaining_balance == 0
        assert progress.progress == 100.0
        assert progress.schedule.remaining_installment_count == 0

    def test_zero_principal(self):
        """Test that a loan with no principal has zero progress."""
        progress = loan_progress(make_loan(principal=0), [], AS_OF)
        assert progress.progress == 0.0
        assert progress.remaining_balance == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
