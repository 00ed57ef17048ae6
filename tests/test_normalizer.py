"""
Tests for the definition normalizer

Covers every stored shape (camelCase and snake_case keys, legacy payment
days, both loan layouts) and the skip-and-report path for bad records.
"""

import pytest
from datetime import date

from cashflow.models.recurring import (
    FixedDirection,
    LoanStatus,
    RecurringRecords,
    RepaymentRule,
    SubscriptionFrequency,
)
from cashflow.validation import DefinitionNormalizer, normalize_definitions


AS_OF = date(2025, 3, 20)


class TestSalary:
    """Tests for salary records."""

    def test_camel_case(self):
        """Test the settings-screen shape."""
        definitions, issues = normalize_definitions(
            RecurringRecords(salary={"monthlyIncome": 250000, "payday": 25}),
            AS_OF,
        )
        assert definitions.salary.amount == 250000
        assert definitions.salary.pay_day == 25
        assert issues == []

    def test_default_pay_day(self):
        """Test that a missing pay day defaults to the 25th."""
        definitions, _ = normalize_definitions(RecurringRecords(salary={"amount": 1000}), AS_OF)
        assert definitions.salary.pay_day == 25

    def test_unset_income_means_no_salary(self):
        """Test that a zero income is treated as not configured."""
        definitions, issues = normalize_definitions(
            RecurringRecords(salary={"monthlyIncome": 0, "payday": 25}),
            AS_OF,
        )
        assert definitions.salary is None
        assert issues == []

    def test_start_date(self):
        """Test that a start date string is parsed."""
        definitions, _ = normalize_definitions(
            RecurringRecords(salary={"monthlyIncome": 1000, "startDate": "2025-05-01"}),
            AS_OF,
        )
        assert definitions.salary.start_date == date(2025, 5, 1)


class TestSubscriptions:
    """Tests for subscription records."""

    def test_next_payment_date(self):
        """Test the current shape."""
        definitions, _ = normalize_definitions(
            RecurringRecords(subscriptions=[{
                "id": "s1",
                "name": "Cloud",
                "amount": 13000,
                "frequency": "yearly",
                "nextPaymentDate": "2025-08-01",
            }]),
            AS_OF,
        )
        sub = definitions.subscriptions[0]
        assert sub.next_payment_date == date(2025, 8, 1)
        assert sub.frequency == SubscriptionFrequency.YEARLY

    def test_legacy_payment_day(self):
        """Test that a bare payment day resolves against as-of."""
        definitions, _ = normalize_definitions(
            RecurringRecords(subscriptions=[
                {"id": "s1", "name": "Music", "amount": 980, "paymentDay": 25},
                {"id": "s2", "name": "News", "amount": 500, "paymentDay": 5},
            ]),
            AS_OF,
        )
        assert definitions.subscriptions[0].next_payment_date == date(2025, 3, 25)
        assert definitions.subscriptions[1].next_payment_date == date(2025, 4, 5)

    def test_no_anchor_is_skipped(self):
        """Test that a subscription without any date is reported."""
        definitions, issues = normalize_definitions(
            RecurringRecords(subscriptions=[
                {"id": "bad", "name": "Mystery", "amount": 100},
                {"id": "ok", "name": "Music", "amount": 980, "paymentDay": 25},
            ]),
            AS_OF,
        )
        assert [s.id for s in definitions.subscriptions] == ["ok"]
        assert len(issues) == 1
        assert issues[0].record_type == "subscription"
        assert issues[0].record_id == "bad"

    def test_unparseable_date_is_skipped(self):
        """Test that a garbage date is reported, not raised."""
        _, issues = normalize_definitions(
            RecurringRecords(subscriptions=[
                {"id": "bad", "name": "X", "amount": 100, "nextPaymentDate": "next tuesday"},
            ]),
            AS_OF,
        )
        assert len(issues) == 1
        assert issues[0].record_id == "bad"


class TestLoans:
    """Tests for both loan layouts."""

    def test_flat_installment_plan(self):
        """Test the numberOfPayments/amountPerPayment shape."""
        definitions, issues = normalize_definitions(
            RecurringRecords(loans=[{
                "id": "phone",
                "name": "Phone",
                "amountPerPayment": 3000,
                "startDate": "2025-01-27",
                "frequency": "half-year",
                "numberOfPayments": 4,
            }]),
            AS_OF,
        )
        assert issues == []
        loan = definitions.loans[0]
        assert loan.is_flat_schedule
        assert loan.interval_months == 6
        assert loan.payment_day == 27
        assert loan.first_payment_date == date(2025, 1, 27)
        assert loan.monthly_amount == 3000

    def test_unknown_frequency_is_skipped(self):
        """Test that an unknown installment frequency is reported."""
        _, issues = normalize_definitions(
            RecurringRecords(loans=[{
                "id": "x",
                "name": "X",
                "amountPerPayment": 1,
                "startDate": "2025-01-01",
                "frequency": "weekly",
                "numberOfPayments": 2,
            }]),
            AS_OF,
        )
        assert "weekly" in issues[0].message

    def test_installment_plan_without_count_is_skipped(self):
        """Test that a plan with no number of payments is reported, not projected."""
        definitions, issues = normalize_definitions(
            RecurringRecords(loans=[{
                "id": "car",
                "amountPerPayment": 5000,
                "startDate": "2025-09-10",
            }]),
            AS_OF,
        )
        assert definitions.loans == ()
        assert [issue.record_id for issue in issues] == ["car"]
        assert "number of payments" in issues[0].message

    def test_loan_account(self):
        """Test the snake_case loan account shape."""
        definitions, _ = normalize_definitions(
            RecurringRecords(loans=[{
                "id": "car",
                "name": "Car",
                "principal": 1200000,
                "interest_rate": 1.5,
                "status": "active",
                "repayment_rule": "semiannual",
                "payment_day": 27,
                "monthly_amount": 30000,
                "bonus_months": [6, 12],
                "bonus_amount": 100000,
            }]),
            AS_OF,
        )
        loan = definitions.loans[0]
        assert not loan.is_flat_schedule
        assert loan.status == LoanStatus.ACTIVE
        assert loan.repayment_rule == RepaymentRule.SEMIANNUAL
        assert loan.bonus_months == (6, 12)
        assert loan.has_bonus_schedule

    def test_invalid_bonus_month_is_skipped(self):
        """Test that a validation failure skips only that loan."""
        definitions, issues = normalize_definitions(
            RecurringRecords(loans=[
                {"id": "bad", "name": "Bad", "principal": 100, "bonus_months": [13]},
                {"id": "good", "name": "Good", "principal": 100},
            ]),
            AS_OF,
        )
        assert [loan.id for loan in definitions.loans] == ["good"]
        assert issues[0].record_type == "loan"
        assert issues[0].record_id == "bad"


class TestFixedItems:
    """Tests for manual fixed items."""

    def test_fixed_income_and_expense(self):
        """Test direction and day keys."""
        definitions, _ = normalize_definitions(
            RecurringRecords(fixed_items=[
                {"id": "rent", "name": "Rent", "amount": 80000, "day": 27},
                {"id": "side", "name": "Side job", "amount": 20000, "type": "income", "paymentDay": 5},
            ]),
            AS_OF,
        )
        rent, side = definitions.fixed_items
        assert rent.direction == FixedDirection.EXPENSE
        assert side.direction == FixedDirection.INCOME
        assert side.day == 5

    def test_missing_day_is_skipped(self):
        """Test that a fixed item without a day is reported."""
        _, issues = normalize_definitions(
            RecurringRecords(fixed_items=[{"id": "x", "name": "X", "amount": 1}]),
            AS_OF,
        )
        assert issues[0].record_type == "fixed"


class TestNormalizer:
    """Tests for the normalizer as a whole."""

    def test_empty_records(self):
        """Test that nothing stored gives empty definitions."""
        definitions, issues = normalize_definitions(RecurringRecords(), AS_OF)
        assert definitions.as_list() == []
        assert issues == []

    def test_issues_accumulate(self):
        """Test that every bad record is reported once."""
        normalizer = DefinitionNormalizer(AS_OF)
        normalizer.normalize(RecurringRecords(
            subscriptions=[{"id": "a"}, {"id": "b"}],
            loans=[{"id": "c", "name": "C", "bonus_months": [0]}],
        ))
        assert [issue.record_id for issue in normalizer.issues] == ["a", "b", "c"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
