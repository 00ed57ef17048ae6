"""
Definition Normalizer

DESIGN DECISION: Stored recurring records come in more than one shape:

- Keys in camelCase (older settings screens) or snake_case (loan accounts)
- Subscriptions anchored on `nextPaymentDate`, or on a bare legacy
  `paymentDay` that has to be resolved against the as-of date
- Loans as a flat installment plan (`numberOfPayments`,
  `amountPerPayment`) or as a ledger-linked loan account (`principal`)

Every shape is converted here, once per fetch, into the canonical models
in `cashflow.models.recurring`. A record that cannot be converted is
skipped and reported as a `NormalizationIssue`; it never stops the rest
of the projection.

IMPORTANT: The normalizer NEVER guesses missing amounts or dates. A
record without enough information is reported, not repaired.
"""

from datetime import date
from typing import Any, Callable, Mapping, Optional

from pydantic import TypeAdapter, ValidationError

from cashflow.engine.dates import next_occurrence
from cashflow.models.recurring import (
    FixedItem,
    Loan,
    NormalizationIssue,
    RecurringDefinitions,
    RecurringRecords,
    Salary,
    Subscription,
)


# Flat-plan frequency labels -> months between installments
FLAT_LOAN_INTERVALS = {
    "monthly": 1,
    "half-year": 6,
    "half_year": 6,
    "semiannual": 6,
    "yearly": 12,
}

_DATE = TypeAdapter(date)


class NormalizationError(ValueError):
    """A stored record cannot be turned into a definition."""
    pass


def _pick(record: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """First non-empty value among `keys`."""
    for key in keys:
        value = record.get(key)
        if value is not None and value != "":
            return value
    return default


def _parse_date(value: Any) -> date:
    return _DATE.validate_python(value)


def _describe(error: Exception) -> str:
    """One readable line from a pydantic or plain error."""
    if isinstance(error, ValidationError):
        first = error.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        message = first.get("msg", str(error))
        return f"{location}: {message}" if location else message
    return str(error)


class DefinitionNormalizer:
    """
    Converts raw stored records into canonical recurring definitions.

    Holds the as-of date so legacy relative fields (a bare payment day)
    resolve to concrete dates.
    """

    def __init__(self, as_of: date):
        self._as_of = as_of
        self._issues: list[NormalizationIssue] = []

    @property
    def issues(self) -> list[NormalizationIssue]:
        return list(self._issues)

    def _convert(
        self,
        record_type: str,
        record: Mapping[str, Any],
        converter: Callable[[Mapping[str, Any]], Any],
    ) -> Optional[Any]:
        """Run one converter; on failure record an issue and return None."""
        try:
            return converter(record)
        except (ValidationError, ValueError, TypeError) as e:
            record_id = _pick(record, "id") if isinstance(record, Mapping) else None
            self._issues.append(NormalizationIssue(
                record_type=record_type,
                record_id=str(record_id) if record_id is not None else None,
                message=_describe(e),
            ))
            return None

    def salary(self, record: Mapping[str, Any]) -> Optional[Salary]:
        """An unset (missing or zero) income means no salary yet."""
        amount = _pick(record, "monthlyIncome", "monthly_income", "amount")
        if amount is None or amount == 0:
            return None

        start = _pick(record, "startDate", "start_date")
        return Salary(
            amount=amount,
            pay_day=_pick(record, "payday", "payDay", "pay_day", default=25),
            start_date=_parse_date(start) if start is not None else None,
        )

    def subscription(self, record: Mapping[str, Any]) -> Subscription:
        next_payment = _pick(record, "nextPaymentDate", "next_payment_date")
        if next_payment is not None:
            anchor = _parse_date(next_payment)
        else:
            payment_day = _pick(record, "paymentDay", "payment_day")
            if payment_day is None:
                raise NormalizationError(
                    "Subscription has neither a next payment date nor a payment day"
                )
            anchor = next_occurrence(int(payment_day), self._as_of)

        return Subscription(
            id=str(_pick(record, "id", default="")),
            name=_pick(record, "name", default=""),
            amount=_pick(record, "amount"),
            frequency=_pick(record, "frequency", default="monthly"),
            next_payment_date=anchor,
        )

    def loan(self, record: Mapping[str, Any]) -> Loan:
        if _pick(record, "numberOfPayments", "amountPerPayment") is not None:
            return self._flat_loan(record)
        return self._loan_account(record)

    def _flat_loan(self, record: Mapping[str, Any]) -> Loan:
        count = _pick(record, "numberOfPayments", "number_of_payments")
        if count is None:
            raise NormalizationError("Installment plan has no number of payments")

        start = _pick(record, "startDate", "start_date", "firstPaymentDate")
        if start is None:
            raise NormalizationError("Installment plan has no start date")
        first = _parse_date(start)

        frequency = _pick(record, "frequency", default="monthly")
        if frequency not in FLAT_LOAN_INTERVALS:
            raise NormalizationError(f"Unknown installment frequency: {frequency}")

        return Loan(
            id=str(_pick(record, "id", default="")),
            name=_pick(record, "name", default=""),
            monthly_amount=_pick(record, "amountPerPayment", "amount_per_payment"),
            payment_day=_pick(record, "paymentDay", "payment_day", default=first.day),
            interval_months=FLAT_LOAN_INTERVALS[frequency],
            first_payment_date=first,
            number_of_payments=count,
        )

    def _loan_account(self, record: Mapping[str, Any]) -> Loan:
        bonus_months = _pick(record, "bonus_months", "bonusMonths", default=())
        return Loan(
            id=str(_pick(record, "id", default="")),
            name=_pick(record, "name", default=""),
            status=_pick(record, "status", default="active"),
            repayment_rule=_pick(record, "repayment_rule", "repaymentRule", default="monthly"),
            payment_day=_pick(record, "payment_day", "paymentDay"),
            monthly_amount=_pick(record, "monthly_amount", "monthlyAmount"),
            bonus_months=tuple(bonus_months),
            bonus_amount=_pick(record, "bonus_amount", "bonusAmount"),
            principal=_pick(record, "principal"),
            interest_rate=_pick(record, "interest_rate", "interestRate", default=0.0),
        )

    def fixed_item(self, record: Mapping[str, Any]) -> FixedItem:
        return FixedItem(
            id=str(_pick(record, "id", default="")),
            name=_pick(record, "name", default=""),
            amount=_pick(record, "amount"),
            direction=_pick(record, "direction", "type", default="expense"),
            day=_pick(record, "day", "paymentDay", "payment_day"),
            category=_pick(record, "category", default="other"),
        )

    def normalize(self, records: RecurringRecords) -> RecurringDefinitions:
        salary = None
        if records.salary is not None:
            salary = self._convert("salary", records.salary, self.salary)

        subscriptions = [
            self._convert("subscription", record, self.subscription)
            for record in records.subscriptions
        ]
        loans = [
            self._convert("loan", record, self.loan)
            for record in records.loans
        ]
        fixed_items = [
            self._convert("fixed", record, self.fixed_item)
            for record in records.fixed_items
        ]

        return RecurringDefinitions(
            salary=salary,
            subscriptions=tuple(s for s in subscriptions if s is not None),
            loans=tuple(loan for loan in loans if loan is not None),
            fixed_items=tuple(item for item in fixed_items if item is not None),
        )


def normalize_definitions(
    records: RecurringRecords,
    as_of: date,
) -> tuple[RecurringDefinitions, list[NormalizationIssue]]:
    """
    Normalize every stored record.

    Returns the canonical definitions plus one issue per skipped record.
    """
    normalizer = DefinitionNormalizer(as_of)
    definitions = normalizer.normalize(records)
    return definitions, normalizer.issues
