"""
In-Memory Ledger Source

Holds per-user data in plain dictionaries. Used by tests and by callers
that already have the data loaded (for example from a backup file).
"""

from typing import Iterable, Optional

from cashflow.models.ledger import LedgerTransaction, PaymentSource
from cashflow.models.recurring import RecurringRecords
from cashflow.services.storage.interface import LedgerSourceInterface


class InMemoryLedgerSource(LedgerSourceInterface):
    """Ledger source backed by dictionaries keyed by user id."""

    def __init__(self):
        self._transactions: dict[str, list[LedgerTransaction]] = {}
        self._sources: dict[str, list[PaymentSource]] = {}
        self._recurring: dict[str, RecurringRecords] = {}

    def add_transactions(
        self,
        user_id: str,
        transactions: Iterable[LedgerTransaction],
    ) -> None:
        self._transactions.setdefault(user_id, []).extend(transactions)

    def add_payment_sources(
        self,
        user_id: str,
        sources: Iterable[PaymentSource],
    ) -> None:
        self._sources.setdefault(user_id, []).extend(sources)

    def set_recurring_records(
        self,
        user_id: str,
        records: Optional[RecurringRecords],
    ) -> None:
        self._recurring[user_id] = records or RecurringRecords()

    async def list_ledger_transactions(self, user_id: str) -> list[LedgerTransaction]:
        return list(self._transactions.get(user_id, []))

    async def list_payment_sources(self, user_id: str) -> list[PaymentSource]:
        return list(self._sources.get(user_id, []))

    async def list_recurring_definitions(self, user_id: str) -> RecurringRecords:
        records = self._recurring.get(user_id)
        if records is None:
            return RecurringRecords()
        return records.model_copy(deep=True)
