"""
Abstract Ledger Source Interface

DESIGN DECISION: The forecast engine reads its inputs through an abstract
interface. This allows us to:
1. Swap Google Sheets for a real database later
2. Use in-memory data for testing
3. Keep projection logic decoupled from storage implementation

The interface is read-only. The engine never writes; recording
transactions and editing definitions happen elsewhere.
"""

from abc import ABC, abstractmethod

from cashflow.models.ledger import LedgerTransaction, PaymentSource
from cashflow.models.recurring import RecurringRecords


class LedgerSourceInterface(ABC):
    """
    Abstract interface for reading one user's ledger.

    Any storage implementation (Google Sheets, PostgreSQL, etc.)
    must implement these methods.
    """

    @abstractmethod
    async def list_ledger_transactions(self, user_id: str) -> list[LedgerTransaction]:
        """
        List every recorded transaction for a user.

        Args:
            user_id: The owning user's identifier

        Returns:
            Transactions in stored order

        Raises:
            StorageError: If the read fails
        """
        pass

    @abstractmethod
    async def list_payment_sources(self, user_id: str) -> list[PaymentSource]:
        """
        List a user's accounts and cards.

        Args:
            user_id: The owning user's identifier

        Returns:
            Payment sources in stored order

        Raises:
            StorageError: If the read fails
        """
        pass

    @abstractmethod
    async def list_recurring_definitions(self, user_id: str) -> RecurringRecords:
        """
        Get a user's recurring definitions exactly as stored.

        Records are returned raw; callers normalize them with
        `cashflow.validation.normalize_definitions`.

        Args:
            user_id: The owning user's identifier

        Returns:
            Raw salary, subscription, loan and fixed-item records

        Raises:
            StorageError: If the read fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
