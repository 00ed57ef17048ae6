"""
Storage Services Package

Provides the read-only ledger source interface and its implementations.
Currently implements Google Sheets and in-memory backends, but designed
to be swappable.
"""

from cashflow.services.storage.interface import (
    ConnectionError,
    LedgerSourceInterface,
    NotFoundError,
    StorageError,
)
from cashflow.services.storage.memory import InMemoryLedgerSource
from cashflow.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsLedgerSource,
)

__all__ = [
    # Interface
    "LedgerSourceInterface",
    # Exceptions
    "ConnectionError",
    "NotFoundError",
    "StorageError",
    # Implementations
    "GoogleSheetsClient",
    "GoogleSheetsLedgerSource",
    "InMemoryLedgerSource",
]
