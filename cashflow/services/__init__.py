"""Services package."""

from cashflow.services.storage import (
    ConnectionError,
    GoogleSheetsClient,
    GoogleSheetsLedgerSource,
    InMemoryLedgerSource,
    LedgerSourceInterface,
    NotFoundError,
    StorageError,
)

__all__ = [
    "ConnectionError",
    "GoogleSheetsClient",
    "GoogleSheetsLedgerSource",
    "InMemoryLedgerSource",
    "LedgerSourceInterface",
    "NotFoundError",
    "StorageError",
]
