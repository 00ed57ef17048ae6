"""
Google Sheets Ledger Source

DESIGN DECISION: Google Sheets is supported as a ledger backend because:
1. Non-technical users can view and fix their data directly in Sheets
2. No database setup required
3. Easy to export/migrate later

TRADEOFFS:
- Not suitable for high-volume data (we're fine for one household)
- Limited query capabilities (we filter by user in Python)

Sheet layout (row 1 is the header):

    Transactions:   id | user_id | date | amount | kind | category_id |
                    payment_source_id | loan_id | memo
    PaymentSources: id | user_id | name | kind | balance | closing_day |
                    payment_day
    Recurring:      id | user_id | kind | payload_json

Recurring rows keep the stored record as JSON so every legacy shape
survives unchanged until the normalizer sees it.
"""

import json
from typing import Callable, Optional, TypeVar

import gspread
import structlog
from google.oauth2.service_account import Credentials
from pydantic import ValidationError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from cashflow.config import GoogleSheetsSettings, get_settings
from cashflow.models.ledger import LedgerTransaction, PaymentSource
from cashflow.models.recurring import RecurringRecords
from cashflow.services.storage.interface import (
    ConnectionError,
    LedgerSourceInterface,
    NotFoundError,
    StorageError,
)


TRANSACTION_COLUMNS = [
    "id",
    "user_id",
    "date",
    "amount",
    "kind",
    "category_id",
    "payment_source_id",
    "loan_id",
    "memo",
]

PAYMENT_SOURCE_COLUMNS = [
    "id",
    "user_id",
    "name",
    "kind",
    "balance",
    "closing_day",
    "payment_day",
]

RECURRING_COLUMNS = [
    "id",
    "user_id",
    "kind",
    "payload_json",
]

# Every sheet starts with the same two columns
ID_INDEX = 0
USER_ID_INDEX = 1

# Recurring row kind -> RecurringRecords list field
RECURRING_KINDS = {
    "subscription": "subscriptions",
    "loan": "loans",
    "fixed": "fixed_items",
}

# Read-only access is all the engine needs
SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets.readonly",
    "https://www.googleapis.com/auth/drive.readonly",
]

logger = structlog.get_logger("cashflow.storage")

T = TypeVar("T")


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @property
    def settings(self) -> GoogleSheetsSettings:
        return self._settings

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(gspread.exceptions.APIError),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=SCOPES,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except gspread.exceptions.APIError:
                raise
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_sheet(self, title: str) -> gspread.Worksheet:
        """Get a worksheet by title. Missing sheets are an error, never created."""
        spreadsheet = self.get_spreadsheet()
        try:
            return spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            raise NotFoundError(f"Worksheet not found: {title}")

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(gspread.exceptions.APIError),
        reraise=True,
    )
    def read_rows(self, title: str) -> list[list[str]]:
        """All data rows of a worksheet, header excluded."""
        return self.get_sheet(title).get_all_values()[1:]


def _cell(row: list, index: int, default: str = "") -> str:
    """Handle missing columns gracefully."""
    try:
        value = row[index]
    except IndexError:
        return default
    if value is None:
        return default
    value = str(value).strip()
    return value if value else default


def _row_values(row: list, columns: list[str]) -> dict[str, str]:
    """Map a row onto its sheet's column names; missing cells are empty."""
    return {name: _cell(row, index) for index, name in enumerate(columns)}


def _row_to_transaction(row: list) -> LedgerTransaction:
    values = _row_values(row, TRANSACTION_COLUMNS)
    return LedgerTransaction(
        id=values["id"],
        date=values["date"],
        amount=values["amount"],
        kind=values["kind"],
        category_id=values["category_id"] or None,
        payment_source_id=values["payment_source_id"] or None,
        loan_id=values["loan_id"] or None,
        memo=values["memo"] or None,
    )


def _row_to_payment_source(row: list) -> PaymentSource:
    values = _row_values(row, PAYMENT_SOURCE_COLUMNS)
    return PaymentSource(
        id=values["id"],
        name=values["name"],
        kind=values["kind"],
        balance=values["balance"] or "0",
        closing_day=values["closing_day"] or None,
        payment_day=values["payment_day"] or None,
    )


def _row_to_record(row: list) -> dict:
    """
    Decode a recurring row's JSON payload.

    An unreadable payload becomes a bare record carrying only its id, so
    the normalizer reports it instead of it vanishing.
    """
    values = _row_values(row, RECURRING_COLUMNS)
    row_id = values["id"]
    try:
        payload = json.loads(values["payload_json"] or "{}")
    except json.JSONDecodeError:
        logger.warning("recurring_payload_unreadable", record_id=row_id)
        payload = {}
    if not isinstance(payload, dict):
        payload = {}
    if row_id:
        payload.setdefault("id", row_id)
    return payload


class GoogleSheetsLedgerSource(LedgerSourceInterface):
    """
    Google Sheets implementation of the ledger source.

    One row per transaction, payment source or recurring record, with a
    user_id column so several users can share a spreadsheet.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _user_rows(self, title: str, user_id: str) -> list[list[str]]:
        try:
            rows = self._client.read_rows(title)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to read {title}: {e}")
        return [row for row in rows if row and _cell(row, USER_ID_INDEX) == user_id]

    def _parse_rows(
        self,
        title: str,
        user_id: str,
        parse: Callable[[list], T],
    ) -> list[T]:
        """Parse a user's rows, skipping (and logging) malformed ones."""
        parsed = []
        for row in self._user_rows(title, user_id):
            try:
                parsed.append(parse(row))
            except (ValidationError, ValueError) as e:
                logger.warning(
                    "malformed_row_skipped",
                    sheet=title,
                    row_id=_cell(row, ID_INDEX),
                    error=str(e),
                )
        return parsed

    async def list_ledger_transactions(self, user_id: str) -> list[LedgerTransaction]:
        """List a user's transactions from the Transactions sheet."""
        return self._parse_rows(
            self._client.settings.transactions_sheet_name,
            user_id,
            _row_to_transaction,
        )

    async def list_payment_sources(self, user_id: str) -> list[PaymentSource]:
        """List a user's accounts and cards from the PaymentSources sheet."""
        return self._parse_rows(
            self._client.settings.payment_sources_sheet_name,
            user_id,
            _row_to_payment_source,
        )

    async def list_recurring_definitions(self, user_id: str) -> RecurringRecords:
        """Group a user's recurring rows by kind, payloads left raw."""
        records = RecurringRecords()

        for row in self._user_rows(self._client.settings.recurring_sheet_name, user_id):
            kind = _cell(row, RECURRING_COLUMNS.index("kind"))
            record = _row_to_record(row)
            if kind == "salary":
                records.salary = record
            elif kind in RECURRING_KINDS:
                getattr(records, RECURRING_KINDS[kind]).append(record)
            else:
                logger.warning(
                    "unknown_recurring_kind",
                    record_id=_cell(row, ID_INDEX),
                    kind=kind,
                )

        return records
