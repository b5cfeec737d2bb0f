"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is the hosted document store:
1. Entries can be viewed and edited directly in a spreadsheet
2. No database setup required
3. Built-in backup (Google's infrastructure)
4. Easy to export/migrate later

TRADEOFFS:
- Not suitable for high-volume data (we're fine for personal use)
- No transactions (we handle this with careful ordering)
- Every operation reads the whole sheet (we filter in Python)

One worksheet per collection, one entry per row.
"""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

import gspread
import structlog
from google.oauth2.service_account import Credentials
from gspread.utils import rowcol_to_a1
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from worthit.config import GoogleSheetsSettings, get_settings
from worthit.models.entry import (
    CollectionKind,
    Entry,
    EntryCreate,
    EntryPatch,
    materialize_entry,
)
from worthit.services.storage.interface import (
    EntryStorageInterface,
    NotFoundError,
    StorageError,
    StorageUnavailableError,
)

logger = structlog.get_logger(__name__)


# Column mappings for the entry sheets
ENTRY_COLUMNS = [
    "id",
    "timestamp",
    "type",
    "description",
    "cost",
    "worth_it",
]

_transient = retry(
    retry=retry_if_exception_type(gspread.exceptions.APIError),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    reraise=True,
)


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise StorageUnavailableError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise StorageUnavailableError(f"Failed to connect to Google Sheets: {e}")

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
                raise StorageUnavailableError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_sheet(self, kind: CollectionKind) -> gspread.Worksheet:
        """Get or create the worksheet for a collection."""
        title = (
            self._settings.finance_sheet_name
            if kind is CollectionKind.FINANCE
            else self._settings.media_sheet_name
        )
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=1000,
                cols=len(ENTRY_COLUMNS),
            )
            sheet.append_row(ENTRY_COLUMNS)
        return sheet


class GoogleSheetsEntryStorage(EntryStorageInterface):
    """
    Google Sheets implementation of entry storage.
    """

    name = "sheets"

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    @staticmethod
    def _entry_to_row(entry: Entry) -> list:
        """Convert an Entry to a spreadsheet row."""
        return [
            entry.id,
            entry.timestamp.isoformat(),
            entry.kind.value,
            entry.description,
            str(entry.cost) if entry.cost is not None else "",
            str(entry.worth_it),
        ]

    @staticmethod
    def _row_to_entry(row: list) -> Entry:
        """Convert a spreadsheet row to an Entry."""
        # Handle missing columns gracefully
        def safe_get(index: int, default: str = "") -> str:
            try:
                return row[index] if row[index] else default
            except IndexError:
                return default

        try:
            cost = Decimal(safe_get(4)) if safe_get(4) else None
        except InvalidOperation:
            raise ValueError(f"Invalid cost: {safe_get(4)!r}")

        return Entry(
            id=safe_get(0),
            timestamp=datetime.fromisoformat(safe_get(1)),
            kind=CollectionKind(safe_get(2)),
            description=safe_get(3),
            cost=cost,
            worth_it=safe_get(5).lower() == "true",
        )

    def _sheet(self, kind: CollectionKind) -> gspread.Worksheet:
        try:
            return self._client.get_sheet(kind)
        except StorageError:
            raise
        except Exception as e:
            raise StorageUnavailableError(f"Google Sheets unavailable: {e}")

    @_transient
    def _all_rows(self, sheet: gspread.Worksheet) -> list[list]:
        # Skip header
        return sheet.get_all_values()[1:]

    def _write_row(self, sheet: gspread.Worksheet, row_number: int, entry: Entry) -> None:
        for col_idx, value in enumerate(self._entry_to_row(entry), start=1):
            sheet.update_cell(row_number, col_idx, value)

    @staticmethod
    def _find_row(rows: list[list], entry_id: str) -> Optional[int]:
        """Sheet row number (1-based, header is row 1) holding `entry_id`."""
        for row_number, row in enumerate(rows, start=2):
            if row and row[0] == entry_id:
                return row_number
        return None

    async def add_entry(
        self,
        kind: CollectionKind,
        data: Union[EntryCreate, Entry],
    ) -> Entry:
        entry = materialize_entry(kind, data)
        sheet = self._sheet(kind)
        try:
            # Re-adding the same ID (e.g. a mirrored write) rewrites its row
            row_number = self._find_row(self._all_rows(sheet), entry.id)
            if row_number is None:
                _transient(sheet.append_row)(
                    self._entry_to_row(entry),
                    value_input_option="RAW",
                )
            else:
                self._write_row(sheet, row_number, entry)
        except Exception as e:
            raise StorageUnavailableError(f"Failed to save entry: {e}")
        return entry

    async def delete_entry(self, kind: CollectionKind, entry_id: str) -> bool:
        sheet = self._sheet(kind)
        try:
            row_number = self._find_row(self._all_rows(sheet), entry_id)
            if row_number is None:
                return False
            sheet.delete_rows(row_number)
            return True
        except Exception as e:
            raise StorageUnavailableError(f"Failed to delete entry: {e}")

    async def list_entries(self, kind: CollectionKind) -> list[Entry]:
        sheet = self._sheet(kind)
        try:
            rows = self._all_rows(sheet)
        except Exception as e:
            raise StorageUnavailableError(f"Failed to list entries: {e}")

        entries = []
        for row in rows:
            if not row or not row[0]:  # Skip empty rows
                continue
            try:
                entries.append(self._row_to_entry(row))
            except Exception as e:
                logger.warning("skipping_malformed_row", entry_id=row[0], error=str(e))
        return entries

    async def update_entry(
        self,
        kind: CollectionKind,
        entry_id: str,
        patch: EntryPatch,
    ) -> Entry:
        sheet = self._sheet(kind)
        try:
            rows = self._all_rows(sheet)
        except Exception as e:
            raise StorageUnavailableError(f"Failed to update entry: {e}")

        row_number = self._find_row(rows, entry_id)
        if row_number is None:
            raise NotFoundError(f"Entry not found: {entry_id}")

        try:
            updated = patch.apply_to(self._row_to_entry(rows[row_number - 2]))
        except ValueError as e:
            # ValidationError is a ValueError
            raise StorageError(f"Row for {entry_id} can't be updated: {e}")

        try:
            self._write_row(sheet, row_number, updated)
        except Exception as e:
            raise StorageUnavailableError(f"Failed to update entry: {e}")
        return updated

    async def replace_entries(
        self,
        kind: CollectionKind,
        entries: list[Entry],
    ) -> None:
        """
        Overwrite the sheet with `entries`.

        Rows are written over the existing ones first and only the
        leftover tail is cleared, so a failure part way never leaves the
        sheet empty.
        """
        sheet = self._sheet(kind)
        values = [ENTRY_COLUMNS] + [self._entry_to_row(e) for e in entries]
        try:
            old_row_count = len(self._all_rows(sheet)) + 1
            sheet.update(values=values, range_name="A1")
            if old_row_count > len(values):
                first = rowcol_to_a1(len(values) + 1, 1)
                last = rowcol_to_a1(old_row_count, len(ENTRY_COLUMNS))
                sheet.batch_clear([f"{first}:{last}"])
        except Exception as e:
            raise StorageUnavailableError(f"Failed to replace entries: {e}")
