"""
FILE: personadev/relay/store.py
PURPOSE: Append-only snapshot and audit-log storage in a Google Sheets spreadsheet
EXPORTS:
  - SnapshotRow (dataclass)
  - LogRow (dataclass)
  - SheetStore (class)
DEPENDENCIES:
  - gspread (Google Sheets client)
  - google-auth (credential errors)
  - personadev.config (RelayConfig)
NOTES:
  - Snapshots go to the PersonaDevData sheet, one full JSON document per row
  - "Latest" is always the last row; rows are never updated or deleted
  - Every audit action goes to the SyncLog sheet
  - Sheets are created with a header row the first time they're used
  - Each append is one API call: it either lands whole or raises
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, TypeVar

import google.auth.exceptions
import gspread
import requests

from ..config import RelayConfig
from ..core.constants import (
    SHEET_APP_DATA,
    SHEET_SYNC_LOG,
    APP_DATA_HEADERS,
    SYNC_LOG_HEADERS,
)
from ..core.exceptions import (
    ConfigurationMissingError,
    MalformedSnapshotError,
    RemoteWriteFailureError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Failures that can come back from the Sheets API or its auth layer
STORE_ERRORS = (
    gspread.exceptions.GSpreadException,
    google.auth.exceptions.GoogleAuthError,
    requests.exceptions.RequestException,
)


@dataclass
class SnapshotRow:
    """One stored snapshot."""

    timestamp: str
    data_type: str
    data: Dict[str, Any]


@dataclass
class LogRow:
    """One audit-log entry."""

    timestamp: str
    action: str
    device: str
    status: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "timestamp": self.timestamp,
            "action": self.action,
            "device": self.device,
            "status": self.status,
        }


class SheetStore:
    """
    Snapshot store backed by two worksheets of one spreadsheet.

    Any object with append_snapshot/latest_snapshot/append_log/history can
    stand in for this class in the relay.
    """

    def __init__(self, spreadsheet: gspread.Spreadsheet):
        self._spreadsheet = spreadsheet
        self._worksheets: Dict[str, gspread.Worksheet] = {}

    @classmethod
    def connect(cls, config: RelayConfig) -> "SheetStore":
        """
        Authorize with a service account and open the configured spreadsheet.

        Raises:
            ConfigurationMissingError: Spreadsheet id or credentials missing
            RemoteWriteFailureError: Authorization or spreadsheet lookup failed
        """
        missing = config.missing()
        if missing:
            raise ConfigurationMissingError("; ".join(missing))

        try:
            client = gspread.service_account(filename=str(config.credentials_path))
            spreadsheet = client.open_by_key(config.spreadsheet_id)
        except STORE_ERRORS as e:
            raise RemoteWriteFailureError(f"Cannot open spreadsheet: {e}")
        except (ValueError, KeyError) as e:
            raise ConfigurationMissingError(
                f"Credentials at {config.credentials_path} are not a service account key: {e}"
            )

        logger.info("Connected to spreadsheet %s", config.spreadsheet_id)
        return cls(spreadsheet)

    def _call(self, operation: Callable[[], T], what: str) -> T:
        try:
            return operation()
        except STORE_ERRORS as e:
            logger.error("Sheets %s failed: %s", what, e)
            raise RemoteWriteFailureError(f"Spreadsheet {what} failed: {e}")

    def _worksheet(self, title: str, headers: List[str]) -> gspread.Worksheet:
        worksheet = self._worksheets.get(title)
        if worksheet is not None:
            return worksheet

        def open_or_create() -> gspread.Worksheet:
            try:
                return self._spreadsheet.worksheet(title)
            except gspread.exceptions.WorksheetNotFound:
                created = self._spreadsheet.add_worksheet(title=title, rows=1000, cols=len(headers))
                created.append_row(headers, value_input_option="RAW")
                logger.info("Created sheet %s", title)
                return created

        worksheet = self._call(open_or_create, f"open of {title}")
        self._worksheets[title] = worksheet
        return worksheet

    def append_snapshot(self, timestamp: str, data_type: str, data: Dict[str, Any]) -> None:
        worksheet = self._worksheet(SHEET_APP_DATA, APP_DATA_HEADERS)
        row = [timestamp, data_type, json.dumps(data)]
        self._call(lambda: worksheet.append_row(row, value_input_option="RAW"), "snapshot append")

    def latest_snapshot(self) -> Optional[SnapshotRow]:
        """
        Return the most recently appended snapshot, or None if none exists.

        Raises:
            MalformedSnapshotError: If the last row doesn't hold valid JSON
        """
        worksheet = self._worksheet(SHEET_APP_DATA, APP_DATA_HEADERS)
        rows = self._call(worksheet.get_all_values, "snapshot read")
        if len(rows) <= 1:
            return None

        timestamp, data_type, json_data = (rows[-1] + ["", "", ""])[:3]
        if not json_data:
            return None
        try:
            data = json.loads(json_data)
        except ValueError as e:
            raise MalformedSnapshotError(f"Stored snapshot from {timestamp} is not valid JSON: {e}")
        return SnapshotRow(timestamp=timestamp, data_type=data_type, data=data)

    def append_log(self, timestamp: str, action: str, device: str, status: str) -> None:
        worksheet = self._worksheet(SHEET_SYNC_LOG, SYNC_LOG_HEADERS)
        row = [timestamp, action, device, status]
        self._call(lambda: worksheet.append_row(row, value_input_option="RAW"), "log append")

    def history(self) -> List[LogRow]:
        """Audit-log rows, most recent first."""
        worksheet = self._worksheet(SHEET_SYNC_LOG, SYNC_LOG_HEADERS)
        rows = self._call(worksheet.get_all_values, "log read")
        entries = [LogRow(*(row + ["", "", "", ""])[:4]) for row in rows[1:]]
        entries.reverse()
        return entries
